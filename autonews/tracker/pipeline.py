import logging
from threading import Lock
from typing import Dict, List, Optional
from urllib.parse import urlparse

from autonews.config import Settings
from autonews.errors import ExtractError, NotFoundError, ValidationError
from autonews.extractor import extract
from autonews.fetcher import PageFetcher
from autonews.storage.blob_client import BlobClient
from autonews.storage.models import (
    AnalyzerCandidate,
    ManualRecordInput,
    NewsRecord,
    PendingItem,
    new_item_id,
)
from autonews.storage.queue_store import QueueStore
from autonews.storage.record_store import RecordStore
from autonews.taxonomy import (
    OTHER_BRAND,
    brand_bucket,
    coerce_sentiment,
    coerce_type,
    match_brand,
)
from autonews.utils.images import resolve_image
from autonews.utils.tz_utils import normalize_date, today_iso

logger = logging.getLogger(__name__)

NO_CONTENT_MESSAGE = "No usable content extracted (page too short or rendered client-side)"
AI_SOURCE = "AI extraction"
_MAX_TAGS = 10


def _clean_str(value) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def _clean_tags(value) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    tags: List[str] = []
    for tag in value:
        tag = _clean_str(tag)
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:_MAX_TAGS]


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class NewsPipeline:
    """
    Orquestra os dois fluxos:

    - ingestão: Fetcher -> Extractor -> QueueStore.append
    - promoção: QueueStore (leitura) -> Analyzer -> RecordStore.append

    A promoção nunca remove o item da fila: o usuário decide se descarta.
    """

    def __init__(self, settings: Settings, fetcher=None, blob_client=None,
                 analyzer=None, classifier=None):
        self.settings = settings
        self.fetcher = fetcher or PageFetcher(timeout=settings.fetch_timeout)
        self._blob_client = blob_client
        self._analyzer = analyzer
        self._classifier = classifier
        self._lock = Lock()  # só protege a criação preguiçosa dos clientes

    # ---------- dependências preguiçosas (credencial checada antes de qualquer I/O) ----------
    @property
    def blob_client(self):
        token = self.settings.require_blob_token()
        with self._lock:
            if self._blob_client is None:
                self._blob_client = BlobClient(token, api_url=self.settings.blob_api_url)
        return self._blob_client

    @property
    def queue(self) -> QueueStore:
        return QueueStore(self.blob_client, self.settings.pending_path)

    @property
    def records(self) -> RecordStore:
        return RecordStore(self.blob_client, self.settings.records_path)

    @property
    def analyzer(self):
        if self._analyzer is None:
            from autonews.analyzer import NewsAnalyzer

            api_key = self.settings.require_analyzer_key()
            with self._lock:
                if self._analyzer is None:
                    self._analyzer = NewsAnalyzer(
                        api_key,
                        base_url=self.settings.analyzer_base_url,
                        model=self.settings.analyzer_model,
                    )
        return self._analyzer

    @property
    def classifier(self):
        if self._classifier is None and self.settings.sentiment_model:
            from autonews.classifier import NewsClassifier

            with self._lock:
                if self._classifier is None:
                    self._classifier = NewsClassifier(self.settings.sentiment_model)
        return self._classifier

    # ---------- ingestão ----------
    @staticmethod
    def validate_url(url: Optional[str]) -> str:
        url = _clean_str(url)
        if not url:
            raise ValidationError("URL must not be empty")
        if not _is_http_url(url):
            raise ValidationError("URL must be an absolute http(s) address")
        return url

    def ingest(self, url: Optional[str]) -> PendingItem:
        queue = self.queue
        url = self.validate_url(url)

        page = self.fetcher.fetch(url)
        extracted = extract(page.html)
        if not extracted.has_content:
            logger.info("Rejected %s: only %d characters of text", url, len(extracted.text))
            raise ExtractError(NO_CONTENT_MESSAGE)

        item = PendingItem(
            id=new_item_id(),
            url=url,
            title=extracted.title,
            text=extracted.text,
            source=urlparse(url).hostname or "",
            scraped_at=today_iso(page.fetched_at),
        )
        return queue.append(item)

    def list_pending(self) -> List[PendingItem]:
        return self.queue.list_all()

    def remove_pending(self, item_id: Optional[str]) -> None:
        item_id = _clean_str(item_id)
        if not item_id:
            raise ValidationError("id must not be empty")
        if not self.queue.remove(item_id):
            raise NotFoundError(f"Pending item {item_id} not found")

    # ---------- promoção ----------
    def promote(self, text: Optional[str] = None, pending_id: Optional[str] = None,
                image: Optional[str] = None, url: Optional[str] = None) -> NewsRecord:
        pending = None
        pending_id = _clean_str(pending_id)
        if pending_id:
            pending = self.queue.get(pending_id)
            if pending is None:
                raise NotFoundError(f"Pending item {pending_id} not found")

        text = _clean_str(text) or (pending.text if pending else "")
        if not text:
            raise ValidationError("Either text or pendingId is required")

        fallback_url = _clean_str(url) or (pending.url if pending else "")
        if pending:
            source = pending.source
        elif fallback_url and _is_http_url(fallback_url):
            source = urlparse(fallback_url).hostname or AI_SOURCE
        else:
            source = AI_SOURCE

        records = self.records
        candidate = self.analyzer.analyze(text, self.settings.brands)
        record = self.build_record(
            candidate,
            image=image,
            fallback_url=fallback_url,
            source=source,
            fallback_title=pending.title if pending else None,
        )
        return records.append(record)

    def create_record(self, data: ManualRecordInput) -> NewsRecord:
        if not _clean_str(data.title):
            raise ValidationError("title must not be empty")
        candidate = AnalyzerCandidate(
            title=data.title,
            summary=data.summary,
            brand=data.brand,
            type=data.type,
            date=data.date,
            url=data.url,
            sentiment=data.sentiment,
            tags=data.tags,
        )
        record = self.build_record(candidate, image=data.image, source=_clean_str(data.source))
        return self.records.append(record)

    def build_record(self, candidate: AnalyzerCandidate, image: Optional[str] = None,
                     fallback_url: str = "", source: str = "",
                     fallback_title: Optional[str] = None) -> NewsRecord:
        """Aplica coerção e defaults sobre a saída não confiável do Analyzer."""
        brands = self.settings.brands
        title = _clean_str(candidate.title) or _clean_str(fallback_title) or "Untitled"
        summary = _clean_str(candidate.summary)

        raw_brand = _clean_str(candidate.brand)
        brand = match_brand(raw_brand, brands) or raw_brand or OTHER_BRAND
        if brand.lower() == OTHER_BRAND.lower():
            brand = OTHER_BRAND
        elif brand not in brands:
            logger.info("Brand %r is not in the allow-list; it will aggregate as %s", brand, OTHER_BRAND)

        candidate_url = _clean_str(candidate.url)
        record_url = candidate_url if _is_http_url(candidate_url) else fallback_url

        sentiment = coerce_sentiment(candidate.sentiment)
        if sentiment is None:
            sentiment = self._classify_sentiment(f"{title}. {summary}")

        prompt = _clean_str(candidate.image_keywords) or f"{brand} {title} automotive"
        return NewsRecord(
            id=new_item_id(),
            title=title,
            summary=summary,
            brand=brand,
            type=coerce_type(candidate.type),
            date=normalize_date(candidate.date),
            url=record_url or "",
            source=source or AI_SOURCE,
            image=resolve_image(image, prompt, self.settings.image_base_url),
            sentiment=sentiment,
            tags=_clean_tags(candidate.tags),
        )

    def _classify_sentiment(self, text: str):
        classifier = self.classifier
        if classifier is None:
            return None
        try:
            return classifier.classify(text)
        except Exception:
            # sentimento é opcional: falha do modelo não bloqueia o commit
            logger.exception("Sentiment classification failed")
            return None

    # ---------- registros ----------
    def list_records(self) -> List[NewsRecord]:
        return self.records.list_all()

    def brand_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {brand: 0 for brand in self.settings.brands}
        counts.setdefault(OTHER_BRAND, 0)
        for record in self.list_records():
            bucket = brand_bucket(record.brand, self.settings.brands)
            counts[bucket] = counts.get(bucket, 0) + 1
        return counts
