import re
import time
import logging
import requests
import charset_normalizer
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from requests.adapters import HTTPAdapter

from autonews.errors import FetchError
from .base import BaseFetcher

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

# ---------- HTTP session global com pool (sem retry: quem chama decide se repete) ----------
_SESSION = requests.Session()
_ADAPTER = HTTPAdapter(pool_connections=10, pool_maxsize=20, max_retries=0)
_SESSION.mount("http://", _ADAPTER)
_SESSION.mount("https://", _ADAPTER)
_SESSION.headers.update({
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
})

_META_CHARSET_RE = re.compile(rb"""<meta[^>]+charset=["']?([A-Za-z0-9_\-:.]+)""", re.IGNORECASE)


@dataclass(frozen=True)
class RawPage:
    url: str
    final_url: str
    status: int
    html: str
    fetched_at: datetime


class PageFetcher(BaseFetcher):
    """
    GET de uma página com prazo fixo de relógio (conexão + leitura + corpo).

    O estouro do prazo vira ``FetchError(kind="timeout")`` antes de qualquer
    outra classificação; status não-2xx vira ``upstream_status``; o resto,
    ``network``.
    """

    TIMEOUT = 15
    CHUNK_SIZE = 16 * 1024
    MAX_BYTES = 5 * 1024 * 1024

    def __init__(self, timeout: float = TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout: float = timeout
        self.session: requests.Session = session or _SESSION

    def fetch(self, url: str) -> RawPage:
        deadline = time.monotonic() + self.timeout
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True, allow_redirects=True)
        except requests.Timeout:
            raise FetchError.timeout(self.timeout)
        except requests.RequestException as e:
            logger.warning("Fetch failed for %s: %s", url, e)
            raise FetchError.network(str(e))

        try:
            if not 200 <= response.status_code < 300:
                raise FetchError.upstream_status(response.status_code)
            body = self._read_body(response, deadline)
        except requests.Timeout:
            raise FetchError.timeout(self.timeout)
        except requests.RequestException as e:
            logger.warning("Body read failed for %s: %s", url, e)
            raise FetchError.network(str(e))
        finally:
            response.close()

        html = self._decode(response, body)
        logger.info("Fetched %s (%s, %d bytes)", url, response.status_code, len(body))
        return RawPage(
            url=url,
            final_url=response.url or url,
            status=response.status_code,
            html=html,
            fetched_at=datetime.now(timezone.utc),
        )

    def _read_body(self, response: requests.Response, deadline: float) -> bytes:
        chunks = []
        total = 0
        for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
            # prazo de relógio: o timeout do requests só cobre cada leitura isolada
            if time.monotonic() > deadline:
                raise FetchError.timeout(self.timeout)
            if not chunk:
                continue
            chunks.append(chunk)
            total += len(chunk)
            if total >= self.MAX_BYTES:
                break
        return b"".join(chunks)

    @staticmethod
    def _decode(response: requests.Response, body: bytes) -> str:
        # response.apparent_encoding lê response.content, que já foi consumido pelo stream
        content_type = response.headers.get("Content-Type", "")
        encoding = response.encoding if "charset" in content_type.lower() else None
        if not encoding:
            encoding = sniff_encoding(body)
        try:
            return body.decode(encoding, errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")


def sniff_encoding(body: bytes) -> str:
    """<meta charset> no começo do documento; senão, detecção sobre os bytes."""
    match = _META_CHARSET_RE.search(body[:4096])
    if match:
        return match.group(1).decode("ascii", errors="ignore")
    best = charset_normalizer.from_bytes(body).best()
    return best.encoding if best is not None else "utf-8"
