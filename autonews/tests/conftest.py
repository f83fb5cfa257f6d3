# autonews/tests/conftest.py
import json
from datetime import datetime, timezone
from threading import Lock

import pytest

from autonews.config import Settings
from autonews.errors import StoreError
from autonews.fetcher import RawPage
from autonews.storage.models import AnalyzerCandidate

ARTICLE_HTML = """
<html><head><title>BYD opens flagship showroom in Dubai</title>
<style>.hero { color: red; }</style>
<script>window.tracking = "SECRET_TRACKER";</script></head>
<body>
<nav><a href="/">Home</a><a href="/cars">Cars</a></nav>
<header>Site header</header>
<article>
<h1>BYD opens flagship showroom</h1>
<p>BYD officially opened its largest showroom in the Middle East on Sheikh Zayed Road.</p>
<p>The event highlighted the Han EV and Tang EV models tuned for high temperatures.</p>
</article>
<footer>Copyright</footer>
</body></html>
"""


class FakeBlobClient:
    """Object store em memória com a mesma interface do BlobClient."""

    def __init__(self, documents=None):
        self.documents = dict(documents or {})
        self.writes = []
        self.reads = 0
        self.fail_reads = False
        self.fail_writes = False
        self._lock = Lock()

    def read_text(self, pathname):
        if self.fail_reads:
            raise StoreError("Storage read failed: boom")
        with self._lock:
            self.reads += 1
            return self.documents.get(pathname)

    def put_text(self, pathname, body, content_type="application/json"):
        if self.fail_writes:
            raise StoreError("Storage write failed: boom")
        with self._lock:
            self.documents[pathname] = body
            self.writes.append((pathname, body, content_type))
        return {"pathname": pathname}

    def load(self, pathname):
        return json.loads(self.documents[pathname])


class FakeFetcher:
    def __init__(self, pages=None, error=None):
        self.pages = dict(pages or {})
        self.error = error
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        html = self.pages.get(url, ARTICLE_HTML)
        return RawPage(url=url, final_url=url, status=200, html=html,
                       fetched_at=datetime(2024, 5, 17, 10, 30, tzinfo=timezone.utc))


class FakeAnalyzer:
    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else {
            "title": "BYD opens flagship showroom in Dubai",
            "summary": "BYD opened its largest Middle East showroom.",
            "brand": "byd",
            "type": "sales",
            "date": "2024-05-17",
            "url": "",
            "image_keywords": "BYD showroom Dubai electric car",
            "sentiment": "positive",
            "tags": ["EV", "Showroom", "EV"],
        }
        self.error = error
        self.calls = []

    def analyze(self, text, brands):
        self.calls.append((text, list(brands)))
        if self.error is not None:
            raise self.error
        return AnalyzerCandidate.model_validate(self.payload)


@pytest.fixture()
def settings():
    return Settings(blob_token="test-token", analyzer_api_key="test-key")


@pytest.fixture()
def blob():
    return FakeBlobClient()


@pytest.fixture()
def fetcher():
    return FakeFetcher()


@pytest.fixture()
def analyzer():
    return FakeAnalyzer()


@pytest.fixture()
def pipeline(settings, blob, fetcher, analyzer):
    from autonews.tracker.pipeline import NewsPipeline
    return NewsPipeline(settings, fetcher=fetcher, blob_client=blob, analyzer=analyzer)


@pytest.fixture()
def app(monkeypatch, pipeline):
    # Troca o pipeline do módulo por um com store/fetcher/analyzer falsos
    from autonews.api import main as api_main
    monkeypatch.setattr(api_main, "pipeline", pipeline, raising=True)
    return api_main.app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
