# autonews/tests/test_api.py
from autonews.errors import AnalyzerError, FetchError

from conftest import FakeFetcher


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    j = r.json()
    assert j["status"] == "ok"
    assert isinstance(j["ts"], int)


def test_ingest_then_list_round_trip(client):
    r = client.post("/api/ingest", json={"url": "https://news.example.com/byd-dubai"})
    assert r.status_code == 200
    j = r.json()
    assert j["success"] is True
    item = j["item"]
    assert set(item) == {"id", "url", "title", "text", "source", "scrapedAt"}

    r = client.get("/api/pending", params={"_t": 1715940000000})
    assert r.status_code == 200
    assert r.headers["Cache-Control"] == "no-store"
    assert r.json() == [item]


def test_ingest_order_is_most_recent_first(client):
    a = client.post("/api/ingest", json={"url": "https://a.example.com/1"}).json()["item"]
    b = client.post("/api/ingest", json={"url": "https://b.example.com/2"}).json()["item"]
    ids = [i["id"] for i in client.get("/api/pending").json()]
    assert ids == [b["id"], a["id"]]


def test_ingest_missing_url_is_400(client, blob):
    r = client.post("/api/ingest", json={})
    assert r.status_code == 400
    assert "error" in r.json()
    assert blob.writes == []


def test_ingest_without_store_token_is_503(client, pipeline):
    pipeline.settings.blob_token = None
    r = client.post("/api/ingest", json={"url": "https://a.example.com/1"})
    assert r.status_code == 503
    assert "BLOB_READ_WRITE_TOKEN" in r.json()["error"]


def test_ingest_short_page_is_500_without_write(client, fetcher, blob):
    fetcher.pages["https://spa.example.com/"] = "<html><body><div id=app></div></body></html>"
    r = client.post("/api/ingest", json={"url": "https://spa.example.com/"})
    assert r.status_code == 500
    assert "no usable content" in r.json()["error"].lower()
    assert blob.writes == []


def test_ingest_timeout_message_is_distinct(client, pipeline):
    pipeline.fetcher = FakeFetcher(error=FetchError.timeout(15))
    r = client.post("/api/ingest", json={"url": "https://slow.example.com/"})
    assert r.status_code == 500
    assert r.json()["kind"] == "timeout"
    assert "timed out" in r.json()["error"]


def test_ingest_upstream_status(client, pipeline):
    pipeline.fetcher = FakeFetcher(error=FetchError.upstream_status(404))
    r = client.post("/api/ingest", json={"url": "https://gone.example.com/"})
    assert r.status_code == 500
    assert "404" in r.json()["error"]


def test_ingest_store_failure_is_500(client, blob):
    blob.fail_writes = True
    r = client.post("/api/ingest", json={"url": "https://a.example.com/1"})
    assert r.status_code == 500
    assert r.json()["kind"] == "store"


def test_delete_pending(client):
    item = client.post("/api/ingest", json={"url": "https://a.example.com/1"}).json()["item"]
    r = client.delete("/api/pending", params={"id": item["id"]})
    assert r.status_code == 200
    assert client.get("/api/pending").json() == []

    # apagar de novo -> 404
    r = client.delete("/api/pending", params={"id": item["id"]})
    assert r.status_code == 404

    r = client.delete("/api/pending")
    assert r.status_code == 400


def test_analyze_pending_item_commits_record(client):
    item = client.post("/api/ingest", json={"url": "https://news.example.com/byd"}).json()["item"]
    r = client.post("/api/analyze", json={"pendingId": item["id"]})
    assert r.status_code == 200
    record = r.json()["record"]
    assert record["brand"] == "BYD"
    assert record["type"] == "sales"
    assert record["image"]

    assert [rec["id"] for rec in client.get("/api/records").json()] == [record["id"]]
    # o item pendente não é removido automaticamente
    assert [i["id"] for i in client.get("/api/pending").json()] == [item["id"]]


def test_analyze_requires_input(client):
    r = client.post("/api/analyze", json={})
    assert r.status_code == 400


def test_analyze_unknown_type_becomes_other(client, analyzer):
    analyzer.payload = {"title": "Dealer news", "brand": "MG", "type": "rumor"}
    r = client.post("/api/analyze", json={"text": "pasted article"})
    assert r.status_code == 200
    assert r.json()["record"]["type"] == "other"


def test_analyzer_failures_have_distinct_messages(client, analyzer):
    seen = {}
    for kind in (AnalyzerError.AUTH, AnalyzerError.PARSE_SHAPE, AnalyzerError.OTHER):
        analyzer.error = AnalyzerError(kind, "detail")
        r = client.post("/api/analyze", json={"text": "pasted article"})
        assert r.status_code == 502
        assert r.json()["kind"] == kind
        seen[kind] = r.json()["error"]
    assert len(set(seen.values())) == 3


def test_manual_record_and_brand_counts(client):
    r = client.post("/api/records", json={"title": "Launch", "brand": "toyota", "type": "launch"})
    assert r.status_code == 200
    assert r.json()["record"]["brand"] == "Toyota"
    client.post("/api/records", json={"title": "Startup", "brand": "Lucid"})

    counts = client.get("/api/records/brands").json()
    assert counts["Toyota"] == 1
    assert counts["Other"] == 1
    assert "Lucid" not in counts


def test_unexpected_error_is_json_500_with_cors(app, pipeline, monkeypatch):
    from fastapi.testclient import TestClient

    def boom():
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(pipeline, "list_pending", boom)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/api/pending", headers={"Origin": "https://dashboard.example.com"})

    assert r.status_code == 500
    assert r.json() == {"error": "disk on fire"}
    assert r.headers["access-control-allow-origin"] == "*"
