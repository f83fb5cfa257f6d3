# autonews/tests/test_classifier.py
from autonews.classifier import NewsClassifier
from autonews.taxonomy import Sentiment
from autonews.tracker.pipeline import NewsPipeline

from conftest import FakeAnalyzer, FakeFetcher


def test_classifier_is_disabled_without_model(pipeline):
    assert pipeline.classifier is None


def test_pipeline_builds_lazy_classifier(settings, blob, monkeypatch):
    settings.sentiment_model = "tabularisai/multilingual-sentiment-analysis"
    analyzer = FakeAnalyzer(payload={"title": "Sales slump", "brand": "Nissan", "type": "sales"})
    pipeline = NewsPipeline(settings, fetcher=FakeFetcher(), blob_client=blob, analyzer=analyzer)

    classifier = pipeline.classifier
    assert isinstance(classifier, NewsClassifier)
    assert classifier.model is None  # nada baixado até a primeira classificação

    # retornos determinísticos p/ testes
    def fake_classify_texts(texts):
        return [{"text": t, "sentiment": Sentiment.neutral, "probabilities": []} for t in texts]
    monkeypatch.setattr(classifier, "classify_texts", fake_classify_texts, raising=True)

    record = pipeline.promote(text="Nissan sales fell in May")
    assert record.sentiment == Sentiment.neutral


def test_failing_classifier_does_not_block_commit(settings, blob, monkeypatch):
    settings.sentiment_model = "any/model"
    pipeline = NewsPipeline(settings, fetcher=FakeFetcher(), blob_client=blob,
                            analyzer=FakeAnalyzer(payload={"title": "T"}))

    def boom(texts):
        raise RuntimeError("model download failed")
    monkeypatch.setattr(pipeline.classifier, "classify_texts", boom, raising=True)

    record = pipeline.promote(text="article")
    assert record.sentiment is None
    assert blob.load("news.json")[0]["id"] == record.id


def test_five_class_labels_collapse_to_three():
    assert NewsClassifier.FIVE_CLASS_MAP == [
        Sentiment.negative, Sentiment.negative, Sentiment.neutral, Sentiment.positive, Sentiment.positive,
    ]
