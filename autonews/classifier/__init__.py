from .news_classifier import NewsClassifier

__all__ = ["NewsClassifier"]
