from .news_analyzer import NewsAnalyzer

__all__ = ["NewsAnalyzer"]
