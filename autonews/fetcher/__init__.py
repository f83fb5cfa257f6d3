from .page_fetcher import PageFetcher, RawPage, BROWSER_USER_AGENT

from .base import BaseFetcher

__all__ = ["PageFetcher", "RawPage", "BaseFetcher", "BROWSER_USER_AGENT"]
