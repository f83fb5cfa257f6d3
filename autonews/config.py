import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from autonews.errors import ConfigError
from autonews.taxonomy import DEFAULT_BRANDS

logger = logging.getLogger(__name__)

DEFAULT_BLOB_API_URL = "https://blob.vercel-storage.com"
DEFAULT_ANALYZER_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
DEFAULT_ANALYZER_MODEL = "qwen-plus"
DEFAULT_IMAGE_BASE_URL = "https://image.pollinations.ai/prompt"
DEFAULT_FETCH_TIMEOUT = 15


def _int_from_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
        return value if value > 0 else default
    except ValueError:
        logger.warning("Invalid int value for %s=%s; using default %s", key, raw, default)
        return default


def _parse_brands(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_BRANDS)
    brands = []
    for token in raw.split(","):
        token = token.strip()
        if token and token not in brands:
            brands.append(token)
    return brands or list(DEFAULT_BRANDS)


@dataclass
class Settings:
    blob_token: Optional[str] = None
    blob_api_url: str = DEFAULT_BLOB_API_URL
    pending_path: str = "pending.json"
    records_path: str = "news.json"
    fetch_timeout: int = DEFAULT_FETCH_TIMEOUT
    analyzer_api_key: Optional[str] = None
    analyzer_base_url: str = DEFAULT_ANALYZER_BASE_URL
    analyzer_model: str = DEFAULT_ANALYZER_MODEL
    brands: List[str] = field(default_factory=lambda: list(DEFAULT_BRANDS))
    sentiment_model: Optional[str] = None
    image_base_url: str = DEFAULT_IMAGE_BASE_URL

    @classmethod
    def from_env(cls, load_env: bool = True) -> "Settings":
        """Monta as configurações a partir do ambiente (e do .env, se houver)."""
        if load_env:
            load_dotenv(override=False)
        return cls(
            blob_token=os.getenv("BLOB_READ_WRITE_TOKEN") or None,
            blob_api_url=os.getenv("BLOB_API_URL") or DEFAULT_BLOB_API_URL,
            pending_path=os.getenv("PENDING_PATH") or "pending.json",
            records_path=os.getenv("RECORDS_PATH") or "news.json",
            fetch_timeout=_int_from_env("FETCH_TIMEOUT_SECONDS", DEFAULT_FETCH_TIMEOUT),
            analyzer_api_key=os.getenv("DASHSCOPE_API_KEY") or None,
            analyzer_base_url=os.getenv("ANALYZER_BASE_URL") or DEFAULT_ANALYZER_BASE_URL,
            analyzer_model=os.getenv("ANALYZER_MODEL") or DEFAULT_ANALYZER_MODEL,
            brands=_parse_brands(os.getenv("BRANDS")),
            sentiment_model=os.getenv("SENTIMENT_MODEL") or None,
            image_base_url=os.getenv("IMAGE_BASE_URL") or DEFAULT_IMAGE_BASE_URL,
        )

    def require_blob_token(self) -> str:
        if not self.blob_token:
            raise ConfigError("Server misconfigured: storage token (BLOB_READ_WRITE_TOKEN) is not set")
        return self.blob_token

    def require_analyzer_key(self) -> str:
        if not self.analyzer_api_key:
            raise ConfigError("Server misconfigured: analyzer API key (DASHSCOPE_API_KEY) is not set")
        return self.analyzer_api_key


def configure_logging(level: Optional[str] = None) -> None:
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
