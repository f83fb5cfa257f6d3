"""
Taxonomia de erros do pipeline de ingestão.

Toda falha conhecida herda de PipelineError e carrega o status HTTP e a
mensagem que o usuário vê; a API converte tudo num único formato
``{"error": ..., "kind": ...}``.
"""
from typing import Any, Dict, Optional


class PipelineError(Exception):
    status_code = 500
    kind: Optional[str] = None

    def __init__(self, message: str, kind: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.kind:
            payload["kind"] = self.kind
        return payload


class ConfigError(PipelineError):
    status_code = 503


class ValidationError(PipelineError):
    status_code = 400


class NotFoundError(PipelineError):
    status_code = 404


class FetchError(PipelineError):
    TIMEOUT = "timeout"
    UPSTREAM_STATUS = "upstream_status"
    NETWORK = "network"

    def __init__(self, message: str, kind: str = NETWORK, status: Optional[int] = None):
        super().__init__(message, kind)
        self.status = status

    @classmethod
    def timeout(cls, seconds: float) -> "FetchError":
        return cls(f"Fetch timed out ({seconds:g}s): target site responded too slowly", cls.TIMEOUT)

    @classmethod
    def upstream_status(cls, status: int) -> "FetchError":
        return cls(f"Fetch failed: target site returned {status}", cls.UPSTREAM_STATUS, status=status)

    @classmethod
    def network(cls, detail: str) -> "FetchError":
        return cls(f"Fetch failed: {detail}", cls.NETWORK)


class ExtractError(PipelineError):
    kind = "insufficient_content"


class StoreError(PipelineError):
    kind = "store"


class AnalyzerError(PipelineError):
    status_code = 502

    AUTH = "auth"
    PARSE_SHAPE = "parse_shape"
    OTHER = "other"

    MESSAGES = {
        AUTH: "Analyzer API key rejected. Check the DASHSCOPE_API_KEY configuration.",
        PARSE_SHAPE: "The AI response could not be parsed, please retry.",
    }

    def __init__(self, kind: str = OTHER, detail: Optional[str] = None):
        message = self.MESSAGES.get(kind) or f"Analysis failed: {detail or 'unknown error'}"
        super().__init__(message, kind)
        self.detail = detail
