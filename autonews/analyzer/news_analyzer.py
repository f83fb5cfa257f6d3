import re
import json
import logging
from typing import List, Optional

import openai
from openai import OpenAI
from pydantic import ValidationError as PydanticValidationError

from autonews.errors import AnalyzerError
from autonews.storage.models import AnalyzerCandidate
from autonews.taxonomy import NewsType

logger = logging.getLogger(__name__)

_JSON_HINT = "Reply with exactly one valid JSON object, no explanation, no markdown, no code fences."

SYSTEM_PROMPT = """You are an automotive industry news analyst.
Read the article text and extract:
- title: a concise headline
- summary: two or three sentences
- brand: the main car brand, chosen from this list when possible: {brands}. Use "Other" when none applies.
- type: one of {types}
- date: publication date as YYYY-MM-DD (today's date if unknown)
- url: the article URL if it appears in the text, otherwise ""
- image_keywords: a short English prompt describing a matching illustration
- sentiment: one of positive, neutral, negative
- tags: up to five short labels
"""


def _extract_first_json(text: str) -> str:
    """Pega o primeiro bloco {...} e remove vírgulas sobrando."""
    m = re.search(r"\{.*\}", text, flags=re.DOTALL)
    candidate = m.group(0) if m else text.strip()
    candidate = re.sub(r",\s*([}\]])", r"\1", candidate)
    return candidate.strip()


class NewsAnalyzer:
    """
    Extração estruturada via LLM (endpoint compatível com OpenAI; por padrão
    Qwen no DashScope). A saída é tratada como não confiável: aqui só se
    garante que é um objeto JSON; coerção e defaults ficam no pipeline.
    """

    def __init__(self, api_key: str, base_url: Optional[str] = None,
                 model: str = "qwen-plus", timeout_s: float = 60, client: Optional[OpenAI] = None):
        self.model = model
        self.timeout_s = timeout_s
        self.client = client or OpenAI(api_key=api_key, base_url=base_url, max_retries=0)

    def _build_messages(self, text: str, brands: List[str]) -> list:
        system = SYSTEM_PROMPT.format(
            brands=", ".join(brands),
            types=", ".join(t.value for t in NewsType),
        )
        return [
            {"role": "system", "content": f"{system}\n{_JSON_HINT}"},
            {"role": "user", "content": f"{text.strip()}\n\n{_JSON_HINT}"},
        ]

    def analyze(self, text: str, brands: List[str]) -> AnalyzerCandidate:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(text, brands),
                temperature=0.2,
                response_format={"type": "json_object"},
                timeout=self.timeout_s,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.warning("Analyzer credential rejected: %s", e)
            raise AnalyzerError(AnalyzerError.AUTH, str(e))
        except openai.OpenAIError as e:
            logger.error("Analyzer call failed: %s", e)
            raise AnalyzerError(AnalyzerError.OTHER, str(e))

        return self.parse_response(self._message_content(completion))

    @staticmethod
    def _message_content(completion) -> str:
        # resposta sem choices (filtro de conteúdo, proxy) ou sem message é forma inválida
        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        if message is None:
            logger.warning("Analyzer returned no message in the completion")
            raise AnalyzerError(AnalyzerError.PARSE_SHAPE, "completion has no message")
        return getattr(message, "content", None) or ""

    @staticmethod
    def parse_response(raw_text: str) -> AnalyzerCandidate:
        try:
            data = json.loads(_extract_first_json(raw_text))
        except json.JSONDecodeError as e:
            logger.warning("Analyzer returned non-JSON output: %s", e)
            raise AnalyzerError(AnalyzerError.PARSE_SHAPE, str(e))
        if not isinstance(data, dict):
            raise AnalyzerError(AnalyzerError.PARSE_SHAPE, "expected a JSON object")
        try:
            return AnalyzerCandidate.model_validate(data)
        except PydanticValidationError as e:
            raise AnalyzerError(AnalyzerError.PARSE_SHAPE, str(e))
