"""
Redução de HTML para texto puro, sem parser de DOM.

Cada passo é uma substituição por regex independente das outras: HTML
quebrado só piora o resultado, nunca gera exceção. A saída é pensada para
alimentar um modelo de linguagem, não para fidelidade de marcação.
"""
import re
from dataclasses import dataclass
from typing import Union

UNTITLED = "Untitled"
MAX_TEXT_LENGTH = 5000
MIN_CONTENT_LENGTH = 50

_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title\s*>", re.IGNORECASE | re.DOTALL)

# blocos sem texto narrativo, removidos por pares abre/fecha (non-greedy)
_BLOCK_TAGS = ("script", "style", "nav", "header", "footer", "iframe", "svg")
_BLOCK_RES = [
    re.compile(rf"<{tag}\b[^>]*>.*?</{tag}\s*>", re.IGNORECASE | re.DOTALL)
    for tag in _BLOCK_TAGS
]
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_NBSP_RE = re.compile(r"&nbsp;", re.IGNORECASE)
_BLANK_LINES_RE = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class ExtractedPage:
    title: str
    text: str

    @property
    def has_content(self) -> bool:
        return len(self.text) >= MIN_CONTENT_LENGTH


def extract_title(html: str) -> str:
    match = _TITLE_RE.search(html)
    if not match:
        return UNTITLED
    title = match.group(1).strip()
    return title or UNTITLED


def strip_blocks(html: str) -> str:
    body = _COMMENT_RE.sub("", html)
    for pattern in _BLOCK_RES:
        body = pattern.sub("", body)
    return body


def html_to_text(body: str) -> str:
    text = _TAG_RE.sub("\n", body)
    text = _NBSP_RE.sub(" ", text)
    text = text.replace("\t", " ").replace("\r\n", "\n").replace("\r", "\n")
    text = _BLANK_LINES_RE.sub("\n", text)
    return text.strip()


def extract(html: Union[str, bytes, None]) -> ExtractedPage:
    """Título + corpo em texto puro (no máximo MAX_TEXT_LENGTH caracteres)."""
    if html is None:
        html = ""
    elif isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")

    title = extract_title(html)
    text = html_to_text(strip_blocks(html))
    return ExtractedPage(title=title, text=text[:MAX_TEXT_LENGTH])
