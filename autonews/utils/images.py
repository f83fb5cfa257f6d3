import hashlib
from typing import Optional
from urllib.parse import quote

from autonews.config import DEFAULT_IMAGE_BASE_URL


def image_seed(prompt: str) -> int:
    # seed estável: o mesmo prompt sempre gera a mesma URL
    digest = hashlib.sha256(prompt.encode("utf-8")).hexdigest()
    return int(digest[:8], 16) % 1000


def generate_image_url(prompt: str, base_url: str = DEFAULT_IMAGE_BASE_URL,
                       width: int = 800, height: int = 600) -> str:
    prompt = " ".join((prompt or "").split()) or "automotive news"
    return (
        f"{base_url.rstrip('/')}/{quote(prompt, safe='')}"
        f"?width={width}&height={height}&nologo=true&seed={image_seed(prompt)}"
    )


def resolve_image(supplied: Optional[str], prompt: str, base_url: str = DEFAULT_IMAGE_BASE_URL) -> str:
    """Imagem informada pelo usuário, ou uma gerada a partir do prompt."""
    if supplied and supplied.strip():
        return supplied.strip()
    return generate_image_url(prompt, base_url)
