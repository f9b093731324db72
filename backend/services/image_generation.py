# services/image_generation.py
from typing import Any, Optional

import openai
from pydantic import BaseModel

from services import openai_client
from services.errors import NoImageDataError, status_code_of
from services.utils import debug_print, to_data_url

FALLBACK_STATUS_CODES = (403, 404)


class DiagramImage(BaseModel):
    image_url: str
    model: str
    used_fallback: bool = False


def should_fall_back(exc: BaseException) -> bool:
    """Only permission / availability problems of the primary model switch models."""
    if isinstance(exc, (openai.PermissionDeniedError, openai.NotFoundError)):
        return True
    if status_code_of(exc) in FALLBACK_STATUS_CODES:
        return True
    return "PERMISSION_DENIED" in str(exc)


def _first_b64(response: Any) -> Optional[str]:
    for item in getattr(response, "data", None) or []:
        b64 = getattr(item, "b64_json", None)
        if b64:
            return b64
    return None


def _render_primary(client, prompt: str) -> Any:
    return client.images.generate(
        model=openai_client.IMAGE_MODEL,
        prompt=prompt,
        size=openai_client.IMAGE_SIZE,
        quality="high",
        n=1,
    )


def _render_fallback(client, prompt: str) -> Any:
    # the fallback model returns URLs unless asked for base64; no "high" quality tier either
    return client.images.generate(
        model=openai_client.FALLBACK_IMAGE_MODEL,
        prompt=prompt,
        size=openai_client.FALLBACK_IMAGE_SIZE,
        response_format="b64_json",
        n=1,
    )


def generate_diagram_image(client, prompt: str) -> DiagramImage:
    model = openai_client.IMAGE_MODEL
    used_fallback = False

    try:
        response = _render_primary(client, prompt)
    except Exception as e:
        if not should_fall_back(e):
            raise
        debug_print(f"{model} failed, falling back to {openai_client.FALLBACK_IMAGE_MODEL}", str(e))
        model = openai_client.FALLBACK_IMAGE_MODEL
        used_fallback = True
        response = _render_fallback(client, prompt)

    b64 = _first_b64(response)
    if not b64:
        raise NoImageDataError()

    return DiagramImage(image_url=to_data_url(b64), model=model, used_fallback=used_fallback)
