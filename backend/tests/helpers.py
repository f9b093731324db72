from types import SimpleNamespace
from typing import Optional

import httpx
import openai

OPENAI_URL = "https://api.openai.com/v1/images/generations"


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def openai_status_error(status_code: int, message: Optional[str] = None) -> openai.APIStatusError:
    """Real SDK exception objects, as the client would raise them."""
    response = httpx.Response(status_code, request=httpx.Request("POST", OPENAI_URL))
    classes = {
        401: openai.AuthenticationError,
        403: openai.PermissionDeniedError,
        404: openai.NotFoundError,
        429: openai.RateLimitError,
        500: openai.InternalServerError,
    }
    cls = classes.get(status_code, openai.APIStatusError)
    return cls(message or f"Error code: {status_code}", response=response, body=None)


def openai_connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", OPENAI_URL))


def image_response(b64: Optional[str] = "aGVsbG8="):
    return SimpleNamespace(data=[SimpleNamespace(b64_json=b64)] if b64 is not None else [])
