# services/errors.py
from typing import Optional

import openai
import requests
from pydantic import BaseModel

CREDENTIAL_MARKERS = ("PERMISSION_DENIED", "Requested entity was not found")

ACCESS_DENIED_MESSAGE = "Access denied. Please select a valid API key with billing enabled."
NETWORK_MESSAGE = (
    "Could not read the repository. Check the URL, or switch to manual input "
    "and paste the README / llms.txt yourself."
)
GENERIC_MESSAGE = "An unexpected error occurred during generation."


class RepoVisionError(Exception):
    pass


class MissingApiKeyError(RepoVisionError):
    def __init__(self, message: str = "API Key not found. Please select a key."):
        super().__init__(message)


class InvalidRepoUrlError(RepoVisionError):
    def __init__(self, message: str = "Invalid GitHub URL"):
        super().__init__(message)


class ContextFetchError(RepoVisionError):
    pass


class NoImageDataError(RepoVisionError):
    def __init__(self, message: str = "No image data returned from the image model."):
        super().__init__(message)


class InvalidTransitionError(RepoVisionError):
    pass


class ErrorInfo(BaseModel):
    kind: str
    message: str
    reprompt_key: bool = False


def status_code_of(exc: BaseException) -> Optional[int]:
    code = getattr(exc, "status_code", None)
    if code is None:
        code = getattr(exc, "status", None)
    return code if isinstance(code, int) else None


def is_credential_error(exc: BaseException) -> bool:
    if isinstance(exc, (MissingApiKeyError, openai.AuthenticationError, openai.PermissionDeniedError)):
        return True
    if status_code_of(exc) in (401, 403):
        return True
    text = str(exc)
    return any(marker in text for marker in CREDENTIAL_MARKERS)


def classify_error(exc: BaseException) -> ErrorInfo:
    """
    Maps a pipeline failure to what the user sees:
    credentials -> ask for a key again, network -> suggest manual input,
    everything else -> message passed through.
    """
    if is_credential_error(exc):
        return ErrorInfo(kind="credentials", message=ACCESS_DENIED_MESSAGE, reprompt_key=True)

    if isinstance(exc, (InvalidRepoUrlError, ContextFetchError, requests.RequestException, openai.APIConnectionError)):
        detail = str(exc).strip()
        message = f"{detail}. {NETWORK_MESSAGE}" if detail else NETWORK_MESSAGE
        return ErrorInfo(kind="network", message=message)

    return ErrorInfo(kind="generic", message=str(exc).strip() or GENERIC_MESSAGE)
