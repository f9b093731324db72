# services/openai_client.py
import os
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI

from services.errors import MissingApiKeyError

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
ANALYSIS_MODEL = os.getenv("ANALYSIS_MODEL", "gpt-4.1-mini")
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gpt-image-1")
IMAGE_SIZE = os.getenv("IMAGE_SIZE", "1536x1024")
FALLBACK_IMAGE_MODEL = os.getenv("FALLBACK_IMAGE_MODEL", "dall-e-3")
FALLBACK_IMAGE_SIZE = os.getenv("FALLBACK_IMAGE_SIZE", "1792x1024")


def resolve_api_key(api_key: Optional[str] = None) -> str:
    # request key (UI picker / header) wins over the environment
    key = (api_key or "").strip() or (OPENAI_API_KEY or "").strip()
    if not key:
        raise MissingApiKeyError()
    return key


def get_openai_client(api_key: Optional[str] = None) -> OpenAI:
    # fresh client per call so a newly selected key is always picked up
    return OpenAI(api_key=resolve_api_key(api_key))
