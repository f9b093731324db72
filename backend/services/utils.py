# services/utils.py
import base64
from typing import Any

MAX_CONTEXT_CHARS = 15000
DATA_URL_PREFIX = "data:image/png;base64,"


def debug_print(title: str, payload: Any) -> None:
    print(f">>> {title}: {payload}")


def truncate_context(text: str, limit: int = MAX_CONTEXT_CHARS) -> str:
    return (text or "")[:limit]


def strip_code_fences(text: str) -> str:
    """Model output sometimes comes wrapped in ``` fences; keep only the body."""
    if not text:
        return ""
    t = text.strip()
    if t.startswith("```"):
        parts = t.split("```")
        if len(parts) >= 2:
            candidate = parts[1].strip()
            first_line, _, rest = candidate.partition("\n")
            if rest and " " not in first_line.strip():
                candidate = rest.strip()
            return candidate
    return t


def to_data_url(b64_png: str) -> str:
    return f"{DATA_URL_PREFIX}{b64_png}"


def decode_data_url(data_url: str) -> bytes:
    if not data_url.startswith("data:") or ";base64," not in data_url:
        raise ValueError("not a base64 data URL")
    return base64.b64decode(data_url.split(";base64,", 1)[1])
