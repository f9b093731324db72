# streamlit_ui/backend_client.py
import os
from typing import Any, Callable, Dict, Optional, Tuple

import requests
from dotenv import load_dotenv

DEFAULT_BACKEND = "http://localhost:8000"

CONTEXT_PATH = "/context"
ANALYZE_PATH = "/analyze"
DIAGRAM_PATH = "/diagram"

GENERIC_MESSAGE = "An unexpected error occurred during generation."


class BackendError(RuntimeError):
    def __init__(self, message: str, kind: str = "generic", reprompt_key: bool = False):
        super().__init__(message)
        self.kind = kind
        self.reprompt_key = reprompt_key


def load_settings(dotenv_path: Optional[str] = None) -> Dict[str, str]:
    """.env first, then whatever the process environment already has."""
    load_dotenv(dotenv_path)
    return {
        "backend": os.getenv("REPOVISION_BACKEND") or DEFAULT_BACKEND,
        "api_key": os.getenv("OPENAI_API_KEY") or "",
    }


def format_detail(detail: Any, status_code: int) -> str:
    # FastAPI validation errors come as a list of {"loc": [...], "msg": ...}
    if isinstance(detail, list):
        parts = []
        for item in detail:
            if isinstance(item, dict):
                loc = [str(x) for x in item.get("loc", []) if x != "body"]
                msg = item.get("msg", "invalid value")
                parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
            else:
                parts.append(str(item))
        return "; ".join(parts) or f"HTTP {status_code}"
    if isinstance(detail, str) and detail.strip():
        return detail
    return f"HTTP {status_code}"


def api_post(backend: str, path: str, payload: Dict[str, Any], api_key: Optional[str] = None) -> Dict[str, Any]:
    url = backend.rstrip("/") + path
    headers = {}
    if api_key:
        headers["X-OpenAI-Key"] = api_key

    try:
        r = requests.post(url, json=payload, headers=headers, timeout=180)
    except requests.RequestException as e:
        raise BackendError(f"Backend not reachable: {e}", kind="network")

    try:
        data = r.json()
    except ValueError:
        raise BackendError("Backend returned invalid JSON.")

    if not r.ok:
        detail = data.get("detail") if isinstance(data, dict) else None
        if isinstance(detail, dict):
            raise BackendError(
                detail.get("message") or f"HTTP {r.status_code}",
                kind=detail.get("kind", "generic"),
                reprompt_key=bool(detail.get("reprompt_key")),
            )
        raise BackendError(format_detail(detail, r.status_code))

    return data


def run_steps(
    post: Callable[[str, Dict[str, Any]], Dict[str, Any]],
    mode: str,
    url: str,
    text: str,
    enter: Callable[[str], None],
) -> Tuple[str, str]:
    """
    Drives /context -> /analyze -> /diagram and reports each step through enter().
    Returns (prompt, image_url); every failure comes out as BackendError.
    """
    try:
        enter("FETCHING_REPO")
        if mode == "url":
            ctx = post(CONTEXT_PATH, {"repo_url": url})
            name, context = ctx["name"], ctx["context"]
        else:
            name, context = "Manual Context", text

        enter("ANALYZING_ARCH")
        prompt = post(ANALYZE_PATH, {"repo_name": name, "context": context})["prompt"]

        enter("GENERATING_IMAGE")
        image_url = post(DIAGRAM_PATH, {"prompt": prompt})["image_url"]

        enter("COMPLETED")
        return prompt, image_url
    except BackendError:
        raise
    except Exception as e:
        raise BackendError(f"{GENERIC_MESSAGE} ({type(e).__name__}: {e})")
