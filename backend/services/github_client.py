# services/github_client.py
import os
from typing import List, Optional

import requests
from dotenv import load_dotenv
from pydantic import BaseModel

from services.errors import ContextFetchError, InvalidRepoUrlError
from services.utils import debug_print, truncate_context

load_dotenv()

GITHUB_RAW_BASE = os.getenv("GITHUB_RAW_BASE", "https://raw.githubusercontent.com")
# HEAD resolves to the repository's default branch on raw.githubusercontent.com
GITHUB_BRANCH = os.getenv("GITHUB_BRANCH", "HEAD")
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", "15"))

CONTEXT_FILES = ["llms.txt", "README.md"]


class RepoRef(BaseModel):
    user: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.user}/{self.repo}"


class RepoContext(BaseModel):
    name: str
    context: str
    source: str


def parse_repo_url(url: str) -> RepoRef:
    """
    github.com/<user>/<repo>[/...] -> RepoRef.
    Scheme, www., an explicit port, trailing slash, .git suffix and deeper paths are tolerated.
    """
    raw = (url or "").strip()
    if "://" in raw:
        raw = raw.split("://", 1)[1]
    raw = raw.split("?", 1)[0].split("#", 1)[0]

    parts = [p for p in raw.split("/") if p]
    host = parts[0].split(":", 1)[0].lower() if parts else ""
    if host not in ("github.com", "www.github.com"):
        raise InvalidRepoUrlError()
    if len(parts) < 3:
        raise InvalidRepoUrlError()

    user = parts[1]
    repo = parts[2]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not user or not repo:
        raise InvalidRepoUrlError()

    return RepoRef(user=user, repo=repo)


def raw_file_url(ref: RepoRef, path: str, branch: Optional[str] = None) -> str:
    base = GITHUB_RAW_BASE.rstrip("/")
    return f"{base}/{ref.user}/{ref.repo}/{branch or GITHUB_BRANCH}/{path}"


def placeholder_context(repo_name: str) -> str:
    return (
        f"The user provided the repository {repo_name} but the contents could not be fetched directly. "
        "Please assume a standard architecture based on the repository name and common patterns for this type of tool."
    )


def fetch_raw_file(ref: RepoRef, path: str) -> Optional[str]:
    """Returns the file text, or None when the server answers with a non-2xx status."""
    resp = requests.get(raw_file_url(ref, path), timeout=FETCH_TIMEOUT)
    if not resp.ok:
        debug_print(f"{path} fetch failed", f"HTTP {resp.status_code}")
        return None
    return resp.text


def fetch_repo_context(url: str) -> RepoContext:
    ref = parse_repo_url(url)
    repo_name = ref.full_name

    transport_errors: List[str] = []
    for path in CONTEXT_FILES:
        try:
            text = fetch_raw_file(ref, path)
        except requests.RequestException as e:
            debug_print(f"{path} fetch failed", str(e))
            transport_errors.append(f"{path}: {e}")
            continue
        if text is not None:
            return RepoContext(name=repo_name, context=truncate_context(text), source=path)

    if len(transport_errors) == len(CONTEXT_FILES):
        raise ContextFetchError(f"Could not reach GitHub for {repo_name}")

    # reachable but nothing readable (private repo, no README): let the model infer from the name
    return RepoContext(name=repo_name, context=placeholder_context(repo_name), source="placeholder")
