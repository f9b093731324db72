# services/pipeline.py
from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel

from app_agents.architecture_agent import analyze_architecture
from services.errors import InvalidTransitionError
from services.github_client import RepoContext, fetch_repo_context
from services.image_generation import generate_diagram_image
from services.openai_client import get_openai_client
from services.utils import debug_print, truncate_context

MANUAL_CONTEXT_NAME = "Manual Context"


class AppStatus(str, Enum):
    IDLE = "IDLE"
    FETCHING_REPO = "FETCHING_REPO"
    ANALYZING_ARCH = "ANALYZING_ARCH"
    GENERATING_IMAGE = "GENERATING_IMAGE"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


# forward steps only; ERROR is reachable from every non-terminal state
NEXT_STATUS: Dict[AppStatus, AppStatus] = {
    AppStatus.IDLE: AppStatus.FETCHING_REPO,
    AppStatus.FETCHING_REPO: AppStatus.ANALYZING_ARCH,
    AppStatus.ANALYZING_ARCH: AppStatus.GENERATING_IMAGE,
    AppStatus.GENERATING_IMAGE: AppStatus.COMPLETED,
}

TERMINAL = (AppStatus.COMPLETED, AppStatus.ERROR)


class StatusTracker:
    def __init__(self, on_status: Optional[Callable[[AppStatus], None]] = None):
        self.status = AppStatus.IDLE
        self.history: List[AppStatus] = [AppStatus.IDLE]
        self._on_status = on_status

    def _enter(self, status: AppStatus) -> None:
        self.status = status
        self.history.append(status)
        debug_print("Status", status.value)
        if self._on_status:
            self._on_status(status)

    def advance(self, status: AppStatus) -> None:
        expected = NEXT_STATUS.get(self.status)
        if status == AppStatus.ERROR or expected != status:
            raise InvalidTransitionError(f"{self.status.value} -> {status.value} is not allowed")
        self._enter(status)

    def fail(self) -> None:
        if self.status in TERMINAL:
            raise InvalidTransitionError(f"{self.status.value} is terminal")
        self._enter(AppStatus.ERROR)


class VisualizeSource(BaseModel):
    mode: str = "url"
    repo_url: Optional[str] = None
    manual_text: Optional[str] = None


class GenerationResult(BaseModel):
    repo_name: str
    prompt: str
    image_url: str
    model: str
    context_source: str
    steps: List[AppStatus]


def load_context(source: VisualizeSource) -> RepoContext:
    if source.mode == "manual":
        return RepoContext(
            name=MANUAL_CONTEXT_NAME,
            context=truncate_context(source.manual_text or ""),
            source="manual",
        )
    return fetch_repo_context(source.repo_url or "")


def run_visualization(
    source: VisualizeSource,
    agent,
    api_key: Optional[str] = None,
    tracker: Optional[StatusTracker] = None,
    on_status: Optional[Callable[[AppStatus], None]] = None,
) -> GenerationResult:
    """
    fetch -> analyze -> render, strictly in that order.
    On failure the tracker ends in ERROR and the exception propagates to the caller.
    """
    tracker = tracker or StatusTracker(on_status=on_status)

    try:
        tracker.advance(AppStatus.FETCHING_REPO)
        repo_ctx = load_context(source)
        debug_print("Context", {"name": repo_ctx.name, "source": repo_ctx.source, "chars": len(repo_ctx.context)})

        tracker.advance(AppStatus.ANALYZING_ARCH)
        prompt = analyze_architecture(agent, repo_ctx.name, repo_ctx.context, api_key=api_key)
        debug_print("ArchitectureAgent", prompt)

        tracker.advance(AppStatus.GENERATING_IMAGE)
        image = generate_diagram_image(get_openai_client(api_key), prompt)
        debug_print("Image", {"model": image.model, "used_fallback": image.used_fallback})

        tracker.advance(AppStatus.COMPLETED)
    except Exception:
        if tracker.status not in TERMINAL:
            tracker.fail()
        raise

    return GenerationResult(
        repo_name=repo_ctx.name,
        prompt=prompt,
        image_url=image.image_url,
        model=image.model,
        context_source=repo_ctx.source,
        steps=list(tracker.history),
    )
