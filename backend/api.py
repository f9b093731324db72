from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from app_agents.architecture_agent import analyze_architecture, build_architecture_agent
from services.errors import classify_error
from services.github_client import RepoContext, fetch_repo_context
from services.image_generation import DiagramImage, generate_diagram_image
from services.openai_client import get_openai_client
from services.pipeline import GenerationResult, VisualizeSource, run_visualization
from services.utils import debug_print, truncate_context


# -----------------------------------------
# ENV
# -----------------------------------------
load_dotenv()


# -----------------------------------------
# FastAPI
# -----------------------------------------
app = FastAPI(title="RepoVision")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------------------------
# Models
# -----------------------------------------
class ContextRequest(BaseModel):
    repo_url: str


class AnalyzeRequest(BaseModel):
    repo_name: str = "Manual Context"
    context: str


class AnalyzeResponse(BaseModel):
    prompt: str


class DiagramRequest(BaseModel):
    prompt: str


# -----------------------------------------
# Helpers
# -----------------------------------------
STATUS_BY_KIND = {
    "credentials": 401,
    "network": 502,
    "generic": 500,
}


def error_response(exc: Exception) -> HTTPException:
    info = classify_error(exc)
    debug_print(f"Error ({info.kind})", repr(exc))
    return HTTPException(
        status_code=STATUS_BY_KIND.get(info.kind, 500),
        detail={"status": "ERROR", **info.model_dump()},
    )


def require_text(value: Optional[str], field: str) -> str:
    if not (value and value.strip()):
        raise HTTPException(status_code=400, detail=f"{field} is required")
    return value.strip()


# -----------------------------------------
# Agents (constructed)
# -----------------------------------------
ArchitectureAgent = build_architecture_agent()


# -----------------------------------------
# Endpoints
# -----------------------------------------
@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/context", response_model=RepoContext)
def context(req: ContextRequest):
    repo_url = require_text(req.repo_url, "repo_url")
    try:
        return fetch_repo_context(repo_url)
    except Exception as e:
        raise error_response(e)


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: AnalyzeRequest, x_openai_key: Optional[str] = Header(default=None)):
    text = truncate_context(require_text(req.context, "context"))
    try:
        prompt = analyze_architecture(ArchitectureAgent, req.repo_name, text, api_key=x_openai_key)
        return AnalyzeResponse(prompt=prompt)
    except Exception as e:
        raise error_response(e)


@app.post("/diagram", response_model=DiagramImage)
def diagram(req: DiagramRequest, x_openai_key: Optional[str] = Header(default=None)):
    prompt = require_text(req.prompt, "prompt")
    try:
        return generate_diagram_image(get_openai_client(x_openai_key), prompt)
    except Exception as e:
        raise error_response(e)


@app.post("/visualize", response_model=GenerationResult)
def visualize(req: VisualizeSource, x_openai_key: Optional[str] = Header(default=None)):
    debug_print("Request /visualize", {"mode": req.mode, "repo_url": req.repo_url})

    if req.mode not in ("url", "manual"):
        raise HTTPException(status_code=400, detail="mode must be 'url' or 'manual'")
    if req.mode == "url":
        require_text(req.repo_url, "repo_url")
    else:
        require_text(req.manual_text, "manual_text")

    try:
        return run_visualization(req, ArchitectureAgent, api_key=x_openai_key)
    except HTTPException:
        raise
    except Exception as e:
        raise error_response(e)
