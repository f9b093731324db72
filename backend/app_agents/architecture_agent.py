# app_agents/architecture_agent.py
from typing import Optional

from agents import Agent, OpenAIProvider, RunConfig, Runner

from services import openai_client
from services.utils import strip_code_fences, truncate_context

DEFAULT_PROMPT = "A hand-drawn architecture diagram of a software system."

ILLUSTRATOR_SYSTEM = """
You are a Senior Technical Illustrator. Your goal is to write a highly detailed image generation prompt based on a code repository's description.

The output image should look like a "Hand-drawn Whiteboard Architecture Workflow Diagram".

Style Guide for the image prompt:
- Visual Style: Hand-drawn marker on whiteboard, clean, comic-style, engineering flowchart, step-by-step workflow.
- Layout: Left-to-right flow, divided into distinct vertical columns or "Steps" (e.g., Step 1: Input, Step 2: Processing, Step 3: Output).
- Elements: Boxes, cylinders (databases), clouds (internet), arrows connecting them, small icons.
- Colors: Black marker outlines with vibrant pastel fills (blue, orange, green, yellow) for highlights.

Task:
Analyze the provided repository context (README/llms.txt). Identify the key modules, data flow, steps, and technologies.
Then, write a descriptive paragraph that describes this architecture visually as a workflow.

Format the output as a single, dense paragraph suitable for an image generation model.
Start with: "A hand-drawn whiteboard workflow diagram of [Repo Name]..."
"""


def build_architecture_agent(model: Optional[str] = None) -> Agent:
    return Agent(
        name="ArchitectureAgent",
        instructions=ILLUSTRATOR_SYSTEM,
        model=model or openai_client.ANALYSIS_MODEL,
    )


def build_analysis_message(repo_name: str, context: str) -> str:
    return f"Repository Name: {repo_name}\n\nContext/Readme:\n{context}"


def analyze_architecture(agent: Agent, repo_name: str, context: str, api_key: Optional[str] = None) -> str:
    """
    Text step: repository context -> one paragraph image prompt.
    Raises MissingApiKeyError before any call when no key is configured.
    """
    key = openai_client.resolve_api_key(api_key)
    result = Runner.run_sync(
        agent,
        [{"role": "user", "content": build_analysis_message(repo_name, truncate_context(context))}],
        run_config=RunConfig(model_provider=OpenAIProvider(api_key=key)),
    )
    prompt = strip_code_fences(str(result.final_output or ""))
    return prompt or DEFAULT_PROMPT
