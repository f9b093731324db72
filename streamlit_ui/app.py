import base64
import time
from typing import Any, Dict

import streamlit as st

from backend_client import BackendError, GENERIC_MESSAGE, api_post, load_settings, run_steps

# =====================================================
# CONFIG
# =====================================================

st.set_page_config(page_title="RepoVision", layout="wide")

SETTINGS = load_settings()

STEPS = [
    ("FETCHING_REPO", "Scanning Repo"),
    ("ANALYZING_ARCH", "Analyzing Logic"),
    ("GENERATING_IMAGE", "Drawing Diagram"),
]

BILLING_DOCS = "https://platform.openai.com/settings/organization/billing"


# =====================================================
# HELPER
# =====================================================

def post(path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return api_post(SETTINGS["backend"], path, payload, api_key=st.session_state.api_key)


def render_steps(current: str) -> None:
    order = [s for s, _ in STEPS]
    cols = st.columns(len(STEPS))
    for i, (status, label) in enumerate(STEPS):
        with cols[i]:
            if current == "COMPLETED" or (current in order and order.index(current) > i):
                st.markdown(f"✅ **{label}**")
            elif current == status:
                st.markdown(f"⏳ **{label}**")
            else:
                st.markdown(f"▫️ {label}")


def image_bytes(data_url: str) -> bytes:
    return base64.b64decode(data_url.split(";base64,", 1)[1])


# =====================================================
# STATE
# =====================================================

if "api_key" not in st.session_state:
    st.session_state.api_key = SETTINGS["api_key"]

if "has_key" not in st.session_state:
    st.session_state.has_key = bool(st.session_state.api_key)

if "status" not in st.session_state:
    st.session_state.status = "IDLE"

if "error" not in st.session_state:
    st.session_state.error = None

if "result_image" not in st.session_state:
    st.session_state.result_image = None

if "prompt_summary" not in st.session_state:
    st.session_state.prompt_summary = None


# =====================================================
# KEY PICKER
# =====================================================

if not st.session_state.has_key:
    st.title("Access Required")
    st.write("To generate architecture diagrams you need an OpenAI API key with image generation enabled.")
    if st.session_state.error:
        st.error(st.session_state.error)
    key = st.text_input("OpenAI API key", type="password")
    if st.button("Connect", type="primary"):
        if key.strip():
            st.session_state.api_key = key.strip()
            st.session_state.has_key = True
            st.session_state.error = None
            st.session_state.status = "IDLE"
            st.rerun()
        else:
            st.error("Please enter a key.")
    st.markdown(f"[Learn about billing & API keys]({BILLING_DOCS})")
    st.stop()


# =====================================================
# HEADER
# =====================================================

st.title("RepoVision")
st.caption("Provide a GitHub URL or paste your documentation. We'll deduce the architecture and draw a whiteboard diagram.")

tab_url, tab_manual = st.tabs(["Public GitHub URL", "Manual Input (Private Repo)"])

with tab_url:
    repo_url = st.text_input("Repository", placeholder="https://github.com/username/repository")
    run_url = st.button("Visualize", type="primary", key="visualize_url")

with tab_manual:
    manual_text = st.text_area(
        "Documentation",
        placeholder="Paste your README.md, llms.txt, or a description of your architecture here...",
        height=180,
    )
    run_manual = st.button("Visualize", type="primary", key="visualize_manual")


# =====================================================
# RUN
# =====================================================

def run(mode: str, url: str, text: str) -> None:
    st.session_state.error = None
    st.session_state.result_image = None
    st.session_state.prompt_summary = None

    progress = st.empty()

    def enter(status: str) -> None:
        st.session_state.status = status
        with progress.container():
            render_steps(status)

    try:
        prompt, image_url = run_steps(post, mode, url, text, enter)
        st.session_state.prompt_summary = prompt
        st.session_state.result_image = image_url

    except BackendError as e:
        st.session_state.status = "ERROR"
        st.session_state.error = str(e) or GENERIC_MESSAGE
        if e.reprompt_key:
            st.session_state.has_key = False
            st.rerun()


if run_url and repo_url.strip():
    run("url", repo_url.strip(), "")
elif run_manual and manual_text.strip():
    run("manual", "", manual_text.strip())


# =====================================================
# RESULT
# =====================================================

status = st.session_state.status

if status == "ERROR" and st.session_state.error:
    st.error(st.session_state.error)

if status == "COMPLETED" and st.session_state.result_image:
    st.subheader("Architecture Diagram")
    st.image(image_bytes(st.session_state.result_image), use_container_width=True)
    st.download_button(
        "Download",
        data=image_bytes(st.session_state.result_image),
        file_name=f"architecture-{int(time.time() * 1000)}.png",
        mime="image/png",
    )
    st.markdown("#### Behind the scenes")
    st.code(st.session_state.prompt_summary or "", language=None)
