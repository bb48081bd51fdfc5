# Role: Streamlit chat UI over the one-shot SSE transport.
# - Each message is a standalone /api/chat-stream request; the reply renders as fragments arrive.
# - Sidebar shows backend health and an optional per-request API key override.

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Optional

import requests
import streamlit as st

BACKEND_URL = "http://127.0.0.1:3000"
FINAL_SENTINEL = "[FINAL]"


class BackendError(RuntimeError):
    pass


# ----------------------------
# Session helpers
# ----------------------------
def ensure_session() -> None:
    if "messages" not in st.session_state:
        st.session_state["messages"] = []
    if "busy" not in st.session_state:
        st.session_state["busy"] = False
    if "health" not in st.session_state:
        st.session_state["health"] = None


# ----------------------------
# Backend calls
# ----------------------------
def _error_from(data: str) -> Optional[str]:
    if not data.startswith('{"error"'):
        return None
    try:
        return str(json.loads(data).get("error", ""))
    except json.JSONDecodeError:
        return None


def stream_reply(text: str, key: Optional[str] = None) -> Iterator[str]:
    # 1) POST the message, keep the response open
    # 2) Yield every data: fragment until [FINAL]
    # 3) Raise BackendError on an error event
    body: Dict[str, Any] = {"text": text}
    if key:
        body["key"] = key

    with requests.post(
        f"{BACKEND_URL}/api/chat-stream",
        json=body,
        stream=True,
        timeout=(5, 180),
    ) as resp:
        resp.raise_for_status()
        resp.encoding = "utf-8"
        for line in resp.iter_lines(decode_unicode=True):
            if not line:
                continue
            if not line.startswith("data: "):
                # Fragments are sent raw, so an embedded newline continues the previous event.
                yield "\n" + line
                continue

            data = line[len("data: "):]
            if data == FINAL_SENTINEL:
                return
            error = _error_from(data)
            if error is not None:
                raise BackendError(error)
            yield data


def fetch_health() -> Optional[Dict[str, Any]]:
    try:
        r = requests.get(f"{BACKEND_URL}/health", timeout=10)
        if r.status_code != 200:
            return None
        return r.json()
    except requests.RequestException:
        return None


# ----------------------------
# UI polish
# ----------------------------
def inject_css() -> None:
    st.markdown(
        """
<style>
.block-container { max-width: 1100px; padding-top: 2rem; padding-bottom: 2rem; }

.ea-card {
  border: 1px solid rgba(49, 51, 63, 0.14);
  border-radius: 16px;
  padding: 12px 14px;
}

.ea-k { font-size: 0.85rem; opacity: 0.72; }
.ea-v { font-size: 1rem; font-weight: 700; margin-bottom: 8px; }
</style>
""",
        unsafe_allow_html=True,
    )


def render_health(health: Optional[Dict[str, Any]]) -> None:
    if not health:
        st.sidebar.warning("Backend unreachable.")
        return

    key_state = "configured" if health.get("api_key_configured") else "missing"
    st.sidebar.markdown(
        f"""
<div class="ea-card">
<div class="ea-k">Model</div><div class="ea-v">{health.get("model", "—")}</div>
<div class="ea-k">Default API key</div><div class="ea-v">{key_state}</div>
<div class="ea-k">Open WebSocket sessions</div><div class="ea-v">{health.get("active_sessions", 0)}</div>
</div>
""",
        unsafe_allow_html=True,
    )


def render_sidebar() -> Optional[str]:
    st.sidebar.title("Expo agent")

    col1, col2 = st.sidebar.columns(2)
    with col1:
        if st.button("New chat", use_container_width=True, disabled=st.session_state["busy"]):
            st.session_state["messages"] = []
            st.rerun()
    with col2:
        if st.button("Check backend", use_container_width=True, disabled=st.session_state["busy"]):
            st.session_state["health"] = fetch_health()
            st.rerun()

    st.sidebar.divider()
    render_health(st.session_state.get("health"))

    key = st.sidebar.text_input("API key (optional)", type="password")
    return key.strip() or None


# ----------------------------
# Chat
# ----------------------------
def render_chat() -> None:
    for msg in st.session_state["messages"]:
        with st.chat_message(msg["role"]):
            st.markdown(msg["content"])


# ----------------------------
# Main
# ----------------------------
def main() -> None:
    st.set_page_config(page_title="Expo Chat Agent", page_icon="🎪", layout="wide")
    inject_css()

    st.title("🎪 展会信息与策划助手")
    st.caption("问展会信息，或让我帮你策划一个展。每条消息独立发送。")

    ensure_session()
    key = render_sidebar()
    render_chat()

    user_input = st.chat_input("想了解哪些展会？", disabled=st.session_state["busy"])
    if not user_input:
        return

    st.session_state["messages"].append({"role": "user", "content": user_input})
    with st.chat_message("user"):
        st.markdown(user_input)

    st.session_state["busy"] = True
    try:
        with st.chat_message("assistant"):
            assistant_text = st.write_stream(stream_reply(user_input, key))
        st.session_state["messages"].append({"role": "assistant", "content": str(assistant_text)})

    except BackendError as e:
        st.session_state["messages"].append({"role": "assistant", "content": f"❌ {e}"})
        with st.chat_message("assistant"):
            st.error(str(e))
    except requests.RequestException:
        msg = f"I couldn’t reach the backend. Make sure the API is running on {BACKEND_URL}."
        st.session_state["messages"].append({"role": "assistant", "content": msg})
        with st.chat_message("assistant"):
            st.error(msg)
    finally:
        st.session_state["busy"] = False


if __name__ == "__main__":
    main()
