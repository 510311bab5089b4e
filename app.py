import json
from typing import List

import streamlit as st
import streamlit.components.v1 as components
from loguru import logger

import helper_state
import speech
from config import Settings, configure_logging, load_settings
from history import HistoryItem, HistoryStore
from suggestion_client import SuggestionClient

APP_TITLE = "Live Interview Helper"
APP_SUBTITLE = "Get real-time AI-powered suggestions during your interviews"
COPIED_RESET_MS = 2000

TIPS: List[str] = [
    "Make sure your microphone is enabled and working properly",
    "Speak clearly and at a moderate pace for better speech recognition",
    "Use the AI suggestions as inspiration - personalize them with your own experience",
    "Your interview history is automatically saved locally on this machine",
    "Export your history to keep a permanent record of your practice sessions",
]


@st.cache_resource(show_spinner=False)
def _get_settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info(f"Interview helper using suggestion service at {settings.suggestion_api_url}")
    return settings


@st.cache_resource(show_spinner=False)
def _get_suggestion_client(url: str, timeout: float) -> SuggestionClient:
    return SuggestionClient(url, timeout=timeout)


def _hide_streamlit_header_actions() -> None:
    # Hide Streamlit's top-right header actions (e.g., Deploy) for a cleaner app UI.
    st.markdown(
        """
        <style>
          [data-testid="stHeaderActionElements"] { display: none; }
          [data-testid="stToolbar"] { display: none; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def _init_session_state(store: HistoryStore) -> None:
    helper_state.init_state(st.session_state, store)


def _process_speech_events(settings: Settings) -> None:
    ss = st.session_state
    value = speech.speech_input(
        speech.WebSpeechConfig(lang=settings.speech_lang),
        listening=bool(ss.get("listening")),
    )
    was_listening = bool(ss.get("listening"))
    if helper_state.handle_speech_event(ss, speech.parse_event(value)):
        # The recognizer only sees a new listening state on the next render.
        if bool(ss.get("listening")) != was_listening:
            st.rerun()


def _show_toasts() -> None:
    for toast in helper_state.drain_toasts(st.session_state):
        st.toast(f"**{toast.title}** {toast.description}", icon="⚠️" if toast.destructive else "✅")


def _render_history_controls(store: HistoryStore) -> None:
    ss = st.session_state
    items: List[HistoryItem] = ss.get("history") or []

    _, col_toggle, col_export, col_clear = st.columns([6, 1.4, 1, 1])
    col_toggle.button(
        "Hide History" if ss.get("show_history") else "Show History",
        key="history_toggle",
        icon=":material/history:",
        use_container_width=True,
        on_click=helper_state.toggle_history_panel,
        args=(ss,),
    )
    if not items:
        return

    exported = helper_state.export_history(ss)
    if exported is not None:
        file_name, payload = exported
        col_export.download_button(
            "Export",
            data=payload,
            file_name=file_name,
            mime="application/json",
            icon=":material/download:",
            use_container_width=True,
            on_click=helper_state.on_history_exported,
            args=(ss,),
        )
    col_clear.button(
        "Clear",
        key="history_clear",
        type="primary",
        icon=":material/delete:",
        use_container_width=True,
        on_click=helper_state.clear_history,
        args=(ss, store),
    )


def _render_history_panel() -> None:
    ss = st.session_state
    items: List[HistoryItem] = ss.get("history") or []
    if not ss.get("show_history") or not items:
        return

    with st.container(border=True):
        st.markdown(f"#### Interview History ({len(items)})")
        with st.container(height=384, border=False):
            for item in items:
                with st.container(border=True):
                    st.markdown(f"**Q:** {item.question}")
                    st.markdown(f"A: {item.suggestion}")
                    st.caption(item.timestamp)


def _render_question_card() -> None:
    ss = st.session_state
    listening = bool(ss.get("listening"))

    with st.container(border=True):
        col_title, col_mic = st.columns([5, 1])
        col_title.subheader("Question Detected")
        col_mic.button(
            "Stop" if listening else "Listen",
            key="mic_toggle",
            icon=":material/mic_off:" if listening else ":material/mic:",
            type="primary" if listening else "secondary",
            help="Stop listening" if listening else "Start listening",
            on_click=helper_state.toggle_listening,
            args=(ss,),
        )

        with st.container(height=200, border=False):
            question = str(ss.get("question") or "")
            if listening and not question:
                st.markdown("*Listening for questions...*")
            if question:
                st.write(question)

        if listening:
            st.caption(":red[●] Microphone is active - speak your interview question")
        else:
            st.caption("Click the microphone to start listening for interview questions")

        with st.form("manual_question", clear_on_submit=True, border=False):
            typed = st.text_input(
                "Or type a question",
                key="typed_question",
                placeholder="Tell me about a time you handled a difficult stakeholder…",
            )
            if st.form_submit_button("Get Suggestion", key="ask_typed"):
                ss["question"] = typed.strip()
                ss["pending_question"] = typed


def _render_copy_button(text: str) -> None:
    # Embedded as a JS string literal; "</" must not close the script tag.
    payload = json.dumps(text).replace("</", "<\\/")
    components.html(
        f"""
        <div style="font-family: ui-sans-serif, system-ui, -apple-system;">
          <button id="copy-btn" style="border: 1px solid #d0d0d0; background: #fff; border-radius: 9999px; padding: 0.3rem 0.9rem; cursor: pointer;">
            Copy
          </button>
          <span id="copy-msg" style="margin-left: 0.5rem; font-size: 0.85rem;"></span>
        </div>
        <script>
          (function() {{
            const text = {payload};
            const btn = document.getElementById("copy-btn");
            const msg = document.getElementById("copy-msg");
            btn.addEventListener("click", function() {{
              navigator.clipboard.writeText(text).then(function() {{
                btn.textContent = "Copied!";
                msg.textContent = "Response copied to clipboard";
                setTimeout(function() {{ btn.textContent = "Copy"; msg.textContent = ""; }}, {COPIED_RESET_MS});
              }}).catch(function(err) {{
                console.error("Failed to copy text: ", err);
                msg.style.color = "#b00020";
                msg.textContent = "Copy Failed: failed to copy to clipboard";
              }});
            }});
          }})();
        </script>
        """,
        height=44,
    )


def _render_suggestion_card(client: SuggestionClient, store: HistoryStore) -> None:
    ss = st.session_state
    with st.container(border=True):
        st.subheader("AI Suggestion")

        if ss.get("pending_question") is not None:
            with st.spinner("Generating AI response..."):
                helper_state.run_pending_suggestion(ss, client.fetch, store)

        suggestion = str(ss.get("suggestion") or "")
        with st.container(height=200, border=False):
            if suggestion:
                st.markdown(suggestion)
            elif not ss.get("question"):
                st.markdown("*AI suggestions will appear here when a question is detected*")

        if suggestion:
            _render_copy_button(suggestion)


def _render_tips() -> None:
    with st.container(border=True):
        st.markdown("#### Tips for Best Results")
        st.markdown("\n".join(f"- {tip}" for tip in TIPS))


def main() -> None:
    st.set_page_config(page_title=APP_TITLE, layout="wide")
    _hide_streamlit_header_actions()

    settings = _get_settings()
    store = HistoryStore(settings.history_file)
    client = _get_suggestion_client(settings.suggestion_api_url, settings.suggestion_timeout_s)

    _init_session_state(store)
    _process_speech_events(settings)

    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)

    _render_history_controls(store)
    _render_history_panel()

    col_question, col_suggestion = st.columns(2)
    with col_question:
        _render_question_card()
    with col_suggestion:
        _render_suggestion_card(client, store)

    _render_tips()
    _show_toasts()


if __name__ == "__main__":
    main()
