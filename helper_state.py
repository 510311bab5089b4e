"""Page state for the interview helper.

Every function takes the session mapping explicitly (``st.session_state`` in
the app). Notifications are queued under ``toasts`` and drained by the page,
so nothing here touches Streamlit directly.
"""

from dataclasses import dataclass
from typing import Callable, List, MutableMapping, Optional, Tuple

from loguru import logger

import history as history_lib
import speech
from history import HistoryError, HistoryItem, HistoryStore
from suggestion_client import SuggestionError

Fetch = Callable[[str], str]


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    destructive: bool = False


def notify(ss: MutableMapping, title: str, description: str, *, destructive: bool = False) -> None:
    toasts = list(ss.get("toasts") or [])
    toasts.append(Toast(title, description, destructive))
    ss["toasts"] = toasts


def drain_toasts(ss: MutableMapping) -> List[Toast]:
    toasts = list(ss.get("toasts") or [])
    ss["toasts"] = []
    return toasts


def init_state(ss: MutableMapping, store: HistoryStore) -> None:
    ss.setdefault("listening", False)
    ss.setdefault("question", "")
    ss.setdefault("suggestion", "")
    ss.setdefault("is_loading", False)
    ss.setdefault("pending_question", None)
    ss.setdefault("show_history", False)
    ss.setdefault("speech_supported", True)
    ss.setdefault("last_speech_seq", 0)
    ss.setdefault("last_final_count", 0)
    ss.setdefault("toasts", [])
    ss.setdefault("history_loaded", False)
    ss.setdefault("history", [])

    if not ss.get("history_loaded"):
        ss["history"] = store.load()
        ss["history_loaded"] = True


def toggle_listening(ss: MutableMapping) -> None:
    if not ss.get("speech_supported", True):
        notify(ss, "Error", "Speech recognition not initialized.", destructive=True)
        return

    if ss.get("listening"):
        ss["listening"] = False
        notify(ss, "Stopped", "Microphone turned off")
        return

    ss["listening"] = True
    ss["last_final_count"] = 0
    ss["question"] = ""
    ss["suggestion"] = ""
    notify(ss, "Listening", "Microphone is active and listening for questions...")


def handle_speech_event(ss: MutableMapping, event: Optional[speech.SpeechEvent]) -> bool:
    """Apply one recognizer event. Returns True when the event was new."""
    if event is None or event.seq <= int(ss.get("last_speech_seq") or 0):
        return False
    ss["last_speech_seq"] = event.seq

    if event.kind == speech.EVENT_RESULT:
        ss["question"] = event.transcript
        seen = int(ss.get("last_final_count") or 0)
        if event.final_count < seen:
            # A restarted recognizer reports a fresh result list.
            seen = 0
        if event.final_count > seen:
            ss["pending_question"] = event.final_text
        ss["last_final_count"] = event.final_count
    elif event.kind == speech.EVENT_ERROR:
        ss["listening"] = False
        if event.error == speech.START_FAILED:
            logger.error("Error starting speech recognition")
            notify(ss, "Microphone Error", "Failed to start microphone. Please check permissions.", destructive=True)
        else:
            logger.error(f"Speech recognition error: {event.error}")
            notify(ss, "Speech Recognition Error", f"Error: {event.error}. Please try again.", destructive=True)
    elif event.kind == speech.EVENT_END:
        ss["listening"] = False
    elif event.kind == speech.EVENT_UNSUPPORTED:
        ss["speech_supported"] = False
        ss["listening"] = False
        notify(
            ss,
            "Browser Not Supported",
            "Speech recognition is not supported in your browser. Please use Chrome or Edge.",
            destructive=True,
        )
    return True


def get_ai_suggestion(ss: MutableMapping, question: str, fetch: Fetch, store: HistoryStore) -> None:
    if not question or not question.strip():
        notify(ss, "No Question", "Please speak a question first.", destructive=True)
        return

    ss["is_loading"] = True
    ss["suggestion"] = ""
    try:
        suggestion = fetch(question.strip())
        ss["suggestion"] = suggestion
        _remember(ss, question, suggestion, store)
    except SuggestionError as exc:
        logger.error(f"Error getting AI suggestion: {exc}")
        notify(ss, "AI Service Error", str(exc) or "Failed to get AI suggestion. Please try again.", destructive=True)
    finally:
        ss["is_loading"] = False


def run_pending_suggestion(ss: MutableMapping, fetch: Fetch, store: HistoryStore) -> bool:
    question = ss.get("pending_question")
    if question is None:
        return False
    ss["pending_question"] = None
    get_ai_suggestion(ss, question, fetch, store)
    return True


def _remember(ss: MutableMapping, question: str, suggestion: str, store: HistoryStore) -> None:
    items = history_lib.add_item(ss.get("history") or [], HistoryItem.create(question, suggestion))
    ss["history"] = items
    try:
        store.save(items)
    except HistoryError as exc:
        # The suggestion is already on screen; only persistence is lost.
        logger.error(f"Error saving interview history: {exc}")


def clear_history(ss: MutableMapping, store: HistoryStore) -> None:
    ss["history"] = []
    try:
        store.clear()
    except HistoryError as exc:
        logger.error(f"Error clearing history: {exc}")
        notify(ss, "Clear Error", "Failed to clear history", destructive=True)
        return
    notify(ss, "History Cleared", "Interview history cleared successfully")


def export_history(ss: MutableMapping) -> Optional[Tuple[str, bytes]]:
    items: List[HistoryItem] = ss.get("history") or []
    if not items:
        notify(ss, "No Data", "No interview history to export")
        return None
    return history_lib.export_filename(), history_lib.to_json(items).encode("utf-8")


def on_history_exported(ss: MutableMapping) -> None:
    notify(ss, "Export Successful", "Interview history downloaded as JSON")


def toggle_history_panel(ss: MutableMapping) -> None:
    ss["show_history"] = not ss.get("show_history", False)
