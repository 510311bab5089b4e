"""Browser speech recognition for the interview helper.

The Web Speech API runs in the browser, inside the component served from
``speech_component/``. Python sends it the recognizer configuration plus the
desired listening state, and receives back one event per recognizer callback:

    {"seq": 7, "kind": "result", "results": [{"transcript": "...", "isFinal": true}, ...]}
    {"seq": 8, "kind": "error", "error": "no-speech"}
    {"seq": 9, "kind": "end"}
    {"seq": 1, "kind": "unsupported"}

``seq`` increases for every event the component emits, so a value that
survives a rerun is not handled twice. A later interim result can replace an
event before Python sees it, so every result event also carries how many
results are final; a growing count means a new question is complete.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from loguru import logger

EVENT_RESULT = "result"
EVENT_ERROR = "error"
EVENT_END = "end"
EVENT_UNSUPPORTED = "unsupported"
EVENT_KINDS = (EVENT_RESULT, EVENT_ERROR, EVENT_END, EVENT_UNSUPPORTED)

# Reported by the component when recognition.start() throws.
START_FAILED = "start-failed"

COMPONENT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "speech_component")


@dataclass
class WebSpeechConfig:
    lang: str = "en-US"
    continuous: bool = True
    interim_results: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lang": self.lang,
            "continuous": self.continuous,
            "interimResults": self.interim_results,
        }


@dataclass(frozen=True)
class SpeechEvent:
    seq: int
    kind: str
    transcript: str = ""
    is_final: bool = False
    error: str = ""
    final_count: int = 0
    final_text: str = ""


def _first_alternative_text(result: Any) -> str:
    if isinstance(result, dict):
        text = result.get("transcript")
        if text is None:
            alternatives = result.get("alternatives")
            if isinstance(alternatives, list) and alternatives and isinstance(alternatives[0], dict):
                text = alternatives[0].get("transcript")
        return text if isinstance(text, str) else ""
    return ""


def assemble_transcript(results: List[Any]) -> str:
    return "".join(_first_alternative_text(r) for r in (results or []))


def _is_final(result: Any) -> bool:
    return isinstance(result, dict) and bool(result.get("isFinal"))


def last_result_is_final(results: List[Any]) -> bool:
    return bool(results) and _is_final(results[-1])


def count_final_results(results: List[Any]) -> int:
    return sum(1 for r in (results or []) if _is_final(r))


def final_transcript(results: List[Any]) -> str:
    """Transcript up to and including the last final result."""
    results = results or []
    last_final = max((i for i, r in enumerate(results) if _is_final(r)), default=-1)
    return assemble_transcript(results[: last_final + 1])


def parse_event(value: Any) -> Optional[SpeechEvent]:
    if not isinstance(value, dict):
        return None
    kind = value.get("kind")
    if kind not in EVENT_KINDS:
        logger.warning(f"Ignoring speech event of unknown kind: {kind!r}")
        return None
    try:
        seq = int(value.get("seq"))
    except (TypeError, ValueError):
        logger.warning(f"Ignoring speech event without a sequence number: {value!r}")
        return None

    if kind == EVENT_RESULT:
        results = value.get("results")
        if not isinstance(results, list):
            results = []
        return SpeechEvent(
            seq=seq,
            kind=kind,
            transcript=assemble_transcript(results),
            is_final=last_result_is_final(results),
            final_count=count_final_results(results),
            final_text=final_transcript(results),
        )
    if kind == EVENT_ERROR:
        return SpeechEvent(seq=seq, kind=kind, error=str(value.get("error") or "unknown"))
    return SpeechEvent(seq=seq, kind=kind)


_component_func = None


def _component():
    global _component_func
    if _component_func is None:
        import streamlit.components.v1 as components

        _component_func = components.declare_component("speech_input", path=COMPONENT_DIR)
    return _component_func


def speech_input(config: WebSpeechConfig, *, listening: bool, key: str = "speech_input") -> Optional[Dict[str, Any]]:
    """Render the recognizer and return the latest event it reported, if any."""
    return _component()(config=config.to_dict(), listening=listening, key=key, default=None)
