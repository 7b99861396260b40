"""
Generative-AI layer: local Ollama backend.

Two calls, both against Ollama's /api/chat at OLLAMA_BASE_URL:
  - chat():            the Sahayak passenger assistant.  Free-text reply,
                       conversation history passed along as context.
  - classify_report(): tags a crowdsourced station report with a type
                       (ISSUE / INFO / CROWD) and severity (LOW / MEDIUM / HIGH)
                       using Ollama's JSON output mode.

Quick setup:
    ollama serve
    ollama pull llama3.2

Neither call raises on a backend failure.  chat() returns a fixed apology
and classify_report() returns (INFO, LOW), so the feature that asked keeps
working when Ollama is down.
"""

import itertools
import json
import logging
from dataclasses import dataclass
from typing import Literal

import httpx

from config import OLLAMA_BASE_URL, OLLAMA_MODEL

logger = logging.getLogger(__name__)

Role = Literal["user", "model"]

SYSTEM_PROMPT = """
You are the AI Assistant for 'RailSahayak', an Indian Railways companion app.
Your tone is helpful, urgent (when needed), and distinctly Indian context-aware.
You help users with:
1. Station navigation (Platform numbers, exits).
2. Food recommendations based on stop time.
3. Porter/Coolie negotiation tips.
4. Analyzing crowdsourced text to categorize it (Issue vs Info).

If the user asks about specific live train status, clarify that you are using simulated data for this prototype.
Keep responses concise as users might be in a rush.
""".strip()

CLASSIFIER_PROMPT = """
You label station reports from railway passengers.
Reply with a JSON object with exactly two keys:
  "type":     one of "ISSUE", "INFO", "CROWD"
  "severity": one of "LOW", "MEDIUM", "HIGH"
No other keys, no prose.
""".strip()

WELCOME_MESSAGE = (
    "Namaste! I'm Sahayak. I can help you find platforms, suggest food, "
    "or book a coolie. How can I help you today?"
)
APOLOGY = "Network patchy? I'm having trouble connecting to the railway brain."
EMPTY_REPLY = "Sorry, I couldn't process that request right now."

REPORT_TYPES = ("ISSUE", "INFO", "CROWD")
SEVERITIES = ("LOW", "MEDIUM", "HIGH")
DEFAULT_CLASSIFICATION = ("INFO", "LOW")

# Ollama speaks OpenAI-style roles
_OLLAMA_ROLE = {"user": "user", "model": "assistant"}


async def _ollama_chat(messages: list[dict[str, str]], *, json_mode: bool = False) -> str:
    payload: dict = {"model": OLLAMA_MODEL, "stream": False, "messages": messages}
    if json_mode:
        payload["format"] = "json"

    async with httpx.AsyncClient(timeout=60.0) as client:
        resp = await client.post(f"{OLLAMA_BASE_URL}/api/chat", json=payload)
        resp.raise_for_status()
    return resp.json()["message"]["content"]


async def chat(message: str, history: list[dict[str, str]]) -> str:
    """
    Send *message* to the assistant with the prior transcript as context.

    Args:
        message: The user's new message.
        history: Earlier turns as {"role": "user" | "model", "text": ...}.

    Returns:
        The model's reply, or a fixed apology string on any failure.
    """
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages += [
        {"role": _OLLAMA_ROLE.get(h["role"], "user"), "content": h["text"]}
        for h in history
    ]
    messages.append({"role": "user", "content": message})

    try:
        reply = await _ollama_chat(messages)
    except httpx.ConnectError:
        logger.warning("Ollama unreachable at %s: chat reply skipped.", OLLAMA_BASE_URL)
        return APOLOGY
    except httpx.HTTPStatusError as exc:
        logger.warning("Ollama returned HTTP %d: chat reply skipped.", exc.response.status_code)
        return APOLOGY
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
        logger.error("Assistant chat error: %s", exc)
        return APOLOGY

    reply = (reply or "").strip()
    logger.debug("Assistant reply generated (%d chars).", len(reply))
    return reply or EMPTY_REPLY


async def classify_report(text: str) -> tuple[str, str]:
    """
    Return (type, severity) for a station report.

    Any backend failure, unparsable output, or value outside the allowed
    labels yields DEFAULT_CLASSIFICATION.
    """
    messages = [
        {"role": "system", "content": CLASSIFIER_PROMPT},
        {"role": "user", "content": f'Analyze this station report: "{text}".'},
    ]
    try:
        raw = await _ollama_chat(messages, json_mode=True)
        result = json.loads(raw)
        report_type = str(result["type"]).upper()
        severity = str(result["severity"]).upper()
    except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
        logger.warning("Report classification failed (%s); defaulting to INFO/LOW.", exc)
        return DEFAULT_CLASSIFICATION

    if report_type not in REPORT_TYPES or severity not in SEVERITIES:
        logger.warning("Classifier returned unknown labels %r/%r.", report_type, severity)
        return DEFAULT_CLASSIFICATION
    return report_type, severity


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChatMessage:
    id: int
    role: Role
    text: str


class Transcript:
    """Append-only chat log with monotonically increasing message ids."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self._ids = itertools.count(1)
        self.messages: list[ChatMessage] = []
        self.append("model", WELCOME_MESSAGE)

    def append(self, role: Role, text: str) -> ChatMessage:
        msg = ChatMessage(id=next(self._ids), role=role, text=text)
        self.messages.append(msg)
        return msg

    def history(self) -> list[dict[str, str]]:
        return [{"role": m.role, "text": m.text} for m in self.messages]

    async def send(self, text: str) -> ChatMessage:
        """Record the user's message, ask the assistant, record the reply."""
        history = self.history()
        self.append("user", text)
        reply = await chat(text, history)
        return self.append("model", reply)


transcript = Transcript()
