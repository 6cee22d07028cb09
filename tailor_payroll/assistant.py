# -*- coding: utf-8 -*-
"""
Natural-language questions about the current month, answered by an LLM that
is handed a JSON snapshot of the payroll data.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

import anthropic

from .errors import AssistantError
from .payroll import DailyEntry, WorkerSummary

log = logging.getLogger(__name__)

AI_ERROR = "Sorry, the assistant could not answer right now. Please try again."

SYSTEM_INSTRUCTION = (
    "You are a helpful payroll data analyst for a tailoring business. "
    "You will be given payroll data in JSON format for a specific month. "
    "The final salary for a worker is calculated by adding their piecework salary "
    "to their base salary and then subtracting any advances. "
    "Answer the user's questions based ONLY on the provided data. "
    "Format your answers clearly and concisely. "
    "If the data is empty, inform the user they need to add entries first. "
    "All monetary values are in {currency}. "
    "Your response should be in the same language as the user's question."
)


def greeting(month: str) -> dict[str, str]:
    return {
        "role": "model",
        "content": f"Hello! I'm your AI Payroll Assistant. You can ask me anything about the data for {month}.",
    }


def trim_transcript(messages: list[dict[str, str]], limit: int) -> list[dict[str, str]]:
    """Keep the opening greeting and the most recent ``limit - 1`` messages."""
    if limit < 2 or len(messages) <= limit:
        return list(messages)
    return [messages[0], *messages[-(limit - 1):]]


def build_snapshot(
    month: str,
    base_salaries: Mapping[str, float],
    advances: Mapping[str, float],
    summary: Iterable[WorkerSummary],
    entries: Iterable[DailyEntry],
) -> dict[str, Any]:
    return {
        "month": month,
        "baseSalaries": dict(base_salaries),
        "advances": dict(advances),
        "summary": [s.to_dict() for s in summary],
        "entries": [e.to_dict() for e in entries],
    }


def build_prompt(snapshot: Mapping[str, Any], question: str) -> str:
    dump = lambda v: json.dumps(v, ensure_ascii=False)
    return (
        f"The data is for the month: {snapshot['month']}.\n\n"
        f"Workers' Base Salaries (monthly):\n{dump(snapshot['baseSalaries'])}\n\n"
        f"Workers' Advances/Deductions (for this month):\n{dump(snapshot['advances'])}\n\n"
        "Monthly Summary Data (The 'totalSalary' field represents piecework salary, and "
        "'finalSalary' is the sum of piecework and base salary minus advances):\n"
        f"{dump(snapshot['summary'])}\n\n"
        f"Daily Entries Data (This contributes to the piecework salary):\n{dump(snapshot['entries'])}\n\n"
        f"User question: {question}"
    )


class PayrollAssistant:
    def __init__(self, api_key: str, model: str, max_tokens: int = 1024, currency: str = "SAR", client=None):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.currency = currency
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise AssistantError(AI_ERROR)
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    def ask(self, question: str, snapshot: Mapping[str, Any]) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_INSTRUCTION.format(currency=self.currency),
                messages=[{"role": "user", "content": build_prompt(snapshot, question)}],
            )
        except anthropic.APIError as exc:
            log.exception("assistant request failed")
            raise AssistantError(AI_ERROR) from exc
        return "".join(getattr(block, "text", "") for block in response.content)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "PayrollAssistant":
        return cls(
            api_key=config.get("ANTHROPIC_API_KEY", ""),
            model=config.get("ASSISTANT_MODEL", ""),
            max_tokens=int(config.get("ASSISTANT_MAX_TOKENS", 1024)),
            currency=config.get("CURRENCY", "SAR"),
        )


def ask_and_record(
    transcript: list[dict[str, str]],
    assistant: PayrollAssistant,
    question: str,
    snapshot: Mapping[str, Any],
) -> list[dict[str, str]]:
    """Append the question and the answer (or an error entry) to a copy of the transcript."""
    question = (question or "").strip()
    if not question:
        return list(transcript)
    out = [*transcript, {"role": "user", "content": question}]
    try:
        out.append({"role": "model", "content": assistant.ask(question, snapshot)})
    except AssistantError as exc:
        out.append({"role": "error", "content": str(exc)})
    return out
