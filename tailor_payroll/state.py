# -*- coding: utf-8 -*-
"""
Month view state and the rules for folding gateway replies into it.

Every transition returns a new ``AppState``; nothing is mutated in place.
A fetch is tagged with the ``generation`` current when it started, and a
reply carrying an older generation is dropped, so a slow answer for a month
the operator already left cannot overwrite the newer one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping

from .errors import GatewayError
from .payroll import (
    Configuration,
    DailyEntry,
    PaymentStatus,
    WorkerSummary,
    month_statuses,
    recompute_summary,
)

log = logging.getLogger(__name__)

# "no rows in range" from Sheets, in English and Arabic locales
EMPTY_RANGE_MARKERS = (
    "must be at least one",
    "يجب ألا تقل الصفوف في النطاق عن صف واحد",
)


def is_empty_range_error(message: str | None) -> bool:
    text = message or ""
    return any(m in text for m in EMPTY_RANGE_MARKERS)


@dataclass(frozen=True)
class AppState:
    month: str
    summary_raw: tuple[WorkerSummary, ...] = ()
    entries: tuple[DailyEntry, ...] = ()
    workers: tuple[str, ...] = ()
    error: str | None = None
    generation: int = 0


def begin_fetch(state: AppState, month: str) -> AppState:
    return replace(state, month=month, generation=state.generation + 1, error=None)


def _cleared(state: AppState, error: str | None) -> AppState:
    return replace(state, summary_raw=(), entries=(), workers=(), error=error)


def apply_fetch_failure(state: AppState, generation: int, message: str) -> AppState:
    if generation != state.generation:
        log.info("dropping stale fetch failure (generation %s, current %s)", generation, state.generation)
        return state
    if is_empty_range_error(message):
        log.warning("sheet has no rows for %s, showing empty month", state.month)
        return _cleared(state, None)
    return _cleared(state, message)


def apply_fetch(
    state: AppState,
    generation: int,
    payloads: tuple[Mapping[str, Any], Mapping[str, Any], Mapping[str, Any]],
) -> AppState:
    if generation != state.generation:
        log.info("dropping stale fetch result (generation %s, current %s)", generation, state.generation)
        return state

    summary_json, entries_json, workers_json = payloads
    combined_error = summary_json.get("error") or entries_json.get("error") or workers_json.get("error")
    if combined_error:
        return apply_fetch_failure(state, generation, str(combined_error))

    return replace(
        state,
        summary_raw=tuple(WorkerSummary.from_row(r) for r in (summary_json.get("rows") or []) if isinstance(r, dict)),
        entries=tuple(DailyEntry.from_row(r) for r in (entries_json.get("rows") or []) if isinstance(r, dict)),
        workers=tuple(str(w) for w in (workers_json.get("workers") or [])),
        error=None,
    )


def load_month(gateway, state: AppState, month: str) -> AppState:
    state = begin_fetch(state, month)
    generation = state.generation
    try:
        payloads = gateway.fetch_month(month)
    except GatewayError as exc:
        return apply_fetch_failure(state, generation, str(exc))
    return apply_fetch(state, generation, payloads)


def derived_summary(
    state: AppState,
    config: Configuration,
    statuses: Mapping[str, Mapping[str, PaymentStatus]],
) -> list[WorkerSummary]:
    return recompute_summary(
        state.summary_raw,
        config.base_salaries,
        config.advances,
        month_statuses(statuses, state.month),
    )
