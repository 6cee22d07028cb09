# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Iterable

from .payroll import WorkerSummary

BOM = "\ufeff"

HEADERS = (
    "Worker Name",
    "Total Items",
    "Piecework Salary",
    "Base Salary",
    "Advance",
    "Final Salary",
    "Payment Status",
    "Payment Date",
    "Payment Notes",
)
PAID = "Paid"
UNPAID = "Unpaid"


def _quoted(value: str) -> str:
    return '"' + (value or "").replace('"', '""') + '"'


def _row(item: WorkerSummary) -> str:
    final = item.final_salary if item.final_salary is not None else item.total_salary
    status = item.payment_status
    return ",".join([
        _quoted(item.worker_name),
        str(item.total_items),
        f"{item.total_salary:.2f}",
        f"{item.base_salary or 0:.2f}",
        f"{item.advance or 0:.2f}",
        f"{final:.2f}",
        PAID if status else UNPAID,
        status.paid_date if status else "",
        _quoted(status.notes if status else ""),
    ])


def summary_csv(summary: Iterable[WorkerSummary], headers: Iterable[str] = HEADERS) -> str:
    """Derived summary -> BOM-prefixed CSV text, one line per worker."""
    lines = [",".join(headers)]
    lines.extend(_row(item) for item in summary)
    return BOM + "\n".join(lines)


def export_filename(month: str) -> str:
    return f"payroll_summary_{month}.csv"
