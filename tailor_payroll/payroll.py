# -*- coding: utf-8 -*-
"""
Payroll core: records, the monthly summary reconciliation, entry validation,
payment status transitions and the worker profile registry.

Everything here is pure: functions take the current values and return new
ones, persistence is the caller's business (see ``storage``).
"""

from __future__ import annotations

import base64
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from .errors import EntryValidationError, PhotoRejected

# validation messages, in the order the checks run
MSG_WORKER_NAME = "Please enter the worker's name."
MSG_DATE = "Please choose a valid date."
MSG_ITEMS = "Items delivered must be a number greater than zero."
MSG_PRICE = "Price per item must be a number, zero or more."


def to_number(value: Any, default: float = 0.0) -> float:
    if value in (None, ""):
        return default
    try:
        x = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(x) else x


def _plain(x: float) -> int | float:
    return int(x) if float(x).is_integer() else x


# ------------ records ---------------------------------------------------------
@dataclass(frozen=True)
class PaymentStatus:
    paid_date: str
    notes: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PaymentStatus":
        return cls(paid_date=str(raw.get("paidDate") or ""), notes=str(raw.get("notes") or ""))

    def to_dict(self) -> dict[str, str]:
        return {"paidDate": self.paid_date, "notes": self.notes}


@dataclass(frozen=True)
class DailyEntry:
    worker_name: str
    date: str  # YYYY-MM-DD
    items: int | float
    price: float
    daily_total: float
    id: int | str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DailyEntry":
        items = to_number(row.get("items"))
        price = to_number(row.get("price"))
        total = row.get("dailyTotal")
        return cls(
            id=row.get("id"),
            worker_name=str(row.get("workerName") or ""),
            date=str(row.get("date") or "")[:10],
            items=_plain(items),
            price=price,
            daily_total=to_number(total) if total not in (None, "") else items * price,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "workerName": self.worker_name,
            "date": self.date,
            "items": self.items,
            "price": self.price,
            "dailyTotal": self.daily_total,
        }


@dataclass(frozen=True)
class WorkerSummary:
    """Raw monthly totals from the spreadsheet, or the derived row when the
    adjustment fields are filled in by :func:`recompute_summary`."""

    worker_name: str
    total_items: int | float
    total_salary: float
    base_salary: float | None = None
    advance: float | None = None
    final_salary: float | None = None
    payment_status: PaymentStatus | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WorkerSummary":
        return cls(
            worker_name=str(row.get("workerName") or ""),
            total_items=_plain(to_number(row.get("totalItems"))),
            total_salary=to_number(row.get("totalSalary")),
        )

    @property
    def is_paid(self) -> bool:
        return self.payment_status is not None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "workerName": self.worker_name,
            "totalItems": self.total_items,
            "totalSalary": self.total_salary,
        }
        if self.base_salary is not None:
            out["baseSalary"] = self.base_salary
        if self.advance is not None:
            out["advance"] = self.advance
        if self.final_salary is not None:
            out["finalSalary"] = self.final_salary
        if self.payment_status is not None:
            out["paymentStatus"] = self.payment_status.to_dict()
        return out


@dataclass(frozen=True)
class WorkerProfile:
    name: str
    photo: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "WorkerProfile":
        return cls(name=str(raw.get("name") or ""), photo=raw.get("photo") or None)

    def to_dict(self) -> dict[str, str]:
        out = {"name": self.name}
        if self.photo:
            out["photo"] = self.photo
        return out


@dataclass(frozen=True)
class Configuration:
    script_url: str | None = None
    base_salaries: dict[str, float] = field(default_factory=dict)
    advances: dict[str, float] = field(default_factory=dict)


# ------------ summary reconciliation ------------------------------------------
def recompute_summary(
    raw: Iterable[WorkerSummary],
    base_salaries: Mapping[str, float],
    advances: Mapping[str, float],
    paid: Mapping[str, PaymentStatus],
) -> list[WorkerSummary]:
    """final = piecework + base - advance, never clamped; remote order kept."""
    out = []
    for s in raw:
        base = to_number(base_salaries.get(s.worker_name))
        adv = to_number(advances.get(s.worker_name))
        out.append(
            replace(
                s,
                base_salary=base,
                advance=adv,
                final_salary=s.total_salary + base - adv,
                payment_status=paid.get(s.worker_name),
            )
        )
    return out


# ------------ entry submission ------------------------------------------------
def entry_month(entry_date: str) -> str:
    """'2024-05-17' -> '2024-05'"""
    return (entry_date or "")[:7]


def current_month(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def validate_entry(worker_name: Any, entry_date: Any, items: Any, price: Any) -> DailyEntry:
    name = str(worker_name or "").strip()
    if not name:
        raise EntryValidationError("workerName", MSG_WORKER_NAME)

    d = str(entry_date or "").strip()
    if not d:
        raise EntryValidationError("date", MSG_DATE)
    try:
        datetime.strptime(d, "%Y-%m-%d")
    except ValueError:
        raise EntryValidationError("date", MSG_DATE) from None

    items_n = to_number(items, math.nan)
    if not math.isfinite(items_n) or items_n <= 0:
        raise EntryValidationError("items", MSG_ITEMS)

    price_n = to_number(price, math.nan)
    if not math.isfinite(price_n) or price_n < 0:
        raise EntryValidationError("price", MSG_PRICE)

    return DailyEntry(
        worker_name=name,
        date=d,
        items=_plain(items_n),
        price=price_n,
        daily_total=items_n * price_n,
    )


# ------------ payment status --------------------------------------------------
StatusMap = dict[str, dict[str, PaymentStatus]]


def month_statuses(statuses: Mapping[str, Mapping[str, PaymentStatus]], month: str) -> dict[str, PaymentStatus]:
    return dict(statuses.get(month) or {})


def confirm_payment(
    statuses: Mapping[str, Mapping[str, PaymentStatus]],
    month: str,
    worker_name: str,
    notes: str,
    today: str | None = None,
) -> tuple[StatusMap, bool]:
    """Mark paid (stamping today) or, when already paid, update the notes only.

    Returns the new map and whether a record already existed.
    """
    today = today or date.today().isoformat()
    current = month_statuses(statuses, month)
    existing = current.get(worker_name)
    current[worker_name] = PaymentStatus(
        paid_date=existing.paid_date if existing and existing.paid_date else today,
        notes=notes or "",
    )
    new = {m: dict(v) for m, v in statuses.items()}
    new[month] = current
    return new, existing is not None


def unmark_payment(
    statuses: Mapping[str, Mapping[str, PaymentStatus]],
    month: str,
    worker_name: str,
) -> StatusMap:
    new = {m: dict(v) for m, v in statuses.items()}
    current = new.get(month) or {}
    current.pop(worker_name, None)
    new[month] = current
    return new


# ------------ worker profiles -------------------------------------------------
def find_profile(profiles: Iterable[WorkerProfile], name: str) -> WorkerProfile | None:
    for p in profiles:
        if p.name == name:
            return p
    return None


def ensure_profile(profiles: list[WorkerProfile], name: str) -> tuple[list[WorkerProfile], bool]:
    """Add a bare ``{name}`` profile when the name is not known yet."""
    if find_profile(profiles, name) is not None:
        return list(profiles), False
    return [*profiles, WorkerProfile(name=name)], True


def upsert_profile(profiles: list[WorkerProfile], profile: WorkerProfile) -> list[WorkerProfile]:
    existing = find_profile(profiles, profile.name)
    if existing is None:
        return [*profiles, profile]
    merged = replace(existing, photo=profile.photo or existing.photo)
    return [merged if p.name == profile.name else p for p in profiles]


def delete_profile(profiles: list[WorkerProfile], name: str) -> list[WorkerProfile]:
    return [p for p in profiles if p.name != name]


def initials(name: str) -> str:
    parts = (name or "").strip().split()
    if len(parts) >= 2:
        return f"{parts[0][0]}{parts[1][0]}".upper()
    if len(parts) == 1:
        return parts[0][:2].upper()
    return "??"


def photo_too_large(limit: int) -> PhotoRejected:
    return PhotoRejected(f"File is too large. Please select an image under {limit // (1024 * 1024)}MB.")


def check_photo(mimetype: str | None, declared_size: int | None, limit: int) -> None:
    """Type and size gate, applied before the upload is read."""
    if not (mimetype or "").startswith("image/"):
        raise PhotoRejected("Please choose an image file.")
    if declared_size and declared_size > limit:
        raise photo_too_large(limit)


def photo_data_url(data: bytes, mimetype: str) -> str:
    return f"data:{mimetype};base64,{base64.b64encode(data).decode('ascii')}"


def known_worker_names(workers: Iterable[str], profiles: Iterable[WorkerProfile]) -> list[str]:
    """Remote workers first, then locally registered ones, without repeats."""
    seen: dict[str, None] = {}
    for n in workers:
        seen.setdefault(n, None)
    for p in profiles:
        seen.setdefault(p.name, None)
    return list(seen)


def parse_amounts(names: Iterable[str], values: Mapping[str, Any], prefix: str = "") -> dict[str, float]:
    """Form values -> {worker: amount}; unparsable input counts as 0."""
    return {n: to_number(values.get(f"{prefix}{n}")) for n in names}
