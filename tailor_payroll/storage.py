# -*- coding: utf-8 -*-
"""
Per-operator key/value store for configuration and payroll adjustments.

Values are kept as JSON text with the same shapes the browser build used in
localStorage, so exported/imported data stays readable:

  scriptUrl        "https://script.google.com/macros/s/.../exec"
  workerProfiles   [{"name": "Ali", "photo": "data:image/png;base64,..."}]
  baseSalaries     {"Ali": 100}
  advances         {"Ali": 30}
  paymentStatuses  {"2024-05": {"Ali": {"paidDate": "2024-05-31", "notes": ""}}}
  chat:2024-05     [{"role": "model", "content": "..."}, ...]

Each ``save`` replaces one whole value in a single commit.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from flask import current_app

from .extensions import db
from .models.store import StoredValue
from .payroll import Configuration, PaymentStatus, WorkerProfile, to_number

log = logging.getLogger(__name__)

KEY_SCRIPT_URL = "scriptUrl"
KEY_WORKER_PROFILES = "workerProfiles"
KEY_BASE_SALARIES = "baseSalaries"
KEY_ADVANCES = "advances"
KEY_PAYMENT_STATUSES = "paymentStatuses"

ALL_KEYS = (
    KEY_SCRIPT_URL,
    KEY_BASE_SALARIES,
    KEY_ADVANCES,
    KEY_WORKER_PROFILES,
    KEY_PAYMENT_STATUSES,
)

# one assistant transcript per month
CHAT_PREFIX = "chat:"

_MISSING = object()


class LocalStore:
    def __init__(self, owner_id: int):
        self.owner_id = int(owner_id)

    def _row(self, key: str) -> StoredValue | None:
        return StoredValue.query.filter_by(owner_id=self.owner_id, key=key).first()

    # --- raw access ---
    def load(self, key: str, default: Any = None) -> Any:
        raw = (
            db.session.query(StoredValue.value_json)
            .filter_by(owner_id=self.owner_id, key=key)
            .scalar()
        )
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            log.warning("stored value %r for owner %s is not valid JSON, using default", key, self.owner_id)
            return default

    def save(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        row = self._row(key)
        if row is None:
            row = StoredValue(owner_id=self.owner_id, key=key)
            db.session.add(row)
        row.value_json = payload
        row.updated_at = datetime.utcnow()
        db.session.commit()

    def remove(self, key: str) -> None:
        StoredValue.query.filter_by(owner_id=self.owner_id, key=key).delete()
        db.session.commit()

    def clear(self) -> None:
        StoredValue.query.filter(
            StoredValue.owner_id == self.owner_id,
            StoredValue.key.in_(ALL_KEYS) | StoredValue.key.startswith(CHAT_PREFIX),
        ).delete(synchronize_session=False)
        db.session.commit()

    # --- typed access ---
    def _amounts(self, key: str) -> dict[str, float]:
        raw = self.load(key, {})
        if not isinstance(raw, dict):
            return {}
        return {str(k): to_number(v) for k, v in raw.items()}

    def load_config(self) -> Configuration:
        url = self.load(KEY_SCRIPT_URL, _MISSING)
        if url is _MISSING:
            url = current_app.config.get("DEFAULT_SCRIPT_URL") or None
        return Configuration(
            script_url=url or None,
            base_salaries=self._amounts(KEY_BASE_SALARIES),
            advances=self._amounts(KEY_ADVANCES),
        )

    def save_script_url(self, url: str) -> None:
        self.save(KEY_SCRIPT_URL, url)

    def save_base_salaries(self, salaries: dict[str, float]) -> None:
        self.save(KEY_BASE_SALARIES, dict(salaries))

    def save_advances(self, advances: dict[str, float]) -> None:
        self.save(KEY_ADVANCES, dict(advances))

    def load_profiles(self) -> list[WorkerProfile]:
        raw = self.load(KEY_WORKER_PROFILES, [])
        if not isinstance(raw, list):
            return []
        return [WorkerProfile.from_dict(p) for p in raw if isinstance(p, dict) and p.get("name")]

    def save_profiles(self, profiles: list[WorkerProfile]) -> None:
        self.save(KEY_WORKER_PROFILES, [p.to_dict() for p in profiles])

    def load_payment_statuses(self) -> dict[str, dict[str, PaymentStatus]]:
        raw = self.load(KEY_PAYMENT_STATUSES, {})
        if not isinstance(raw, dict):
            return {}
        out: dict[str, dict[str, PaymentStatus]] = {}
        for month, per_worker in raw.items():
            if not isinstance(per_worker, dict):
                continue
            out[month] = {
                name: PaymentStatus.from_dict(st)
                for name, st in per_worker.items()
                if isinstance(st, dict)
            }
        return out

    def save_payment_statuses(self, statuses: dict[str, dict[str, PaymentStatus]]) -> None:
        self.save(
            KEY_PAYMENT_STATUSES,
            {m: {n: st.to_dict() for n, st in per.items()} for m, per in statuses.items()},
        )

    def load_transcript(self, month: str) -> list[dict[str, str]]:
        raw = self.load(CHAT_PREFIX + month, [])
        if not isinstance(raw, list):
            return []
        return [m for m in raw if isinstance(m, dict)]

    def save_transcript(self, month: str, messages: list[dict[str, str]]) -> None:
        self.save(CHAT_PREFIX + month, list(messages))

    def remove_transcript(self, month: str) -> None:
        self.remove(CHAT_PREFIX + month)


def store_for(user) -> LocalStore:
    return LocalStore(getattr(user, "id", 0))
