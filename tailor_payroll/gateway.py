# -*- coding: utf-8 -*-
"""
Client for the spreadsheet endpoint (a Google Apps Script web app).

  GET  {base}?action=summary&month=YYYY-MM  -> {"rows": [...], "error"?: str}
  GET  {base}?action=entries&month=YYYY-MM  -> {"rows": [...], "error"?: str}
  GET  {base}?action=workers                -> {"workers": [...], "error"?: str}
  POST {base}  {"date", "workerName", "items", "price"}
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests

from .errors import GatewayError, InvalidScriptUrl
from .payroll import DailyEntry

log = logging.getLogger(__name__)

API_ERROR = "Could not load data from the spreadsheet. Check the script URL and your connection."
URL_REQUIRED = "Please enter a valid Google Apps Script web app URL."


def validate_script_url(url: str | None, prefix: str) -> str:
    cleaned = (url or "").strip()
    if not cleaned.startswith(prefix):
        raise InvalidScriptUrl(URL_REQUIRED)
    return cleaned


class PayrollGateway:
    def __init__(self, base_url: str, timeout: float = 20, session: requests.Session | None = None):
        self.base_url = base_url
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "PayrollGateway":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get(self, params: dict[str, str]) -> dict[str, Any]:
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            log.error("gateway GET %s failed: %s", params.get("action"), exc)
            raise GatewayError(API_ERROR) from exc
        return payload if isinstance(payload, dict) else {}

    def fetch_month(self, month: str) -> tuple[dict[str, Any], dict[str, Any], dict[str, Any]]:
        """Summary, entries and worker list, requested side by side.

        Any transport failure fails the whole fetch.
        """
        queries = (
            {"action": "summary", "month": month},
            {"action": "entries", "month": month},
            {"action": "workers"},
        )
        with ThreadPoolExecutor(max_workers=len(queries), thread_name_prefix="payroll-gw") as pool:
            futures = [pool.submit(self._get, q) for q in queries]
            summary, entries, workers = (f.result() for f in futures)
        return summary, entries, workers

    def submit_entry(self, entry: DailyEntry) -> None:
        """Optimistic write: the reply body is not looked at."""
        body = {
            "date": entry.date,
            "workerName": entry.worker_name,
            "items": entry.items,
            "price": entry.price,
        }
        try:
            self.session.post(self.base_url, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("gateway POST failed for %s on %s: %s", entry.worker_name, entry.date, exc)
            raise GatewayError(str(exc) or API_ERROR) from exc
