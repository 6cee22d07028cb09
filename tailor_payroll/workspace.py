# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any

from flask import current_app, redirect, request, url_for
from flask_login import current_user

from .gateway import PayrollGateway
from .payroll import Configuration, current_month
from .state import AppState, derived_summary, load_month
from .storage import LocalStore, store_for


def current_store() -> LocalStore:
    return store_for(current_user)


def month_key(m: str | None) -> str:
    """'2024-5' / '2024-05' -> '2024-05'; anything unparsable -> this month."""
    if m:
        try:
            y, mm = map(int, m.strip().split("-")[:2])
            return f"{date(y, mm, 1):%Y-%m}"
        except (TypeError, ValueError):
            pass
    return current_month()


def requested_month() -> str:
    return month_key(request.values.get("m"))


def gateway_for(config: Configuration) -> PayrollGateway:
    return PayrollGateway(config.script_url, timeout=current_app.config.get("GATEWAY_TIMEOUT", 20))


def setup_required(f):
    """Send the operator to the setup screen until a script URL is stored."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_store().load_config().script_url:
            return redirect(url_for("setup.index"))
        return f(*args, **kwargs)
    return wrapper


def load_view(month: str) -> dict[str, Any]:
    """Fetch one month from the spreadsheet and derive its summary."""
    store = current_store()
    config = store.load_config()
    statuses = store.load_payment_statuses()
    with gateway_for(config) as gateway:
        state = load_month(gateway, AppState(month=month), month)
    return {
        "state": state,
        "config": config,
        "statuses": statuses,
        "profiles": store.load_profiles(),
        "summary": derived_summary(state, config, statuses),
    }
