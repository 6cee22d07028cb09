# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Blueprint, flash, redirect, request, url_for
from flask_login import login_required

from ...errors import EntryValidationError, GatewayError
from ...payroll import ensure_profile, entry_month, validate_entry
from ...workspace import current_store, gateway_for, requested_month, setup_required

log = logging.getLogger(__name__)

bp = Blueprint("entries", __name__, url_prefix="/entries")

ENTRY_ADDED = "Entry added successfully."
ENTRY_FAILED = "Could not add the entry. Please try again."


@bp.post("/new")
@login_required
@setup_required
def new():
    f = request.form
    month = requested_month()
    try:
        entry = validate_entry(f.get("workerName"), f.get("date"), f.get("items"), f.get("price"))
    except EntryValidationError as exc:
        # nothing stored, nothing sent; give the form back as typed
        flash(exc.message, "warning")
        return redirect(url_for(
            "dashboard.index",
            m=month,
            worker=f.get("workerName", ""),
            d=f.get("date", ""),
            items=f.get("items", ""),
            price=f.get("price", ""),
        ))

    store = current_store()
    profiles, added = ensure_profile(store.load_profiles(), entry.worker_name)
    if added:
        store.save_profiles(profiles)
        log.info("new worker profile %r", entry.worker_name)

    try:
        with gateway_for(store.load_config()) as gateway:
            gateway.submit_entry(entry)
    except GatewayError:
        flash(ENTRY_FAILED, "danger")
        return redirect(url_for("dashboard.index", m=month, d=entry.date))

    flash(ENTRY_ADDED, "success")
    # refetch the month the entry belongs to, keep the date for the next one
    return redirect(url_for("dashboard.index", m=entry_month(entry.date), d=entry.date))
