# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import date

from flask import Blueprint, flash, jsonify, redirect, request, url_for
from flask_login import login_required

from ...payroll import confirm_payment, month_statuses, unmark_payment
from ...workspace import current_store, requested_month

bp = Blueprint("payments", __name__, url_prefix="/payments")

MARKED = "Payment marked as paid."
NOTES_SAVED = "Payment notes saved."
UNMARKED = "Payment status removed."


def _worker() -> str:
    # exact name, no trimming: it is the worker's identity
    return request.form.get("workerName") or ""


@bp.get("/")
@login_required
def index():
    month = requested_month()
    statuses = month_statuses(current_store().load_payment_statuses(), month)
    return jsonify({
        "ok": True,
        "month": month,
        "statuses": {name: st.to_dict() for name, st in statuses.items()},
    })


@bp.post("/confirm")
@login_required
def confirm():
    month = requested_month()
    worker = _worker()
    if not worker:
        flash("Unknown worker.", "warning")
        return redirect(url_for("dashboard.index", m=month))

    store = current_store()
    statuses, existed = confirm_payment(
        store.load_payment_statuses(),
        month,
        worker,
        request.form.get("notes", ""),
        today=date.today().isoformat(),
    )
    store.save_payment_statuses(statuses)
    flash(NOTES_SAVED if existed else MARKED, "success")
    return redirect(url_for("dashboard.index", m=month))


@bp.post("/unmark")
@login_required
def unmark():
    month = requested_month()
    worker = _worker()
    if request.form.get("confirm") != "1":
        flash("Please confirm removing the payment status.", "warning")
        return redirect(url_for("dashboard.index", m=month))

    store = current_store()
    store.save_payment_statuses(unmark_payment(store.load_payment_statuses(), month, worker))
    flash(UNMARKED, "success")
    return redirect(url_for("dashboard.index", m=month))
