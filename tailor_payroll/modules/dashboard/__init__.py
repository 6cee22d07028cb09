# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import date

from flask import Blueprint, Response, jsonify, render_template, request
from flask_login import login_required

from ...export import export_filename, summary_csv
from ...payroll import known_worker_names
from ...workspace import load_view, requested_month, setup_required

bp = Blueprint("dashboard", __name__, url_prefix="/payroll")


@bp.get("/")
@login_required
@setup_required
def index():
    month = requested_month()
    view = load_view(month)
    state = view["state"]

    # the entry form keeps its date between submissions
    form = {
        "workerName": request.args.get("worker", ""),
        "date": request.args.get("d") or date.today().isoformat(),
        "items": request.args.get("items", ""),
        "price": request.args.get("price", ""),
    }
    return render_template(
        "dashboard/index.html",
        month=month,
        error=state.error,
        summary=view["summary"],
        entries=state.entries,
        profiles={p.name: p for p in view["profiles"]},
        worker_names=known_worker_names(state.workers, view["profiles"]),
        form=form,
    )


@bp.get("/export")
@login_required
@setup_required
def export():
    month = requested_month()
    view = load_view(month)
    body = summary_csv(view["summary"])
    return Response(
        body.encode("utf-8"),
        mimetype="text/csv",
        headers={
            "Content-Type": "text/csv; charset=utf-8",
            "Content-Disposition": f'attachment; filename="{export_filename(month)}"',
        },
    )


@bp.get("/api/month")
@login_required
@setup_required
def api_month():
    month = requested_month()
    view = load_view(month)
    state = view["state"]
    if state.error:
        return jsonify({"ok": False, "month": month, "error": state.error}), 502
    return jsonify({
        "ok": True,
        "month": month,
        "summary": [s.to_dict() for s in view["summary"]],
        "entries": [e.to_dict() for e in state.entries],
        "workers": list(state.workers),
    })
