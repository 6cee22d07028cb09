# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, redirect, render_template, request, url_for
from flask_login import login_required

from ...assistant import PayrollAssistant, ask_and_record, build_snapshot, greeting, trim_transcript
from ...workspace import current_store, load_view, requested_month, setup_required

bp = Blueprint("assistant", __name__, url_prefix="/assistant")


def _transcript(month: str) -> list[dict[str, str]]:
    # kept server-side; the session cookie only carries the login
    return current_store().load_transcript(month) or [greeting(month)]


@bp.get("/")
@login_required
@setup_required
def index():
    month = requested_month()
    return render_template("assistant/index.html", month=month, messages=_transcript(month))


@bp.post("/ask")
@login_required
@setup_required
def ask():
    month = requested_month()
    payload = request.get_json(silent=True) if request.is_json else None
    question = (payload or request.form).get("question", "")

    transcript = _transcript(month)
    if question.strip():
        view = load_view(month)
        config = view["config"]
        snapshot = build_snapshot(month, config.base_salaries, config.advances, view["summary"], view["state"].entries)
        transcript = ask_and_record(transcript, PayrollAssistant.from_config(current_app.config), question, snapshot)
        transcript = trim_transcript(transcript, int(current_app.config.get("ASSISTANT_HISTORY", 40)))
        current_store().save_transcript(month, transcript)

    if request.is_json:
        return jsonify({"ok": True, "month": month, "messages": transcript})
    return redirect(url_for("assistant.index", m=month))


@bp.post("/reset")
@login_required
def reset():
    month = requested_month()
    current_store().remove_transcript(month)
    return redirect(url_for("assistant.index", m=month))
