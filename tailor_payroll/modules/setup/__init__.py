# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_login import login_required

from ...errors import InvalidScriptUrl
from ...gateway import validate_script_url
from ...workspace import current_store

bp = Blueprint("setup", __name__, url_prefix="/setup")


@bp.get("/")
@login_required
def index():
    config = current_store().load_config()
    return render_template(
        "setup/index.html",
        script_url=config.script_url or "",
        url_prefix=current_app.config["SCRIPT_URL_PREFIX"],
    )


@bp.post("/save")
@login_required
def save():
    try:
        url = validate_script_url(request.form.get("script_url"), current_app.config["SCRIPT_URL_PREFIX"])
    except InvalidScriptUrl as exc:
        flash(str(exc), "warning")
        return redirect(url_for("setup.index"))
    current_store().save_script_url(url)
    flash("Script URL saved.", "success")
    return redirect(url_for("dashboard.index"))


@bp.post("/clear")
@login_required
def clear():
    """Forget the script URL and every local adjustment (salaries, advances,
    profiles, payment statuses, assistant transcripts)."""
    if request.form.get("confirm") != "1":
        flash("Please confirm clearing the configuration.", "warning")
        return redirect(request.referrer or url_for("home"))
    current_store().clear()
    flash("Configuration cleared.", "success")
    return redirect(url_for("setup.index"))
