# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_login import login_required
from werkzeug.exceptions import RequestEntityTooLarge

from ...errors import PhotoRejected
from ...payroll import (
    WorkerProfile,
    check_photo,
    delete_profile,
    ensure_profile,
    parse_amounts,
    photo_data_url,
    photo_too_large,
    upsert_profile,
)
from ...workspace import current_store, load_view, requested_month, setup_required

bp = Blueprint("workers", __name__, url_prefix="/workers")


# ------------ profiles --------------------------------------------------------
@bp.get("/")
@login_required
def index():
    return render_template("workers/index.html", profiles=current_store().load_profiles())


@bp.post("/add")
@login_required
def add():
    name = (request.form.get("name") or "").strip()
    if not name:
        flash("Please enter the worker's name.", "warning")
        return redirect(url_for("workers.index"))
    store = current_store()
    profiles, added = ensure_profile(store.load_profiles(), name)
    if added:
        store.save_profiles(profiles)
        flash("Worker profile updated.", "success")
    else:
        flash("This worker already exists.", "info")
    return redirect(url_for("workers.index"))


@bp.post("/photo")
@login_required
def photo():
    name = request.form.get("name") or ""
    f = request.files.get("photo")
    if not name or not f or not f.filename:
        flash("Choose a photo to upload.", "warning")
        return redirect(url_for("workers.index"))

    limit = int(current_app.config["PHOTO_MAX_BYTES"])
    try:
        check_photo(f.mimetype, f.content_length, limit)
        data = f.stream.read(limit + 1)
        check_photo(f.mimetype, len(data), limit)
    except PhotoRejected as exc:
        flash(str(exc), "warning")
        return redirect(url_for("workers.index"))

    store = current_store()
    store.save_profiles(upsert_profile(store.load_profiles(), WorkerProfile(name=name, photo=photo_data_url(data, f.mimetype))))
    flash("Worker profile updated.", "success")
    return redirect(url_for("workers.index"))


@bp.errorhandler(RequestEntityTooLarge)
def upload_too_large(exc):
    # the body is over MAX_CONTENT_LENGTH, so the form is never parsed
    flash(str(photo_too_large(int(current_app.config["PHOTO_MAX_BYTES"]))), "warning")
    return redirect(url_for("workers.index"))


@bp.post("/delete")
@login_required
def delete():
    name = request.form.get("name") or ""
    if request.form.get("confirm") != "1":
        flash("Please confirm deleting the worker.", "warning")
        return redirect(url_for("workers.index"))
    store = current_store()
    store.save_profiles(delete_profile(store.load_profiles(), name))
    flash("Worker profile deleted.", "success")
    return redirect(url_for("workers.index"))


# ------------ base salaries / advances ----------------------------------------
@bp.get("/adjustments")
@login_required
@setup_required
def adjustments():
    month = requested_month()
    view = load_view(month)
    return render_template(
        "workers/adjustments.html",
        month=month,
        workers=[s.worker_name for s in view["summary"]],
        base_salaries=view["config"].base_salaries,
        advances=view["config"].advances,
        profiles={p.name: p for p in view["profiles"]},
    )


def _save_amounts(kind: str) -> None:
    names = request.form.getlist("worker")
    store = current_store()
    config = store.load_config()
    if kind == "base":
        store.save_base_salaries({**config.base_salaries, **parse_amounts(names, request.form, "base__")})
    else:
        store.save_advances({**config.advances, **parse_amounts(names, request.form, "advance__")})


@bp.post("/salaries")
@login_required
def save_salaries():
    _save_amounts("base")
    flash("Base salaries saved.", "success")
    return redirect(url_for("dashboard.index", m=requested_month()))


@bp.post("/advances")
@login_required
def save_advances():
    _save_amounts("advance")
    flash("Advances saved.", "success")
    return redirect(url_for("dashboard.index", m=requested_month()))
