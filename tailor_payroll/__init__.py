# -*- coding: utf-8 -*-
import logging
from datetime import datetime, date
from flask import Flask, redirect, url_for
from flask_login import login_required

from .config import Config, ensure_instance
from .extensions import db, migrate, login_manager

# blueprints
from .auth import auth_bp
from .modules.setup import bp as setup_bp
from .modules.dashboard import bp as dashboard_bp
from .modules.entries import bp as entries_bp
from .modules.payments import bp as payments_bp
from .modules.workers import bp as workers_bp
from .modules.assistant import bp as assistant_bp

from .payroll import initials
from .workspace import current_store


def create_app(config_object=None):
    app = Flask(
        __name__,
        instance_relative_config=True,
        template_folder="templates",
        static_folder="static",
    )
    app.config.from_object(config_object or Config)
    ensure_instance(app)
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # --- jinja filters ---
    @app.template_filter("fmt_date")
    def fmt_date(value, fmt="%d.%m.%Y"):
        if value in (None, ""):
            return ""
        try:
            if isinstance(value, (datetime, date)):
                return value.strftime(fmt)
            return date.fromisoformat(str(value)[:10]).strftime(fmt)
        except ValueError:
            return str(value)

    @app.template_filter("fmt_money")
    def fmt_money(v):
        try:
            return f"{float(v):,.2f}".replace(",", " ")
        except (TypeError, ValueError):
            return str(v)

    app.add_template_filter(initials, "initials")

    # --- blueprints ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(setup_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(entries_bp)
    app.register_blueprint(payments_bp)
    app.register_blueprint(workers_bp)
    app.register_blueprint(assistant_bp)

    # --- home: setup screen until the script URL is known ---
    @app.route("/")
    @login_required
    def home():
        if not current_store().load_config().script_url:
            return redirect(url_for("setup.index"))
        return redirect(url_for("dashboard.index"))

    return app
