#!/usr/bin/env python3
"""
Importer service - spreadsheet import over HTTP
================================================

Single-command run:  python main.py

See config.py for all environment-variable tunables.  Importers are
declared in the modules listed in IMPORTER_MODULES.
"""

from __future__ import annotations

import importlib
import logging

from flask import Flask

import config
from db import init_db
from api import api_bp

logger = logging.getLogger(__name__)


def load_importer_modules(modules: list[str]) -> None:
    """Import each module so the importers it builds get registered."""
    for module in modules:
        importlib.import_module(module)
        logger.info("Loaded importer module %s", module)


def create_app(db_url: str | None = None, importer_modules: list[str] | None = None) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES

    # ── Importers first: their entity tables must exist for create_all ──
    load_importer_modules(config.IMPORTER_MODULES if importer_modules is None else importer_modules)

    # ── Initialise database ─────────────────────────────────────────
    url = db_url or config.DB_URL
    init_db(url)
    logger.info("Database: %s", url)

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    return app


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    app = create_app()
    logger.info("Listening on http://%s:%s", config.HOST, config.PORT)
    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
