"""
api.routes_import - /api/v1/import endpoints.

Accepts a spreadsheet via multipart file upload or raw request body and
runs one of the registered importers over it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from flask import request, jsonify
from sqlalchemy import select

import config
from api import api_bp
from db import ImportRun, get_session
from import_engine import registry
from import_engine.errors import OpenError
from import_engine.importer import ImportSession
from import_engine.report import ImportReport

logger = logging.getLogger(__name__)


@api_bp.route("/importers")
def list_importers():
    """GET /api/v1/importers - registered importers and their columns."""
    importers = []
    for name in registry.names():
        spec = registry.get(name)
        importers.append({
            "name": name,
            "model": spec.model_class.__name__,
            "transactional": spec.transactional,
            "columns": [
                {
                    "title": c.title_or_index,
                    "field": c.field_name,
                    "optional": c.optional,
                }
                for c in spec.columns
            ],
        })
    return jsonify({"importers": importers})


@api_bp.route("/import/<name>", methods=["POST"])
def api_import(name: str):
    """
    POST /api/v1/import/<name>?transactional=0|1&sheet=&ext=csv|xlsx

    Multipart: field name 'file'
    Or: raw document as request body (?ext= required unless csv).
    """
    spec = registry.get(name)
    if spec is None:
        return jsonify({"error": f"unknown importer '{name}'"}), 404

    filename = ""
    if request.content_type and "multipart" in request.content_type:
        f = request.files.get("file")
        if not f:
            return jsonify({"error": "no file in upload"}), 400
        filename = f.filename or ""
        content = f.read()
    else:
        content = request.get_data()

    if not content:
        return jsonify({"error": "empty body"}), 400

    ext = request.args.get("ext") or Path(filename).suffix.lstrip(".") or "csv"
    options = {"extension": ext}
    if "transactional" in request.args:
        options["transactional"] = request.args.get("transactional") == "1"
    sheet = request.args.get("sheet", "").strip()
    if sheet:
        options["sheet"] = int(sheet) if sheet.isdigit() else sheet

    try:
        importer = ImportSession(spec, content, **options)
    except OpenError as exc:
        _record_run(name, filename, "failed", str(exc))
        return jsonify({"error": str(exc)}), 422

    try:
        importer.run()
    except Exception as exc:
        report = ImportReport.from_session(importer)
        _record_run(name, filename, "failed", str(exc), report)
        if importer.transactional and importer.row_errors:
            return jsonify({"error": str(exc), "report": report.to_dict()}), 422
        logger.exception("Import %s failed", name)
        return jsonify({"error": "import failed", "report": report.to_dict()}), 500

    report = ImportReport.from_session(importer)
    status = "aborted" if report.aborted else "finished"
    run = _record_run(name, filename, status, report.abort_message or "", report)
    return jsonify({"run_id": run.id, **report.to_dict()})


@api_bp.route("/import/runs")
def list_import_runs():
    """GET /api/v1/import/runs?importer=&limit= - most recent first."""
    try:
        limit = int(request.args.get("limit", config.IMPORT_RUNS_LIMIT))
    except ValueError:
        return jsonify({"error": "limit must be an integer"}), 400
    if limit < 1:
        return jsonify({"error": "limit must be positive"}), 400
    limit = min(limit, config.IMPORT_RUNS_LIMIT)
    stmt = select(ImportRun).order_by(ImportRun.id.desc()).limit(limit)
    importer = request.args.get("importer", "").strip()
    if importer:
        stmt = stmt.where(ImportRun.importer == importer)

    session = get_session()
    try:
        runs = session.scalars(stmt).all()
        return jsonify({"runs": [r.to_dict() for r in runs]})
    finally:
        session.close()


def _record_run(name: str, filename: str, status: str, message: str,
                report: ImportReport | None = None) -> ImportRun:
    run = ImportRun(importer=name, filename=filename, status=status, message=message)
    if report is not None:
        run.transactional = report.transactional
        run.total_rows = report.total_rows
        run.processed = report.processed
        run.imported = report.imported
        run.skipped = report.skipped
        run.failed = report.failed
        run.errors_json = json.dumps(report.errors, ensure_ascii=False, default=str)

    session = get_session()
    try:
        session.add(run)
        session.commit()
    finally:
        session.close()
    logger.info("Recorded import run %s for %s: %s", run.id, name, status)
    return run
