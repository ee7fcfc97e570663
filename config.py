"""
Importer service - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("IMPORTER_DB", f"sqlite:///{BASE_DIR / 'importer.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("IMPORTER_HOST", "0.0.0.0")
PORT   = int(os.environ.get("IMPORTER_PORT", "5000"))
DEBUG  = os.environ.get("IMPORTER_DEBUG", "0") == "1"

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("IMPORTER_LOG_LEVEL", "INFO").upper()

# ── Importers ──────────────────────────────────────────────────────────
# Comma-separated modules imported at startup; each builds its named
# importers, which registers them for the API.
IMPORTER_MODULES = [
    m.strip() for m in os.environ.get("IMPORTER_MODULES", "").split(",") if m.strip()
]

# ── Uploads / listing ──────────────────────────────────────────────────
MAX_UPLOAD_BYTES  = int(os.environ.get("IMPORTER_MAX_UPLOAD_MB", "20")) * 1024 * 1024
IMPORT_RUNS_LIMIT = int(os.environ.get("IMPORT_RUNS_LIMIT", "50"))
