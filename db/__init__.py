"""
db - Database layer.

Public API:
    init_db(url)    → create engine + tables
    get_session()   → new Session
    Base            → declarative base for imported entity types
    ImportRun       → log of imports triggered through the API
"""

from db.engine import init_db, dispose_db, get_session   # noqa: F401
from db.models import Base, ImportRun                    # noqa: F401
