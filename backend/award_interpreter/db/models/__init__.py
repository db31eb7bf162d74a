"""
Models package — re-exports Base and all models.

Import models here so `Base.metadata.create_all` picks up every table.
"""

from award_interpreter.db.models.base import Base
from award_interpreter.db.models.document import StoredDocument

__all__ = [
    "Base",
    "StoredDocument",
]
