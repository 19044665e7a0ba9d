"""Custom SQLAlchemy JSON type: PostgreSQL JSONB with validation.

Production runs on PostgreSQL and stores native JSONB. The in-memory SQLite
engine used by the integration tests gets the generic JSON type.
"""

import logging
from typing import Any

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.types import JSON, TypeDecorator

logger = logging.getLogger(__name__)


class JSONType(TypeDecorator):
    """JSONB type that only accepts dicts and lists.

    Usage:
        class MyModel(Base):
            data: Mapped[dict | None] = mapped_column(JSONType)

    Error Handling:
        - Non-JSON types are logged and converted to empty dict
        - Python None is stored as SQL NULL, not JSON null
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB(none_as_null=True))
        return dialect.type_descriptor(JSON(none_as_null=True))

    def process_bind_param(self, value: Any, dialect: Dialect) -> dict | list | None:
        if value is None:
            return None

        if not isinstance(value, dict | list):
            logger.warning(
                f"JSONType received non-JSON type: {type(value).__name__}. "
                f"Converting to empty dict to prevent data corruption."
            )
            value = {}

        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> dict | list | None:
        if value is None:
            return None

        if isinstance(value, dict | list):
            return value

        logger.error(f"Unexpected type in JSON column: {type(value).__name__}. Value: {repr(value)[:100]}")
        raise TypeError(
            f"Unexpected type in JSON column: {type(value).__name__}. "
            "JSON columns should always return dict or list. "
            "This may indicate a database schema issue."
        )
