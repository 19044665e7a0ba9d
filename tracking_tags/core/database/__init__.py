"""Database module for the placement tag engine.

Key components:
- db_config.py: Database configuration and connection setup
- database_session.py: Session management and context handlers
- json_type.py: JSON column type (JSONB on PostgreSQL)
- models.py: SQLAlchemy ORM models
- queries.py: Loaders and tracking script query helpers
"""
