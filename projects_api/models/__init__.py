"""ORM Models — SQLAlchemy declarative models.

Design Decisions:
    - All models imported here so Base.metadata is complete on first import
"""

from projects_api.models.test_project import TestProject  # noqa: F401
