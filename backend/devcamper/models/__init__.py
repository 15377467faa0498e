"""
DevCamper API — ORM Models
===========================

Importing this package registers every table with `Base.metadata`
(Alembic autogenerate and `Database.create_all` rely on it).
"""

from devcamper.models.user import ROLES, User
from devcamper.models.bootcamp import CAREERS, DEFAULT_PHOTO, Bootcamp
from devcamper.models.course import SKILL_LEVELS, Course
from devcamper.models.review import Review

__all__ = [
    "User",
    "Bootcamp",
    "Course",
    "Review",
    "ROLES",
    "CAREERS",
    "SKILL_LEVELS",
    "DEFAULT_PHOTO",
]
