"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from specforge.db.models.project import ProjectRow
from specforge.db.models.specification import SpecificationRow
from specforge.db.models.spec_version import SpecVersionRow
from specforge.db.models.npm_config import NpmConfigRow
from specforge.db.models.generated_client import GeneratedClientRow

__all__ = [
    "ProjectRow",
    "SpecificationRow",
    "SpecVersionRow",
    "NpmConfigRow",
    "GeneratedClientRow",
]
