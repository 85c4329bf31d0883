# backend/cranedb/apps/maintenance_schedule/__init__.py
"""
Calendar-window maintenance scheduling (monthly crane tracking ledger).

NOTE:
Only models and schemas are imported at package import time so that Alembic
can load metadata without pulling in services. Plant models are imported
first because tracking rows reference cranes.
"""

from ..plant import models as plant_models  # noqa: F401
from . import models, schemas  # noqa: F401
