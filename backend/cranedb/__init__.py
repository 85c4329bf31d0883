# backend/cranedb/__init__.py
"""
Crane maintenance backend.

Model modules are imported so that Alembic and Base.metadata.create_all()
see every table. The model classes live in cranedb/apps/*/models.py.
"""

from .apps.plant import models as plant_models                          # departments / sheds / cranes
from .apps.maintenance_schedule import models as maintenance_schedule_models  # monthly tracking ledger

__all__ = [
    "plant_models",
    "maintenance_schedule_models",
]
