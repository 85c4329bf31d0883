"""
Plant registry (departments, sheds, cranes).

Read-only reference data for the maintenance scheduler.
"""

from . import models  # noqa: F401
