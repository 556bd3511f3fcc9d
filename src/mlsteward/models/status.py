"""
Run status and lifecycle enumerations.

Values match the strings used on the MLflow REST wire format.
"""

from enum import Enum


class RunStatus(str, Enum):
    """Run status enumeration.

    - RUNNING: Run is in progress
    - SCHEDULED: Run is scheduled to run at a later time
    - FINISHED: Run completed
    - FAILED: Run failed
    - KILLED: Run was terminated
    """

    RUNNING = "RUNNING"
    SCHEDULED = "SCHEDULED"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    KILLED = "KILLED"


class LifecycleStage(str, Enum):
    """Soft-deletion state shared by runs and experiments."""

    ACTIVE = "active"
    DELETED = "deleted"


class ViewType(str, Enum):
    """Qualifier for which runs or experiments a search returns."""

    ACTIVE_ONLY = "ACTIVE_ONLY"
    DELETED_ONLY = "DELETED_ONLY"
    ALL = "ALL"
