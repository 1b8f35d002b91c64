"""CLI commands for momentum-log."""

from .backup import export, import_backup
from .exercises import exercises
from .init import init
from .logs import bodyweight, food
from .progress import prs, status
from .session import session

__all__ = [
    "bodyweight",
    "exercises",
    "export",
    "food",
    "import_backup",
    "init",
    "prs",
    "session",
    "status",
]
