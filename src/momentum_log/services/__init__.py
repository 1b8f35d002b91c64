"""Services built on top of the store."""

from .autosave import AutosaveCoalescer
from .backup import (
    BackupService,
    ImportSummary,
    ValidationResult,
    backup_filename,
    get_import_summary,
    validate_import_payload,
)
from .insights import InsightsService, WeeklyInsights, weekly_breakdown
from .momentum import MomentumState, MomentumStatus, calculate_momentum
from .pr import PrService
from .xp import AwardOutcome, XpAwardResult, XpBreakdown, XpService

__all__ = [
    "AutosaveCoalescer",
    "AwardOutcome",
    "backup_filename",
    "BackupService",
    "calculate_momentum",
    "get_import_summary",
    "ImportSummary",
    "InsightsService",
    "MomentumState",
    "MomentumStatus",
    "PrService",
    "validate_import_payload",
    "ValidationResult",
    "weekly_breakdown",
    "WeeklyInsights",
    "XpAwardResult",
    "XpBreakdown",
    "XpService",
]
