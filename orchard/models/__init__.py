"""Domain enumeration registry — application code can do::

    from orchard.models import GrowthStageEnum, SeverityEnum, ...
"""

# ── Plot profile vocabulary ─────────────────────────────────────────────────
# ── Engine output vocabulary ────────────────────────────────────────────────
# ── Manifest tokens ─────────────────────────────────────────────────────────
from orchard.models.enums import (
    ActivityTypeEnum,
    AdvisoryCategoryEnum,
    CriticalAssetEnum,
    DataIntegrityEnum,
    GrowthStageEnum,
    InsightStatusEnum,
    LayoutEnum,
    PendingStatusEnum,
    ProfileMatchEnum,
    ReminderBucketEnum,
    SeverityEnum,
    SoilTypeEnum,
    ThemeEnum,
    VisualModeEnum,
    WaterSourceQualityEnum,
)

__all__ = [
    # Activity log
    "ActivityTypeEnum",
    # Advisories
    "AdvisoryCategoryEnum",
    "CriticalAssetEnum",
    "DataIntegrityEnum",
    # Plot profile
    "GrowthStageEnum",
    "InsightStatusEnum",
    # Manifest
    "LayoutEnum",
    "PendingStatusEnum",
    "ProfileMatchEnum",
    "ReminderBucketEnum",
    "SeverityEnum",
    "SoilTypeEnum",
    "ThemeEnum",
    "VisualModeEnum",
    "WaterSourceQualityEnum",
]
