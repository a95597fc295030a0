"""Domain enum types shared by schemas, rules and the aggregator.

Each StrEnum value is the wire token used in JSON reports and manifests.
These are separate from the StrEnums in orchard/config.py —
config enums validate settings, domain enums type report fields.
"""

from enum import StrEnum

# ── Plot biology enums ──────────────────────────────────────────────────────


class GrowthStageEnum(StrEnum):
    """Crop-cycle stage of a plot (set externally, read-only to the engine)."""

    preparing_leaf = "preparing_leaf"
    induction = "induction"
    bloom = "bloom"
    fruit_set = "fruit_set"
    harvest = "harvest"
    seedling = "seedling"


class SoilTypeEnum(StrEnum):
    """Soil class; sandy soil lowers the irrigation humidity trigger."""

    sandy = "sandy"
    loamy = "loamy"
    loamy_sandy = "loamy_sandy"
    clayey = "clayey"
    clayey_filled = "clayey_filled"


class WaterSourceQualityEnum(StrEnum):
    """Irrigation water quality (informational)."""

    normal = "normal"
    high_mineral = "high_mineral"
    clean_mountain = "clean_mountain"
    brackish = "brackish"


class CriticalAssetEnum(StrEnum):
    """What a plot protects above all else."""

    durian = "durian"
    mangosteen = "mangosteen"
    showcase = "showcase"
    seedling = "seedling"
    mixed = "mixed"


# ── Advisory enums ──────────────────────────────────────────────────────────


class AdvisoryCategoryEnum(StrEnum):
    """Hazard family an advisory belongs to."""

    irrigation = "irrigation"
    disease = "disease"
    physiology = "physiology"
    pest = "pest"


class SeverityEnum(StrEnum):
    """Ordered advisory severity: info < optimal < warning < critical."""

    info = "info"
    optimal = "optimal"
    warning = "warning"
    critical = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    SeverityEnum.info: 0,
    SeverityEnum.optimal: 1,
    SeverityEnum.warning: 2,
    SeverityEnum.critical: 3,
}


# ── Activity enums ──────────────────────────────────────────────────────────


class ActivityTypeEnum(StrEnum):
    """Kind of farming action recorded in the activity log."""

    watering = "watering"
    spraying = "spraying"
    fertilizing = "fertilizing"
    pruning = "pruning"
    monitoring = "monitoring"
    other = "other"


class PendingStatusEnum(StrEnum):
    """Lifecycle of a follow-up action attached to an activity."""

    pending = "pending"
    completed = "completed"
    skipped = "skipped"


# ── Report enums ────────────────────────────────────────────────────────────


class InsightStatusEnum(StrEnum):
    """Per-plot insight summary level."""

    nominal = "nominal"
    watch = "watch"
    critical = "critical"


class DataIntegrityEnum(StrEnum):
    """Forecast freshness classification from gap analysis."""

    fresh = "fresh"
    stale = "stale"


class VisualModeEnum(StrEnum):
    """Metric family foregrounded by a chart or headline."""

    vpd = "vpd"
    rain = "rain"
    temp = "temp"
    default = "default"


class ProfileMatchEnum(StrEnum):
    """How a plot identifier was resolved to a profile."""

    slug = "slug"
    alias = "alias"
    fallback = "fallback"


class ReminderBucketEnum(StrEnum):
    """Due-date bucket for pending follow-up actions."""

    overdue = "overdue"
    today = "today"
    upcoming = "upcoming"
    unscheduled = "unscheduled"


# ── Manifest enums ──────────────────────────────────────────────────────────


class ThemeEnum(StrEnum):
    """Semantic theme token interpreted by the renderer."""

    nominal = "nominal"
    drought_orange = "drought-orange"
    emergency_red = "emergency-red"


class LayoutEnum(StrEnum):
    """Layout strategy the renderer maps to a grid."""

    dashboard_v1 = "dashboard-v1"
    mobile_focus = "mobile-focus"
