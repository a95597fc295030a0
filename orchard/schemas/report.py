"""Pydantic schemas for situation reports and aggregator output."""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, Field, model_validator

from orchard.models.enums import DataIntegrityEnum, InsightStatusEnum, VisualModeEnum
from orchard.schemas.activity import ActivityContext, ActivityRecord, PendingTask
from orchard.schemas.advisory import Advisory
from orchard.schemas.forecast import DailyForecast, EnrichedDay
from orchard.schemas.plot import PlotProfile


class GapAnalysis(BaseModel):
	integrity: DataIntegrityEnum = DataIntegrityEnum.fresh
	last_update_hours: int = 0
	missing_plots: list[str] = Field(default_factory=list)
	external_search_needed: bool = False
	notes: list[str] = Field(default_factory=list)


class PlotInsight(BaseModel):
	status: InsightStatusEnum = InsightStatusEnum.nominal
	headlines: list[str] = Field(default_factory=list)


class DailyRisk(BaseModel):
	"""Traffic-light heat/dryness status of one forecast day for one plot."""

	date: dt.date
	temp_max: float
	humidity: float
	status: InsightStatusEnum = InsightStatusEnum.nominal


class Sitrep(BaseModel):
	"""Per-plot situation report."""

	plot_id: str
	profile: PlotProfile
	profile_resolved: bool = True
	forecast: list[EnrichedDay] = Field(default_factory=list)
	current: EnrichedDay | None = None
	daily_risk: list[DailyRisk] = Field(default_factory=list)
	forecast_source: str | None = None
	recent_activities: list[ActivityContext] = Field(default_factory=list)
	pending_tasks: list[PendingTask] = Field(default_factory=list)
	advisories: list[Advisory] = Field(default_factory=list)
	insight: PlotInsight = Field(default_factory=PlotInsight)


class SystemReport(BaseModel):
	generated_at: dt.datetime
	horizon_days: int
	focus: list[str] = Field(default_factory=lambda: ["all"])
	gap_analysis: GapAnalysis = Field(default_factory=GapAnalysis)
	plots: dict[str, Sitrep] = Field(default_factory=dict)


class PrimaryMetric(BaseModel):
	label: str
	value: float
	unit: str | None = None
	status: str = "normal"


class PlotFocus(BaseModel):
	"""Aggregator decision for a single plot."""

	plot_id: str
	mode: VisualModeEnum
	primary_metric: PrimaryMetric


class GlobalSignal(BaseModel):
	"""Aggregator decision for the whole orchard."""

	mode: VisualModeEnum = VisualModeEnum.default
	emergency: bool = False
	drought: bool = False
	headline: str
	bullet_points: list[str] = Field(default_factory=list)
	max_rain_mm: float = 0.0
	max_vpd: float = 0.0
	source_plot: str | None = None


class AggregateView(BaseModel):
	generated_at: dt.datetime
	horizon_days: int
	signal: GlobalSignal
	plots: list[PlotFocus] = Field(default_factory=list)


class InsightOverride(BaseModel):
	"""Manual insight broadcast applied to every plot before aggregation."""

	status: InsightStatusEnum | None = None
	headlines: list[str] | None = None

	@model_validator(mode="after")
	def _validate_payload(self) -> "InsightOverride":
		if self.status is None and self.headlines is None:
			raise ValueError("provide status or headlines")
		return self


class InsightRequest(BaseModel):
	forecasts: list[DailyForecast] = Field(default_factory=list)
	activities: list[ActivityRecord] = Field(default_factory=list)
	requested_plots: list[str] = Field(default_factory=list)
	horizon_days: int | None = Field(default=None, ge=1, le=14)
	override: InsightOverride | None = None
	reflexes: bool = False


class ManifestRequest(InsightRequest):
	focus_plot: str | None = None
	include_advisories: bool = False


class AdvisoryListRead(BaseModel):
	generated_at: dt.datetime
	items: list[Advisory] = Field(default_factory=list)
	summary: dict[str, Any] = Field(default_factory=dict)
