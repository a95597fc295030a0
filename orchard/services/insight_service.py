"""Insight engine — one invocation from raw rows to report, manifest or reminders."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

import structlog

from orchard.models.enums import InsightStatusEnum
from orchard.schemas.activity import ActivityRecord, ReminderDigest
from orchard.schemas.forecast import EnrichedDay
from orchard.schemas.manifest import HeadlessManifest
from orchard.schemas.plot import PlotProfile
from orchard.schemas.report import (
	AdvisoryListRead,
	DailyRisk,
	InsightOverride,
	InsightRequest,
	ManifestRequest,
	PlotInsight,
	Sitrep,
	SystemReport,
)
from orchard.services.aggregator import aggregate
from orchard.services.context_service import EngineContext, PlotKeyResolver, build_system_report
from orchard.services.manifest import assemble_manifest
from orchard.services.reminders import build_digest
from orchard.services.rules import highest_severity

_logger = structlog.get_logger("orchard.insights")

REFLEX_VPD_WATCH = 2.0
REFLEX_HEAVY_RAIN_MM = 30.0
REFLEX_DRY_DAY_MM = 1.0
REFLEX_DRY_WINDOW_DAYS = 5
REFLEX_DRY_VPD = 1.5

# Daily risk lights, tiered by the plot's drought sensitivity
RISK_EXTREME_HEAT_C = 36.0
RISK_SENSITIVE_HEAT_C = 34.0
RISK_SENSITIVE_DRY_RH = 55.0
RISK_HARDY_HEAT_C = 35.0
HIGH_DROUGHT_SENSITIVITY = 9
LOW_DROUGHT_SENSITIVITY = 5

_STATUS_RANK = {
	InsightStatusEnum.nominal: 0,
	InsightStatusEnum.watch: 1,
	InsightStatusEnum.critical: 2,
}


def _escalate(insight: PlotInsight, status: InsightStatusEnum, headline: str) -> None:
	if _STATUS_RANK[status] > _STATUS_RANK[insight.status]:
		insight.status = status
	insight.headlines.append(headline)


def day_risk_status(day: EnrichedDay, profile: PlotProfile | None) -> InsightStatusEnum:
	"""Heat/dryness light for one day; without a profile only extreme heat counts."""
	if day.temp_max >= RISK_EXTREME_HEAT_C:
		return InsightStatusEnum.critical
	if profile is None:
		return InsightStatusEnum.nominal

	sensitivity = profile.personality.drought_sensitivity
	if sensitivity >= HIGH_DROUGHT_SENSITIVITY:
		if day.temp_max >= RISK_SENSITIVE_HEAT_C or day.humidity < RISK_SENSITIVE_DRY_RH:
			return InsightStatusEnum.watch
	elif sensitivity < LOW_DROUGHT_SENSITIVITY and day.temp_max >= RISK_HARDY_HEAT_C:
		return InsightStatusEnum.watch
	return InsightStatusEnum.nominal


def annotate_daily_risk(sitrep: Sitrep) -> None:
	profile = sitrep.profile if sitrep.profile_resolved else None
	sitrep.daily_risk = [
		DailyRisk(date=day.date, temp_max=day.temp_max, humidity=day.humidity, status=day_risk_status(day, profile))
		for day in sitrep.forecast
	]


def apply_reflexes(sitrep: Sitrep) -> None:
	"""Quick weather heuristics; they only ever raise the insight status."""
	insight = sitrep.insight
	current = sitrep.current

	if current is not None and current.vpd > REFLEX_VPD_WATCH:
		_escalate(insight, InsightStatusEnum.watch, f"High water stress (VPD > {REFLEX_VPD_WATCH:g})")

	if any((day.rain_mm or 0.0) > REFLEX_HEAVY_RAIN_MM for day in sitrep.forecast):
		_escalate(insight, InsightStatusEnum.critical, f"Heavy rain alert (>{REFLEX_HEAVY_RAIN_MM:g}mm forecast)")

	window = sitrep.forecast[:REFLEX_DRY_WINDOW_DAYS]
	dry_spell = bool(window) and all((day.rain_mm or 0.0) < REFLEX_DRY_DAY_MM for day in window)
	if dry_spell and current is not None and current.vpd > REFLEX_DRY_VPD:
		_escalate(insight, InsightStatusEnum.watch, "Drought conditions developing")


def apply_override(report: SystemReport, override: InsightOverride) -> None:
	"""Broadcast a manual insight to every plot; given fields replace computed ones."""
	for sitrep in report.plots.values():
		if override.status is not None:
			sitrep.insight.status = override.status
		if override.headlines is not None:
			sitrep.insight.headlines = list(override.headlines)


class InsightEngine:
	def __init__(self, context: EngineContext):
		self.context = context

	async def build_report(self, request: InsightRequest) -> SystemReport:
		report = await build_system_report(
			request.forecasts,
			request.activities,
			self.context,
			requested_plots=request.requested_plots,
			horizon_days=request.horizon_days,
		)
		for sitrep in report.plots.values():
			annotate_daily_risk(sitrep)
		if request.reflexes:
			for sitrep in report.plots.values():
				apply_reflexes(sitrep)
		if request.override is not None:
			apply_override(report, request.override)
			_logger.info("insight_override_applied", status=request.override.status, plots=len(report.plots))
		return report

	async def build_manifest(self, request: ManifestRequest) -> HeadlessManifest:
		report = await self.build_report(request)
		view = aggregate(report)

		focus_plot = None
		if request.focus_plot is not None:
			focus_plot = await PlotKeyResolver(self.context.resolver).key_for(request.focus_plot)

		manifest = assemble_manifest(
			report,
			view,
			self.context.settings,
			focus_plot=focus_plot,
			include_advisories=request.include_advisories,
		)
		_logger.info(
			"manifest_assembled",
			theme=manifest.theme.value,
			layout=manifest.layout.value,
			components=len(manifest.visual_manifest),
			source_plot=view.signal.source_plot,
		)
		return manifest

	async def list_advisories(self, request: InsightRequest) -> AdvisoryListRead:
		report = await self.build_report(request)
		items = [advisory for sitrep in report.plots.values() for advisory in sitrep.advisories]
		items.sort(key=lambda advisory: (advisory.target_date, advisory.plot_id))
		top = highest_severity(items)
		return AdvisoryListRead(
			generated_at=report.generated_at,
			items=items,
			summary={
				"total": len(items),
				"by_severity": dict(Counter(str(advisory.severity) for advisory in items)),
				"by_category": dict(Counter(str(advisory.category) for advisory in items)),
				"highest_severity": str(top) if top is not None else None,
			},
		)

	async def reminders(self, activities: Sequence[ActivityRecord]) -> ReminderDigest:
		report = await build_system_report([], activities, self.context)
		today = report.generated_at.astimezone(self.context.tz).date()
		digest = build_digest(
			{plot_id: sitrep.pending_tasks for plot_id, sitrep in report.plots.items()},
			today,
		)
		_logger.info("reminder_digest_built", total=digest.total, overdue=len(digest.overdue))
		return digest
