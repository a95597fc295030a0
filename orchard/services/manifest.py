"""Manifest assembly — turns a report and its aggregate view into renderer-neutral components."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from orchard.config import Settings
from orchard.models.enums import LayoutEnum, SeverityEnum, ThemeEnum, VisualModeEnum
from orchard.schemas.forecast import EnrichedDay
from orchard.schemas.manifest import (
	ActivityNote,
	ChartData,
	ChartDataset,
	ChartSpec,
	HeadlessManifest,
	InsightCard,
	InsightCardProps,
	ManifestMeta,
	MetricReadout,
	PlotCompositeCard,
	PlotCompositeProps,
	TableCard,
	TableCardProps,
)
from orchard.schemas.report import AggregateView, GlobalSignal, PlotFocus, Sitrep, SystemReport

VPD_COLOR = "#10b981"
RAIN_COLOR = "#3b82f6"
ETO_COLOR = "#f59e0b"
HEAT_COLOR = "#ef4444"
DEFAULT_TEMP_COLOR = "#6366f1"

ADVISORY_HEADERS = ["Date", "Category", "Severity", "Message"]


# ── Charts ──────────────────────────────────────────────────────────────────


def _labels(days: Sequence[EnrichedDay]) -> list[str]:
	return [day.date.strftime("%m-%d") for day in days]


def _vpd_chart(days: Sequence[EnrichedDay]) -> ChartSpec:
	return ChartSpec(
		title="VPD & Stress Index",
		desc="Transpiration demand over the forecast horizon",
		chart_type="line",
		data=ChartData(
			labels=_labels(days),
			datasets=[ChartDataset(label="VPD (kPa)", data=[day.vpd for day in days], color=VPD_COLOR, fill=True)],
		),
	)


def _rain_chart(days: Sequence[EnrichedDay]) -> ChartSpec:
	return ChartSpec(
		title="Precipitation & Flood Risk",
		desc="Rainfall against evaporative demand",
		chart_type="mixed",
		data=ChartData(
			labels=_labels(days),
			datasets=[
				ChartDataset(label="Rain (mm)", data=[day.rain_mm or 0.0 for day in days], color=RAIN_COLOR, type="bar"),
				ChartDataset(label="ETo (mm)", data=[day.eto for day in days], color=ETO_COLOR, type="line"),
			],
		),
	)


def _temp_chart(days: Sequence[EnrichedDay]) -> ChartSpec:
	return ChartSpec(
		title="Heat Stress (Max Temp)",
		desc="Daily maximum temperature",
		chart_type="line",
		data=ChartData(
			labels=_labels(days),
			datasets=[
				ChartDataset(label="Max Temp (°C)", data=[day.temp_max for day in days], color=HEAT_COLOR, fill=True)
			],
		),
	)


def _default_chart(days: Sequence[EnrichedDay]) -> ChartSpec:
	return ChartSpec(
		title="General Forecast",
		desc="Temperature and rain probability",
		chart_type="mixed",
		data=ChartData(
			labels=_labels(days),
			datasets=[
				ChartDataset(label="Max Temp", data=[day.temp_max for day in days], color=DEFAULT_TEMP_COLOR, type="line"),
				ChartDataset(label="Rain %", data=[day.rain_probability for day in days], color=RAIN_COLOR, type="bar"),
			],
		),
	)


CHART_BUILDERS: dict[VisualModeEnum, Callable[[Sequence[EnrichedDay]], ChartSpec]] = {
	VisualModeEnum.vpd: _vpd_chart,
	VisualModeEnum.rain: _rain_chart,
	VisualModeEnum.temp: _temp_chart,
	VisualModeEnum.default: _default_chart,
}


# ── Components ──────────────────────────────────────────────────────────────


def _banner(signal: GlobalSignal) -> InsightCard:
	return InsightCard(
		id="global_summary",
		props=InsightCardProps(
			title=signal.headline,
			severity="critical" if signal.emergency else "info",
			messages=list(signal.bullet_points),
		),
	)


def _plot_card(sitrep: Sitrep, focus: PlotFocus, activity_limit: int) -> PlotCompositeCard:
	profile = sitrep.profile
	tags = [str(profile.personality.critical_asset), str(profile.soil_type)]
	if not sitrep.profile_resolved:
		tags.append("unresolved")
	metric = focus.primary_metric
	notes = [
		ActivityNote(date=activity.date.date().isoformat(), note=activity.notes or str(activity.type))
		for activity in sitrep.recent_activities[:activity_limit]
	]
	return PlotCompositeCard(
		id=f"plot_{sitrep.plot_id}",
		props=PlotCompositeProps(
			plot_name=sitrep.plot_id,
			display_name=profile.name_local,
			stage=str(profile.growth_stage),
			mode=focus.mode,
			tags=tags,
			primary_metric=MetricReadout(
				label=metric.label,
				value=f"{metric.value:.1f}",
				unit=metric.unit,
				status=metric.status,
			),
			hero_chart=CHART_BUILDERS[focus.mode](sitrep.forecast),
			recent_activities=notes,
		),
	)


def _advisory_table(sitrep: Sitrep) -> TableCard:
	rows = [
		[advisory.target_date.isoformat(), str(advisory.category), str(advisory.severity), advisory.message]
		for advisory in sitrep.advisories
	]
	highlight = [
		index for index, advisory in enumerate(sitrep.advisories) if advisory.severity == SeverityEnum.critical
	]
	return TableCard(
		id=f"advisories_{sitrep.plot_id}",
		props=TableCardProps(
			title=f"Advisories: {sitrep.profile.name_local}",
			headers=list(ADVISORY_HEADERS),
			rows=rows,
			highlight_row_index=highlight,
			variant="colored-status",
		),
	)


def select_theme(signal: GlobalSignal) -> ThemeEnum:
	if signal.emergency:
		return ThemeEnum.emergency_red
	if signal.drought:
		return ThemeEnum.drought_orange
	return ThemeEnum.nominal


def assemble_manifest(
	report: SystemReport,
	view: AggregateView,
	settings: Settings,
	*,
	focus_plot: str | None = None,
	include_advisories: bool = False,
) -> HeadlessManifest:
	"""Map the aggregate view onto ordered visual components.

	All thresholds were applied upstream by the aggregator; this function only
	selects component shapes, colors and layout tokens.
	"""
	if focus_plot is not None and focus_plot not in report.plots:
		raise LookupError(f"plot '{focus_plot}' is not part of this report")

	components: list[InsightCard | PlotCompositeCard | TableCard] = []
	if focus_plot is None:
		components.append(_banner(view.signal))

	for focus in view.plots:
		if focus_plot is not None and focus.plot_id != focus_plot:
			continue
		sitrep = report.plots[focus.plot_id]
		components.append(_plot_card(sitrep, focus, settings.recent_activity_display))
		if include_advisories and sitrep.advisories:
			components.append(_advisory_table(sitrep))

	return HeadlessManifest(
		summary=view.signal.headline,
		theme=select_theme(view.signal),
		layout=LayoutEnum.mobile_focus if focus_plot is not None else LayoutEnum.dashboard_v1,
		visual_manifest=components,
		meta=ManifestMeta(
			generated_at=report.generated_at,
			horizon_days=report.horizon_days,
			version=settings.manifest_version,
			generator=settings.manifest_generator,
		),
	)
