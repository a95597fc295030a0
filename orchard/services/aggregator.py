"""Aggregator — gap analysis, global priority chain and per-plot focus."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo

from orchard.models.enums import (
	CriticalAssetEnum,
	DataIntegrityEnum,
	InsightStatusEnum,
	SoilTypeEnum,
	VisualModeEnum,
)
from orchard.schemas.report import (
	AggregateView,
	GapAnalysis,
	GlobalSignal,
	PlotFocus,
	PrimaryMetric,
	Sitrep,
	SystemReport,
)

FLOOD_RAIN_MM = 50.0
TRANSPIRATION_VPD = 2.0
DROUGHT_THEME_VPD = 1.5
RAIN_TOTAL_WARNING_MM = 30.0
FLOOD_SENSITIVITY_RAIN_MODE = 7

NOMINAL_HEADLINE = "Orchard Overview"
NOMINAL_BULLET = "Conditions are nominal."

_VPD_STAGES = {"bloom", "pollination"}


# ── Gap analysis ────────────────────────────────────────────────────────────


def analyze_gaps(
	forecast_dates: Mapping[str, Sequence[date]],
	*,
	now: datetime,
	tz: tzinfo,
	requested_plots: Sequence[str] = (),
) -> GapAnalysis:
	"""Classify forecast freshness and list requested plots without coverage."""
	gap = GapAnalysis()
	today = now.astimezone(tz).date()
	all_dates = [day for dates in forecast_dates.values() for day in dates]

	if not all_dates:
		gap.integrity = DataIntegrityEnum.stale
		gap.external_search_needed = True
		gap.notes.append("No forecast data found for the requested period.")
	else:
		earliest = min(all_dates)
		start = datetime.combine(earliest, time.min, tzinfo=tz)
		gap.last_update_hours = math.floor((now - start).total_seconds() / 3600)
		if today not in all_dates:
			gap.integrity = DataIntegrityEnum.stale
			gap.external_search_needed = True
			gap.notes.append(f"Forecast does not cover today ({today.isoformat()}).")

	if requested_plots:
		missing = [plot_id for plot_id in requested_plots if not forecast_dates.get(plot_id)]
		if missing:
			gap.missing_plots = missing
			gap.integrity = DataIntegrityEnum.stale
			gap.notes.append(f"Missing forecast for plots: {', '.join(missing)}")

	return gap


# ── Global signal ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _Scan:
	max_rain_mm: float
	max_vpd: float
	critical_plots: tuple[Sitrep, ...]


def _scan(sitreps: Iterable[Sitrep]) -> _Scan:
	max_rain = 0.0
	max_vpd = 0.0
	critical: list[Sitrep] = []
	for sitrep in sitreps:
		for day in sitrep.forecast:
			max_rain = max(max_rain, day.rain_mm or 0.0)
			max_vpd = max(max_vpd, day.vpd)
		if sitrep.insight.status == InsightStatusEnum.critical:
			critical.append(sitrep)
	return _Scan(max_rain_mm=max_rain, max_vpd=max_vpd, critical_plots=tuple(critical))


def _critical_plot_signal(scan: _Scan, horizon_days: int) -> GlobalSignal | None:
	if not scan.critical_plots:
		return None
	lead = scan.critical_plots[0]
	headline = lead.insight.headlines[0] if lead.insight.headlines else f"Critical condition on {lead.plot_id}"
	bullets = [
		f"{sitrep.plot_id}: {line}"
		for sitrep in scan.critical_plots
		for line in (sitrep.insight.headlines or ["critical status flagged"])
	]
	return GlobalSignal(emergency=True, headline=headline, bullet_points=bullets, source_plot=lead.plot_id)


def _flood_signal(scan: _Scan, horizon_days: int) -> GlobalSignal | None:
	if scan.max_rain_mm <= FLOOD_RAIN_MM:
		return None
	return GlobalSignal(
		mode=VisualModeEnum.rain,
		emergency=True,
		headline=f"Heavy Rain Alert ({scan.max_rain_mm:g}mm detected)",
		bullet_points=[f"High precipitation expected in the next {horizon_days} days."],
	)


def _transpiration_signal(scan: _Scan, horizon_days: int) -> GlobalSignal | None:
	if scan.max_vpd <= TRANSPIRATION_VPD:
		return None
	return GlobalSignal(
		mode=VisualModeEnum.vpd,
		headline=f"High Transpiration Rate (VPD {scan.max_vpd:.2f} kPa)",
		bullet_points=["Monitor irrigation closely. High water demand."],
	)


def _nominal_signal(scan: _Scan, horizon_days: int) -> GlobalSignal:
	return GlobalSignal(headline=NOMINAL_HEADLINE, bullet_points=[NOMINAL_BULLET])


# Evaluated in order; the first signal produced wins.
GLOBAL_CHAIN: tuple[Callable[[_Scan, int], GlobalSignal | None], ...] = (
	_critical_plot_signal,
	_flood_signal,
	_transpiration_signal,
	_nominal_signal,
)


def resolve_global_signal(sitreps: Sequence[Sitrep], horizon_days: int) -> GlobalSignal:
	scan = _scan(sitreps)
	for step in GLOBAL_CHAIN:
		signal = step(scan, horizon_days)
		if signal is not None:
			break
	return signal.model_copy(
		update={
			"max_rain_mm": round(scan.max_rain_mm, 2),
			"max_vpd": round(scan.max_vpd, 2),
			"drought": scan.max_vpd > DROUGHT_THEME_VPD,
		}
	)


# ── Per-plot focus ──────────────────────────────────────────────────────────


def resolve_plot_mode(sitrep: Sitrep, global_mode: VisualModeEnum) -> VisualModeEnum:
	"""Local chart focus; a plot's own sensitivities override the global mode."""
	personality = sitrep.profile.personality
	stage = str(sitrep.profile.growth_stage)
	if personality.critical_asset == CriticalAssetEnum.durian or stage in _VPD_STAGES:
		return VisualModeEnum.vpd
	if (
		personality.flood_sensitivity > FLOOD_SENSITIVITY_RAIN_MODE
		or sitrep.profile.soil_type == SoilTypeEnum.clayey_filled
	):
		return VisualModeEnum.rain
	if personality.critical_asset == CriticalAssetEnum.seedling:
		return VisualModeEnum.temp
	return global_mode


def primary_metric(sitrep: Sitrep, mode: VisualModeEnum, horizon_days: int) -> PrimaryMetric:
	if mode == VisualModeEnum.rain:
		total = sum(day.rain_mm or 0.0 for day in sitrep.forecast)
		return PrimaryMetric(
			label=f"{horizon_days}-Day Rain",
			value=round(total, 1),
			unit="mm",
			status="warning" if total > RAIN_TOTAL_WARNING_MM else "normal",
		)
	current_gdd = sitrep.current.gdd if sitrep.current is not None else 0.0
	return PrimaryMetric(label="Daily GDD", value=round(current_gdd, 1), status="normal")


def aggregate(report: SystemReport) -> AggregateView:
	"""Reduce a report to one global signal plus a focus decision per plot.

	Pure function of the report: identical input yields identical output.
	"""
	sitreps = list(report.plots.values())
	signal = resolve_global_signal(sitreps, report.horizon_days)
	plots = []
	for sitrep in sitreps:
		mode = resolve_plot_mode(sitrep, signal.mode)
		plots.append(
			PlotFocus(
				plot_id=sitrep.plot_id,
				mode=mode,
				primary_metric=primary_metric(sitrep, mode, report.horizon_days),
			)
		)
	return AggregateView(
		generated_at=report.generated_at,
		horizon_days=report.horizon_days,
		signal=signal,
		plots=plots,
	)
