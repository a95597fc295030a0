"""Context assembly — resolve plots, de-duplicate and enrich forecasts, build SITREPs."""

from __future__ import annotations

import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import structlog

from orchard.config import Settings, get_settings
from orchard.models.enums import PendingStatusEnum
from orchard.schemas.activity import ActivityContext, ActivityRecord, PendingTask
from orchard.schemas.forecast import DailyForecast, EnrichedDay
from orchard.schemas.plot import ProfileResolution
from orchard.schemas.report import PlotInsight, Sitrep, SystemReport
from orchard.services import agronomy
from orchard.services.aggregator import analyze_gaps
from orchard.services.profiles import normalize_identifier
from orchard.services.rules import evaluate_series

_logger = structlog.get_logger("orchard.context")

Resolver = Callable[[str], ProfileResolution | Awaitable[ProfileResolution]]
Clock = Callable[[], datetime]

HIGH_GROWTH_GDD = 30.0


def utc_now() -> datetime:
	return datetime.now(UTC)


@dataclass
class EngineContext:
	"""Collaborators injected into one engine invocation."""

	resolver: Resolver
	clock: Clock = utc_now
	settings: Settings = field(default_factory=get_settings)

	@property
	def tz(self) -> ZoneInfo:
		return ZoneInfo(self.settings.engine_timezone)


class PlotKeyResolver:
	"""Memoizes resolutions for one invocation and maps identifiers to report keys.

	Resolved identifiers collapse onto the canonical profile id. Unresolved
	identifiers keep their own normalized key so a typo never merges into the
	default plot's data.
	"""

	def __init__(self, resolver: Resolver) -> None:
		self._resolver = resolver
		self._by_query: dict[str, ProfileResolution] = {}
		self.by_key: dict[str, ProfileResolution] = {}

	async def resolve(self, query: str) -> ProfileResolution:
		cached = self._by_query.get(query)
		if cached is not None:
			return cached
		outcome = self._resolver(query)
		if inspect.isawaitable(outcome):
			outcome = await outcome
		self._by_query[query] = outcome
		return outcome

	async def key_for(self, query: str) -> str:
		resolution = await self.resolve(query)
		key = resolution.profile.id if resolution.resolved else normalize_identifier(query)
		self.by_key.setdefault(key, resolution)
		return key


def _fetch_rank(row: DailyForecast) -> float:
	if row.fetched_at is None:
		return float("-inf")
	fetched = row.fetched_at if row.fetched_at.tzinfo is not None else row.fetched_at.replace(tzinfo=UTC)
	return fetched.timestamp()


def deduplicate_forecasts(rows: Iterable[tuple[str, DailyForecast]]) -> dict[str, dict[date, DailyForecast]]:
	"""Keep one row per (plot, date): newest ``fetched_at`` wins, ties go to the later row."""
	kept: dict[str, dict[date, DailyForecast]] = defaultdict(dict)
	for key, row in rows:
		existing = kept[key].get(row.date)
		if existing is None or _fetch_rank(row) >= _fetch_rank(existing):
			kept[key][row.date] = row
	return dict(kept)


def enrich_day(row: DailyForecast, latitude: float) -> EnrichedDay:
	"""Derive VPD, GDD, ETo and dew point; raises AgronomyDomainError on bad input."""
	t_mean = agronomy.mean_temp(row.temp_max, row.temp_min)
	eto = agronomy.hargreaves_eto(row.temp_max, row.temp_min, latitude, row.date)
	dew = agronomy.dew_point(t_mean, row.relative_humidity) if row.relative_humidity > 0 else None
	return EnrichedDay(
		date=row.date,
		temp_max=row.temp_max,
		temp_min=row.temp_min,
		humidity=row.relative_humidity,
		rain_probability=row.rain_probability,
		rain_mm=row.rain_mm,
		shortwave_radiation=row.shortwave_radiation,
		vpd=round(agronomy.vpd(t_mean, row.relative_humidity), 2),
		gdd=round(agronomy.gdd(row.temp_max, row.temp_min), 2),
		eto=round(eto, 2),
		dew_point=dew,
	)


def nearest_day(days: Sequence[EnrichedDay], today: date) -> EnrichedDay | None:
	"""Day 0 if present, else the day closest to today (earlier wins ties)."""
	if not days:
		return None
	return min(days, key=lambda day: (abs((day.date - today).days), day.date))


def _recent_activities(records: Sequence[ActivityRecord], limit: int) -> list[ActivityContext]:
	ordered = sorted(records, key=lambda record: record.date, reverse=True)[:limit]
	return [ActivityContext(date=record.date, type=record.type, notes=record.notes) for record in ordered]


def _pending_tasks(records: Sequence[ActivityRecord]) -> list[PendingTask]:
	pending = [
		record
		for record in records
		if record.pending_action is not None and record.pending_action.status == PendingStatusEnum.pending
	]
	pending.sort(key=lambda record: record.date)
	return [
		PendingTask(
			activity_id=record.id,
			origin_type=record.type,
			logged_at=record.date,
			action_text=record.pending_action.action_text,
			due_date=record.pending_action.due_date,
			notes=record.notes,
		)
		for record in pending
		if record.pending_action is not None
	]


async def build_system_report(
	forecasts: Sequence[DailyForecast],
	activities: Sequence[ActivityRecord],
	context: EngineContext,
	*,
	requested_plots: Sequence[str] = (),
	horizon_days: int | None = None,
) -> SystemReport:
	"""Assemble the per-invocation SystemReport (advisories attached, no aggregation)."""
	settings = context.settings
	horizon = horizon_days or settings.horizon_days
	now = context.clock()
	tz = context.tz
	today = now.astimezone(tz).date()
	keys = PlotKeyResolver(context.resolver)

	requested: list[str] = []
	for raw in requested_plots:
		key = await keys.key_for(raw)
		if key not in requested:
			requested.append(key)

	keyed_rows: list[tuple[str, DailyForecast]] = []
	for row in forecasts:
		key = await keys.key_for(row.plot_id)
		if requested and key not in requested:
			continue
		keyed_rows.append((key, row))
	forecasts_by_plot = deduplicate_forecasts(keyed_rows)

	activities_by_plot: dict[str, list[ActivityRecord]] = defaultdict(list)
	for record in activities:
		key = await keys.key_for(record.plot_id)
		if requested and key not in requested:
			continue
		activities_by_plot[key].append(record)

	gap = analyze_gaps(
		{key: sorted(rows) for key, rows in forecasts_by_plot.items()},
		now=now,
		tz=tz,
		requested_plots=requested,
	)

	targets = requested or sorted(set(forecasts_by_plot) | set(activities_by_plot))

	report = SystemReport(
		generated_at=now,
		horizon_days=horizon,
		focus=requested or ["all"],
		gap_analysis=gap,
	)

	for key in targets:
		resolution = keys.by_key[key]
		profile = resolution.profile

		source = key
		rows_by_date = forecasts_by_plot.get(key, {})
		neighbour = settings.forecast_fallback_plots.get(key)
		if not rows_by_date and neighbour and forecasts_by_plot.get(neighbour):
			rows_by_date = forecasts_by_plot[neighbour]
			source = neighbour
			report.gap_analysis.notes.append(f"Plot {key} uses regional forecast from {neighbour}")

		rows = [rows_by_date[day] for day in sorted(rows_by_date)]
		enriched = [enrich_day(row, profile.latitude) for row in rows]
		gdd_total = sum(agronomy.gdd(row.temp_max, row.temp_min) for row in rows)

		insight = PlotInsight()
		if gdd_total > HIGH_GROWTH_GDD:
			insight.headlines.append(f"High growth expected (GDD {gdd_total:.1f})")

		plot_records = activities_by_plot.get(key, [])
		report.plots[key] = Sitrep(
			plot_id=key,
			profile=profile,
			profile_resolved=resolution.resolved,
			forecast=enriched,
			current=nearest_day(enriched, today),
			forecast_source=source if enriched else None,
			recent_activities=_recent_activities(plot_records, settings.recent_activity_limit),
			pending_tasks=_pending_tasks(plot_records),
			advisories=evaluate_series(key, enriched, profile),
			insight=insight,
		)

	_logger.info(
		"system_report_built",
		plots=len(report.plots),
		forecast_rows=len(keyed_rows),
		integrity=report.gap_analysis.integrity.value,
		missing=report.gap_analysis.missing_plots,
	)
	return report
