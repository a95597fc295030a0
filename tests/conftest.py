"""Shared pytest fixtures — pinned clock, profile table, forecast builders, async test client."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from orchard.config import Settings
from orchard.main import app
from orchard.routes.insights import get_engine, get_profile_registry
from orchard.schemas.activity import ActivityRecord, PendingAction
from orchard.schemas.forecast import DailyForecast, EnrichedDay
from orchard.services.context_service import EngineContext
from orchard.services.insight_service import InsightEngine
from orchard.services.profiles import BUILTIN_PROFILES, PlotContextResolver, ProfileRegistry

# 10:00 in Asia/Bangkok, so the engine's "today" is 2026-03-10.
PINNED_NOW = datetime(2026, 3, 10, 3, 0, tzinfo=UTC)
TODAY = date(2026, 3, 10)


@pytest.fixture
def pinned_now() -> datetime:
	return PINNED_NOW


@pytest.fixture
def today() -> date:
	return TODAY


@pytest.fixture
def settings() -> Settings:
	"""Explicit settings so host environment variables never leak into tests."""
	return Settings(_env_file=None, engine_timezone="Asia/Bangkok", horizon_days=3, default_plot_slug="house")


@pytest.fixture
def resolver() -> PlotContextResolver:
	return PlotContextResolver(BUILTIN_PROFILES, default_slug="house")


@pytest.fixture
def engine_context(resolver: PlotContextResolver, settings: Settings) -> EngineContext:
	return EngineContext(resolver=resolver, clock=lambda: PINNED_NOW, settings=settings)


@pytest.fixture
def engine(engine_context: EngineContext) -> InsightEngine:
	return InsightEngine(engine_context)


@pytest.fixture
def make_forecast() -> Callable[..., DailyForecast]:
	"""Benign forecast rows (no advisory fires) with per-test overrides."""

	def _make(plot_id: str = "house", day_offset: int = 0, **overrides: Any) -> DailyForecast:
		values: dict[str, Any] = {
			"plot_id": plot_id,
			"date": TODAY + timedelta(days=day_offset),
			"temp_max": 30.0,
			"temp_min": 22.0,
			"relative_humidity": 70.0,
			"rain_probability": 20.0,
			"rain_mm": 2.0,
			"shortwave_radiation": 450.0,
		}
		values.update(overrides)
		return DailyForecast(**values)

	return _make


@pytest.fixture
def make_day() -> Callable[..., EnrichedDay]:
	"""Already-enriched days for rule and aggregator tests."""

	def _make(day_offset: int = 0, **overrides: Any) -> EnrichedDay:
		values: dict[str, Any] = {
			"date": TODAY + timedelta(days=day_offset),
			"temp_max": 30.0,
			"temp_min": 22.0,
			"humidity": 70.0,
			"rain_probability": 20.0,
			"rain_mm": 2.0,
			"shortwave_radiation": 450.0,
			"vpd": 1.0,
			"gdd": 16.0,
			"eto": 4.5,
			"dew_point": 20.0,
		}
		values.update(overrides)
		return EnrichedDay(**values)

	return _make


@pytest.fixture
def make_activity() -> Callable[..., ActivityRecord]:
	def _make(
		plot_id: str = "house",
		days_ago: int = 0,
		*,
		notes: str = "",
		activity_type: str = "watering",
		action_text: str | None = None,
		due_in_days: int | None = None,
		status: str = "pending",
	) -> ActivityRecord:
		pending = None
		if action_text is not None:
			pending = PendingAction(
				action_text=action_text,
				due_date=TODAY + timedelta(days=due_in_days) if due_in_days is not None else None,
				status=status,
			)
		return ActivityRecord(
			id=f"{plot_id}-{days_ago}-{activity_type}",
			date=PINNED_NOW - timedelta(days=days_ago),
			type=activity_type,
			plot_id=plot_id,
			notes=notes,
			pending_action=pending,
		)

	return _make


@pytest.fixture
async def client(engine_context: EngineContext) -> AsyncGenerator[AsyncClient, None]:
	"""HTTPX async client with lifespan disabled and the engine pinned to the test clock."""

	registry = ProfileRegistry(default_slug="house")

	def override_engine() -> InsightEngine:
		return InsightEngine(engine_context)

	app.dependency_overrides[get_engine] = override_engine
	app.dependency_overrides[get_profile_registry] = lambda: registry
	original_lifespan = app.router.lifespan_context

	@asynccontextmanager
	async def noop_lifespan(_: Any) -> AsyncGenerator[None, None]:
		yield

	app.router.lifespan_context = noop_lifespan

	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://test") as test_client:
		yield test_client

	app.router.lifespan_context = original_lifespan
	app.dependency_overrides.clear()
