"""Pydantic schemas for raw and enriched daily forecasts."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class DailyForecast(BaseModel):
	"""One plot, one calendar day, as delivered by the weather collaborator."""

	plot_id: str = Field(min_length=1)
	date: dt.date
	temp_max: float
	temp_min: float
	relative_humidity: float = Field(ge=0, le=100)
	rain_probability: float = Field(default=0.0, ge=0, le=100)
	rain_mm: float | None = Field(default=None, ge=0)
	shortwave_radiation: float | None = Field(default=None, ge=0)
	fetched_at: dt.datetime | None = None


class EnrichedDay(BaseModel):
	"""A forecast day with its derived agronomic metrics (display-rounded)."""

	model_config = ConfigDict(frozen=True)

	date: dt.date
	temp_max: float
	temp_min: float
	humidity: float
	rain_probability: float = 0.0
	rain_mm: float | None = None
	shortwave_radiation: float | None = None
	vpd: float
	gdd: float
	eto: float
	dew_point: float | None = None
