"""Pydantic schema for rule-evaluator advisories."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from orchard.models.enums import AdvisoryCategoryEnum, SeverityEnum


class Advisory(BaseModel):
	model_config = ConfigDict(frozen=True)

	plot_id: str
	target_date: date
	category: AdvisoryCategoryEnum
	severity: SeverityEnum
	message: str
	trigger_data: dict[str, Any] = Field(default_factory=dict)
