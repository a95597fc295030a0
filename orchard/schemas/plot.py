"""Pydantic schemas for plot identity and biology."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from orchard.models.enums import (
	CriticalAssetEnum,
	GrowthStageEnum,
	ProfileMatchEnum,
	SoilTypeEnum,
	WaterSourceQualityEnum,
)


class PlotPersonality(BaseModel):
	model_config = ConfigDict(frozen=True)

	drought_sensitivity: int = Field(default=5, ge=0, le=10)
	flood_sensitivity: int = Field(default=5, ge=0, le=10)
	critical_asset: CriticalAssetEnum = CriticalAssetEnum.mixed
	notes: str = ""


class PlotProfile(BaseModel):
	"""Identity and biology of one orchard plot."""

	model_config = ConfigDict(frozen=True)

	id: str = Field(min_length=1, max_length=64)
	name_local: str
	latitude: float = Field(ge=-90, le=90)
	longitude: float = Field(ge=-180, le=180)
	growth_stage: GrowthStageEnum
	soil_type: SoilTypeEnum
	water_source_quality: WaterSourceQualityEnum = WaterSourceQualityEnum.normal
	personality: PlotPersonality = Field(default_factory=PlotPersonality)


class ProfileResolution(BaseModel):
	"""Outcome of resolving a free-text plot identifier."""

	query: str
	profile: PlotProfile
	resolved: bool
	matched_by: ProfileMatchEnum


class ProfileListRead(BaseModel):
	items: list[PlotProfile]
	default_plot: str
