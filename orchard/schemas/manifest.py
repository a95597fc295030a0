"""Pydantic schemas for the headless visual manifest consumed by renderers."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from orchard.models.enums import LayoutEnum, ThemeEnum, VisualModeEnum


class ChartDataset(BaseModel):
	label: str
	data: list[float | None] = Field(default_factory=list)
	color: str | None = None
	type: Literal["line", "bar"] | None = None
	fill: bool = False


class ChartData(BaseModel):
	labels: list[str] = Field(default_factory=list)
	datasets: list[ChartDataset] = Field(default_factory=list)


class ChartSpec(BaseModel):
	title: str
	desc: str = ""
	chart_type: Literal["line", "bar", "mixed"]
	data: ChartData


class MetricReadout(BaseModel):
	label: str
	value: str
	unit: str | None = None
	status: str = "normal"


class ActivityNote(BaseModel):
	date: str
	note: str


class InsightCardProps(BaseModel):
	title: str
	severity: Literal["info", "warning", "critical"]
	messages: list[str] = Field(default_factory=list)


class InsightCard(BaseModel):
	type: Literal["INSIGHT_CARD"] = "INSIGHT_CARD"
	id: str
	col_span: int = Field(default=4, ge=1, le=4)
	props: InsightCardProps


class PlotCompositeProps(BaseModel):
	plot_name: str
	display_name: str
	stage: str
	mode: VisualModeEnum
	tags: list[str] = Field(default_factory=list)
	primary_metric: MetricReadout
	hero_chart: ChartSpec
	recent_activities: list[ActivityNote] = Field(default_factory=list)


class PlotCompositeCard(BaseModel):
	type: Literal["PLOT_COMPOSITE"] = "PLOT_COMPOSITE"
	id: str
	col_span: int = Field(default=1, ge=1, le=4)
	props: PlotCompositeProps


class TableCardProps(BaseModel):
	title: str
	headers: list[str]
	rows: list[list[str]] = Field(default_factory=list)
	highlight_row_index: list[int] = Field(default_factory=list)
	variant: Literal["simple", "colored-status"] = "simple"


class TableCard(BaseModel):
	type: Literal["TABLE_CARD"] = "TABLE_CARD"
	id: str
	col_span: int = Field(default=1, ge=1, le=4)
	props: TableCardProps


VisualComponent = Annotated[
	Union[InsightCard, PlotCompositeCard, TableCard],
	Field(discriminator="type"),
]


class ManifestMeta(BaseModel):
	generated_at: datetime
	horizon_days: int
	version: str
	generator: str | None = None


class HeadlessManifest(BaseModel):
	summary: str
	theme: ThemeEnum
	layout: LayoutEnum
	visual_manifest: list[VisualComponent] = Field(default_factory=list)
	meta: ManifestMeta


