"""Rule evaluator — threshold rules per hazard family, first match wins.

Every family is an ordered tuple of ``Rule`` entries. ``evaluate_family`` walks
the tuple and stops at the first rule whose predicate holds; that rule's
outcome builder decides the advisory (or that there is none). A missing plot
profile is an explicit context-naive mode: profile-dependent escalations do
not apply.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from orchard.models.enums import AdvisoryCategoryEnum, GrowthStageEnum, SeverityEnum, SoilTypeEnum
from orchard.schemas.advisory import Advisory
from orchard.schemas.forecast import EnrichedDay
from orchard.schemas.plot import PlotProfile

# ── Thresholds ──────────────────────────────────────────────────────────────

LOW_RH_THRESHOLD = 50.0
LOW_RH_THRESHOLD_SANDY = 60.0
HEAT_STRESS_TEMP = 35.0
HIGH_RADIATION = 600.0
LOW_RADIATION = 300.0

DROUGHT_BREAK_RAIN_MM = 5.0
INDUCTION_TEMP = 32.0

FUNGAL_RAIN_MM = 10.0
FUNGAL_RH = 80.0
MILDEW_RH = 90.0

MITE_TEMP = 33.0
MITE_RH = 50.0


@dataclass(frozen=True)
class RuleInput:
	day: EnrichedDay
	profile: PlotProfile | None

	@property
	def rh(self) -> float:
		return self.day.humidity

	@property
	def temp(self) -> float:
		return self.day.temp_max

	@property
	def rain(self) -> float | None:
		return self.day.rain_mm

	@property
	def swdown(self) -> float | None:
		return self.day.shortwave_radiation

	@property
	def stage(self) -> GrowthStageEnum | None:
		return self.profile.growth_stage if self.profile is not None else None

	@property
	def sandy(self) -> bool:
		return self.profile is not None and self.profile.soil_type == SoilTypeEnum.sandy


@dataclass(frozen=True)
class Outcome:
	severity: SeverityEnum
	message: str
	trigger_data: dict[str, Any]


@dataclass(frozen=True)
class Rule:
	condition: str
	matches: Callable[[RuleInput], bool]
	build: Callable[[RuleInput], Outcome | None]


def _gt(value: float | None, threshold: float) -> bool:
	return value is not None and value > threshold


def _lt(value: float | None, threshold: float) -> bool:
	return value is not None and value < threshold


def _is_zero(value: float | None) -> bool:
	return value is not None and value == 0


# ── Irrigation ──────────────────────────────────────────────────────────────


def _low_rh_threshold(inp: RuleInput) -> float:
	return LOW_RH_THRESHOLD_SANDY if inp.sandy else LOW_RH_THRESHOLD


def _high_transpiration(inp: RuleInput) -> Outcome:
	critical = inp.sandy and inp.rh < LOW_RH_THRESHOLD
	return Outcome(
		severity=SeverityEnum.critical if critical else SeverityEnum.warning,
		message=(
			f"Increase irrigation 20-30% (RH {inp.rh:g}%). Very dry air, leaf scorch risk; "
			"finish watering before 09:00."
		),
		trigger_data={"rh": inp.rh, "threshold": _low_rh_threshold(inp), "condition": "High Transpiration"},
	)


def _heat_stress(inp: RuleInput) -> Outcome:
	return Outcome(
		severity=SeverityEnum.critical if inp.stage == GrowthStageEnum.bloom else SeverityEnum.warning,
		message=(
			f"Cooling irrigation (T_max {inp.temp:g}°C, {inp.swdown:g} W/m²). Short afternoon misting "
			"to cut heat stress; skip it if humidity is high."
		),
		trigger_data={"temp": inp.temp, "swdown": inp.swdown, "condition": "Heat Stress"},
	)


def _low_light(inp: RuleInput) -> Outcome:
	return Outcome(
		severity=SeverityEnum.optimal,
		message=f"Reduce irrigation by 20% (low light {inp.swdown:g} W/m²). Low uptake, watch for waterlogged roots.",
		trigger_data={"swdown": inp.swdown, "condition": "Low Light"},
	)


IRRIGATION_RULES: tuple[Rule, ...] = (
	Rule("High Transpiration", lambda inp: inp.rh < _low_rh_threshold(inp), _high_transpiration),
	Rule(
		"Heat Stress",
		lambda inp: inp.temp > HEAT_STRESS_TEMP and _gt(inp.swdown, HIGH_RADIATION),
		_heat_stress,
	),
	Rule("Low Light", lambda inp: _lt(inp.swdown, LOW_RADIATION), _low_light),
)


# ── Physiology ──────────────────────────────────────────────────────────────


def _nutrient_lock(inp: RuleInput) -> Outcome:
	escalate = inp.stage in (GrowthStageEnum.bloom, GrowthStageEnum.fruit_set)
	return Outcome(
		severity=SeverityEnum.critical if escalate else SeverityEnum.warning,
		message="Nutrient lock (strong sun, dry air). Calcium is not reaching the fruit; apply foliar Ca-B now.",
		trigger_data={"swdown": inp.swdown, "rh": inp.rh, "condition": "Nutrient Lock"},
	)


def _drought_break(inp: RuleInput) -> Outcome:
	# Both branches are critical: bloom damage and stress relief share the level.
	if inp.stage == GrowthStageEnum.bloom:
		return Outcome(
			severity=SeverityEnum.critical,
			message=(
				f"Rain on open flowers ({inp.rain:g}mm). Expect flower drop and poor pollination; "
				"protect blooms and plan a fungicide cover after the rain."
			),
			trigger_data={"rain": inp.rain, "condition": "Bloom Rain Damage"},
		)
	return Outcome(
		severity=SeverityEnum.critical,
		message=(
			f"Drought break ({inp.rain:g}mm). Accumulated stress will reset; fertigation window, "
			"spray reserve nutrients plus Ca-B ahead of the flush."
		),
		trigger_data={"rain": inp.rain, "condition": "Drought Break"},
	)


def _ideal_induction(inp: RuleInput) -> Outcome | None:
	trigger = {"rain": inp.rain, "temp": inp.temp, "condition": "Ideal Induction"}
	if inp.stage == GrowthStageEnum.bloom:
		return Outcome(
			severity=SeverityEnum.warning,
			message=f"Bloom stress (dry, {inp.temp:g}°C). Open flowers are drying out; keep canopy humidity up.",
			trigger_data=trigger,
		)
	if inp.profile is None or inp.stage in (GrowthStageEnum.induction, GrowthStageEnum.preparing_leaf):
		return Outcome(
			severity=SeverityEnum.optimal,
			message=f"Good weather for flower induction (dry, {inp.temp:g}°C). Plan the controlled watering step.",
			trigger_data=trigger,
		)
	return None


PHYSIOLOGY_RULES: tuple[Rule, ...] = (
	Rule(
		"Nutrient Lock",
		lambda inp: _gt(inp.swdown, HIGH_RADIATION) and inp.rh < LOW_RH_THRESHOLD,
		_nutrient_lock,
	),
	Rule("Drought Break", lambda inp: _gt(inp.rain, DROUGHT_BREAK_RAIN_MM), _drought_break),
	Rule("Ideal Induction", lambda inp: _is_zero(inp.rain) and inp.temp > INDUCTION_TEMP, _ideal_induction),
)


# ── Disease ─────────────────────────────────────────────────────────────────


DISEASE_RULES: tuple[Rule, ...] = (
	Rule(
		"Phytophthora Risk",
		lambda inp: _gt(inp.rain, FUNGAL_RAIN_MM) and inp.rh > FUNGAL_RH,
		lambda inp: Outcome(
			severity=SeverityEnum.critical,
			message=(
				f"High fungal risk (rain {inp.rain:g}mm / RH {inp.rh:g}%). Inspect trunk bases and branches "
				"for root rot; treat sour-smelling lesions immediately."
			),
			trigger_data={"rain": inp.rain, "rh": inp.rh, "condition": "Phytophthora Risk"},
		),
	),
	Rule(
		"High Humidity",
		lambda inp: inp.rh > MILDEW_RH,
		lambda inp: Outcome(
			severity=SeverityEnum.warning,
			message=f"Mildew and leaf blight watch (RH {inp.rh:g}%). Apply a protective contact fungicide.",
			trigger_data={"rh": inp.rh, "condition": "High Humidity"},
		),
	),
)


# ── Pest ────────────────────────────────────────────────────────────────────


def _thrips(inp: RuleInput) -> Outcome:
	if inp.stage in (GrowthStageEnum.bloom, GrowthStageEnum.preparing_leaf):
		return Outcome(
			severity=SeverityEnum.critical,
			message="Thrips outbreak risk on flowers and young flush (no rain). Scout today and rotate insecticide groups.",
			trigger_data={"rain": inp.rain, "condition": "Thrips Alert"},
		)
	return Outcome(
		severity=SeverityEnum.info,
		message="Thrips watch (no rain). Rotate insecticide groups; never repeat the same one back to back.",
		trigger_data={"rain": inp.rain, "condition": "Thrips Alert"},
	)


PEST_RULES: tuple[Rule, ...] = (
	Rule(
		"Red Mite Boom",
		lambda inp: inp.temp > MITE_TEMP and inp.rh < MITE_RH,
		lambda inp: Outcome(
			severity=SeverityEnum.warning,
			message=(
				f"Red mite outbreak risk (hot {inp.temp:g}°C / dry {inp.rh:g}%). Use acaricides, not general "
				"insecticides, and raise humidity with sprinklers."
			),
			trigger_data={"temp": inp.temp, "rh": inp.rh, "condition": "Red Mite Boom"},
		),
	),
	Rule("Thrips Alert", lambda inp: _is_zero(inp.rain), _thrips),
)


# ── Evaluation ──────────────────────────────────────────────────────────────

RULE_FAMILIES: tuple[tuple[AdvisoryCategoryEnum, tuple[Rule, ...]], ...] = (
	(AdvisoryCategoryEnum.irrigation, IRRIGATION_RULES),
	(AdvisoryCategoryEnum.physiology, PHYSIOLOGY_RULES),
	(AdvisoryCategoryEnum.disease, DISEASE_RULES),
	(AdvisoryCategoryEnum.pest, PEST_RULES),
)

_FAMILY_ORDER = {category: index for index, (category, _rules) in enumerate(RULE_FAMILIES)}


def evaluate_family(
	category: AdvisoryCategoryEnum,
	rules: Sequence[Rule],
	plot_id: str,
	day: EnrichedDay,
	profile: PlotProfile | None = None,
) -> Advisory | None:
	inp = RuleInput(day=day, profile=profile)
	for rule in rules:
		if not rule.matches(inp):
			continue
		outcome = rule.build(inp)
		if outcome is None:
			return None
		return Advisory(
			plot_id=plot_id,
			target_date=day.date,
			category=category,
			severity=outcome.severity,
			message=outcome.message,
			trigger_data=outcome.trigger_data,
		)
	return None


def analyze_irrigation(plot_id: str, day: EnrichedDay, profile: PlotProfile | None = None) -> Advisory | None:
	return evaluate_family(AdvisoryCategoryEnum.irrigation, IRRIGATION_RULES, plot_id, day, profile)


def analyze_physiology(plot_id: str, day: EnrichedDay, profile: PlotProfile | None = None) -> Advisory | None:
	return evaluate_family(AdvisoryCategoryEnum.physiology, PHYSIOLOGY_RULES, plot_id, day, profile)


def analyze_disease(plot_id: str, day: EnrichedDay, profile: PlotProfile | None = None) -> Advisory | None:
	return evaluate_family(AdvisoryCategoryEnum.disease, DISEASE_RULES, plot_id, day, profile)


def analyze_pest(plot_id: str, day: EnrichedDay, profile: PlotProfile | None = None) -> Advisory | None:
	return evaluate_family(AdvisoryCategoryEnum.pest, PEST_RULES, plot_id, day, profile)


def evaluate_day(plot_id: str, day: EnrichedDay, profile: PlotProfile | None = None) -> list[Advisory]:
	"""Run every family over one day; at most one advisory per family."""
	advisories: list[Advisory] = []
	for category, rules in RULE_FAMILIES:
		advisory = evaluate_family(category, rules, plot_id, day, profile)
		if advisory is not None:
			advisories.append(advisory)
	return advisories


def evaluate_series(
	plot_id: str,
	days: Iterable[EnrichedDay],
	profile: PlotProfile | None = None,
) -> list[Advisory]:
	advisories = [advisory for day in days for advisory in evaluate_day(plot_id, day, profile)]
	advisories.sort(key=lambda item: (item.target_date, _FAMILY_ORDER[item.category]))
	return advisories


def highest_severity(advisories: Iterable[Advisory]) -> SeverityEnum | None:
	top: SeverityEnum | None = None
	for advisory in advisories:
		if top is None or advisory.severity.rank > top.rank:
			top = advisory.severity
	return top
