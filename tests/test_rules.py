from __future__ import annotations

from collections.abc import Callable

import pytest

from orchard.models.enums import (
	AdvisoryCategoryEnum,
	CriticalAssetEnum,
	GrowthStageEnum,
	SeverityEnum,
	SoilTypeEnum,
)
from orchard.schemas.forecast import EnrichedDay
from orchard.schemas.plot import PlotPersonality, PlotProfile
from orchard.services.rules import (
	analyze_disease,
	analyze_irrigation,
	analyze_pest,
	analyze_physiology,
	evaluate_day,
	evaluate_series,
	highest_severity,
)

DayFactory = Callable[..., EnrichedDay]


def _profile(stage: GrowthStageEnum, soil: SoilTypeEnum = SoilTypeEnum.loamy) -> PlotProfile:
	return PlotProfile(
		id="block-a",
		name_local="Block A",
		latitude=12.5,
		longitude=102.1,
		growth_stage=stage,
		soil_type=soil,
		personality=PlotPersonality(critical_asset=CriticalAssetEnum.mangosteen),
	)


# ── Irrigation ──────────────────────────────────────────────────────────────


def test_sandy_soil_raises_humidity_trigger(make_day: DayFactory) -> None:
	day = make_day(humidity=55)
	assert analyze_irrigation("p", day, _profile(GrowthStageEnum.fruit_set)) is None

	advisory = analyze_irrigation("p", day, _profile(GrowthStageEnum.fruit_set, SoilTypeEnum.sandy))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.warning
	assert advisory.trigger_data["threshold"] == 60.0


def test_dry_air_on_sandy_soil_is_critical(make_day: DayFactory) -> None:
	advisory = analyze_irrigation("p", make_day(humidity=45), _profile(GrowthStageEnum.harvest, SoilTypeEnum.sandy))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.critical
	assert advisory.trigger_data["rh"] == 45
	assert advisory.trigger_data["condition"] == "High Transpiration"


def test_irrigation_first_match_wins_over_heat_stress(make_day: DayFactory) -> None:
	day = make_day(humidity=40, temp_max=38, shortwave_radiation=750)
	advisory = analyze_irrigation("p", day, _profile(GrowthStageEnum.bloom))
	assert advisory is not None
	assert advisory.trigger_data["condition"] == "High Transpiration"


def test_heat_stress_escalates_at_bloom(make_day: DayFactory) -> None:
	day = make_day(temp_max=37, shortwave_radiation=700)
	bloom = analyze_irrigation("p", day, _profile(GrowthStageEnum.bloom))
	leaf = analyze_irrigation("p", day, _profile(GrowthStageEnum.preparing_leaf))
	assert bloom is not None and bloom.severity == SeverityEnum.critical
	assert leaf is not None and leaf.severity == SeverityEnum.warning


def test_low_light_reduces_irrigation(make_day: DayFactory) -> None:
	advisory = analyze_irrigation("p", make_day(shortwave_radiation=200))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.optimal
	assert advisory.trigger_data["condition"] == "Low Light"


def test_missing_radiation_never_triggers_light_rules(make_day: DayFactory) -> None:
	day = make_day(temp_max=37, shortwave_radiation=None)
	assert analyze_irrigation("p", day, _profile(GrowthStageEnum.bloom)) is None


# ── Physiology ──────────────────────────────────────────────────────────────


def test_nutrient_lock_critical_during_fruit_set(make_day: DayFactory) -> None:
	day = make_day(humidity=45, shortwave_radiation=650)
	advisory = analyze_physiology("p", day, _profile(GrowthStageEnum.fruit_set))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.critical
	assert advisory.category == AdvisoryCategoryEnum.physiology


def test_rain_during_bloom_is_flower_damage(make_day: DayFactory) -> None:
	advisory = analyze_physiology("p", make_day(rain_mm=8), _profile(GrowthStageEnum.bloom))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.critical
	assert advisory.trigger_data["condition"] == "Bloom Rain Damage"


def test_rain_outside_bloom_is_drought_break(make_day: DayFactory) -> None:
	advisory = analyze_physiology("p", make_day(rain_mm=8), _profile(GrowthStageEnum.harvest))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.critical
	assert advisory.trigger_data["condition"] == "Drought Break"


def test_ideal_induction_by_stage(make_day: DayFactory) -> None:
	day = make_day(rain_mm=0, temp_max=33)

	induction = analyze_physiology("p", day, _profile(GrowthStageEnum.induction))
	assert induction is not None and induction.severity == SeverityEnum.optimal

	bloom = analyze_physiology("p", day, _profile(GrowthStageEnum.bloom))
	assert bloom is not None and bloom.severity == SeverityEnum.warning
	assert bloom.trigger_data == induction.trigger_data

	assert analyze_physiology("p", day, _profile(GrowthStageEnum.harvest)) is None


def test_context_naive_mode_uses_base_behaviour(make_day: DayFactory) -> None:
	advisory = analyze_physiology("p", make_day(rain_mm=0, temp_max=33))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.optimal

	heat = analyze_irrigation("p", make_day(temp_max=37, shortwave_radiation=700))
	assert heat is not None and heat.severity == SeverityEnum.warning


# ── Disease & pest ──────────────────────────────────────────────────────────


def test_phytophthora_before_mildew(make_day: DayFactory) -> None:
	advisory = analyze_disease("p", make_day(rain_mm=15, humidity=95))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.critical
	assert advisory.trigger_data["condition"] == "Phytophthora Risk"


def test_mildew_watch_on_saturated_air(make_day: DayFactory) -> None:
	advisory = analyze_disease("p", make_day(rain_mm=2, humidity=93))
	assert advisory is not None
	assert advisory.severity == SeverityEnum.warning


def test_pest_family_uses_pest_category(make_day: DayFactory) -> None:
	advisory = analyze_pest("p", make_day(temp_max=35, humidity=40))
	assert advisory is not None
	assert advisory.category == AdvisoryCategoryEnum.pest
	assert advisory.trigger_data["condition"] == "Red Mite Boom"


@pytest.mark.parametrize(
	("stage", "severity"),
	[
		(GrowthStageEnum.bloom, SeverityEnum.critical),
		(GrowthStageEnum.preparing_leaf, SeverityEnum.critical),
		(GrowthStageEnum.harvest, SeverityEnum.info),
	],
)
def test_thrips_severity_follows_stage(make_day: DayFactory, stage: GrowthStageEnum, severity: SeverityEnum) -> None:
	advisory = analyze_pest("p", make_day(rain_mm=0), _profile(stage))
	assert advisory is not None
	assert advisory.severity == severity


def test_missing_rain_does_not_count_as_dry(make_day: DayFactory) -> None:
	assert analyze_pest("p", make_day(rain_mm=None)) is None


# ── Evaluation ──────────────────────────────────────────────────────────────


def test_benign_day_produces_nothing(make_day: DayFactory) -> None:
	assert evaluate_day("p", make_day(), _profile(GrowthStageEnum.bloom)) == []


def test_at_most_one_advisory_per_family(make_day: DayFactory) -> None:
	day = make_day(humidity=40, temp_max=36, shortwave_radiation=700, rain_mm=0)
	advisories = evaluate_day("p", day, _profile(GrowthStageEnum.bloom, SoilTypeEnum.sandy))
	categories = [advisory.category for advisory in advisories]
	assert len(categories) == len(set(categories))
	assert categories == [
		AdvisoryCategoryEnum.irrigation,
		AdvisoryCategoryEnum.physiology,
		AdvisoryCategoryEnum.pest,
	]


def test_series_is_ordered_by_date_then_family(make_day: DayFactory) -> None:
	days = [make_day(1, rain_mm=15, humidity=95), make_day(0, humidity=40)]
	advisories = evaluate_series("p", days)
	assert [advisory.target_date for advisory in advisories] == sorted(
		advisory.target_date for advisory in advisories
	)
	assert advisories[0].category == AdvisoryCategoryEnum.irrigation


def test_highest_severity(make_day: DayFactory) -> None:
	advisories = evaluate_series("p", [make_day(humidity=93), make_day(1, rain_mm=15, humidity=95)])
	assert highest_severity(advisories) == SeverityEnum.critical
	assert highest_severity([]) is None
