from __future__ import annotations

import pytest

from orchard.models.enums import ProfileMatchEnum
from orchard.services.profiles import (
	BUILTIN_PROFILES,
	PlotContextResolver,
	ProfileRegistry,
	normalize_identifier,
)


def test_normalize_identifier_folds_case_and_whitespace() -> None:
	assert normalize_identifier("  Suan-Makham ") == "suan-makham"


def test_resolves_exact_slug(resolver: PlotContextResolver) -> None:
	resolution = resolver.resolve("tamarind")
	assert resolution.resolved is True
	assert resolution.matched_by == ProfileMatchEnum.slug
	assert resolution.profile.id == "tamarind"


@pytest.mark.parametrize("query", ["suan-makham", "มะขาม", "SUAN_MAKHAM", "สวนมะขาม"])
def test_aliases_resolve_to_tamarind(resolver: PlotContextResolver, query: str) -> None:
	resolution = resolver.resolve(query)
	assert resolution.profile.id == "tamarind"
	assert resolution.matched_by == ProfileMatchEnum.alias
	assert resolution.resolved is True


@pytest.mark.parametrize(
	("query", "expected"),
	[("สวนบ้าน", "house"), ("suan-lang", "lower"), ("plant_shop", "pram"), ("nursery", "pram")],
)
def test_alias_table_covers_every_plot(resolver: PlotContextResolver, query: str, expected: str) -> None:
	assert resolver.resolve(query).profile.id == expected


def test_unknown_identifier_falls_back_to_default(resolver: PlotContextResolver) -> None:
	resolution = resolver.resolve("mystery-block")
	assert resolution.resolved is False
	assert resolution.matched_by == ProfileMatchEnum.fallback
	assert resolution.profile.id == "house"
	assert resolution.query == "mystery-block"


def test_resolver_is_callable(resolver: PlotContextResolver) -> None:
	assert resolver("lower").profile.id == "lower"


def test_missing_default_slug_is_rejected() -> None:
	with pytest.raises(LookupError):
		PlotContextResolver(BUILTIN_PROFILES, default_slug="nowhere")


def test_aliases_pointing_at_unknown_plots_are_ignored() -> None:
	house = next(profile for profile in BUILTIN_PROFILES if profile.id == "house")
	resolver = PlotContextResolver([house], default_slug="house", aliases={"makham": "tamarind"})
	resolution = resolver.resolve("makham")
	assert resolution.resolved is False
	assert resolution.profile.id == "house"


@pytest.mark.asyncio
async def test_registry_caches_within_ttl() -> None:
	calls = 0
	clock = [100.0]

	async def loader():
		nonlocal calls
		calls += 1
		return list(BUILTIN_PROFILES)

	registry = ProfileRegistry(loader, default_slug="house", ttl_seconds=30, monotonic=lambda: clock[0])
	await registry.get_resolver()
	clock[0] += 10
	await registry.get_resolver()
	assert calls == 1

	clock[0] += 30
	await registry.get_resolver()
	assert calls == 2
	assert registry.source == "loader"


@pytest.mark.asyncio
async def test_registry_force_refresh_bypasses_cache() -> None:
	calls = 0

	async def loader():
		nonlocal calls
		calls += 1
		return list(BUILTIN_PROFILES)

	registry = ProfileRegistry(loader, default_slug="house")
	await registry.get_resolver()
	await registry.get_resolver(force_refresh=True)
	assert calls == 2


@pytest.mark.asyncio
async def test_registry_serves_builtin_table_when_loader_fails() -> None:
	async def broken_loader():
		raise ConnectionError("profile store unreachable")

	registry = ProfileRegistry(broken_loader, default_slug="house")
	resolution = await registry.resolve("suan-makham")
	assert resolution.profile.id == "tamarind"
	assert registry.source == "builtin"
	assert registry.describe()["loaded_at"] is None


@pytest.mark.asyncio
async def test_registry_falls_back_when_loader_omits_default() -> None:
	async def partial_loader():
		return [profile for profile in BUILTIN_PROFILES if profile.id != "house"]

	registry = ProfileRegistry(partial_loader, default_slug="house")
	profiles = await registry.list_profiles()
	assert {profile.id for profile in profiles} == {"house", "tamarind", "lower", "pram"}
	assert registry.source == "builtin"


@pytest.mark.parametrize("query", ["homestead", "nurserymen", "makhamville", "seedlings"])
def test_latin_keywords_do_not_match_inside_other_words(resolver: PlotContextResolver, query: str) -> None:
	resolution = resolver.resolve(query)
	assert resolution.resolved is False
	assert resolution.matched_by == ProfileMatchEnum.fallback


@pytest.mark.parametrize(
	("query", "expected"),
	[("Home garden", "house"), ("old-nursery", "pram"), ("suan_makham north", "tamarind"), ("สวนล่างฝั่งคลอง", "lower")],
)
def test_keywords_match_as_whole_words_or_thai_substrings(
	resolver: PlotContextResolver,
	query: str,
	expected: str,
) -> None:
	assert resolver.resolve(query).profile.id == expected
