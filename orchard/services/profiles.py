"""Plot context resolution — slug, alias table, then the designated default."""

from __future__ import annotations

import re
import time
import unicodedata
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

import structlog

from orchard.models.enums import (
	CriticalAssetEnum,
	GrowthStageEnum,
	ProfileMatchEnum,
	SoilTypeEnum,
	WaterSourceQualityEnum,
)
from orchard.schemas.plot import PlotPersonality, PlotProfile, ProfileResolution

_logger = structlog.get_logger("orchard.profiles")

ProfileLoader = Callable[[], Awaitable[Iterable[PlotProfile]]]

BUILTIN_PROFILES: tuple[PlotProfile, ...] = (
	PlotProfile(
		id="house",
		name_local="สวนบ้าน",
		latitude=12.552967,
		longitude=102.155557,
		growth_stage=GrowthStageEnum.bloom,
		soil_type=SoilTypeEnum.loamy_sandy,
		water_source_quality=WaterSourceQualityEnum.clean_mountain,
		personality=PlotPersonality(
			drought_sensitivity=9,
			flood_sensitivity=3,
			critical_asset=CriticalAssetEnum.showcase,
			notes="Front-of-house showcase and nursery zone; must never look neglected.",
		),
	),
	PlotProfile(
		id="tamarind",
		name_local="สวนมะขาม",
		latitude=12.658602,
		longitude=102.204633,
		growth_stage=GrowthStageEnum.bloom,
		soil_type=SoilTypeEnum.sandy,
		water_source_quality=WaterSourceQualityEnum.high_mineral,
		personality=PlotPersonality(
			drought_sensitivity=10,
			flood_sensitivity=2,
			critical_asset=CriticalAssetEnum.durian,
			notes="Crown jewel durian block. Never let it run dry.",
		),
	),
	PlotProfile(
		id="lower",
		name_local="สวนล่าง",
		latitude=12.546194,
		longitude=102.140010,
		growth_stage=GrowthStageEnum.preparing_leaf,
		soil_type=SoilTypeEnum.clayey_filled,
		water_source_quality=WaterSourceQualityEnum.normal,
		personality=PlotPersonality(
			drought_sensitivity=4,
			flood_sensitivity=8,
			critical_asset=CriticalAssetEnum.mangosteen,
			notes="The fortress. Hardy mangosteen, but floods easily.",
		),
	),
	PlotProfile(
		id="pram",
		name_local="แปลงพันธุ์ไม้",
		latitude=12.552967,
		longitude=102.155557,
		growth_stage=GrowthStageEnum.seedling,
		soil_type=SoilTypeEnum.loamy_sandy,
		water_source_quality=WaterSourceQualityEnum.clean_mountain,
		personality=PlotPersonality(
			drought_sensitivity=9,
			flood_sensitivity=5,
			critical_asset=CriticalAssetEnum.seedling,
			notes="Young seedlings: no drying out, no waterlogging.",
		),
	),
)

# Keyword → canonical slug. Longer keywords are tried first so that
# "สวนมะขาม" is not shadowed by a shorter overlapping key.
ALIAS_TABLE: dict[str, str] = {
	"suan-ban": "house",
	"suan_ban": "house",
	"suanban": "house",
	"home": "house",
	"สวนบ้าน": "house",
	"บ้าน": "house",
	"suan-makham": "tamarind",
	"suan_makham": "tamarind",
	"makham": "tamarind",
	"มะขาม": "tamarind",
	"suan-lang": "lower",
	"suan_lang": "lower",
	"สวนล่าง": "lower",
	"ล่าง": "lower",
	"plant_shop": "pram",
	"plant-shop": "pram",
	"nursery": "pram",
	"seedling": "pram",
	"แปลงพันธุ์": "pram",
	"เพาะชำ": "pram",
}


def normalize_identifier(raw: str) -> str:
	"""Case-fold, NFC-normalize and trim a free-text plot identifier."""
	return unicodedata.normalize("NFC", raw).strip().casefold()


class PlotContextResolver:
	"""Resolve identifiers against a fixed profile table.

	Matching order: exact slug, alias keyword, designated default. Thai keywords
	match as substrings; Latin keywords only on word boundaries.
	"""

	def __init__(
		self,
		profiles: Iterable[PlotProfile],
		*,
		default_slug: str,
		aliases: Mapping[str, str] | None = None,
	) -> None:
		self._profiles: dict[str, PlotProfile] = {profile.id: profile for profile in profiles}
		if default_slug not in self._profiles:
			raise LookupError(f"default plot '{default_slug}' is not in the profile table")
		self.default_slug = default_slug
		alias_source = ALIAS_TABLE if aliases is None else aliases
		self._aliases = sorted(
			(
				(normalize_identifier(keyword), slug)
				for keyword, slug in alias_source.items()
				if slug in self._profiles
			),
			key=lambda item: len(item[0]),
			reverse=True,
		)

	@property
	def profiles(self) -> list[PlotProfile]:
		return list(self._profiles.values())

	@property
	def default_profile(self) -> PlotProfile:
		return self._profiles[self.default_slug]

	def _alias_hit(self, keyword: str, key: str) -> bool:
		if keyword.isascii():
			# Latin keywords must stand alone: "homestead" is not "home"
			return re.search(rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])", key) is not None
		return keyword in key

	def resolve(self, query: str) -> ProfileResolution:
		key = normalize_identifier(query)

		profile = self._profiles.get(key)
		if profile is not None:
			return ProfileResolution(query=query, profile=profile, resolved=True, matched_by=ProfileMatchEnum.slug)

		for keyword, slug in self._aliases:
			if keyword and self._alias_hit(keyword, key):
				return ProfileResolution(
					query=query,
					profile=self._profiles[slug],
					resolved=True,
					matched_by=ProfileMatchEnum.alias,
				)

		_logger.warning("plot_profile_fallback", query=query, fallback=self.default_slug)
		return ProfileResolution(
			query=query,
			profile=self.default_profile,
			resolved=False,
			matched_by=ProfileMatchEnum.fallback,
		)

	__call__ = resolve


async def builtin_profile_loader() -> list[PlotProfile]:
	return list(BUILTIN_PROFILES)


class ProfileRegistry:
	"""TTL-cached profile table backed by an async loader.

	The loader is the persistence collaborator; when it fails or returns no
	rows the registry serves the built-in table so resolution never breaks.
	"""

	def __init__(
		self,
		loader: ProfileLoader = builtin_profile_loader,
		*,
		default_slug: str,
		ttl_seconds: float = 30.0,
		monotonic: Callable[[], float] = time.monotonic,
	) -> None:
		self._loader = loader
		self._default_slug = default_slug
		self._ttl_seconds = ttl_seconds
		self._monotonic = monotonic
		self._resolver: PlotContextResolver | None = None
		self._loaded_at: float | None = None
		self.source = "none"

	async def get_resolver(self, force_refresh: bool = False) -> PlotContextResolver:
		now = self._monotonic()
		if (
			not force_refresh
			and self._resolver is not None
			and self._loaded_at is not None
			and now - self._loaded_at < self._ttl_seconds
		):
			return self._resolver

		profiles: list[PlotProfile] = []
		try:
			profiles = list(await self._loader())
		except Exception as exc:
			_logger.error("profile_loader_failed", error=str(exc))

		if profiles and any(profile.id == self._default_slug for profile in profiles):
			self._resolver = PlotContextResolver(profiles, default_slug=self._default_slug)
			self._loaded_at = now
			self.source = "loader"
			_logger.info("profile_table_loaded", count=len(profiles))
			return self._resolver

		_logger.warning("profile_table_fallback", reason="empty_or_failed_load")
		self.source = "builtin"
		# builtin table is not cached so the next call retries the loader
		return PlotContextResolver(BUILTIN_PROFILES, default_slug=self._default_slug)

	async def resolve(self, query: str) -> ProfileResolution:
		resolver = await self.get_resolver()
		return resolver.resolve(query)

	async def list_profiles(self) -> list[PlotProfile]:
		resolver = await self.get_resolver()
		return resolver.profiles

	def describe(self) -> dict[str, Any]:
		return {"source": self.source, "ttl_seconds": self._ttl_seconds, "loaded_at": self._loaded_at}
