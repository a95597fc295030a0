"""Plot profile lookup routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from orchard.routes.insights import get_profile_registry
from orchard.schemas.plot import ProfileListRead, ProfileResolution
from orchard.services.profiles import ProfileRegistry

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="profile lookup failure")


@router.get("", response_model=ProfileListRead)
async def list_profiles(
	refresh: bool = Query(default=False),
	registry: ProfileRegistry = Depends(get_profile_registry),
) -> ProfileListRead:
	try:
		resolver = await registry.get_resolver(force_refresh=refresh)
		return ProfileListRead(items=resolver.profiles, default_plot=resolver.default_slug)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("/resolve", response_model=ProfileResolution)
async def resolve_profile(
	q: str = Query(min_length=1, max_length=200),
	registry: ProfileRegistry = Depends(get_profile_registry),
) -> ProfileResolution:
	try:
		return await registry.resolve(q)
	except Exception as exc:
		raise _map_error(exc) from exc
