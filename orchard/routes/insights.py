"""Insight engine routes — report, manifest, advisories, reminders."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from orchard.config import get_settings
from orchard.schemas.activity import ActivityRecord, ReminderDigest
from orchard.schemas.manifest import HeadlessManifest
from orchard.schemas.report import AdvisoryListRead, InsightRequest, ManifestRequest, SystemReport
from orchard.services.context_service import EngineContext
from orchard.services.insight_service import InsightEngine
from orchard.services.profiles import ProfileRegistry

router = APIRouter(prefix="/insights", tags=["insights"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="insight engine failure")


def get_profile_registry(request: Request) -> ProfileRegistry:
	return request.app.state.profile_registry


def get_engine(registry: ProfileRegistry = Depends(get_profile_registry)) -> InsightEngine:
	return InsightEngine(EngineContext(resolver=registry.resolve, settings=get_settings()))


@router.post("/report", response_model=SystemReport)
async def build_report(
	payload: InsightRequest,
	engine: InsightEngine = Depends(get_engine),
) -> SystemReport:
	try:
		return await engine.build_report(payload)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/manifest", response_model=HeadlessManifest)
async def build_manifest(
	payload: ManifestRequest,
	engine: InsightEngine = Depends(get_engine),
) -> HeadlessManifest:
	try:
		return await engine.build_manifest(payload)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/advisories", response_model=AdvisoryListRead)
async def list_advisories(
	payload: InsightRequest,
	engine: InsightEngine = Depends(get_engine),
) -> AdvisoryListRead:
	try:
		return await engine.list_advisories(payload)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/reminders", response_model=ReminderDigest)
async def list_reminders(
	payload: list[ActivityRecord],
	engine: InsightEngine = Depends(get_engine),
) -> ReminderDigest:
	try:
		return await engine.reminders(payload)
	except Exception as exc:
		raise _map_error(exc) from exc
