

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from controle_vetorial.api.deps import get_access_resolver, get_current_profile, get_scoped_reports, report_filters
from controle_vetorial.db.session import get_db
from controle_vetorial.models.models import Profile
from controle_vetorial.schemas.reports import ReportCreate, ReportPublic
from controle_vetorial.services.access import AccessResolver, ReportQuery, scope_query
from controle_vetorial.services.report_store import (
    ReportNotFoundError,
    ReportStore,
    ReportStoreError,
    ScopedReportService,
)

logger = logging.getLogger(__name__)
router = APIRouter()


async def _ensure_locality_allowed(resolver: AccessResolver, profile: Profile, localidade: str) -> None:
    access = await resolver.resolve_accessible_localities(profile.id, profile.role)
    if scope_query(access, ReportQuery.build(localities=[localidade])) is None:
        raise HTTPException(status_code=403, detail=f"Sem acesso à localidade '{localidade}'")


@router.get("/", response_model=List[ReportPublic], summary="Lista boletins visíveis ao usuário")
async def read_reports(
    filters: ReportQuery = Depends(report_filters),
    profile: Profile = Depends(get_current_profile),
    service: ScopedReportService = Depends(get_scoped_reports),
):
    try:
        return await service.fetch(profile.id, profile.role, filters)
    except ReportStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{report_id}", response_model=ReportPublic, summary="Detalhe de um boletim")
async def read_report(
    report_id: str,
    profile: Profile = Depends(get_current_profile),
    resolver: AccessResolver = Depends(get_access_resolver),
    db: AsyncSession = Depends(get_db),
):
    try:
        report = await ReportStore(db).get(report_id)
    except ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    await _ensure_locality_allowed(resolver, profile, report.localidade)
    return report


@router.post("/", response_model=ReportPublic, status_code=201, summary="Registra um boletim de campo")
async def create_report(
    report: ReportCreate,
    profile: Profile = Depends(get_current_profile),
    resolver: AccessResolver = Depends(get_access_resolver),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_locality_allowed(resolver, profile, report.localidade)
    try:
        return await ReportStore(db).create(report, user_id=profile.id)
    except ReportStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{report_id}", response_model=ReportPublic, summary="Substitui o conteúdo de um boletim")
async def update_report(
    report_id: str,
    report: ReportCreate,
    profile: Profile = Depends(get_current_profile),
    resolver: AccessResolver = Depends(get_access_resolver),
    db: AsyncSession = Depends(get_db),
):
    store = ReportStore(db)
    try:
        current = await store.get(report_id)
        await _ensure_locality_allowed(resolver, profile, current.localidade)
        await _ensure_locality_allowed(resolver, profile, report.localidade)
        return await store.update(report_id, report)
    except ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ReportStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{report_id}", status_code=204, summary="Exclui um boletim")
async def delete_report(
    report_id: str,
    profile: Profile = Depends(get_current_profile),
    resolver: AccessResolver = Depends(get_access_resolver),
    db: AsyncSession = Depends(get_db),
):
    store = ReportStore(db)
    try:
        current = await store.get(report_id)
        await _ensure_locality_allowed(resolver, profile, current.localidade)
        await store.delete(report_id)
    except ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ReportStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(status_code=204)
