from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from controle_vetorial.api.deps import get_access_resolver, get_current_profile, get_scoped_reports, report_filters
from controle_vetorial.core.catalog import DEFAULT_CATALOG
from controle_vetorial.models.models import Profile
from controle_vetorial.schemas.reports import (
    ConsolidatedTotals,
    FilterOptions,
    GroupedTable,
    RankedLocalityRow,
    ReportPublic,
    ReportsSummary,
    WeekRow,
)
from controle_vetorial.services.access import AccessResolver, ReportQuery, visible_localities
from controle_vetorial.services.consolidation import ConsolidationEngine, GroupBy, GroupedSortField, SortDirection
from controle_vetorial.services.report_store import ReportStoreError, ScopedReportService

router = APIRouter()

engine = ConsolidationEngine(DEFAULT_CATALOG)


async def scoped_reports(
    filters: ReportQuery = Depends(report_filters),
    profile: Profile = Depends(get_current_profile),
    service: ScopedReportService = Depends(get_scoped_reports),
) -> List[ReportPublic]:
    try:
        return await service.fetch(profile.id, profile.role, filters)
    except ReportStoreError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/consolidated", response_model=ConsolidatedTotals, summary="Totais consolidados")
async def read_consolidated(reports: List[ReportPublic] = Depends(scoped_reports)):
    return engine.consolidate(reports)


@router.get("/weekly", response_model=List[WeekRow], summary="Série por Semana Epidemiológica")
async def read_weekly_series(reports: List[ReportPublic] = Depends(scoped_reports)):
    return engine.weekly_series(reports)


@router.get("/weeks", response_model=List[str], summary="Semanas que possuem boletins")
async def read_weeks_with_data(reports: List[ReportPublic] = Depends(scoped_reports)):
    return engine.weeks_with_data(reports)


@router.get("/ranking", response_model=List[RankedLocalityRow], summary="Ranking de localidades por pendência")
async def read_locality_ranking(reports: List[ReportPublic] = Depends(scoped_reports)):
    return engine.locality_ranking(reports)


@router.get("/grouped", response_model=GroupedTable, summary="Tabela analítica agrupada com linha de total")
async def read_grouped_table(
    group_by: GroupBy = Query(GroupBy.LOCALITY, description="Agrupamento: 'locality', 'week' ou 'cycle'"),
    sort_by: Optional[GroupedSortField] = Query(None, description="Coluna de ordenação; sem valor usa a ordem do agrupamento"),
    direction: SortDirection = Query(SortDirection.ASC, description="'asc' ou 'desc'"),
    reports: List[ReportPublic] = Depends(scoped_reports),
):
    rows = engine.grouped_table(reports, group_by, sort_by=sort_by, direction=direction)
    return GroupedTable(rows=rows, totals=engine.grouped_totals(rows))


@router.get("/summary", response_model=ReportsSummary, summary="Resumo dos boletins")
async def read_summary(reports: List[ReportPublic] = Depends(scoped_reports)):
    return engine.summary(reports)


@router.get("/filter-options", response_model=FilterOptions, summary="Opções dos filtros do painel")
async def read_filter_options(
    profile: Profile = Depends(get_current_profile),
    resolver: AccessResolver = Depends(get_access_resolver),
):
    access = await resolver.resolve_accessible_localities(profile.id, profile.role)
    return FilterOptions(
        weeks=DEFAULT_CATALOG.week_labels,
        localities=visible_localities(access, DEFAULT_CATALOG.localities),
        cycles=list(DEFAULT_CATALOG.cycles),
    )
