import logging
from typing import List, Optional

from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from controle_vetorial.db.session import get_db
from controle_vetorial.models.models import Profile
from controle_vetorial.services.access import AccessResolver, ReportQuery, SqlHierarchyRepository, UserRole
from controle_vetorial.services.report_store import ReportStore, ScopedReportService

logger = logging.getLogger(__name__)


async def get_current_profile(
    x_user_id: Optional[str] = Header(None, description="ID do perfil autenticado"),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """
    A autenticação acontece fora deste serviço; aqui só se lê o perfil
    indicado no cabeçalho `X-User-Id` para obter o papel.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Cabeçalho X-User-Id ausente")

    profile = await db.get(Profile, x_user_id)
    if profile is None:
        logger.warning(f"Perfil {x_user_id} não encontrado.")
        raise HTTPException(status_code=401, detail="Perfil não encontrado")
    return profile


async def require_admin(profile: Profile = Depends(get_current_profile)) -> Profile:
    if UserRole.parse(profile.role) is not UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Apenas administradores")
    return profile


def get_access_resolver(db: AsyncSession = Depends(get_db)) -> AccessResolver:
    return AccessResolver(SqlHierarchyRepository(db))


def get_scoped_reports(db: AsyncSession = Depends(get_db)) -> ScopedReportService:
    return ScopedReportService(AccessResolver(SqlHierarchyRepository(db)), ReportStore(db))


def report_filters(
    localidade: Optional[List[str]] = Query(None, description="Filtra por localidade (pode repetir)"),
    semana: Optional[List[str]] = Query(None, description="Filtra por Semana Epidemiológica, ex: 'SE 07' (pode repetir)"),
    ciclo: Optional[List[int]] = Query(None, description="Filtra por ciclo (pode repetir)"),
) -> ReportQuery:
    return ReportQuery.build(localities=localidade, weeks=semana, cycles=ciclo)
