import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from controle_vetorial.api.deps import get_access_resolver, get_current_profile, require_admin
from controle_vetorial.db.session import get_db
from controle_vetorial.models.models import Profile
from controle_vetorial.schemas.hierarchy import (
    AccessPublic,
    LocalidadeAdd,
    LocalidadeSupervisorPublic,
    LocalidadesReplace,
    SupervisorAreaCreate,
    SupervisorAreaPublic,
    SupervisorAreaUpdate,
    SupervisorGeralCreate,
    SupervisorGeralPublic,
)
from controle_vetorial.services.access import AccessResolver, Unrestricted, UserRole
from controle_vetorial.services.hierarchy_service import (
    HierarchyConflictError,
    HierarchyNotFoundError,
    HierarchyService,
    HierarchyServiceError,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_http(e: HierarchyServiceError) -> HTTPException:
    if isinstance(e, HierarchyNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, HierarchyConflictError):
        return HTTPException(status_code=409, detail=str(e))
    logger.error(f"Falha na hierarquia: {e}")
    return HTTPException(status_code=500, detail=str(e))


@router.get("/", response_model=List[SupervisorGeralPublic], summary="Hierarquia completa")
async def read_full_hierarchy(
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await HierarchyService(db).get_full_hierarchy()


@router.get("/me", summary="Subárvore do usuário (supervisor geral) ou suas localidades (supervisor de área)")
async def read_my_hierarchy(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    service = HierarchyService(db)
    role = UserRole.parse(profile.role)
    try:
        if role is UserRole.SUPERVISOR_GERAL:
            node = await service.get_my_hierarchy(profile.id)
            return SupervisorGeralPublic.model_validate(node)
        if role is UserRole.SUPERVISOR_AREA:
            node = await service.get_area_by_profile(profile.id)
            return SupervisorAreaPublic.model_validate(node)
    except HierarchyServiceError as e:
        raise _to_http(e)
    raise HTTPException(status_code=404, detail="Perfil sem posição na hierarquia")


@router.get("/access", response_model=AccessPublic, summary="Escopo de localidades do usuário")
async def read_my_access(
    profile: Profile = Depends(get_current_profile),
    resolver: AccessResolver = Depends(get_access_resolver),
):
    access = await resolver.resolve_accessible_localities(profile.id, profile.role)
    if isinstance(access, Unrestricted):
        return AccessPublic(unrestricted=True)
    return AccessPublic(unrestricted=False, localities=list(access.localities))


@router.post(
    "/general-supervisors",
    response_model=SupervisorGeralPublic,
    status_code=201,
    summary="Cria um Supervisor Geral",
)
async def create_supervisor_geral(
    form: SupervisorGeralCreate,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await HierarchyService(db).create_supervisor_geral(form)
    except HierarchyServiceError as e:
        raise _to_http(e)


@router.delete("/general-supervisors/{geral_id}", status_code=204, summary="Exclui um Supervisor Geral")
async def delete_supervisor_geral(
    geral_id: str,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await HierarchyService(db).delete_supervisor_geral(geral_id)
    except HierarchyServiceError as e:
        raise _to_http(e)
    return Response(status_code=204)


@router.post(
    "/area-supervisors",
    response_model=SupervisorAreaPublic,
    status_code=201,
    summary="Cria um Supervisor de Área com suas localidades",
)
async def create_supervisor_area(
    form: SupervisorAreaCreate,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await HierarchyService(db).create_supervisor_area(form)
    except HierarchyServiceError as e:
        raise _to_http(e)


@router.patch(
    "/area-supervisors/{area_id}",
    response_model=SupervisorAreaPublic,
    summary="Renomeia ou move um Supervisor de Área",
)
async def update_supervisor_area(
    area_id: str,
    form: SupervisorAreaUpdate,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await HierarchyService(db).update_supervisor_area(area_id, form)
    except HierarchyServiceError as e:
        raise _to_http(e)


@router.delete("/area-supervisors/{area_id}", status_code=204, summary="Exclui um Supervisor de Área")
async def delete_supervisor_area(
    area_id: str,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await HierarchyService(db).delete_supervisor_area(area_id)
    except HierarchyServiceError as e:
        raise _to_http(e)
    return Response(status_code=204)


@router.put(
    "/area-supervisors/{area_id}/localities",
    response_model=SupervisorAreaPublic,
    summary="Substitui todas as localidades do Supervisor de Área",
)
async def replace_localidades(
    area_id: str,
    form: LocalidadesReplace,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await HierarchyService(db).replace_localidades(area_id, form.localidades)
    except HierarchyServiceError as e:
        raise _to_http(e)


@router.post(
    "/area-supervisors/{area_id}/localities",
    response_model=LocalidadeSupervisorPublic,
    status_code=201,
    summary="Vincula uma localidade ao Supervisor de Área",
)
async def add_localidade(
    area_id: str,
    form: LocalidadeAdd,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await HierarchyService(db).add_localidade(area_id, form.localidade)
    except HierarchyServiceError as e:
        raise _to_http(e)


@router.delete(
    "/area-supervisors/{area_id}/localities/{localidade}",
    status_code=204,
    summary="Desvincula uma localidade do Supervisor de Área",
)
async def remove_localidade(
    area_id: str,
    localidade: str,
    _: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        removed = await HierarchyService(db).remove_localidade(area_id, localidade)
    except HierarchyServiceError as e:
        raise _to_http(e)
    if not removed:
        raise HTTPException(status_code=404, detail=f"Localidade '{localidade}' não vinculada")
    return Response(status_code=204)
