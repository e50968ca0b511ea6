"""
Resolução do escopo de localidades por usuário.

Hierarquia: Supervisor Geral -> Supervisores de Área -> Localidades.
`Unrestricted` ("sem filtro") e `Scoped(())` ("não vê nada") são
tipos distintos de propósito; quem monta filtros de consulta deve
passar por `scope_query`, que trata os dois casos explicitamente.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from controle_vetorial.models.models import LocalidadeSupervisor, SupervisorArea, SupervisorGeral

logger = logging.getLogger(__name__)


class UserRole(str, Enum):
    ADMIN = "admin"
    GESTOR = "gestor"
    SUPERVISOR_GERAL = "supervisor_geral"
    SUPERVISOR_AREA = "supervisor_area"

    @classmethod
    def parse(cls, value) -> Optional["UserRole"]:
        try:
            return cls(value)
        except ValueError:
            return None


class Tier(str, Enum):
    GENERAL = "general"
    AREA = "area"


@dataclass(frozen=True)
class Unrestricted:
    pass


@dataclass(frozen=True)
class Scoped:
    localities: Tuple[str, ...] = ()


Access = Union[Unrestricted, Scoped]

UNRESTRICTED = Unrestricted()
NO_ACCESS = Scoped(())


class HierarchyRepository(Protocol):
    async def get_node(self, user_id: str, tier: Tier) -> Optional[str]:
        ...

    async def get_children(self, node_id: str) -> List[str]:
        ...

    async def get_localities(self, node_ids: Sequence[str]) -> List[str]:
        ...


class SqlHierarchyRepository:
    """Leitura da hierarquia nas tabelas `supervisores_*`."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_node(self, user_id: str, tier: Tier) -> Optional[str]:
        model = SupervisorGeral if tier is Tier.GENERAL else SupervisorArea
        stmt = select(model.id).where(model.profile_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def get_children(self, node_id: str) -> List[str]:
        stmt = select(SupervisorArea.id).where(SupervisorArea.supervisor_geral_id == node_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_localities(self, node_ids: Sequence[str]) -> List[str]:
        if not node_ids:
            return []
        stmt = select(LocalidadeSupervisor.localidade).where(
            LocalidadeSupervisor.supervisor_area_id.in_(list(node_ids))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())


class AccessResolver:
    def __init__(self, repository: HierarchyRepository):
        self.repository = repository

    async def resolve_accessible_localities(self, user_id: str, role) -> Access:
        parsed = UserRole.parse(role)

        if parsed in (UserRole.ADMIN, UserRole.GESTOR):
            return UNRESTRICTED

        if parsed is UserRole.SUPERVISOR_GERAL:
            node_id = await self.repository.get_node(user_id, Tier.GENERAL)
            if node_id is None:
                logger.warning(f"Supervisor geral {user_id} sem registro na hierarquia; acesso vazio.")
                return NO_ACCESS
            children = await self.repository.get_children(node_id)
            if not children:
                logger.info(f"Supervisor geral {user_id} ainda sem supervisores de área vinculados.")
                return NO_ACCESS
            localities = await self.repository.get_localities(children)
            return Scoped(_distinct_sorted(localities))

        if parsed is UserRole.SUPERVISOR_AREA:
            node_id = await self.repository.get_node(user_id, Tier.AREA)
            if node_id is None:
                logger.warning(f"Supervisor de área {user_id} sem registro na hierarquia; acesso vazio.")
                return NO_ACCESS
            localities = await self.repository.get_localities([node_id])
            return Scoped(_distinct_sorted(localities))

        logger.warning(f"Papel desconhecido '{role}' para o usuário {user_id}; acesso vazio.")
        return NO_ACCESS


def _distinct_sorted(localities: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(set(localities)))


@dataclass(frozen=True)
class ReportQuery:
    """Filtros da consulta de boletins. `None` = sem filtro naquele eixo."""
    localities: Optional[Tuple[str, ...]] = None
    weeks: Optional[Tuple[str, ...]] = None
    cycles: Optional[Tuple[int, ...]] = None

    @classmethod
    def build(cls, localities=None, weeks=None, cycles=None) -> "ReportQuery":
        # listas vazias vindas da interface significam "sem filtro"
        return cls(
            localities=tuple(localities) if localities else None,
            weeks=tuple(weeks) if weeks else None,
            cycles=tuple(cycles) if cycles else None,
        )


def scope_query(access: Access, requested: ReportQuery) -> Optional[ReportQuery]:
    """
    Combina o escopo do usuário com os filtros escolhidos.

    Retorna None quando o resultado é garantidamente vazio; nesse caso o
    banco não deve ser consultado.
    """
    if isinstance(access, Unrestricted):
        return requested

    if isinstance(access, Scoped):
        authorized = access.localities
        if requested.localities is None:
            effective = authorized
        else:
            allowed = set(authorized)
            effective = tuple(loc for loc in requested.localities if loc in allowed)
        if not effective:
            return None
        return replace(requested, localities=effective)

    raise TypeError(f"Tipo de acesso inesperado: {access!r}")


def visible_localities(access: Access, catalog_localities: Sequence[str]) -> List[str]:
    if isinstance(access, Unrestricted):
        return list(catalog_localities)
    if isinstance(access, Scoped):
        return sorted(access.localities)
    raise TypeError(f"Tipo de acesso inesperado: {access!r}")
