import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from controle_vetorial.models.models import LocalidadeSupervisor, Profile, SupervisorArea, SupervisorGeral
from controle_vetorial.schemas.hierarchy import SupervisorAreaCreate, SupervisorAreaUpdate, SupervisorGeralCreate
from controle_vetorial.services.access import UserRole

logger = logging.getLogger(__name__)


class HierarchyServiceError(Exception):

    pass


class HierarchyNotFoundError(HierarchyServiceError):

    pass


class HierarchyConflictError(HierarchyServiceError):

    pass


def _unique(names: List[str]) -> List[str]:
    seen = []
    for name in names:
        name = name.strip()
        if name and name not in seen:
            seen.append(name)
    return seen


class HierarchyService:
    """
    Ações administrativas sobre Supervisores Gerais, Supervisores de Área
    e as localidades vinculadas. Ao criar um supervisor, o papel do
    perfil é promovido junto.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    # --- leitura ---

    def _geral_with_tree(self):
        return select(SupervisorGeral).options(
            selectinload(SupervisorGeral.profile),
            selectinload(SupervisorGeral.supervisores_area).selectinload(SupervisorArea.profile),
            selectinload(SupervisorGeral.supervisores_area).selectinload(SupervisorArea.localidades),
        ).execution_options(populate_existing=True)

    def _area_with_localidades(self):
        return (
            select(SupervisorArea)
            .options(selectinload(SupervisorArea.profile), selectinload(SupervisorArea.localidades))
            .execution_options(populate_existing=True)
        )

    async def get_full_hierarchy(self) -> List[SupervisorGeral]:
        result = await self.db.execute(self._geral_with_tree().order_by(SupervisorGeral.nome))
        return list(result.scalars().all())

    async def get_my_hierarchy(self, profile_id: str) -> SupervisorGeral:
        result = await self.db.execute(self._geral_with_tree().where(SupervisorGeral.profile_id == profile_id))
        node = result.scalars().first()
        if node is None:
            raise HierarchyNotFoundError(f"Nenhum supervisor geral vinculado ao perfil {profile_id}")
        return node

    async def get_supervisor_geral(self, geral_id: str) -> SupervisorGeral:
        result = await self.db.execute(self._geral_with_tree().where(SupervisorGeral.id == geral_id))
        node = result.scalars().first()
        if node is None:
            raise HierarchyNotFoundError(f"Supervisor geral {geral_id} não encontrado")
        return node

    async def get_supervisor_area(self, area_id: str) -> SupervisorArea:
        result = await self.db.execute(self._area_with_localidades().where(SupervisorArea.id == area_id))
        node = result.scalars().first()
        if node is None:
            raise HierarchyNotFoundError(f"Supervisor de área {area_id} não encontrado")
        return node

    async def get_area_by_profile(self, profile_id: str) -> SupervisorArea:
        result = await self.db.execute(self._area_with_localidades().where(SupervisorArea.profile_id == profile_id))
        node = result.scalars().first()
        if node is None:
            raise HierarchyNotFoundError(f"Nenhum supervisor de área vinculado ao perfil {profile_id}")
        return node

    # --- supervisores gerais ---

    async def create_supervisor_geral(self, form: SupervisorGeralCreate) -> SupervisorGeral:
        profile = await self._get_profile(form.profile_id)

        node = SupervisorGeral(profile_id=profile.id, nome=form.nome)
        self.db.add(node)
        profile.role = UserRole.SUPERVISOR_GERAL.value

        await self._flush(f"criar supervisor geral '{form.nome}'")
        logger.info(f"Supervisor geral '{form.nome}' criado para o perfil {profile.id}.")
        return await self.get_supervisor_geral(node.id)

    async def delete_supervisor_geral(self, geral_id: str) -> None:
        node = await self.get_supervisor_geral(geral_id)
        await self.db.delete(node)
        await self._flush(f"excluir supervisor geral {geral_id}")
        logger.info(f"Supervisor geral {geral_id} excluído (com seus supervisores de área).")

    # --- supervisores de área ---

    async def create_supervisor_area(self, form: SupervisorAreaCreate) -> SupervisorArea:
        profile = await self._get_profile(form.profile_id)
        await self.get_supervisor_geral(form.supervisor_geral_id)

        node = SupervisorArea(
            profile_id=profile.id,
            supervisor_geral_id=form.supervisor_geral_id,
            nome=form.nome,
        )
        node.localidades = [LocalidadeSupervisor(localidade=name) for name in _unique(form.localidades)]
        self.db.add(node)
        profile.role = UserRole.SUPERVISOR_AREA.value

        await self._flush(f"criar supervisor de área '{form.nome}'")
        logger.info(
            f"Supervisor de área '{form.nome}' criado com {len(node.localidades)} localidade(s)."
        )
        return await self.get_supervisor_area(node.id)

    async def update_supervisor_area(self, area_id: str, form: SupervisorAreaUpdate) -> SupervisorArea:
        node = await self.get_supervisor_area(area_id)

        if form.supervisor_geral_id is not None:
            await self.get_supervisor_geral(form.supervisor_geral_id)
            node.supervisor_geral_id = form.supervisor_geral_id
        if form.nome is not None:
            node.nome = form.nome
        node.updated_at = datetime.now(timezone.utc)

        await self._flush(f"atualizar supervisor de área {area_id}")
        return node

    async def delete_supervisor_area(self, area_id: str) -> None:
        node = await self.get_supervisor_area(area_id)
        await self.db.delete(node)
        await self._flush(f"excluir supervisor de área {area_id}")
        logger.info(f"Supervisor de área {area_id} excluído.")

    # --- localidades ---

    async def add_localidade(self, area_id: str, localidade: str) -> LocalidadeSupervisor:
        node = await self.get_supervisor_area(area_id)

        link = LocalidadeSupervisor(localidade=localidade.strip())
        node.localidades.append(link)
        await self._flush(f"vincular localidade '{localidade}'")
        return link

    async def remove_localidade(self, area_id: str, localidade: str) -> bool:
        node = await self.get_supervisor_area(area_id)

        links = [link for link in node.localidades if link.localidade == localidade]
        if not links:
            return False
        for link in links:
            node.localidades.remove(link)
        await self._flush(f"desvincular localidade '{localidade}'")
        return True

    async def replace_localidades(self, area_id: str, localidades: List[str]) -> SupervisorArea:
        """Substitui todas as localidades (apaga tudo e insere de novo, sem diff)."""
        node = await self.get_supervisor_area(area_id)

        # dois flushes: os DELETEs precisam ir antes dos INSERTs (uq_supervisor_localidade)
        node.localidades.clear()
        await self._flush(f"remover localidades antigas de {area_id}")

        names = _unique(localidades)
        node.localidades.extend(LocalidadeSupervisor(localidade=name) for name in names)
        await self._flush(f"inserir novas localidades de {area_id}")
        logger.info(f"Localidades do supervisor de área {area_id} substituídas ({len(names)}).")

        return await self.get_supervisor_area(area_id)

    # --- auxiliares ---

    async def _get_profile(self, profile_id: str) -> Profile:
        profile = await self.db.get(Profile, profile_id)
        if profile is None:
            raise HierarchyNotFoundError(f"Perfil {profile_id} não encontrado")
        return profile

    async def _flush(self, action: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Conflito ao {action}: {e.orig}")
            raise HierarchyConflictError(f"Conflito ao {action}") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Erro ao {action}: {e}")
            raise HierarchyServiceError(f"Falha ao {action}: {e}") from e
