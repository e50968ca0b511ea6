import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from controle_vetorial.models.models import Report
from controle_vetorial.schemas.reports import ReportCreate, ReportPayload, ReportPublic
from controle_vetorial.services.access import AccessResolver, ReportQuery, scope_query

logger = logging.getLogger(__name__)


class ReportStoreError(Exception):

    pass


class ReportNotFoundError(ReportStoreError):

    pass


def _payload_of(row: Report) -> ReportPayload:
    try:
        return ReportPayload.model_validate(row.content or {})
    except ValidationError as e:
        # conteúdo gravado fora da API; o boletim entra com contribuição zero
        logger.warning(f"Conteúdo inválido no boletim {row.id}; contagens ignoradas: {e.errors()}")
        return ReportPayload()


def to_public(row: Report) -> ReportPublic:
    return ReportPublic(
        id=row.id,
        user_id=row.user_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        municipio=row.municipio,
        localidade=row.localidade,
        categoria_localidade=row.categoria_localidade or "",
        semana_epidemiologica=row.semana_epidemiologica,
        ciclo=row.ciclo,
        ano=row.ano,
        data_inicio=row.data_inicio,
        data_fim=row.data_fim,
        concluido=bool(row.concluido),
        data=_payload_of(row),
    )


class ReportStore:
    """Acesso à tabela `reports`. Não aplica escopo de acesso."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def query(self, filters: ReportQuery) -> List[ReportPublic]:
        stmt = select(Report).order_by(desc(Report.created_at))

        if filters.localities is not None:
            stmt = stmt.where(Report.localidade.in_(filters.localities))
        if filters.weeks is not None:
            stmt = stmt.where(Report.semana_epidemiologica.in_(filters.weeks))
        if filters.cycles is not None:
            stmt = stmt.where(Report.ciclo.in_(filters.cycles))

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Erro ao consultar boletins com filtros {filters}: {e}")
            raise ReportStoreError(f"Falha na consulta de boletins: {e}") from e

        return [to_public(row) for row in result.scalars().all()]

    async def _get_row(self, report_id: str) -> Report:
        row = await self.db.get(Report, report_id)
        if row is None:
            raise ReportNotFoundError(f"Boletim {report_id} não encontrado")
        return row

    async def get(self, report_id: str) -> ReportPublic:
        return to_public(await self._get_row(report_id))

    async def create(self, report: ReportCreate, user_id: Optional[str] = None) -> ReportPublic:
        row = Report(
            user_id=user_id,
            municipio=report.municipio,
            localidade=report.localidade,
            categoria_localidade=report.categoria_localidade,
            semana_epidemiologica=report.semana_epidemiologica,
            ciclo=report.ciclo,
            ano=report.ano,
            data_inicio=report.data_inicio,
            data_fim=report.data_fim,
            concluido=report.concluido,
            content=report.data.model_dump(by_alias=True),
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(row)
        await self._flush("inserir")
        logger.info(f"Boletim {row.id} criado ({row.localidade}, {row.semana_epidemiologica}).")
        return to_public(row)

    async def update(self, report_id: str, report: ReportCreate) -> ReportPublic:
        row = await self._get_row(report_id)

        # identidade preservada; conteúdo substituído por inteiro
        row.municipio = report.municipio
        row.localidade = report.localidade
        row.categoria_localidade = report.categoria_localidade
        row.semana_epidemiologica = report.semana_epidemiologica
        row.ciclo = report.ciclo
        row.ano = report.ano
        row.data_inicio = report.data_inicio
        row.data_fim = report.data_fim
        row.concluido = report.concluido
        row.content = report.data.model_dump(by_alias=True)
        row.updated_at = datetime.now(timezone.utc)

        await self._flush("atualizar")
        logger.info(f"Boletim {report_id} atualizado.")
        return to_public(row)

    async def delete(self, report_id: str) -> None:
        row = await self._get_row(report_id)
        await self.db.delete(row)
        await self._flush("excluir")
        logger.info(f"Boletim {report_id} excluído.")

    async def _flush(self, action: str) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Erro ao {action} boletim: {e}")
            raise ReportStoreError(f"Falha ao {action} boletim: {e}") from e


class ScopedReportService:
    """Busca boletins já restritos ao escopo do usuário."""

    def __init__(self, resolver: AccessResolver, store: ReportStore):
        self.resolver = resolver
        self.store = store

    async def fetch(self, user_id: str, role, requested: ReportQuery) -> List[ReportPublic]:
        access = await self.resolver.resolve_accessible_localities(user_id, role)
        effective = scope_query(access, requested)
        if effective is None:
            logger.info(f"Escopo vazio para o usuário {user_id}; nenhuma consulta realizada.")
            return []
        return await self.store.query(effective)
