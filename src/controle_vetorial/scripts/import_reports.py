
import argparse
import asyncio
import json
import logging
import sys
import uuid
from typing import Any, Dict, List

import pandas as pd
from pydantic import ValidationError
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import OperationalError

from controle_vetorial.core.config import settings
from controle_vetorial.db.session import AsyncSessionFactory
from controle_vetorial.models.models import Report
from controle_vetorial.schemas.reports import ReportCreate


logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("import_reports")


# cabeçalhos do export (camelCase) -> colunas da tabela
COLUMN_RENAMES = {
    "semanaEpidemiologica": "semana_epidemiologica",
    "categoriaLocalidade": "categoria_localidade",
    "dataInicio": "data_inicio",
    "dataFim": "data_fim",
}

HEADER_FIELDS = (
    "municipio", "localidade", "categoria_localidade", "semana_epidemiologica",
    "ciclo", "ano", "data_inicio", "data_fim", "concluido",
)


def load_export(path: str) -> pd.DataFrame:
    """
    Lê o export JSON (`{"dados": [...]}` ou lista de boletins) ou um CSV
    com colunas pontuadas (`data.imoveis.residencias`).
    """
    logger.info(f"Lendo arquivo de export {path}...")
    if path.lower().endswith(".json"):
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        records = raw.get("dados", []) if isinstance(raw, dict) else raw
        df = pd.json_normalize(records)
    else:
        df = pd.read_csv(path)
    logger.info(f"Total de {len(df)} boletins lidos.")
    return df


def _unflatten(flat: Dict[str, Any]) -> Dict[str, Any]:
    nested: Dict[str, Any] = {}
    for dotted, value in flat.items():
        parts = dotted.split(".")
        node = nested
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return nested


def prepare_data(df: pd.DataFrame) -> List[dict]:
    """Valida cada linha e devolve dicts prontos para a tabela `reports`."""
    logger.info("Preparando dados (renomeando colunas e validando boletins)...")

    df_clean = df.copy()
    df_clean.columns = [
        COLUMN_RENAMES.get(col, col) if not col.startswith("data.") else col
        for col in df_clean.columns
    ]
    if "id" in df_clean.columns:
        df_clean.drop_duplicates(subset=["id"], inplace=True)

    rows = []
    skipped = 0
    for record in df_clean.to_dict("records"):
        # células vazias do CSV/JSON viram ausência (contribuição zero)
        present = {key: _to_python(value) for key, value in record.items() if not _is_missing(value)}
        nested = _unflatten(present)
        report_id = str(nested.pop("id", "") or uuid.uuid4())

        header = {field: nested[field] for field in HEADER_FIELDS if field in nested}
        payload = nested.get("data", {})
        # no export do painel as datas ficam dentro de `data`
        header.setdefault("data_inicio", payload.get("dataInicio") or None)
        header.setdefault("data_fim", payload.get("dataFim") or None)
        if "categoria_localidade" in header:
            category = header["categoria_localidade"]
            # coluna numérica com células vazias chega como float (1.0)
            if isinstance(category, float) and category.is_integer():
                category = int(category)
            header["categoria_localidade"] = str(category)
        try:
            report = ReportCreate(**header, data=payload)
        except ValidationError as e:
            skipped += 1
            logger.warning(f"Boletim {report_id} ignorado por dados inválidos: {e.errors()}")
            continue

        rows.append({
            "id": report_id,
            "municipio": report.municipio,
            "localidade": report.localidade,
            "categoria_localidade": report.categoria_localidade,
            "semana_epidemiologica": report.semana_epidemiologica,
            "ciclo": report.ciclo,
            "ano": report.ano,
            "data_inicio": report.data_inicio,
            "data_fim": report.data_fim,
            "concluido": report.concluido,
            "content": report.data.model_dump(by_alias=True),
        })

    logger.info(f"Total de {len(rows)} boletins válidos ({skipped} ignorados).")
    return rows


def _is_missing(value: Any) -> bool:
    if isinstance(value, (list, dict)):
        return False
    return bool(pd.isna(value))


def _to_python(value: Any) -> Any:
    # escalares numpy (int64, bool_) não passam na validação estrita de int/bool
    return value.item() if hasattr(value, "item") else value


async def import_reports(rows: List[dict], batch_size: int = settings.IMPORT_BATCH_SIZE) -> int:

    if not rows:
        logger.warning("Nenhum boletim para inserir.")
        return 0

    inserted = 0
    async with AsyncSessionFactory() as session:
        try:
            for start in range(0, len(rows), batch_size):
                batch = rows[start:start + batch_size]
                logger.info(f"Inserindo lote de {len(batch)} boletins...")

                stmt = pg_insert(Report).values(batch)
                # reimportar o mesmo arquivo não duplica boletins
                stmt = stmt.on_conflict_do_nothing(index_elements=['id'])
                result = await session.execute(stmt)
                inserted += result.rowcount or 0

            await session.commit()
            logger.info(f"Importação concluída. {inserted} boletins novos.")
            return inserted

        except OperationalError as e:
            logger.error(f"Erro de conexão com o banco. Verifique a DATABASE_URL e se o DB está rodando. Erro: {e}")
            await session.rollback()
            raise
        except Exception as e:
            logger.error(f"Erro durante a inserção no banco: {e}")
            await session.rollback()
            raise


async def main(path: str):

    try:
        df = load_export(path)
        rows = prepare_data(df)
        await import_reports(rows)
    except Exception as e:
        logger.error(f"Falha na importação de boletins: {e}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":

    parser = argparse.ArgumentParser(description="Importa boletins de um export JSON ou CSV.")
    parser.add_argument("path", help="Arquivo .json ou .csv exportado pelo painel")
    args = parser.parse_args()

    if not settings.DATABASE_URL:
        logger.error("DATABASE_URL não encontrada. Verifique seu arquivo .env")
        sys.exit(1)

    asyncio.run(main(args.path))
