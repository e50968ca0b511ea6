import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import text

from controle_vetorial.db.session import get_db

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get(
    "/health",
    summary="Verifica a saúde da aplicação e do DB"
)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Retorna o status da aplicação:
    - API: (se 200 OK, está rodando)
    - DB: Verifica a conexão
    """

    try:
        await db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception as e:
        logger.error(f"Health check: Falha na conexão com DB: {e}")
        db_status = "error"

    return {
        "status": "ok",
        "database_status": db_status,
    }
