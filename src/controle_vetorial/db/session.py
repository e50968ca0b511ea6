import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import text

from controle_vetorial.core.config import settings

logger = logging.getLogger(__name__)


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
)


AsyncSessionFactory = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

async def get_db() -> AsyncGenerator[AsyncSession, None]:

    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error(f"Erro na sessão do banco de dados: {e}")
            raise
        finally:
            await session.close()

@asynccontextmanager
async def lifespan(app):

    logger.info("Iniciando a aplicação...")


    try:
        async with engine.connect() as conn:

            await conn.execute(text("SELECT 1"))
        logger.info("Conexão com o banco de dados estabelecida com sucesso!")
    except Exception as e:
        logger.error(f"Não foi possível conectar ao banco de dados no startup: {e}")

    yield


    logger.info("Finalizando a aplicação...")

    await engine.dispose()
    logger.info("Conexão com DB fechada.")
