"""
Configuração de testes e fixtures
"""
import os
from typing import AsyncGenerator, Dict

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

os.environ.setdefault('DATABASE_URL', 'sqlite+aiosqlite:///./test.db')

from controle_vetorial.main import app
from controle_vetorial.db.session import get_db
from controle_vetorial.models.models import Base, Profile

TEST_DATABASE_URL = os.environ['DATABASE_URL']


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Banco novo a cada teste"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP com a sessão de teste no lugar de get_db"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def profiles(db_session: AsyncSession) -> Dict[str, str]:
    """Perfis de cada papel; devolve nome -> id"""
    rows = {
        'admin': Profile(full_name='Ana Admin', role='admin'),
        'gestor': Profile(full_name='Gil Gestor', role='gestor'),
        'geral': Profile(full_name='Geraldo Geral', role='gestor'),
        'area_norte': Profile(full_name='Nara Norte', role='gestor'),
        'area_sul': Profile(full_name='Silvio Sul', role='gestor'),
        'orfao': Profile(full_name='Otto Sem Vinculo', role='supervisor_area'),
    }
    db_session.add_all(rows.values())
    await db_session.commit()
    return {name: profile.id for name, profile in rows.items()}