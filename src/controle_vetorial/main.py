from fastapi import FastAPI
from controle_vetorial.core.config import settings
from controle_vetorial.db.session import lifespan
from controle_vetorial.api.api import api_router
import logging


logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="API de Controle Vetorial",
    description="Boletins de campo do controle da dengue: consolidação e escopo por supervisão",
    version="0.1.0",
    lifespan=lifespan
)


app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def read_root():
    return {"message": "API de Controle Vetorial no ar! Acesse /docs para a documentação."}
