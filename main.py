"""
Brand DNA Service - Entry point.

Serviço de gerenciamento do Brand DNA do tenant (cores, tipografia,
espaçamento, assets e estratégia), exposto via MCP (Model Context Protocol).
"""

import contextlib
import logging

from starlette.applications import Starlette
from starlette.routing import Mount

from brand_dna.core.config import get_settings
from brand_dna.mcp.server import build_mcp
from brand_dna.services import BrandStore

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

store = BrandStore()
mcp = build_mcp(store)


@contextlib.asynccontextmanager
async def lifespan(_app: Starlette):
    """Application lifespan handler."""
    logger.info("Starting Brand DNA Service (storage=%s)...", settings.BRAND_STORAGE_URL)
    await store.start()
    if store.error:
        logger.error("Brand não carregado: %s", store.error)
    async with mcp.session_manager.run():
        yield
    logger.info("Shutting down Brand DNA Service...")
    await store.close()


app = Starlette(
    routes=[Mount("/", app=mcp.streamable_http_app())],
    lifespan=lifespan,
)


def main() -> None:
    """Run the server."""
    import uvicorn

    logger.info("Starting %s at 0.0.0.0:%s", settings.SERVICE_NAME, settings.PORT)
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
