import logging
from contextlib import asynccontextmanager
from logging.config import dictConfig

import yaml
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orghub.core.version import __version__
from orghub.core.config import get_settings
from orghub.core.db.engine import init_db
from orghub.core.features.abac.router import router as abac_router
from orghub.core.features.monitoring.router import router as monitoring_router
from orghub.core.features.organizations.router import router as organizations_router

logger = logging.getLogger(__name__)
config = get_settings()
prefix = config.api_prefix


def configure_logging(path=None):
    """Apply a YAML dictConfig if one is configured and present."""
    path = path or config.log_config
    if path is None or not path.is_file():
        return False
    with open(path, "r") as stream:
        dictConfig(yaml.safe_load(stream))
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Application lifespan handler for startup/shutdown events."""
	logger.info("Starting orghub API server...")
	if config.create_tables_on_startup:
		await init_db()

	yield

	logger.info("Shutting down orghub API server...")


configure_logging()

app = FastAPI(
	title="orghub Organization Admin API",
	version=__version__,
	lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in (organizations_router, abac_router, monitoring_router):
    app.include_router(router, prefix=prefix)


@app.get(f"{prefix}/version", tags=["version"])
def get_version():
    return {"version": __version__}
