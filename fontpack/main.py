from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from fontpack import __version__
from fontpack.api.health import router as health_router
from fontpack.config import settings
from fontpack.errors import register_error_handlers
from fontpack.logging import configure_logging
from fontpack.observability import ObservabilityMiddleware
from fontpack.services.font_pack_service import sweep_stale
from fontpack.web.download import router as download_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.tmp_dir).mkdir(parents=True, exist_ok=True)
    sweep_stale(settings.tmp_dir, settings.tmp_max_age_seconds)
    yield


app = FastAPI(title="fontpack", version=__version__, lifespan=lifespan)

configure_logging()
app.add_middleware(ObservabilityMiddleware)
register_error_handlers(app)

app.include_router(health_router)
app.include_router(download_router)

app.mount(
    "/assets",
    StaticFiles(directory=Path(settings.public_dir) / "assets", check_dir=False),
    name="assets",
)


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
