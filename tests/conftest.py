import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

# Point the service at a throwaway temp root BEFORE any fontpack imports.
os.environ["TMP_DIR"] = tempfile.mkdtemp(prefix="fontpack-tests-")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from tests.support import FakeUpstream, SyncASGIClient  # noqa: E402


@pytest.fixture()
def upstream():
    return FakeUpstream()


@pytest.fixture()
def tmp_root():
    from fontpack.config import settings

    root = Path(settings.tmp_dir)
    root.mkdir(parents=True, exist_ok=True)
    return root


@pytest.fixture()
def client(upstream, tmp_root):
    """ASGI test client whose outbound HTTP goes to ``upstream``."""
    from fontpack.main import app
    from fontpack.web.download import get_http_client

    async def override_get_http_client():
        async with upstream.client() as http_client:
            yield http_client

    app.dependency_overrides[get_http_client] = override_get_http_client

    @asynccontextmanager
    async def _test_lifespan(_app):
        yield

    original_lifespan = app.router.lifespan_context
    app.router.lifespan_context = _test_lifespan
    test_client = SyncASGIClient(app)
    try:
        yield test_client
    finally:
        test_client.close()
        app.router.lifespan_context = original_lifespan
        app.dependency_overrides.clear()
