"""Tests for the download route, landing page and informational routes."""

import io
import os
import time
import zipfile
from urllib.parse import unquote

import pytest
from starlette.requests import ClientDisconnect

from fontpack.web.download import TemporaryFileResponse
from tests.support import run, serve_inter

CSS_URL = "https://fonts.example.com/css2?family=Inter"


def _error_from(response) -> str:
    location = response.headers["location"]
    assert location.startswith("/?error=")
    return unquote(location.split("error=", 1)[1])


class TestDownload:
    def test_returns_archive_and_cleans_up(self, client, upstream, tmp_root):
        serve_inter(upstream, CSS_URL)
        before = set(tmp_root.iterdir())

        response = client.get("/download", params={"url": CSS_URL})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert "attachment" in response.headers["content-disposition"]
        assert "fonts.zip" in response.headers["content-disposition"]
        with zipfile.ZipFile(io.BytesIO(response.content)) as zf:
            names = zf.namelist()
        assert "fonts/css/fonts.css" in names
        assert "fonts/fonts/Inter/Inter-normal-400.woff2" in names
        assert set(tmp_root.iterdir()) == before

    def test_partial_download_failure_still_returns_archive(self, client, upstream, tmp_root):
        serve_inter(upstream, CSS_URL)
        upstream.add("https://fonts.example.com/s/inter/v13/inter-400.woff2", b"gone", status_code=404)

        response = client.get("/download", params={"url": CSS_URL})

        assert response.status_code == 200
        with zipfile.ZipFile(io.BytesIO(response.content)) as zf:
            assert "fonts/fonts/Inter/Inter-normal-400.woff2" not in zf.namelist()
            assert zf.read("fonts/css/fonts.css").decode().count("@font-face") == 3

    def test_no_fonts_redirects_with_message(self, client, upstream, tmp_root):
        upstream.add(CSS_URL, "/* nothing here */ body { margin: 0; }")
        before = set(tmp_root.iterdir())

        response = client.get("/download", params={"url": CSS_URL}, follow_redirects=False)

        assert response.status_code == 302
        assert _error_from(response) == "Invalid URL or No Fonts Found"
        assert set(tmp_root.iterdir()) == before

    def test_connection_refused_redirects(self, client, upstream, tmp_root):
        url = "http://127.0.0.1:9/css2?family=Inter"
        upstream.fail(url)
        before = set(tmp_root.iterdir())

        response = client.get("/download", params={"url": url}, follow_redirects=False)

        assert response.status_code == 302
        assert _error_from(response)
        assert set(tmp_root.iterdir()) == before

    def test_upstream_error_status_redirects(self, client, upstream):
        response = client.get("/download", params={"url": "https://fonts.example.com/missing.css"}, follow_redirects=False)
        assert response.status_code == 302
        assert "404" in _error_from(response)

    def test_invalid_url_redirects_without_fetching(self, client, upstream):
        response = client.get("/download", params={"url": "not a url"}, follow_redirects=False)
        assert response.status_code == 302
        assert _error_from(response) == "Invalid URL or No Fonts Found"
        assert upstream.requests == []

    def test_missing_url_redirects(self, client, upstream):
        response = client.get("/download", follow_redirects=False)
        assert response.status_code == 302
        assert upstream.requests == []

    def test_redirect_lands_on_index(self, client, upstream):
        response = client.get("/download", params={"url": "ftp://example.com/fonts.css"})
        assert response.status_code == 200
        assert response.url.path == "/"
        assert "error" in response.url.params


class TestPages:
    def test_index(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'id="error"' in response.text

    def test_robots(self, client):
        response = client.get("/robots.txt")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "User-agent" in response.text

    def test_sitemap(self, client):
        response = client.get("/sitemap.xml")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        assert "<urlset" in response.text

    def test_static_assets(self, client):
        response = client.get("/assets/js/main.js")
        assert response.status_code == 200
        assert "search-input" in response.text


class TestErrorPayload:
    def test_unknown_route_returns_error_payload(self, client):
        response = client.get("/no-such-route")
        assert response.status_code == 404
        assert response.json() == {"code": "http_404", "message": "Not Found", "details": None}

    def test_wrong_method_returns_error_payload(self, client):
        response = client.request("POST", "/download")
        assert response.status_code == 405
        assert response.json()["code"] == "http_405"
        assert "GET" in response.headers["allow"]

    def test_missing_asset_returns_error_payload(self, client):
        response = client.get("/assets/js/missing.js")
        assert response.status_code == 404
        assert response.json()["code"] == "http_404"


class TestTemporaryFileResponse:
    SCOPE = {"type": "http", "method": "GET", "path": "/download", "headers": []}

    def _artifacts(self, tmp_path):
        output_dir = tmp_path / "job"
        (output_dir / "css").mkdir(parents=True)
        archive = tmp_path / "job.zip"
        archive.write_bytes(b"PK" * 4096)
        return archive, output_dir

    def test_removes_artifacts_after_sending(self, tmp_path):
        archive, output_dir = self._artifacts(tmp_path)
        response = TemporaryFileResponse(archive, output_dir, media_type="application/zip")
        messages = []

        async def receive():
            return {"type": "http.request", "body": b"", "more_body": False}

        async def send(message):
            messages.append(message)

        run(response(self.SCOPE, receive, send))

        assert messages[0]["type"] == "http.response.start"
        assert b"".join(m.get("body", b"") for m in messages[1:]) == b"PK" * 4096
        assert not archive.exists()
        assert not output_dir.exists()

    def test_removes_artifacts_when_client_disconnects(self, tmp_path):
        archive, output_dir = self._artifacts(tmp_path)
        response = TemporaryFileResponse(archive, output_dir, media_type="application/zip")

        async def receive():
            return {"type": "http.disconnect"}

        async def send(message):
            if message["type"] == "http.response.body":
                raise OSError("Connection reset by peer")

        with pytest.raises((OSError, ClientDisconnect)):
            run(response(self.SCOPE, receive, send))

        assert not archive.exists()
        assert not output_dir.exists()


def test_lifespan_sweeps_stale_entries(tmp_root):
    from fontpack.main import app, lifespan

    stale = tmp_root / "stale-job"
    stale.mkdir()
    os.utime(stale, (time.time() - 86400, time.time() - 86400))

    async def _start_and_stop():
        async with lifespan(app):
            pass

    run(_start_and_stop())

    assert not stale.exists()
