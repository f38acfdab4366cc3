"""Shared helpers for the test-suite: fake upstream provider and in-process ASGI client."""

import asyncio

import httpx

INTER_CSS = """\
/* latin */
@font-face {
  font-family: 'Inter';
  font-style: normal;
  font-weight: 400;
  font-display: swap;
  src: url(https://fonts.example.com/s/inter/v13/inter-400.woff2) format('woff2');
  unicode-range: U+0000-00FF;
}
/* latin */
@font-face {
  font-family: 'Inter';
  font-style: normal;
  font-weight: 700;
  font-display: swap;
  src: url(https://fonts.example.com/s/inter/v13/inter-700.woff2) format('woff2');
  unicode-range: U+0000-00FF;
}
/* latin */
@font-face {
  font-family: 'Roboto Mono';
  font-style: italic;
  font-weight: 400;
  src: url(https://fonts.example.com/s/robotomono/v23/robotomono-italic.ttf) format('truetype');
}
"""


class FakeUpstream:
    """Route table served through ``httpx.MockTransport``; unknown URLs answer 404."""

    def __init__(self):
        self.routes: dict[str, httpx.Response | type[httpx.TransportError]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, content: bytes | str = b"", status_code: int = 200) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.routes[url] = httpx.Response(status_code, content=content)

    def fail(self, url: str, exc_type: type[httpx.TransportError] = httpx.ConnectError) -> None:
        self.routes[url] = exc_type

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, content=b"not found")
        if isinstance(route, type):
            raise route("[Errno 111] Connection refused", request=request)
        return httpx.Response(route.status_code, content=route.content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), follow_redirects=True)

    def requested_urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]


def serve_inter(upstream: FakeUpstream, css_url: str) -> None:
    upstream.add(css_url, INTER_CSS)
    upstream.add("https://fonts.example.com/s/inter/v13/inter-400.woff2", b"wOF2-inter-400")
    upstream.add("https://fonts.example.com/s/inter/v13/inter-700.woff2", b"wOF2-inter-700")
    upstream.add("https://fonts.example.com/s/robotomono/v23/robotomono-italic.ttf", b"\x00\x01\x00\x00ttf")


class SyncASGIClient:
    def __init__(self, app):
        self._app = app

    async def _request(self, method: str, url: str, **kwargs):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self._app, raise_app_exceptions=False),
            base_url="http://testserver",
            follow_redirects=True,
        ) as client:
            return await client.request(method, url, **kwargs)

    def request(self, method: str, url: str, **kwargs):
        return asyncio.run(self._request(method, url, **kwargs))

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def close(self) -> None:
        return None


def run(coro):
    return asyncio.run(coro)


