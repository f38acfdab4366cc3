from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path", "status"],
)
REQUEST_ERRORS = Counter(
    "http_request_errors_total",
    "Total HTTP 5xx responses",
    ["method", "path", "status"],
)

FONT_DOWNLOADS = Counter(
    "fontpack_font_downloads_total",
    "Font file downloads",
    ["status"],
)
FONT_PACK_BUILDS = Counter(
    "fontpack_builds_total",
    "Font pack builds by outcome",
    ["outcome"],
)
ARCHIVE_SIZE = Histogram(
    "fontpack_archive_size_bytes",
    "Size of produced font pack archives",
    buckets=(64_000, 256_000, 1_000_000, 4_000_000, 16_000_000, 64_000_000),
)


def observe_download(status: str) -> None:
    FONT_DOWNLOADS.labels(status=status).inc()


def observe_build(outcome: str) -> None:
    FONT_PACK_BUILDS.labels(outcome=outcome).inc()
