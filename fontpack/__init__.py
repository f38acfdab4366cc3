"""Self-hosted web font packs: fetch a provider stylesheet, download its fonts, zip them."""

__version__ = "0.1.0"
