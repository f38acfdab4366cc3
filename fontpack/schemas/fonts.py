"""Font pack schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class FontFaceDescriptor(BaseModel):
    """One ``@font-face`` block as read from the provider stylesheet."""

    model_config = ConfigDict(frozen=True)

    family: str = ""
    style: str = ""
    weight: str = ""
    source_url: str = ""
    display: str = ""


class ReadinessRead(BaseModel):
    status: str
    timestamp: str
