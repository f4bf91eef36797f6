"""Request and response bodies of the l1m proxy service."""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StructuredRequest(BaseModel):
    """Body of ``POST /structured``.

    Exactly one of ``input`` (text or base64 image data) and ``url`` (a
    document the server downloads) must be given.
    """

    model_config = ConfigDict(populate_by_name=True)

    input: Optional[str] = None
    url: Optional[str] = None
    # "schema" shadows a BaseModel attribute, so the field is aliased
    json_schema: Dict[str, Any] = Field(alias="schema")
    instruction: Optional[str] = None
    type: Optional[str] = None

    @model_validator(mode="after")
    def check_content_source(self) -> "StructuredRequest":
        if (self.input is None) == (self.url is None):
            raise ValueError("Exactly one of input or url must be provided")
        return self


class StructuredResponse(BaseModel):
    data: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str
    timestamp: int
    uptime: float
