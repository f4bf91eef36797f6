"""Data types shared by the extraction engine, provider adapters and clients."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoint and credentials for a hosted model."""
    url: str
    key: str
    model: str


@dataclass(frozen=True)
class Attempt:
    """A failed extraction kept as feedback for the next prompt."""
    raw: str
    errors: str = ""


# (params, prompt_text, previous_attempts) -> raw model text
ProviderFunc = Callable[["ExtractionParams", str, List[Attempt]], str]


@dataclass
class ExtractionParams:
    input: str
    schema: Dict[str, Any]
    provider: Union[ProviderConfig, ProviderFunc]
    instructions: Optional[str] = None
    media_type: Optional[str] = None  # "image/png" etc. when input is base64 image data
    max_attempts: int = 1

    @property
    def is_image(self) -> bool:
        return bool(self.media_type and self.media_type.startswith("image/"))


@dataclass(frozen=True)
class Prompt:
    """Rendered prompt handed to a provider adapter."""
    text: str
    image_data: Optional[str] = None
    image_type: Optional[str] = None
    attempts: Tuple[Attempt, ...] = field(default_factory=tuple)

    @property
    def has_image(self) -> bool:
        return bool(self.image_data and self.image_type)


@dataclass(frozen=True)
class ExtractionResult:
    raw: str
    structured: Optional[Dict[str, Any]]
