"""Data models for crtkit.

All models are Pydantic BaseModel with frozen=True for immutability.
"""

from crtkit.models.image import (
    BasicImageInfo,
    HealthConfig,
    ImageHistory,
    ImageIdentity,
    ImageInfo,
    RunConfig,
)
from crtkit.models.common import ErrorInfo

__all__ = [
    # Image
    "BasicImageInfo",
    "HealthConfig",
    "ImageHistory",
    "ImageIdentity",
    "ImageInfo",
    "RunConfig",
    # Common
    "ErrorInfo",
]
