"""Container runtime adapters."""

from crtkit.runtime.base import (
    AuthConfig,
    PullImageOptions,
    RuntimeAdapter,
    RuntimeKind,
)
from crtkit.runtime.credentials import CredentialResolver, registry_for_image
from crtkit.runtime.docker import DockerAdapter
from crtkit.runtime.podman import PodmanAdapter
from crtkit.runtime.factory import new_runtime_adapter, parse_runtime_kind

__all__ = [
    "AuthConfig",
    "PullImageOptions",
    "RuntimeAdapter",
    "RuntimeKind",
    "CredentialResolver",
    "registry_for_image",
    "DockerAdapter",
    "PodmanAdapter",
    "new_runtime_adapter",
    "parse_runtime_kind",
]
