"""crtkit: one interface to container images across runtimes.

This package normalizes container engine APIs into a single,
engine-neutral data model and call contract:

- **Neutral Image Model**: identity, listings, inspection, history
- **Runtime adapters**: Docker and Podman behind one protocol
- **Credential resolution**: explicit credentials, credential files,
  credential helpers and the engine's default config, in that order

Usage:
    from crtkit import PullImageOptions, new_runtime_adapter

    adapter = new_runtime_adapter("docker")

    for name, info in adapter.list_images().items():
        print(name, info.id, info.size)

    info = adapter.inspect_image("nginx:latest")
    if info.config and info.config.healthcheck:
        print(info.config.healthcheck.test)

    auth = adapter.get_registry_auth_config("", "", "", "ghcr.io")
    adapter.pull_image(PullImageOptions(repository="ghcr.io/org/app", tag="1.0"), auth)

CLI:
    crtkit images [--runtime docker] [--filter nginx]
    crtkit inspect <image>
    crtkit history <image>
    crtkit pull <image>
    crtkit save <image> <path> [--extract]
"""

__version__ = "0.1.0"

# Models
from crtkit.models.image import (
    BasicImageInfo,
    HealthConfig,
    ImageHistory,
    ImageIdentity,
    ImageInfo,
    RunConfig,
)

# Runtime
from crtkit.runtime.base import AuthConfig, PullImageOptions, RuntimeAdapter, RuntimeKind
from crtkit.runtime.credentials import CredentialResolver
from crtkit.runtime.docker import DockerAdapter
from crtkit.runtime.podman import PodmanAdapter
from crtkit.runtime.factory import new_runtime_adapter

# Errors
from crtkit.utils.errors import (
    BadParamError,
    ConfigurationError,
    CrtError,
    MissingAuthConfigError,
    NotFoundError,
    ProviderError,
)

__all__ = [
    # Version
    "__version__",
    # Models
    "BasicImageInfo",
    "HealthConfig",
    "ImageHistory",
    "ImageIdentity",
    "ImageInfo",
    "RunConfig",
    # Runtime
    "AuthConfig",
    "PullImageOptions",
    "RuntimeAdapter",
    "RuntimeKind",
    "CredentialResolver",
    "DockerAdapter",
    "PodmanAdapter",
    "new_runtime_adapter",
    # Errors
    "BadParamError",
    "ConfigurationError",
    "CrtError",
    "MissingAuthConfigError",
    "NotFoundError",
    "ProviderError",
]
