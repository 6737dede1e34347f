"""Runtime adapter protocol and shared types."""

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from crtkit.models.image import BasicImageInfo, ImageHistory, ImageIdentity, ImageInfo


class RuntimeKind(str, Enum):
    """Supported container engines."""

    AUTO = "auto"
    DOCKER = "docker"
    PODMAN = "podman"
    CONTAINERD = "containerd"


class AuthConfig(BaseModel):
    """Registry credential handle.

    The payload is engine specific. Only the adapter kind named in
    ``runtime`` accepts the handle; callers obtain it from
    ``RuntimeAdapter.get_registry_auth_config`` and pass it back unchanged.
    """

    model_config = {"frozen": True}

    runtime: RuntimeKind = Field(description="Engine that produced the credential")
    payload: dict[str, str] = Field(default_factory=dict, repr=False)
    source: str = Field(default="explicit", description="Where the credential came from")


class PullImageOptions(BaseModel):
    """Options for pulling an image."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    repository: str = Field(description="Repository to pull (e.g. 'nginx', 'ghcr.io/org/app')")
    tag: str = Field(default="", description="Tag or digest; engine default when empty")
    output_stream: Any = Field(
        default=None,
        description="Optional text sink receiving progress records as JSON lines",
    )

    @property
    def reference(self) -> str:
        """Repository and tag joined the way engines print them."""
        if not self.tag:
            return self.repository
        separator = "@" if ":" in self.tag else ":"
        return f"{self.repository}{separator}{self.tag}"


@runtime_checkable
class RuntimeAdapter(Protocol):
    """Protocol for container engine adapters.

    An adapter wraps one engine client handle and translates the
    engine's responses and errors into crtkit models and exceptions.

    All operations are synchronous. Adapters do not retry; transient
    engine errors are raised to the caller immediately.

    Raises (every operation):
        NotFoundError: If the referenced image is absent
        BadParamError: If an argument is invalid or foreign
        ProviderError: For any other engine failure
    """

    kind: RuntimeKind
    runtime_name: str

    def has_image(self, image_ref: str) -> ImageIdentity:
        """Check that an image exists locally without pulling it."""
        ...

    def list_images_all(self) -> list[BasicImageInfo]:
        """List every local image, including intermediate ones."""
        ...

    def list_images(self, name_filter: str = "") -> dict[str, BasicImageInfo]:
        """List local images keyed by ``repo:tag``.

        Args:
            name_filter: Engine-side reference filter; empty lists all
        """
        ...

    def inspect_image(self, image_ref: str) -> ImageInfo:
        """Get full image details."""
        ...

    def pull_image(self, options: PullImageOptions, auth_config: AuthConfig | None = None) -> None:
        """Pull an image, anonymously when ``auth_config`` is None."""
        ...

    def get_registry_auth_config(
        self,
        account: str,
        secret: str,
        config_path: str,
        registry: str,
    ) -> AuthConfig:
        """Resolve registry credentials.

        Raises:
            MissingAuthConfigError: If no source has a credential
        """
        ...

    def save_image(
        self,
        image_ref: str,
        local_path: str,
        extract: bool = False,
        remove_orig: bool = False,
    ) -> None:
        """Save an image archive to ``local_path``."""
        ...

    def get_images_history(self, image_ref: str) -> list[ImageHistory]:
        """Get layer history in engine order."""
        ...
