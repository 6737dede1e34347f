"""Podman engine adapter.

Podman serves a Docker-compatible API on its service socket, so the
translation is shared with the Docker adapter. Only the engine identity,
the default socket and the credential file locations differ.
"""

from __future__ import annotations

import os
from typing import Any

from crtkit.runtime.base import RuntimeKind
from crtkit.runtime.credentials import CredentialResolver, find_podman_config
from crtkit.runtime.docker import DockerAdapter

ROOTFUL_SOCKET = "unix:///run/podman/podman.sock"


def default_podman_socket() -> str:
    """Get the Podman API socket URL.

    Uses CONTAINER_HOST when set, else the rootless socket under
    XDG_RUNTIME_DIR when it exists, else the rootful socket.
    """
    container_host = os.environ.get("CONTAINER_HOST")
    if container_host:
        return container_host

    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        rootless = os.path.join(runtime_dir, "podman", "podman.sock")
        if os.path.exists(rootless):
            return f"unix://{rootless}"
    return ROOTFUL_SOCKET


class PodmanAdapter(DockerAdapter):
    """Runtime adapter for Podman's Docker-compatible API."""

    kind = RuntimeKind.PODMAN
    runtime_name = "podman"

    def __init__(
        self,
        client: Any = None,
        base_url: str | None = None,
        timeout: int = 60,
        resolver: CredentialResolver | None = None,
    ) -> None:
        super().__init__(
            client=client,
            base_url=base_url or default_podman_socket(),
            timeout=timeout,
            resolver=resolver,
        )
        self._engine_version: str | None = None

    def _default_resolver(self) -> CredentialResolver:
        return CredentialResolver(self.kind, default_config_finder=find_podman_config)

    def _runtime_version(self, attrs: dict[str, Any]) -> str:
        # Podman leaves DockerVersion empty; report the service version instead
        if self._engine_version is None:
            self._engine_version = self.client.api.version().get("Version", "")
        return self._engine_version
