"""Runtime adapter selection."""

from __future__ import annotations

from crtkit.runtime.base import RuntimeAdapter, RuntimeKind
from crtkit.runtime.docker import DockerAdapter
from crtkit.runtime.podman import PodmanAdapter
from crtkit.utils.config import CrtkitConfig, get_config
from crtkit.utils.errors import ConfigurationError, ProviderError
from crtkit.utils.logging import get_logger

logger = get_logger(__name__)


def parse_runtime_kind(value: str | RuntimeKind) -> RuntimeKind:
    """Parse a runtime kind name.

    Raises:
        ConfigurationError: If the name is not a known runtime
    """
    if isinstance(value, RuntimeKind):
        return value
    try:
        return RuntimeKind(value.strip().lower())
    except ValueError:
        choices = ", ".join(kind.value for kind in RuntimeKind)
        raise ConfigurationError(
            f"Unknown runtime '{value}' (expected one of: {choices})",
            config_key="runtime.kind",
        )


def new_runtime_adapter(
    kind: str | RuntimeKind | None = None,
    config: CrtkitConfig | None = None,
) -> RuntimeAdapter:
    """Create the adapter for a runtime kind.

    Args:
        kind: Runtime to use; the configured ``runtime.kind`` when None
        config: Configuration; the global configuration when None

    Returns:
        Adapter for the selected engine

    Raises:
        ConfigurationError: If the runtime is unknown or unsupported
        ProviderError: If ``auto`` finds no reachable engine
    """
    config = config or get_config()
    settings = config.runtime
    runtime = parse_runtime_kind(kind or settings.kind)

    if runtime == RuntimeKind.DOCKER:
        return DockerAdapter(base_url=settings.docker_host, timeout=settings.timeout)
    if runtime == RuntimeKind.PODMAN:
        return PodmanAdapter(base_url=settings.podman_socket, timeout=settings.timeout)
    if runtime == RuntimeKind.CONTAINERD:
        raise ConfigurationError(
            "The containerd runtime is not supported; use docker or podman",
            config_key="runtime.kind",
        )
    return _detect_runtime(config)


def _detect_runtime(config: CrtkitConfig) -> RuntimeAdapter:
    settings = config.runtime
    candidates = [
        DockerAdapter(base_url=settings.docker_host, timeout=settings.timeout),
        PodmanAdapter(base_url=settings.podman_socket, timeout=settings.timeout),
    ]

    failures = []
    for adapter in candidates:
        try:
            adapter.ping()
        except ProviderError as e:
            logger.debug("Runtime %s unavailable: %s", adapter.runtime_name, e)
            failures.append(f"{adapter.runtime_name}: {e.message}")
            adapter.close()
            continue
        logger.debug("Using runtime %s", adapter.runtime_name)
        return adapter

    raise ProviderError("detect_runtime", "no container runtime available (" + "; ".join(failures) + ")")
