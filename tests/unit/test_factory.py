"""Unit tests for runtime adapter selection."""

from unittest.mock import patch

import pytest

from crtkit.runtime.base import RuntimeKind
from crtkit.runtime.docker import DockerAdapter
from crtkit.runtime.factory import new_runtime_adapter, parse_runtime_kind
from crtkit.runtime.podman import PodmanAdapter
from crtkit.utils.config import CrtkitConfig, RuntimeSettings
from crtkit.utils.errors import ConfigurationError, ProviderError


@pytest.fixture
def config() -> CrtkitConfig:
    """Configuration with explicit engine endpoints."""
    return CrtkitConfig(
        runtime=RuntimeSettings(
            kind="auto",
            docker_host="unix:///tmp/docker.sock",
            podman_socket="unix:///tmp/podman.sock",
            timeout=15,
        )
    )


class TestParseRuntimeKind:
    """Tests for parse_runtime_kind."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("docker", RuntimeKind.DOCKER),
            ("Podman", RuntimeKind.PODMAN),
            (" auto ", RuntimeKind.AUTO),
            (RuntimeKind.CONTAINERD, RuntimeKind.CONTAINERD),
        ],
    )
    def test_known(self, value, expected):
        """Test known names parse."""
        assert parse_runtime_kind(value) == expected

    def test_unknown(self):
        """Test unknown names raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            parse_runtime_kind("rkt")
        assert exc_info.value.details["config_key"] == "runtime.kind"


class TestNewRuntimeAdapter:
    """Tests for new_runtime_adapter."""

    def test_docker(self, config):
        """Test docker builds a DockerAdapter from settings."""
        adapter = new_runtime_adapter("docker", config)

        assert type(adapter) is DockerAdapter
        assert adapter._base_url == "unix:///tmp/docker.sock"
        assert adapter._timeout == 15

    def test_podman(self, config):
        """Test podman builds a PodmanAdapter from settings."""
        adapter = new_runtime_adapter(RuntimeKind.PODMAN, config)

        assert isinstance(adapter, PodmanAdapter)
        assert adapter._base_url == "unix:///tmp/podman.sock"

    def test_kind_from_config(self, config):
        """Test the configured kind is used when none is given."""
        docker_config = config.model_copy(update={"runtime": config.runtime.model_copy(update={"kind": "docker"})})
        assert type(new_runtime_adapter(config=docker_config)) is DockerAdapter

    def test_containerd_unsupported(self, config):
        """Test containerd is rejected."""
        with pytest.raises(ConfigurationError):
            new_runtime_adapter("containerd", config)

    def test_unknown_kind(self, config):
        """Test an unknown kind is rejected."""
        with pytest.raises(ConfigurationError):
            new_runtime_adapter("lxc", config)

    def test_auto_prefers_docker(self, config):
        """Test auto picks Docker when it answers."""
        with patch.object(DockerAdapter, "ping", return_value=True):
            adapter = new_runtime_adapter("auto", config)
        assert type(adapter) is DockerAdapter

    def test_auto_falls_back_to_podman(self, config):
        """Test auto picks Podman when Docker is unreachable."""

        def ping(adapter):
            if adapter.runtime_name == "docker":
                raise ProviderError("ping", "connection refused")
            return True

        with patch.object(DockerAdapter, "ping", autospec=True, side_effect=ping):
            adapter = new_runtime_adapter("auto", config)
        assert isinstance(adapter, PodmanAdapter)

    def test_auto_without_engines(self, config):
        """Test auto fails when no engine answers."""
        with patch.object(DockerAdapter, "ping", side_effect=ProviderError("ping", "connection refused")):
            with pytest.raises(ProviderError) as exc_info:
                new_runtime_adapter("auto", config)

        assert exc_info.value.operation == "detect_runtime"
        assert "docker" in str(exc_info.value)
        assert "podman" in str(exc_info.value)
