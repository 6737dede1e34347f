"""Shared test fixtures for crtkit tests."""

import base64
import io
import json
import tarfile
from typing import Any
from unittest.mock import MagicMock

import pytest

from crtkit.runtime.base import RuntimeKind
from crtkit.runtime.credentials import CredentialResolver
from crtkit.runtime.docker import DockerAdapter

IMAGE_ID = "sha256:deadbeef" + "0" * 56


@pytest.fixture
def docker_inspect_attrs() -> dict[str, Any]:
    """Inspect response for an image with a full Config block."""
    return {
        "Id": IMAGE_ID,
        "RepoTags": ["app:latest", "registry.example.com:5000/team/app:1.4.2"],
        "RepoDigests": ["app@sha256:cafebabe" + "1" * 56],
        "Parent": "",
        "Comment": "",
        "Created": "2023-11-14T22:13:20.123456789Z",
        "DockerVersion": "24.0.7",
        "Author": "platform-team",
        "Architecture": "amd64",
        "Os": "linux",
        "Size": 1048576,
        "Config": {
            "Hostname": "",
            "Domainname": "",
            "User": "app",
            "AttachStdin": False,
            "AttachStdout": False,
            "AttachStderr": False,
            "ExposedPorts": {"8080/tcp": {}, "9090/tcp": {}},
            "Tty": False,
            "OpenStdin": False,
            "StdinOnce": False,
            "Env": ["PATH=/usr/local/bin:/usr/bin", "APP_ENV=production"],
            "Cmd": ["serve", "--port", "8080"],
            "Healthcheck": {
                "Test": ["CMD", "curl", "-f", "http://localhost:8080/health"],
                "Interval": 30000000000,
                "Timeout": 5000000000,
                "StartPeriod": 10000000000,
                "Retries": 3,
            },
            "ArgsEscaped": True,
            "Image": "",
            "Volumes": {"/data": {}},
            "WorkingDir": "/srv/app",
            "Entrypoint": ["/usr/local/bin/app"],
            "OnBuild": None,
            "Labels": {"org.opencontainers.image.version": "1.4.2"},
            "StopSignal": "SIGTERM",
        },
    }


@pytest.fixture
def docker_list_records() -> list[dict[str, Any]]:
    """Image listing with one tagged image."""
    return [
        {
            "Id": IMAGE_ID,
            "ParentId": "",
            "RepoTags": ["app:latest"],
            "RepoDigests": [],
            "Created": 1700000000,
            "Size": 1048576,
            "SharedSize": -1,
            "Labels": None,
            "Containers": -1,
        }
    ]


@pytest.fixture
def docker_history_records() -> list[dict[str, Any]]:
    """History response, newest layer first."""
    return [
        {
            "Id": IMAGE_ID,
            "Created": 1700000000,
            "CreatedBy": "/bin/sh -c #(nop)  CMD [\"serve\"]",
            "Tags": ["app:latest"],
            "Size": 0,
            "Comment": "",
        },
        {
            "Id": "<missing>",
            "Created": 1699990000,
            "CreatedBy": "/bin/sh -c apk add --no-cache curl",
            "Tags": None,
            "Size": 1048576,
            "Comment": "buildkit.dockerfile.v0",
        },
    ]


@pytest.fixture
def mock_client() -> MagicMock:
    """Stand-in for docker.DockerClient."""
    return MagicMock(name="DockerClient")


@pytest.fixture
def resolver_stubs() -> dict[str, MagicMock]:
    """Credential sources that fail the test if touched."""
    return {
        "config_loader": MagicMock(side_effect=AssertionError("config file read")),
        "helper_lookup": MagicMock(side_effect=AssertionError("helper queried")),
        "default_config_finder": MagicMock(side_effect=AssertionError("default config located")),
    }


@pytest.fixture
def docker_adapter(mock_client: MagicMock, resolver_stubs: dict[str, MagicMock]) -> DockerAdapter:
    """Docker adapter over a mocked client."""
    resolver = CredentialResolver(RuntimeKind.DOCKER, **resolver_stubs)
    return DockerAdapter(client=mock_client, resolver=resolver)


def encode_auth(username: str, password: str) -> str:
    """Encode credentials the way engine config files store them."""
    return base64.b64encode(f"{username}:{password}".encode()).decode()


@pytest.fixture
def auth_file(tmp_path) -> str:
    """Engine config file with credentials for two registries."""
    config = {
        "auths": {
            "registry.example.com": {"auth": encode_auth("alice", "s3cret")},
            "ghcr.io": {"identitytoken": "ghs_token"},
            "https://index.docker.io/v1/": {},
        },
        "credsStore": "desktop",
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    return str(path)


@pytest.fixture
def image_tarball() -> bytes:
    """A small saved-image archive."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        manifest = json.dumps([{"Config": "config.json", "RepoTags": ["app:latest"]}]).encode()
        info = tarfile.TarInfo("manifest.json")
        info.size = len(manifest)
        tar.addfile(info, io.BytesIO(manifest))
    return buffer.getvalue()


@pytest.fixture
def pull_stream():
    """Factory for streamed pull responses, as the docker SDK yields them."""

    def make(records):
        yield from records

    return make
