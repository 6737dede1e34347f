"""Docker engine adapter."""

from __future__ import annotations

import json
from contextlib import closing, contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

import docker
import docker.errors
import requests

from crtkit.models.image import (
    BasicImageInfo,
    HealthConfig,
    ImageHistory,
    ImageIdentity,
    ImageInfo,
    RunConfig,
)
from crtkit.runtime.base import AuthConfig, PullImageOptions, RuntimeKind
from crtkit.runtime.credentials import CredentialResolver, find_docker_config
from crtkit.utils.archive import extract_archive
from crtkit.utils.errors import (
    BadParamError,
    CrtError,
    NotFoundError,
    ProviderError,
    safe_get,
    validate_image_reference,
)
from crtkit.utils.logging import get_logger, get_logger_with_context

logger = get_logger(__name__)

UNTAGGED = "<none>:<none>"

AUTH_PAYLOAD_KEYS = frozenset(
    {"username", "password", "email", "serveraddress", "identitytoken", "registrytoken", "auth"}
)

SAVE_CHUNK_SIZE = 2 * 1024 * 1024


class DockerAdapter:
    """Runtime adapter for the Docker engine.

    Wraps one ``docker.DockerClient`` and talks to the daemon through its
    low-level API client, translating responses into crtkit models.

    Example:
        adapter = DockerAdapter()
        for name, info in adapter.list_images().items():
            print(name, info.size)
    """

    kind = RuntimeKind.DOCKER
    runtime_name = "docker"

    def __init__(
        self,
        client: Any = None,
        base_url: str | None = None,
        timeout: int = 60,
        resolver: CredentialResolver | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            client: Existing DockerClient; created lazily when None
            base_url: Daemon URL; environment (DOCKER_HOST) when None
            timeout: Client timeout in seconds
            resolver: Credential resolver; engine default when None
        """
        self._client = client
        self._base_url = base_url
        self._timeout = timeout
        self._resolver = resolver or self._default_resolver()
        self._log = get_logger_with_context(__name__, runtime=self.runtime_name)

    def _default_resolver(self) -> CredentialResolver:
        return CredentialResolver(self.kind, default_config_finder=find_docker_config)

    @property
    def client(self) -> Any:
        """Get the engine client, creating it if necessary."""
        if self._client is None:
            try:
                if self._base_url:
                    self._client = docker.DockerClient(base_url=self._base_url, timeout=self._timeout)
                else:
                    self._client = docker.from_env(timeout=self._timeout)
            except docker.errors.DockerException as e:
                raise ProviderError("connect", str(e), reference=self._base_url) from e
        return self._client

    @contextmanager
    def _provider_call(self, operation: str, reference: str | None = None) -> Iterator[None]:
        """Translate engine errors raised inside the block."""
        self._log.debug("%s %s", operation, reference or "")
        try:
            yield
        except CrtError:
            raise
        except docker.errors.NotFound as e:
            raise NotFoundError(reference or operation) from e
        except (docker.errors.DockerException, requests.exceptions.RequestException, OSError) as e:
            raise ProviderError(operation, str(e), reference) from e

    def ping(self) -> bool:
        """Check that the engine answers.

        Raises:
            ProviderError: If the engine cannot be reached
        """
        with self._provider_call("ping"):
            return bool(self.client.ping())

    def close(self) -> None:
        """Release the engine client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "DockerAdapter":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def has_image(self, image_ref: str) -> ImageIdentity:
        """Check whether an image exists locally.

        Accepts name:tag, name@digest and full or partial image IDs.

        Raises:
            BadParamError: If the reference is empty or malformed
            NotFoundError: If the engine has no such image
            ProviderError: For other engine errors
        """
        validate_image_reference(image_ref)
        with self._provider_call("has_image", image_ref):
            attrs = self.client.api.inspect_image(image_ref)

        image_id = attrs.get("Id")
        if not image_id:
            raise ProviderError("has_image", "engine returned an image without an ID", image_ref)
        return ImageIdentity.from_names(
            image_id,
            repo_tags=attrs.get("RepoTags"),
            repo_digests=attrs.get("RepoDigests"),
        )

    def list_images_all(self) -> list[BasicImageInfo]:
        """List all local images, including intermediate layers."""
        with self._provider_call("list_images_all"):
            records = self.client.api.images(all=True)

        return [
            BasicImageInfo(
                id=record.get("Id", ""),
                size=record.get("Size") or 0,
                created=record.get("Created") or 0,
                virtual_size=record.get("VirtualSize"),
                parent_id=record.get("ParentId") or None,
                repo_tags=record.get("RepoTags"),
                repo_digests=record.get("RepoDigests"),
                labels=record.get("Labels"),
            )
            for record in records or []
        ]

    def list_images(self, name_filter: str = "") -> dict[str, BasicImageInfo]:
        """List tagged images keyed by ``repo:tag``.

        Images without a tag are keyed by their ID.

        Args:
            name_filter: Engine reference filter (e.g. "nginx", "app:*")
        """
        with self._provider_call("list_images", name_filter or None):
            records = self.client.api.images(name=name_filter or None)

        images: dict[str, BasicImageInfo] = {}
        for record in records or []:
            info = BasicImageInfo(
                id=record.get("Id", ""),
                size=record.get("Size") or 0,
                created=record.get("Created") or 0,
            )
            names = [tag for tag in record.get("RepoTags") or [] if tag != UNTAGGED]
            if not names:
                names = [info.id]
            for name in names:
                images[name] = info
        return images

    def inspect_image(self, image_ref: str) -> ImageInfo:
        """Get full image details.

        Raises:
            NotFoundError: If the engine has no such image
            ProviderError: For other engine errors
        """
        validate_image_reference(image_ref)
        with self._provider_call("inspect_image", image_ref):
            attrs = self.client.api.inspect_image(image_ref)
            runtime_version = self._runtime_version(attrs)

        return image_info_from_attrs(attrs, self.runtime_name, runtime_version)

    def _runtime_version(self, attrs: dict[str, Any]) -> str:
        return attrs.get("DockerVersion") or ""

    def pull_image(self, options: PullImageOptions, auth_config: AuthConfig | None = None) -> None:
        """Pull an image.

        Progress records are written to ``options.output_stream`` as JSON
        lines when a sink is given.

        Raises:
            BadParamError: If the repository is empty or the credential
                handle is foreign or malformed
            ProviderError: If the engine reports a failure
        """
        if not options.repository:
            raise BadParamError("Repository cannot be empty", param="repository")
        payload = self._auth_payload(auth_config)
        reference = options.reference

        with self._provider_call("pull_image", reference):
            progress = self.client.api.pull(
                options.repository,
                tag=options.tag or None,
                stream=True,
                decode=True,
                auth_config=payload,
            )
            with closing(progress):
                for record in progress:
                    if "error" in record:
                        raise ProviderError("pull_image", str(record["error"]), reference)
                    if options.output_stream is not None:
                        options.output_stream.write(json.dumps(record) + "\n")

        self._log.info("Pulled %s", reference)

    def _auth_payload(self, auth_config: AuthConfig | None) -> dict[str, str]:
        # An empty payload makes the pull anonymous
        if auth_config is None:
            return {}
        if not isinstance(auth_config, AuthConfig):
            raise BadParamError(
                f"Invalid auth config handle: {type(auth_config).__name__}",
                param="auth_config",
            )
        if auth_config.runtime != self.kind:
            raise BadParamError(
                f"Auth config was produced for {auth_config.runtime.value}, not {self.kind.value}",
                param="auth_config",
            )
        unknown = set(auth_config.payload) - AUTH_PAYLOAD_KEYS
        if unknown:
            raise BadParamError(
                f"Malformed auth config: unexpected fields {sorted(unknown)}",
                param="auth_config",
            )
        return dict(auth_config.payload)

    def get_registry_auth_config(
        self,
        account: str,
        secret: str,
        config_path: str,
        registry: str,
    ) -> AuthConfig:
        """Resolve registry credentials for this engine."""
        return self._resolver.resolve(account, secret, config_path, registry)

    def save_image(
        self,
        image_ref: str,
        local_path: str,
        extract: bool = False,
        remove_orig: bool = False,
    ) -> None:
        """Save an image archive.

        Args:
            image_ref: Image to save
            local_path: Archive path; its directory is created if missing
            extract: Unpack the archive into its directory
            remove_orig: Delete the archive after a successful extraction

        Raises:
            BadParamError: If the path or reference is empty
            NotFoundError: If the engine has no such image
            ProviderError: If export or extraction fails
        """
        if not local_path:
            raise BadParamError("Local path cannot be empty", param="local_path")
        validate_image_reference(image_ref)

        archive = Path(local_path)
        with self._provider_call("save_image", image_ref):
            archive.parent.mkdir(parents=True, exist_ok=True)
            try:
                with archive.open("wb") as f:
                    for chunk in self.client.api.get_image(image_ref, chunk_size=SAVE_CHUNK_SIZE):
                        f.write(chunk)
            except BaseException:
                archive.unlink(missing_ok=True)
                raise

        self._log.debug("Saved %s to %s", image_ref, archive)
        if not extract:
            return

        extract_archive(archive, archive.parent)
        if remove_orig:
            with self._provider_call("save_image", image_ref):
                archive.unlink()

    def get_images_history(self, image_ref: str) -> list[ImageHistory]:
        """Get an image's layer history in engine order."""
        validate_image_reference(image_ref)
        with self._provider_call("get_images_history", image_ref):
            records = self.client.api.history(image_ref)

        return [
            ImageHistory(
                id=record.get("Id") or "",
                created=record.get("Created") or 0,
                created_by=record.get("CreatedBy") or "",
                tags=record.get("Tags"),
                size=record.get("Size") or 0,
                comment=record.get("Comment") or "",
            )
            for record in records or []
        ]


def image_info_from_attrs(attrs: dict[str, Any], runtime_name: str, runtime_version: str = "") -> ImageInfo:
    """Translate an engine inspect response into ImageInfo.

    Args:
        attrs: Inspect response (Docker Engine API ``ImageInspect`` shape)
        runtime_name: Engine name to record
        runtime_version: Engine version to record

    Returns:
        ImageInfo; ``config`` is None when the response has no Config block
    """
    config = attrs.get("Config")
    return ImageInfo(
        id=attrs.get("Id", ""),
        size=attrs.get("Size") or 0,
        created=parse_created(attrs.get("Created")),
        virtual_size=attrs.get("VirtualSize"),
        parent_id=attrs.get("Parent") or None,
        repo_tags=attrs.get("RepoTags"),
        repo_digests=attrs.get("RepoDigests"),
        labels=safe_get(attrs, "Config", "Labels"),
        runtime_name=runtime_name,
        runtime_version=runtime_version,
        os=attrs.get("Os") or "",
        architecture=attrs.get("Architecture") or "",
        author=attrs.get("Author") or "",
        config=run_config_from_attrs(config) if config is not None else None,
    )


def run_config_from_attrs(config: dict[str, Any]) -> RunConfig:
    """Translate an engine ``Config`` block into RunConfig."""
    exposed_ports = config.get("ExposedPorts")
    volumes = config.get("Volumes")
    healthcheck = config.get("Healthcheck")

    return RunConfig(
        user=config.get("User") or "",
        env=config.get("Env") or [],
        entrypoint=config.get("Entrypoint"),
        cmd=config.get("Cmd"),
        exposed_ports=frozenset(exposed_ports) if exposed_ports is not None else None,
        volumes=frozenset(volumes) if volumes is not None else None,
        working_dir=config.get("WorkingDir") or "",
        labels=config.get("Labels"),
        healthcheck=health_config_from_attrs(healthcheck) if healthcheck is not None else None,
        stop_signal=config.get("StopSignal") or "",
        stop_timeout=config.get("StopTimeout"),
        shell=config.get("Shell"),
        on_build=config.get("OnBuild"),
        hostname=config.get("Hostname") or "",
        domainname=config.get("Domainname") or "",
        image=config.get("Image") or "",
        mac_address=config.get("MacAddress") or "",
        args_escaped=bool(config.get("ArgsEscaped")),
        attach_stdin=bool(config.get("AttachStdin")),
        attach_stdout=bool(config.get("AttachStdout")),
        attach_stderr=bool(config.get("AttachStderr")),
        open_stdin=bool(config.get("OpenStdin")),
        stdin_once=bool(config.get("StdinOnce")),
        tty=bool(config.get("Tty")),
        network_disabled=bool(config.get("NetworkDisabled")),
    )


def health_config_from_attrs(healthcheck: dict[str, Any]) -> HealthConfig:
    """Translate an engine ``Healthcheck`` block into HealthConfig."""
    return HealthConfig(
        test=healthcheck.get("Test") or [],
        interval=healthcheck.get("Interval") or 0,
        timeout=healthcheck.get("Timeout") or 0,
        start_period=healthcheck.get("StartPeriod") or 0,
        start_interval=healthcheck.get("StartInterval") or 0,
        retries=healthcheck.get("Retries") or 0,
    )


def parse_created(value: Any) -> int:
    """Convert an engine creation time to Unix epoch seconds.

    Accepts epoch integers and RFC 3339 strings with up to nanosecond
    precision. Unparseable values yield 0.
    """
    if value is None or value == "":
        return 0
    if isinstance(value, (int, float)):
        return int(value)

    timestamp = str(value).replace("Z", "+00:00")
    if "." in timestamp:
        # fromisoformat accepts at most microseconds
        head, _, rest = timestamp.partition(".")
        tz_start = next((i for i, c in enumerate(rest) if c in "+-"), len(rest))
        timestamp = f"{head}.{rest[:tz_start][:6].ljust(6, '0')}{rest[tz_start:]}"

    try:
        return int(datetime.fromisoformat(timestamp).timestamp())
    except ValueError:
        logger.debug("Unparseable creation time %r", value)
        return 0
