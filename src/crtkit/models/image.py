"""Engine-neutral image data models.

Every adapter translates its engine responses into these models, so
callers never see engine SDK types.
"""

from pydantic import BaseModel, Field


class ImageIdentity(BaseModel):
    """Identity of a local image: its ID plus the names pointing to it."""

    model_config = {"frozen": True}

    id: str = Field(min_length=1, description="Content-addressed image ID")
    short_tags: list[str] = Field(default_factory=list, description="Unique tag parts of repo_tags")
    repo_tags: list[str] = Field(default_factory=list, description="repo:tag names")
    short_digests: list[str] = Field(
        default_factory=list,
        description="Unique digest parts of repo_digests",
    )
    repo_digests: list[str] = Field(default_factory=list, description="repo@digest names")

    @classmethod
    def from_names(
        cls,
        image_id: str,
        repo_tags: list[str] | None = None,
        repo_digests: list[str] | None = None,
    ) -> "ImageIdentity":
        """Build an identity, deriving the short tag and digest lists."""
        repo_tags = list(repo_tags or [])
        repo_digests = list(repo_digests or [])

        short_tags: list[str] = []
        for name in repo_tags:
            # rpartition keeps registry ports (host:5000/app:1.0) out of the tag
            repo, sep, tag = name.rpartition(":")
            if sep and "/" not in tag and tag not in short_tags:
                short_tags.append(tag)

        short_digests: list[str] = []
        for name in repo_digests:
            _, sep, digest = name.partition("@")
            if sep and digest not in short_digests:
                short_digests.append(digest)

        return cls(
            id=image_id,
            short_tags=short_tags,
            repo_tags=repo_tags,
            short_digests=short_digests,
            repo_digests=repo_digests,
        )


class BasicImageInfo(BaseModel):
    """Lightweight image record used by listings."""

    model_config = {"frozen": True}

    id: str = Field(description="Image ID")
    size: int = Field(ge=0, description="Image size in bytes")
    created: int = Field(description="Creation time (Unix epoch seconds)")
    virtual_size: int | None = Field(default=None, description="Size including shared layers")
    parent_id: str | None = Field(default=None, description="Parent image ID")
    repo_tags: list[str] | None = Field(default=None, description="repo:tag names")
    repo_digests: list[str] | None = Field(default=None, description="repo@digest names")
    labels: dict[str, str] | None = Field(default=None, description="Image labels")


class HealthConfig(BaseModel):
    """Health-check probe baked into an image.

    Durations are kept in nanoseconds, as engines report them.
    """

    model_config = {"frozen": True}

    test: list[str] = Field(default_factory=list, description="Probe command vector")
    interval: int = Field(default=0, description="Time between probes (ns)")
    timeout: int = Field(default=0, description="Probe timeout (ns)")
    start_period: int = Field(default=0, description="Initialization grace period (ns)")
    start_interval: int = Field(default=0, description="Probe interval during start period (ns)")
    retries: int = Field(default=0, description="Consecutive failures before unhealthy")


class RunConfig(BaseModel):
    """Process and environment defaults of an image."""

    model_config = {"frozen": True}

    user: str = ""
    env: list[str] = Field(default_factory=list, description="KEY=value entries")
    entrypoint: list[str] | None = None
    cmd: list[str] | None = None
    exposed_ports: frozenset[str] | None = Field(default=None, description="port/proto entries")
    volumes: frozenset[str] | None = None
    working_dir: str = ""
    labels: dict[str, str] | None = None
    healthcheck: HealthConfig | None = None
    stop_signal: str = ""
    stop_timeout: int | None = None
    shell: list[str] | None = None
    on_build: list[str] | None = None
    hostname: str = ""
    domainname: str = ""
    image: str = ""
    mac_address: str = ""

    args_escaped: bool = False
    attach_stdin: bool = False
    attach_stdout: bool = False
    attach_stderr: bool = False
    open_stdin: bool = False
    stdin_once: bool = False
    tty: bool = False
    network_disabled: bool = False

    @property
    def env_map(self) -> dict[str, str]:
        """Environment entries as a mapping (later entries win)."""
        env: dict[str, str] = {}
        for item in self.env:
            key, _, value = item.partition("=")
            env[key] = value
        return env


class ImageInfo(BaseModel):
    """Full inspection result for an image."""

    model_config = {"frozen": True}

    id: str = Field(description="Image ID")
    size: int = Field(ge=0, description="Image size in bytes")
    created: int = Field(description="Creation time (Unix epoch seconds)")
    virtual_size: int | None = None
    parent_id: str | None = None
    repo_tags: list[str] | None = None
    repo_digests: list[str] | None = None
    labels: dict[str, str] | None = None

    runtime_name: str = Field(description="Engine that reported the image")
    runtime_version: str = Field(default="", description="Engine version")
    os: str = ""
    architecture: str = ""
    author: str = ""
    config: RunConfig | None = Field(default=None, description="Run configuration, if reported")


class ImageHistory(BaseModel):
    """One entry of an image's layer history."""

    model_config = {"frozen": True}

    id: str
    created: int
    created_by: str = ""
    tags: list[str] | None = None
    size: int = 0
    comment: str = ""
