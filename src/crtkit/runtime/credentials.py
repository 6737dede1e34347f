"""Registry credential resolution.

Credentials are looked up in a fixed order, stopping at the first
source that answers:

1. explicit account/secret
2. an explicit credential file
3. the credential helper configured for the registry
4. the engine's default credential file

An explicit credential file never falls through to the later sources,
and a failing credential helper is an error, not a miss.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

import docker.auth
import docker.credentials
import docker.errors
from docker.utils.config import find_config_file

from crtkit.runtime.base import AuthConfig, RuntimeKind
from crtkit.utils.errors import BadParamError, MissingAuthConfigError, ProviderError
from crtkit.utils.logging import get_logger, get_logger_with_context

logger = get_logger(__name__)

# Docker Hub credentials are stored under the v1 index URL
DOCKER_HUB_AUTH_KEY = docker.auth.INDEX_URL

TOKEN_USERNAME = "<token>"

AuthEntries = dict[str, dict[str, str]]
ConfigLoader = Callable[[str], AuthEntries]
HelperLookup = Callable[[str], dict[str, str] | None]
ConfigFinder = Callable[[], str | None]


def registry_for_image(name: str) -> str:
    """Get the credential key of the registry hosting an image.

    Args:
        name: Image name (e.g. "nginx", "ghcr.io/org/app:1.0")

    Returns:
        Registry host, or the Docker Hub index URL for Hub images
    """
    if not name:
        raise BadParamError("Image name cannot be empty", param="name")
    try:
        index_name, _ = docker.auth.resolve_repository_name(name)
    except docker.errors.InvalidRepository as e:
        raise BadParamError(str(e), param="name") from e
    if index_name == docker.auth.INDEX_NAME:
        return DOCKER_HUB_AUTH_KEY
    return index_name


def read_config_file(path: str) -> dict[str, Any]:
    """Read an engine configuration file as JSON.

    Raises:
        ProviderError: If the file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ProviderError("load_auth_config", str(e), reference=path) from e

    if not isinstance(data, dict):
        raise ProviderError("load_auth_config", "config file is not a JSON object", reference=path)
    return data


def load_engine_config(path: str) -> docker.auth.AuthConfig:
    """Load an engine config file through the docker SDK.

    The file is read here rather than by ``docker.auth.load_config`` so
    that a missing path is an error instead of a switch to the default
    locations.

    Raises:
        ProviderError: If the file cannot be read or an ``auths`` entry is malformed
    """
    return _parse_engine_config(read_config_file(path), path)


def _parse_engine_config(data: dict[str, Any], path: str) -> docker.auth.AuthConfig:
    # load_config searches the default locations when handed an empty dict
    if not data:
        return docker.auth.AuthConfig({})
    try:
        return docker.auth.load_config(config_dict=dict(data))
    except (docker.errors.InvalidConfigFile, ValueError) as e:
        raise ProviderError("load_auth_config", str(e), reference=path) from e


def load_auth_file(path: str) -> AuthEntries:
    """Load the credential entries of a config file, keyed by registry.

    Both the current layout (entries under ``auths``) and the legacy
    ``.dockercfg`` layout (entries at the top level) are accepted. Files
    with neither, such as a config holding only ``currentContext``, have
    no entries.
    """
    data = read_config_file(path)
    config = _parse_engine_config(data, path)

    raw_entries = data.get("auths")
    if not isinstance(raw_entries, dict):
        raw_entries = data

    result: AuthEntries = {}
    for registry, entry in config.auths.items():
        raw = raw_entries.get(registry)
        payload = _payload_from_entry(registry, entry, raw if isinstance(raw, dict) else {})
        if payload:
            result[registry] = payload
    return result


def find_docker_config() -> str | None:
    """Locate Docker's config file ($DOCKER_CONFIG, ~/.docker, ~/.dockercfg)."""
    return find_config_file()


def find_podman_config() -> str | None:
    """Locate the containers auth file used by Podman.

    Falls back to Docker's config file, which Podman also reads.
    """
    candidates = []
    auth_file = os.environ.get("REGISTRY_AUTH_FILE")
    if auth_file:
        candidates.append(Path(auth_file))

    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if runtime_dir:
        candidates.append(Path(runtime_dir) / "containers" / "auth.json")

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    config_home = Path(xdg_config) if xdg_config else Path.home() / ".config"
    candidates.append(config_home / "containers" / "auth.json")

    for candidate in candidates:
        if candidate.exists():
            return str(candidate)
    return find_docker_config()


def lookup_credential_helper(registry: str, config_path: str | None) -> dict[str, str] | None:
    """Ask the credential helper configured for a registry.

    The helper comes from ``credHelpers[registry]``, else ``credsStore``.

    Args:
        registry: Registry key to look up
        config_path: Config file naming the helpers (None when absent)

    Returns:
        Credential payload, or None when no helper is configured or the
        helper has no entry for the registry

    Raises:
        ProviderError: If the helper fails
    """
    if not config_path:
        return None

    program = load_engine_config(config_path).get_credential_store(registry)
    if not program:
        return None

    logger.debug("Querying credential helper %s for %s", program, registry)
    store = docker.credentials.Store(program)
    try:
        creds = store.get(registry)
    except docker.credentials.CredentialsNotFound:
        return None
    except docker.credentials.StoreError as e:
        raise ProviderError("credential_helper", str(e), reference=registry) from e

    username = creds.get("Username", "")
    secret = creds.get("Secret", "")
    if username == TOKEN_USERNAME:
        return {"identitytoken": secret}
    return {"username": username, "password": secret, "serveraddress": creds.get("ServerURL") or registry}


def _payload_from_entry(registry: str, entry: dict[str, Any], raw: dict[str, Any]) -> dict[str, str]:
    # parse_auth only decodes ``auth``; plain username/password entries come from the raw file
    if "IdentityToken" in entry:
        return {"identitytoken": entry["IdentityToken"]}
    username = entry.get("username") or raw.get("username") or ""
    password = entry.get("password") or raw.get("password") or ""
    if not username and not password:
        return {}

    payload = {
        "username": username,
        "password": password,
        "serveraddress": entry.get("serveraddress") or raw.get("serveraddress") or registry,
    }
    email = entry.get("email") or raw.get("email")
    if email:
        payload["email"] = email
    return payload


class CredentialResolver:
    """Resolves registry credentials for one engine kind.

    The credential sources are injectable so that each step of the
    chain can be replaced in tests.

    Example:
        resolver = CredentialResolver(RuntimeKind.DOCKER)
        auth = resolver.resolve("", "", "", "ghcr.io")
    """

    def __init__(
        self,
        runtime: RuntimeKind,
        config_loader: ConfigLoader = load_auth_file,
        helper_lookup: HelperLookup | None = None,
        default_config_finder: ConfigFinder = find_docker_config,
    ) -> None:
        """Initialize the resolver.

        Args:
            runtime: Engine kind stamped on every produced AuthConfig
            config_loader: Loads credential entries from a file path
            helper_lookup: Queries the credential helper for a registry
            default_config_finder: Locates the engine's default config file
        """
        self._runtime = runtime
        self._config_loader = config_loader
        self._default_config_finder = default_config_finder
        self._helper_lookup = helper_lookup or self._lookup_default_helper
        self._log = get_logger_with_context(__name__, runtime=runtime.value)

    def resolve(self, account: str, secret: str, config_path: str, registry: str) -> AuthConfig:
        """Resolve credentials for a registry.

        Args:
            account: Explicit account name
            secret: Explicit password or token
            config_path: Explicit credential file
            registry: Registry key (host, or Docker Hub index URL)

        Returns:
            Credential handle for this resolver's engine

        Raises:
            MissingAuthConfigError: If the chain found no credential
            ProviderError: If a credential source failed
        """
        if account or secret:
            return self._auth(
                {"username": account, "password": secret, "serveraddress": registry},
                source="explicit",
            )

        if config_path:
            try:
                entries = self._config_loader(config_path)
            except ProviderError as e:
                self._log.warning("Failed to load registry config %s: %s", config_path, e)
                raise
            return self._auth(self._entry_for(entries, registry), source=f"file:{config_path}")

        try:
            helper_creds = self._helper_lookup(registry)
        except ProviderError as e:
            self._log.warning("Credential helper lookup failed for %s: %s", registry, e)
            raise
        if helper_creds:
            return self._auth(helper_creds, source="helper")

        default_path = self._default_config_finder()
        if not default_path:
            raise ProviderError("load_auth_config", "no local engine config file found", reference=registry)
        try:
            entries = self._config_loader(default_path)
        except ProviderError as e:
            self._log.error("Failed to load default registry config %s: %s", default_path, e)
            raise
        return self._auth(self._entry_for(entries, registry), source=f"file:{default_path}")

    def _lookup_default_helper(self, registry: str) -> dict[str, str] | None:
        return lookup_credential_helper(registry, self._default_config_finder())

    @staticmethod
    def _entry_for(entries: AuthEntries, registry: str) -> dict[str, str]:
        entry = entries.get(registry)
        if not entry:
            raise MissingAuthConfigError(registry)
        return entry

    def _auth(self, payload: dict[str, str], source: str) -> AuthConfig:
        self._log.debug("Loaded registry auth config from %s", source)
        return AuthConfig(runtime=self._runtime, payload=payload, source=source)
