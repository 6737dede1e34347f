"""Error taxonomy for crtkit.

Every failure an adapter reports is one of these exceptions; engine SDK
exceptions never cross the adapter boundary except as ``__cause__``.
"""

from __future__ import annotations

from typing import Any

from crtkit.models.common import ErrorInfo


class CrtError(Exception):
    """Base exception for crtkit."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_error_info(self) -> ErrorInfo:
        """Convert to ErrorInfo model."""
        return ErrorInfo(code=self.code, message=self.message, details=self.details)


class NotFoundError(CrtError):
    """Referenced image or entity does not exist."""

    def __init__(self, reference: str):
        super().__init__(
            f"Image not found: {reference}",
            code="NOT_FOUND",
            details={"reference": reference},
        )
        self.reference = reference


class BadParamError(CrtError):
    """Caller supplied an invalid or foreign argument."""

    def __init__(self, message: str, param: str | None = None):
        details = {"param": param} if param else {}
        super().__init__(message, code="BAD_PARAM", details=details)


class MissingAuthConfigError(CrtError):
    """No credential source had an entry for the registry."""

    def __init__(self, registry: str):
        super().__init__(
            f"Could not find an auth config for registry - {registry}",
            code="MISSING_AUTH_CONFIG",
            details={"registry": registry},
        )
        self.registry = registry


class ProviderError(CrtError):
    """Any other engine or SDK failure."""

    def __init__(self, operation: str, message: str, reference: str | None = None):
        details: dict[str, Any] = {"operation": operation}
        if reference:
            details["reference"] = reference
        where = f"{operation}({reference})" if reference else operation
        super().__init__(f"{where}: {message}", code="PROVIDER_ERROR", details=details)
        self.operation = operation
        self.reference = reference


class ConfigurationError(CrtError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)


def validate_image_reference(reference: str) -> None:
    """Validate an image reference string.

    Args:
        reference: Image name, name:tag, name@digest or (partial) image ID

    Raises:
        BadParamError: If reference is unusable
    """
    if not reference or not reference.strip():
        raise BadParamError("Image reference cannot be empty", param="reference")

    if reference in (".", ".."):
        raise BadParamError(f"Invalid image reference: {reference}", param="reference")

    if reference.startswith("-"):
        raise BadParamError("Image reference cannot start with '-'", param="reference")

    invalid_chars = set("<>|\"'\\ ")
    for char in invalid_chars:
        if char in reference:
            raise BadParamError(
                f"Image reference contains invalid character: {char!r}",
                param="reference",
            )


def safe_get(data: dict[str, Any] | None, *keys: str, default: Any = None) -> Any:
    """Safely get a nested value from a dictionary.

    Args:
        data: Dictionary to get value from
        *keys: Keys to traverse
        default: Default value if key not found or None

    Returns:
        Value at the nested key path, or default
    """
    current: Any = data
    for key in keys:
        if isinstance(current, dict):
            current = current.get(key)
            if current is None:
                return default
        else:
            return default
    return current
