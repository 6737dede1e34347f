"""Helpers for image IDs and names."""

SHORT_ID_LENGTH = 12


def clean_image_id(image_id: str) -> str:
    """Strip the digest algorithm prefix from an image ID."""
    _, sep, value = image_id.partition(":")
    if sep and value:
        return value
    return image_id


def short_image_id(image_id: str, length: int = SHORT_ID_LENGTH) -> str:
    """Return the display form of an image ID.

    IDs shorter than ``length`` are returned whole.
    """
    cleaned = clean_image_id(image_id)
    if len(cleaned) <= length:
        return cleaned
    return cleaned[:length]


def split_repo_tag(name: str) -> tuple[str, str]:
    """Split ``repo[:tag]`` into repository and tag (default ``latest``).

    Digest references (``repo@sha256:...``) keep the digest as the tag.
    """
    if "@" in name:
        repo, _, digest = name.partition("@")
        return repo, digest

    repo, sep, tag = name.rpartition(":")
    if not sep or "/" in tag:
        return name, "latest"
    return repo, tag
