"""Image archive helpers."""

from __future__ import annotations

import tarfile
from pathlib import Path

from crtkit.utils.errors import ProviderError


def extract_archive(archive: Path | str, dest: Path | str) -> None:
    """Unpack a saved image archive.

    Members that would land outside ``dest`` (absolute paths, ``..``
    components, device files) are rejected by the ``data`` filter.

    Args:
        archive: Tar archive to unpack
        dest: Destination directory

    Raises:
        ProviderError: If the archive cannot be read or unpacked
    """
    archive = Path(archive)
    dest = Path(dest)
    try:
        dest.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive, "r") as tar:
            tar.extractall(dest, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise ProviderError("extract_archive", str(e), reference=str(archive)) from e
