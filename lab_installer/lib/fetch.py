from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import List

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 60
CHUNK_SIZE = 1 << 16


class DownloadError(RuntimeError):
    """A remote file could not be fetched."""


def download(url: str, dest: Path, *, timeout_s: float = DEFAULT_TIMEOUT_S, dry_run: bool = False) -> Path:
    """Download url to dest, overwriting it.

    The body is streamed to a temp file in the destination directory and only
    moved into place once complete, so a failed download never leaves a
    truncated file that a later existence check would accept.
    """

    logger.info("GET %s -> %s", url, str(dest))
    if dry_run:
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", dir=str(dest.parent))
    try:
        with os.fdopen(fd, "wb") as out:
            with requests.get(url, stream=True, timeout=timeout_s, allow_redirects=True) as r:
                r.raise_for_status()
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        out.write(chunk)
        os.replace(tmp_name, dest)
    except (requests.RequestException, OSError) as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e

    return dest


def extract_zip(archive: Path, dest_dir: Path, *, dry_run: bool = False) -> List[str]:
    """Extract archive into dest_dir (overwriting), returning member names."""

    logger.info("Extracting %s -> %s", str(archive), str(dest_dir))
    if dry_run:
        return []
    try:
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
            zf.extractall(dest_dir)
    except zipfile.BadZipFile as e:
        raise DownloadError(f"Not a valid zip archive: {archive}") from e
    return names
