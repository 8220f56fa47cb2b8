from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from .command import sudo_cmd

logger = logging.getLogger(__name__)


def write_file(
    path: Path,
    contents: str,
    *,
    executable: bool = False,
    encoding: str = "utf-8",
    dry_run: bool = False,
) -> None:
    """Write (overwrite) a text file, creating parent directories."""

    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the template's line endings on every OS.
    with open(path, "w", encoding=encoding, newline="") as f:
        f.write(contents)
    if executable:
        mode = os.stat(path).st_mode
        os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.info("Wrote %s", str(path))


def write_system_file(path: Path, contents: str, *, dry_run: bool = False) -> None:
    """Write a root-owned file (e.g. under /etc) via sudo tee."""

    sudo_cmd(["mkdir", "-p", str(path.parent)], dry_run=dry_run)
    sudo_cmd(["tee", str(path)], input_text=contents, dry_run=dry_run)
    logger.info("Wrote %s", str(path))


def count_lines(path: Path) -> int:
    with open(path, "rb") as f:
        return sum(1 for _ in f)


def ensure_dirs(*paths: Path, dry_run: bool = False) -> None:
    for p in paths:
        if dry_run:
            logger.info("Would create %s", str(p))
            continue
        p.mkdir(parents=True, exist_ok=True)
