from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .command import run_cmd, sudo_cmd

logger = logging.getLogger(__name__)


def apt_update(*, dry_run: bool = False) -> None:
    sudo_cmd(["apt-get", "update", "-y"], dry_run=dry_run)


def apt_upgrade(*, dry_run: bool = False) -> None:
    sudo_cmd(["apt-get", "upgrade", "-y"], dry_run=dry_run)


def apt_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    sudo_cmd(["apt-get", "install", "-y", *packages], dry_run=dry_run)


def dpkg_installed(package: str, *, dry_run: bool = False) -> bool:
    """Return True if dpkg knows the package is installed."""
    if dry_run:
        # Plan as if nothing is installed yet.
        return False
    r = run_cmd(["dpkg-query", "-W", "-f=${Status}", package], check=False)
    return r.ok and "install ok installed" in r.stdout


def apt_install_missing(packages: Sequence[str], *, dry_run: bool = False) -> list[str]:
    """Install only the packages dpkg does not report as installed."""

    missing = [p for p in packages if not dpkg_installed(p, dry_run=dry_run)]
    if missing:
        apt_install(missing, dry_run=dry_run)
    else:
        logger.info("Already installed: %s", " ".join(packages))
    return missing


def macos_install_pkg(pkg_path: str, *, dry_run: bool = False) -> None:
    sudo_cmd(["installer", "-pkg", pkg_path, "-target", "/"], dry_run=dry_run)


def winget_install(package_id: str, *, dry_run: bool = False) -> None:
    run_cmd(
        [
            "winget",
            "install",
            "--id",
            package_id,
            "-e",
            "--silent",
            "--accept-package-agreements",
            "--accept-source-agreements",
        ],
        dry_run=dry_run,
    )


def python_version(executable: str) -> Optional[Tuple[int, int]]:
    """(major, minor) of an interpreter on PATH, or None if unusable."""

    r = run_cmd(
        [executable, "-c", "import sys; print('%d.%d' % sys.version_info[:2])"],
        check=False,
    )
    if not r.ok:
        return None
    try:
        major, minor = r.stdout.strip().split(".")
        return int(major), int(minor)
    except ValueError:
        return None
