"""Bootstrap launcher: the only command a student runs by hand.

Makes sure curl is available (the Ollama install script needs it), fetches
the latest published installer archive to the Desktop, installs it into the
running interpreter and hands off to ``lab-installer`` for the platform.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.command import have_command, run_cmd, run_passthrough
from .lib.fetch import DownloadError, download
from .lib.manifests import PLATFORMS, load_lab_manifest
from .lib.pkg import apt_install, apt_update
from .lib.platforms import detect_platform
from .logging_utils import configure_logging, log_header

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_NAME = "ai_red_team_lab_installer.zip"


def ensure_curl(platform_id: str, *, dry_run: bool = False) -> None:
    if platform_id == "windows" or have_command("curl"):
        logger.info("curl is available")
        return
    if platform_id == "macos":
        raise RuntimeError("curl not found. Install the Xcode Command Line Tools (xcode-select --install) and re-run.")
    logger.info("curl not found; installing it first")
    apt_update(dry_run=dry_run)
    apt_install(["curl"], dry_run=dry_run)


def _bootstrap_section() -> Dict[str, Any]:
    return load_lab_manifest().get("bootstrap") or {}


def package_url() -> str:
    url = str(_bootstrap_section().get("package_url") or "")
    if not url:
        raise RuntimeError("No installer package_url configured in lab.yaml (bootstrap section)")
    return url


def installer_argv(platform_id: str, *, dry_run: bool = False) -> List[str]:
    # Same interpreter that pip installed into, so PATH does not matter.
    argv = [sys.executable, "-m", "lab_installer.main", "--platform", platform_id]
    if dry_run:
        argv.append("--dry-run")
    return argv


def bootstrap(
    *,
    platform_id: str,
    url: Optional[str] = None,
    dest: Optional[Path] = None,
    dry_run: bool = False,
) -> int:
    log_header(f"AI Red Team Lab - Starting Installation ({platform_id})", logger)

    ensure_curl(platform_id, dry_run=dry_run)

    src = url or package_url()
    name = str(_bootstrap_section().get("archive_name") or DEFAULT_ARCHIVE_NAME)
    target = dest or (Path.home() / "Desktop" / name)

    logger.info("Fetching installer package from %s", src)
    try:
        download(src, target, dry_run=dry_run)
    except DownloadError as e:
        raise RuntimeError(f"{e}. Please check your internet connection and try again.") from e
    if not dry_run and not target.is_file():
        raise RuntimeError(f"Failed to download {target.name}. Please check your internet connection and try again.")

    logger.info("Installing %s", target)
    run_cmd([sys.executable, "-m", "pip", "install", "--upgrade", str(target)], dry_run=dry_run)

    logger.info("Handing off to lab-installer")
    return run_passthrough(installer_argv(platform_id, dry_run=dry_run), dry_run=dry_run)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="lab-bootstrap", description="Install and run the AI Red Team Lab installer.")
    p.add_argument("--platform", choices=PLATFORMS, default=None, help="Platform variant (default: auto-detect)")
    p.add_argument("--url", default=None, help="Override the installer package URL")
    p.add_argument("--dest", default=None, help="Where to save the installer package (default: Desktop)")
    p.add_argument("--log", default="lab-bootstrap.log", help="Path to bootstrap log")
    p.add_argument("--dry-run", action="store_true")

    args = p.parse_args(argv)
    configure_logging(log_path=args.log)

    try:
        return bootstrap(
            platform_id=args.platform or detect_platform(),
            url=args.url,
            dest=Path(args.dest) if args.dest else None,
            dry_run=bool(args.dry_run),
        )
    except RuntimeError as e:
        logger.error("%s", e)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
