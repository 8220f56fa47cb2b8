from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..config import LabConfig, lab_config_from_state
from ..lib.fetch import download
from ..lib.pkg import apt_install, macos_install_pkg, python_version, winget_install
from ..state_store import record_decision

logger = logging.getLogger(__name__)


def system_python(cfg: LabConfig) -> str:
    return "python" if cfg.is_windows else "python3"


class SystemPackagesStep:
    """System tools and a usable Python 3 interpreter."""

    step_id = "20_system_packages"
    title = "Python and System Tools"

    def _python_ok(self, cfg: LabConfig) -> bool:
        if cfg.dry_run:
            return True
        ver = python_version(system_python(cfg))
        return ver is not None and ver[0] == 3 and ver[1] >= cfg.python_min_minor

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        dry_run = cfg.dry_run

        if cfg.is_linux:
            apt_install(cfg.system_packages, dry_run=dry_run)
        elif self._python_ok(cfg):
            logger.info("Python 3.%d+ already installed", cfg.python_min_minor)
        elif cfg.is_macos:
            # Official .pkg rather than Homebrew keeps the installer self-contained.
            logger.info("Python 3.%d+ not found; installing official macOS package", cfg.python_min_minor)
            pkg = Path("/tmp/python_installer.pkg")
            download(cfg.macos_python_pkg_url, pkg, dry_run=dry_run)
            macos_install_pkg(str(pkg), dry_run=dry_run)
        elif cfg.is_windows:
            logger.info("Python 3.%d+ not found; installing via winget", cfg.python_min_minor)
            winget_install(cfg.python_winget_id, dry_run=dry_run)

        if not self._python_ok(cfg):
            raise RuntimeError(
                f"Python 3.{cfg.python_min_minor}+ is required but `{system_python(cfg)}` is missing or too old. "
                "On Windows, open a new terminal after installing Python so PATH is refreshed."
            )

        ver = None if dry_run else python_version(system_python(cfg))
        version_txt = f"{ver[0]}.{ver[1]}" if ver else "unknown"
        record_decision(state, "python_executable", system_python(cfg))
        record_decision(state, "python_version", version_txt)
        logger.info("Python version: %s", version_txt)
        return state
