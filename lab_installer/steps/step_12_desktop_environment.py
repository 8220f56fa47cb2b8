from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.pkg import apt_install_missing

logger = logging.getLogger(__name__)


class DesktopEnvironmentStep:
    """XFCE: the lightweight desktop xrdp sessions launch into."""

    step_id = "12_desktop_environment"
    title = "XFCE Desktop Environment"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        packages = [str(p) for p in (cfg.platform.get("desktop_packages") or ["xfce4", "xfce4-session"])]
        installed = apt_install_missing(packages, dry_run=cfg.dry_run)
        if installed:
            logger.info("Installed: %s", " ".join(installed))
        return state
