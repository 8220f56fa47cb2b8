from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.pkg import apt_update, apt_upgrade

logger = logging.getLogger(__name__)


class SystemUpdateStep:
    step_id = "10_system_update"
    title = "Updating System Packages"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        logger.info("Running apt update + upgrade (may take a few minutes)...")
        apt_update(dry_run=cfg.dry_run)
        apt_upgrade(dry_run=cfg.dry_run)
        logger.info("System packages up to date")
        return state
