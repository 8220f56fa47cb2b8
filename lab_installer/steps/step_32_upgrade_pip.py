from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.venv import pip_upgrade

logger = logging.getLogger(__name__)


class UpgradePipStep:
    step_id = "32_upgrade_pip"
    title = "Upgrading pip"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        pip_upgrade(cfg.venv_python, dry_run=cfg.dry_run)
        logger.info("pip upgraded")
        return state
