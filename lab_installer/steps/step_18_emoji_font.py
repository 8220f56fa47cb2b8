from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.command import run_cmd
from ..lib.pkg import apt_install_missing

logger = logging.getLogger(__name__)


class EmojiFontStep:
    step_id = "18_emoji_font"
    title = "Emoji Font and Font Cache"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        packages = [str(p) for p in (cfg.platform.get("font_packages") or ["fonts-noto-color-emoji"])]
        apt_install_missing(packages, dry_run=cfg.dry_run)

        # Makes the font usable without a logout.
        run_cmd(["fc-cache", "-f", "-v"], dry_run=cfg.dry_run)
        logger.info("Font cache rebuilt")
        return state
