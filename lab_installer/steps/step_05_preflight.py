from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.files import ensure_dirs
from ..lib.platforms import is_root
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "05_preflight"
    title = "Preflight Checks"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)

        if cfg.refuse_root and is_root():
            # Everything is built in $HOME; root's home is not reachable over RDP.
            raise RuntimeError(
                "Do not run this installer as root. Log in as your regular user "
                "(with sudo rights) and try again."
            )

        # A fresh server VM may not have a Desktop directory yet.
        ensure_dirs(cfg.desktop_dir, dry_run=cfg.dry_run)

        record_decision(state, "platform", cfg.platform_id)
        record_decision(state, "user", cfg.user)
        logger.info("Platform=%s user=%s home=%s", cfg.platform_id, cfg.user, cfg.home)
        return state
