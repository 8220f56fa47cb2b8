from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.files import write_file
from ..lib.templates import render_backup_launcher_ps1, render_backup_launcher_sh

logger = logging.getLogger(__name__)


class BackupLauncherStep:
    step_id = "75_backup_launcher"
    title = "Creating Backup Jupyter Launcher"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        if cfg.is_windows:
            contents = render_backup_launcher_ps1(cfg)
        else:
            contents = render_backup_launcher_sh(cfg)
        write_file(cfg.backup_launcher_path, contents, executable=not cfg.is_windows, dry_run=cfg.dry_run)
        logger.info("Backup launcher created at %s", cfg.backup_launcher_path)
        return state
