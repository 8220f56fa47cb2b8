from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.files import ensure_dirs

logger = logging.getLogger(__name__)


class LabFoldersStep:
    step_id = "40_lab_folders"
    title = "Creating Lab Folder Structure"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        ensure_dirs(cfg.datasets_dir, cfg.notebooks_dir, cfg.outputs_dir, dry_run=cfg.dry_run)
        logger.info("Lab folder structure created at %s", cfg.lab_dir)
        return state
