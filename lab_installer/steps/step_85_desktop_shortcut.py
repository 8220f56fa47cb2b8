from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.files import write_file
from ..lib.templates import render_html_shortcut

logger = logging.getLogger(__name__)


class DesktopShortcutStep:
    step_id = "85_desktop_shortcut"
    title = "Creating Desktop HTML Shortcut"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        write_file(cfg.html_shortcut_path, render_html_shortcut(cfg), dry_run=cfg.dry_run)
        logger.info("Desktop HTML shortcut created at %s", cfg.html_shortcut_path)
        return state
