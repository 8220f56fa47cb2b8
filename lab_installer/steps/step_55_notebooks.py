from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..config import lab_config_from_state
from ..lib.fetch import DownloadError, download
from ..state_store import add_warning

logger = logging.getLogger(__name__)


class NotebooksStep:
    step_id = "55_notebooks"
    title = "Downloading Lab Notebooks"
    always_run = True

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        logger.info("Downloading notebooks from %s", cfg.notebook_base_url)

        failed: List[str] = []
        for name in cfg.notebooks:
            dest = cfg.notebooks_dir / name
            # Always refreshed: instructors update notebooks between sessions.
            try:
                download(f"{cfg.notebook_base_url}/{name}", dest, dry_run=cfg.dry_run)
                logger.info("  %s downloaded", name)
                continue
            except DownloadError as e:
                logger.warning("%s", e)

            if dest.is_file():
                logger.warning("Keeping previously downloaded %s", name)
                add_warning(state, self.step_id, "notebook_refresh_failed", notebook=name)
            else:
                logger.warning("Failed to download %s; copy it manually to %s", name, cfg.notebooks_dir)
                add_warning(state, self.step_id, "notebook_download_failed", notebook=name)
                failed.append(name)

        ok = len(cfg.notebooks) - len(failed)
        logger.info("%d of %d notebooks available", ok, len(cfg.notebooks))
        return state
