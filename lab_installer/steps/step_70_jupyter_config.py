from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.files import write_file
from ..lib.templates import render_jupyter_config

logger = logging.getLogger(__name__)


class JupyterConfigStep:
    """Write the token and default notebook to both config file names.

    JupyterLab 3.x and jupyter-server 2.x look for different file names.
    """

    step_id = "70_jupyter_config"
    title = "Configuring Jupyter"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        contents = render_jupyter_config(cfg)
        for path in cfg.jupyter_config_files:
            write_file(path, contents, dry_run=cfg.dry_run)

        logger.info("Token set to   : %s", cfg.token)
        logger.info("Default URL set: %s", cfg.default_url)
        return state
