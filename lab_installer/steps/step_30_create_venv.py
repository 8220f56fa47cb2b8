from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.venv import create_venv
from .step_20_system_packages import system_python

logger = logging.getLogger(__name__)


class CreateVenvStep:
    # Ubuntu 24.04 enforces PEP 668, so the lab libraries must live in a venv.
    step_id = "30_create_venv"
    title = "Creating Python Virtual Environment"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)

        if cfg.venv_path.is_dir():
            logger.info("Virtual environment already exists at %s; skipping creation", cfg.venv_path)
            return state

        logger.info("Creating virtual environment at %s", cfg.venv_path)
        create_venv(system_python(cfg), cfg.venv_path, dry_run=cfg.dry_run)

        if not cfg.dry_run and not cfg.venv_python.exists():
            raise RuntimeError(f"Virtual environment creation failed: {cfg.venv_python} missing")
        logger.info("Virtual environment created")
        return state
