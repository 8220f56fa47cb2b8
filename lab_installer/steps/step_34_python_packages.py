from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.venv import import_versions, installed_distributions, missing_packages, pip_install
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class PythonPackagesStep:
    step_id = "34_python_packages"
    title = "Installing Python Libraries"
    # Re-entered every run: only missing libraries are installed.
    always_run = True

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        dry_run = cfg.dry_run

        requested = cfg.python_packages
        missing = missing_packages(requested, installed_distributions(cfg.venv_python, dry_run=dry_run))

        if missing:
            logger.info("Installing %d libraries (this may take 3-5 minutes): %s", len(missing), " ".join(missing))
            pip_install(cfg.venv_python, missing, dry_run=dry_run)
        else:
            logger.info("All %d libraries already installed; skipping pip install", len(requested))

        record_decision(state, "python_packages_installed", missing)

        versions = import_versions(cfg.venv_python, cfg.verify_imports, dry_run=dry_run)
        for name, ver in versions.items():
            logger.info("  %-20s: %s", name, ver or "NOT FOUND")
        return state
