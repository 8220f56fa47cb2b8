from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

DEFAULT_LOG_NAME = "lab_installer_log.txt"

BANNER = "=" * 45


def configure_logging(
    log_path: str,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    The lab log lives on the Desktop next to the shortcuts so students and
    instructors can find it.

    Notes:
    - A fresh server VM may have no Desktop yet; the directory is created.
    - If the requested path is not writable we fall back to a file in the
      current working directory, while still *reporting* the intended path
      in state/logs.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_lab_installer_configured", False):
        return getattr(logger, "_lab_installer_log_path", log_path)

    chosen_path = log_path
    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        # Fall back to a writable location.
        chosen_path = str(Path.cwd() / "lab-installer.log")
        file_handler = logging.FileHandler(chosen_path, encoding="utf-8")
    file_handler.setFormatter(fmt)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_lab_installer_configured", True)
    setattr(logger, "_lab_installer_log_path", chosen_path)

    logging.getLogger(__name__).info(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path


def log_header(title: str, logger: Optional[logging.Logger] = None) -> None:
    """Section banner, mirrored to console and log file."""

    log = logger or logging.getLogger(__name__)
    log.info(BANNER)
    log.info("  %s", title)
    log.info(BANNER)


def log_run_banner(cfg, logger: Optional[logging.Logger] = None) -> None:
    log = logger or logging.getLogger(__name__)
    log_header(f"{cfg.title} - Installation Log ({cfg.platform_id})", log)
    log.info("Date        : %s", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    log.info("User        : %s", cfg.user)
    log.info("Home        : %s", cfg.home)
    log.info("Lab folder  : %s", cfg.lab_dir)
    log.info("Virtual env : %s", cfg.venv_path)
    log.info("Jupyter URL : %s", cfg.jupyter_url)
    log.info("Notebooks   : %s", cfg.notebook_base_url)
