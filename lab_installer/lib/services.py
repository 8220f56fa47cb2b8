from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd, sudo_cmd

logger = logging.getLogger(__name__)


# -- systemd (Ubuntu / Azure) -------------------------------------------------


def systemd_daemon_reload(*, dry_run: bool = False) -> None:
    sudo_cmd(["systemctl", "daemon-reload"], dry_run=dry_run)


def systemd_enable(unit: str, *, dry_run: bool = False) -> None:
    sudo_cmd(["systemctl", "enable", unit], dry_run=dry_run)


def systemd_start(unit: str, *, dry_run: bool = False) -> None:
    sudo_cmd(["systemctl", "start", unit], dry_run=dry_run)


def systemd_restart(unit: str, *, dry_run: bool = False) -> None:
    sudo_cmd(["systemctl", "restart", unit], dry_run=dry_run)


def systemd_is_active(unit: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return True
    return sudo_cmd(["systemctl", "is-active", "--quiet", unit], check=False).ok


# -- launchd (macOS) ----------------------------------------------------------


def launchctl_load(plist: Path, *, dry_run: bool = False) -> bool:
    # Loading an already-loaded agent exits non-zero; callers treat it as advisory.
    return run_cmd(["launchctl", "load", str(plist)], check=False, dry_run=dry_run).ok


def launchctl_unload(plist: Path, *, dry_run: bool = False) -> None:
    run_cmd(["launchctl", "unload", str(plist)], check=False, dry_run=dry_run)


def launchctl_is_loaded(label: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return True
    return run_cmd(["launchctl", "list", label], check=False).ok


# -- Task Scheduler (Windows) -------------------------------------------------


def schtasks_create_from_xml(task_name: str, xml_path: Path, *, dry_run: bool = False) -> None:
    run_cmd(["schtasks", "/Create", "/TN", task_name, "/XML", str(xml_path), "/F"], dry_run=dry_run)


def schtasks_run(task_name: str, *, dry_run: bool = False) -> bool:
    return run_cmd(["schtasks", "/Run", "/TN", task_name], check=False, dry_run=dry_run).ok


def schtasks_exists(task_name: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return True
    return run_cmd(["schtasks", "/Query", "/TN", task_name], check=False).ok
