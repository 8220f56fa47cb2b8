from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict

from ..config import LabConfig, lab_config_from_state
from ..lib import services
from ..lib.files import write_file, write_system_file
from ..lib.readiness import wait_until_ready
from ..lib.templates import render_launch_agent, render_systemd_unit, render_task_xml
from ..state_store import add_warning, record_decision

logger = logging.getLogger(__name__)

SETTLE_S = 5.0


class AutostartStep:
    """Start JupyterLab automatically with the OS-native service manager."""

    step_id = "80_autostart"
    title = "Jupyter Auto-Start"

    def __init__(
        self,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sleep = sleep
        self._clock = clock

    def _systemd(self, cfg: LabConfig, state: Dict[str, Any]) -> None:
        unit = f"{cfg.service_name}.service"
        write_system_file(cfg.systemd_unit_path, render_systemd_unit(cfg), dry_run=cfg.dry_run)
        services.systemd_daemon_reload(dry_run=cfg.dry_run)
        services.systemd_enable(unit, dry_run=cfg.dry_run)
        services.systemd_start(unit, dry_run=cfg.dry_run)

        running = wait_until_ready(
            lambda: services.systemd_is_active(unit, dry_run=cfg.dry_run),
            interval_s=SETTLE_S,
            max_wait_s=SETTLE_S,
            sleep=self._sleep,
            clock=self._clock,
            name=unit,
        )
        record_decision(state, "jupyter_service_running", running)
        if running:
            logger.info("JupyterLab service is running")
        else:
            logger.warning("JupyterLab service may not have started. Check: sudo systemctl status %s", unit)
            add_warning(state, self.step_id, "jupyter_service_not_active", unit=unit)

    def _launch_agent(self, cfg: LabConfig, state: Dict[str, Any]) -> None:
        plist = cfg.launch_agent_path
        write_file(plist, render_launch_agent(cfg), dry_run=cfg.dry_run)
        # Unload first so a re-run picks up the rewritten plist.
        services.launchctl_unload(plist, dry_run=cfg.dry_run)
        if services.launchctl_load(plist, dry_run=cfg.dry_run):
            logger.info("LaunchAgent loaded; JupyterLab starts at every login")
        else:
            logger.warning("launchctl load failed; the agent will still load at next login")
            add_warning(state, self.step_id, "launch_agent_load_failed", plist=str(plist))

    def _task_scheduler(self, cfg: LabConfig, state: Dict[str, Any]) -> None:
        # schtasks expects the UTF-16 encoding the XML declares.
        write_file(cfg.task_xml_path, render_task_xml(cfg), encoding="utf-16", dry_run=cfg.dry_run)
        services.schtasks_create_from_xml(cfg.task_name, cfg.task_xml_path, dry_run=cfg.dry_run)
        if services.schtasks_run(cfg.task_name, dry_run=cfg.dry_run):
            logger.info("Scheduled task %s registered and started", cfg.task_name)
        else:
            logger.warning("Scheduled task %s registered but could not be started now", cfg.task_name)
            add_warning(state, self.step_id, "scheduled_task_not_started", task=cfg.task_name)

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        kind = cfg.autostart_kind
        if kind == "systemd":
            self._systemd(cfg, state)
        elif kind == "launchagent":
            self._launch_agent(cfg, state)
        elif kind == "task_scheduler":
            self._task_scheduler(cfg, state)
        else:
            raise RuntimeError(f"Unknown autostart kind {kind!r}")
        record_decision(state, "autostart", kind)
        return state
