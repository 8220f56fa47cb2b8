from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import LabConfig, lab_config_from_state
from ..lib import ollama, services
from ..lib.command import have_command, run_cmd
from ..lib.files import count_lines
from ..lib.pkg import dpkg_installed
from ..lib.venv import import_versions
from ..logging_utils import log_header

logger = logging.getLogger(__name__)


class Report:
    def __init__(self) -> None:
        self.sections: Dict[str, List[Dict[str, Any]]] = {}

    def add(self, section: str, item: str, ok: bool, detail: str = "", bad: str = "MISSING") -> None:
        self.sections.setdefault(section, []).append({"item": item, "ok": ok, "detail": detail})
        tag = "OK" if ok else bad
        suffix = f" ({detail})" if detail else ""
        logger.info("  [%s] %s%s", tag, item, suffix)

    def failed(self, section: str) -> List[str]:
        return [c["item"] for c in self.sections.get(section, []) if not c["ok"]]

    def as_dict(self) -> Dict[str, Any]:
        return {"sections": self.sections}


class VerifyStep:
    """Re-check every expected artifact and service, then print the summary."""

    step_id = "90_verify"
    title = "Final Verification"
    always_run = True

    def _libraries(self, cfg: LabConfig, report: Report) -> None:
        logger.info("Library Check:")
        versions = import_versions(cfg.venv_python, cfg.verify_imports, dry_run=cfg.dry_run)
        for name, _ in cfg.verify_imports:
            ver = versions.get(name)
            report.add("libraries", name, ver is not None, ver or "NOT FOUND")

    def _datasets(self, cfg: LabConfig, report: Report) -> None:
        logger.info("Dataset Check:")
        for ds in cfg.datasets:
            p = cfg.datasets_dir / ds.filename
            if p.is_file():
                report.add("datasets", ds.filename, True, f"{count_lines(p)} {ds.unit}")
            else:
                report.add("datasets", ds.filename, False)

    def _notebooks(self, cfg: LabConfig, report: Report) -> None:
        logger.info("Notebook Check:")
        for name in cfg.notebooks:
            report.add("notebooks", name, (cfg.notebooks_dir / name).is_file())

    def _services(self, cfg: LabConfig, report: Report) -> None:
        logger.info("Service Check:")
        dry_run = cfg.dry_run
        kind = cfg.autostart_kind
        if kind == "systemd":
            unit = f"{cfg.service_name}.service"
            report.add(
                "services",
                f"JupyterLab systemd service ({unit})",
                services.systemd_is_active(unit, dry_run=dry_run),
                bad="STOPPED",
            )
            if cfg.platform_id == "azure":
                port = cfg.platform.get("rdp_port") or 3389
                report.add(
                    "services",
                    f"xrdp on port {port}",
                    services.systemd_is_active("xrdp", dry_run=dry_run),
                    bad="STOPPED",
                )
        elif kind == "launchagent":
            report.add("services", "LaunchAgent plist", cfg.launch_agent_path.is_file())
            report.add(
                "services",
                f"LaunchAgent {cfg.launch_agent_label} loaded",
                services.launchctl_is_loaded(cfg.launch_agent_label, dry_run=dry_run),
                bad="STOPPED",
            )
        elif kind == "task_scheduler":
            report.add("services", f"Scheduled task {cfg.task_name}", services.schtasks_exists(cfg.task_name, dry_run=dry_run))

        if cfg.llm_enabled:
            ready = dry_run or ollama.api_responding(cfg.llm_api_base)
            report.add("services", "Ollama API", ready, cfg.llm_api_base, bad="STOPPED")

    def _remote_desktop(self, cfg: LabConfig, report: Report) -> None:
        logger.info("Desktop and Config Check:")
        report.add("desktop", "Google Chrome", have_command("google-chrome-stable") or cfg.dry_run)
        xsession = cfg.home / ".xsession"
        configured = xsession.is_file() and "xfce4-session" in xsession.read_text(encoding="utf-8", errors="ignore")
        report.add("desktop", "~/.xsession -> xfce4-session", configured or cfg.dry_run)
        report.add("desktop", "Emoji font", cfg.dry_run or dpkg_installed("fonts-noto-color-emoji"))

    def _desktop_files(self, cfg: LabConfig, report: Report, log_path: Path) -> None:
        logger.info("Desktop Files Check:")
        for p in (cfg.html_shortcut_path, cfg.backup_launcher_path, log_path):
            report.add("files", p.name, p.is_file())

    def _vm_ip(self) -> Optional[str]:
        r = run_cmd(["hostname", "-I"], check=False)
        parts = r.stdout.split() if r.ok else []
        return parts[0] if parts else None

    def _summary(self, cfg: LabConfig, log_path: Path) -> None:
        log_header("INSTALLATION COMPLETE", logger)
        logger.info("  Lab folder  : %s", cfg.lab_dir)
        logger.info("  Jupyter URL : %s", cfg.jupyter_url)
        logger.info("  Token       : %s", cfg.token)
        logger.info("  Log file    : %s", log_path)
        logger.info("  Desktop shortcuts:")
        logger.info("    - %s  (double-click to open the lab in a browser)", cfg.html_shortcut_path.name)
        logger.info("    - %s  (backup if auto-start stops working)", cfg.backup_launcher_path.name)

        if cfg.platform_id == "azure":
            ip = None if cfg.dry_run else self._vm_ip()
            port = cfg.platform.get("rdp_port") or 3389
            logger.info("  NEXT STEPS")
            logger.info("  1. Open TCP port %s in Azure: Portal -> VM -> Networking -> Add inbound rule", port)
            logger.info("  2. If only SSH keys are set up, set a password: sudo passwd %s", cfg.user)
            logger.info("  3. Connect with any RDP client to %s", ip or "<VM public IP>")
            logger.info("  4. Log in as %s and double-click %s", cfg.user, cfg.html_shortcut_path.name)
        elif cfg.is_macos:
            logger.info("  JupyterLab starts automatically every time you log in.")
        elif cfg.is_windows:
            logger.info("  JupyterLab starts automatically at logon (Task Scheduler: %s).", cfg.task_name)
        else:
            logger.info("  JupyterLab starts automatically on every boot.")

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        paths = (state.get("execution") or {}).get("paths") or {}
        log_path = Path(str(paths.get("log_path_actual") or cfg.log_path))

        report = Report()
        self._libraries(cfg, report)
        self._datasets(cfg, report)
        self._notebooks(cfg, report)
        self._services(cfg, report)
        if cfg.platform_id == "azure":
            self._remote_desktop(cfg, report)
        self._desktop_files(cfg, report, log_path)

        state.setdefault("execution", {})["verification"] = report.as_dict()

        missing_libs = report.failed("libraries")
        if missing_libs:
            raise RuntimeError(f"Some libraries missing ({', '.join(missing_libs)}). Please re-run the installer.")
        logger.info("All libraries verified OK")

        self._summary(cfg, log_path)
        return state
