from __future__ import annotations

import logging
import subprocess
from typing import List

import requests

from .command import have_command, run_cmd
from .pkg import winget_install
from .services import systemd_enable, systemd_is_active, systemd_restart, systemd_start

logger = logging.getLogger(__name__)

STATUS_TIMEOUT_S = 3


def is_installed() -> bool:
    return have_command("ollama")


def install(platform_id: str, *, install_script: str, winget_id: str, dry_run: bool = False) -> None:
    if platform_id in {"ubuntu", "azure"}:
        # The official script also registers ollama.service with systemd.
        run_cmd(["bash", "-c", f"curl -fsSL {install_script} | sh"], dry_run=dry_run)
    elif platform_id == "macos":
        if not have_command("brew"):
            raise RuntimeError("Homebrew not found; install Ollama from https://ollama.com/download")
        run_cmd(["brew", "install", "ollama"], dry_run=dry_run)
    elif platform_id == "windows":
        winget_install(winget_id, dry_run=dry_run)
    else:
        raise RuntimeError(f"No Ollama install method for platform {platform_id}")


def api_responding(api_base: str) -> bool:
    try:
        r = requests.get(f"{api_base}/api/version", timeout=STATUS_TIMEOUT_S)
    except requests.RequestException:
        return False
    return r.status_code == 200


def _spawn_serve() -> None:
    kwargs = {}
    if hasattr(subprocess, "DETACHED_PROCESS"):
        kwargs["creationflags"] = subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
    else:
        kwargs["start_new_session"] = True
    logger.info("CMD ollama serve (background)")
    try:
        subprocess.Popen(
            ["ollama", "serve"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **kwargs,
        )
    except OSError as e:
        # Right after a winget install this process still has the old PATH.
        raise RuntimeError(f"Could not launch ollama serve: {e}") from e


class OllamaService:
    """Start/restart/status for the local runtime, per process manager."""

    def __init__(self, platform_id: str, *, service_name: str, api_base: str, dry_run: bool = False) -> None:
        self.platform_id = platform_id
        self.service_name = service_name
        self.api_base = api_base
        self.dry_run = dry_run

    @property
    def uses_systemd(self) -> bool:
        return self.platform_id in {"ubuntu", "azure"}

    def start(self) -> None:
        if self.uses_systemd:
            systemd_enable(self.service_name, dry_run=self.dry_run)
            systemd_start(self.service_name, dry_run=self.dry_run)
        elif self.platform_id == "macos" and have_command("brew"):
            run_cmd(["brew", "services", "start", "ollama"], dry_run=self.dry_run)
        elif not self.dry_run:
            _spawn_serve()

    def restart(self) -> None:
        if self.uses_systemd:
            systemd_restart(self.service_name, dry_run=self.dry_run)
        elif self.platform_id == "macos" and have_command("brew"):
            run_cmd(["brew", "services", "restart", "ollama"], dry_run=self.dry_run)
        elif not self.dry_run:
            _spawn_serve()

    def is_ready(self) -> bool:
        if self.dry_run:
            return True
        if self.uses_systemd and not systemd_is_active(self.service_name):
            return False
        return api_responding(self.api_base)

    def list_models(self) -> List[str]:
        if self.dry_run:
            return []
        r = requests.get(f"{self.api_base}/api/tags", timeout=STATUS_TIMEOUT_S)
        r.raise_for_status()
        return [str(m.get("name")) for m in (r.json().get("models") or [])]

    def pull(self, model: str) -> None:
        run_cmd(["ollama", "pull", model], dry_run=self.dry_run)


def model_present(model: str, installed: List[str]) -> bool:
    # "llama3.2" and "llama3.2:latest" name the same model.
    want = model if ":" in model else f"{model}:latest"
    return any(name == model or name == want for name in installed)
