from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .lib.manifests import load_platform_manifest


@dataclass(frozen=True)
class DatasetSpec:
    name: str
    url: str
    filename: str
    download_as: Optional[str] = None
    archive: Optional[str] = None
    cleanup: Tuple[str, ...] = ()
    unit: str = "lines"
    required: bool = True

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "DatasetSpec":
        for key in ("name", "url", "filename"):
            if not raw.get(key):
                raise ValueError(f"dataset entry missing {key!r}: {raw}")
        return cls(
            name=str(raw["name"]),
            url=str(raw["url"]),
            filename=str(raw["filename"]),
            download_as=raw.get("download_as"),
            archive=raw.get("archive"),
            cleanup=tuple(str(c) for c in (raw.get("cleanup") or [])),
            unit=str(raw.get("unit") or "lines"),
            required=bool(raw.get("required", True)),
        )

    @property
    def download_name(self) -> str:
        return self.download_as or self.filename


@dataclass(frozen=True)
class LabConfig:
    """Typed view over state['config'] plus the platform manifest.

    All values are plain lookups with defaults; nothing here touches the
    filesystem, so templates rendered from a LabConfig are deterministic.
    """

    raw: Dict[str, Any]
    platform: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    # -- runtime ---------------------------------------------------------

    @property
    def platform_id(self) -> str:
        return str(self.raw.get("platform") or self.platform.get("platform") or "ubuntu")

    @property
    def is_windows(self) -> bool:
        return self.platform_id == "windows"

    @property
    def is_macos(self) -> bool:
        return self.platform_id == "macos"

    @property
    def is_linux(self) -> bool:
        return self.platform_id in {"ubuntu", "azure"}

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    @property
    def user(self) -> str:
        return str(self.raw.get("user") or "student")

    @property
    def home(self) -> Path:
        return Path(str(self.raw.get("home") or Path.home()))

    # -- lab layout ------------------------------------------------------

    @property
    def title(self) -> str:
        return str(self._section("lab").get("title") or "AI Red Team Lab")

    @property
    def desktop_dir(self) -> Path:
        override = (self.raw.get("paths") or {}).get("desktop")
        return Path(str(override)) if override else self.home / "Desktop"

    @property
    def venv_path(self) -> Path:
        return self.home / str(self._section("lab").get("venv_name") or "lab_env")

    @property
    def venv_bin(self) -> Path:
        return self.venv_path / ("Scripts" if self.is_windows else "bin")

    @property
    def venv_python(self) -> Path:
        return self.venv_bin / ("python.exe" if self.is_windows else "python")

    @property
    def jupyter_exe(self) -> Path:
        return self.venv_bin / ("jupyter.exe" if self.is_windows else "jupyter")

    @property
    def lab_dir(self) -> Path:
        return self.desktop_dir / str(self._section("lab").get("folder_name") or "AI_Red_Team_Lab")

    @property
    def datasets_dir(self) -> Path:
        return self.lab_dir / "datasets"

    @property
    def notebooks_dir(self) -> Path:
        return self.lab_dir / "notebooks"

    @property
    def outputs_dir(self) -> Path:
        return self.lab_dir / "outputs"

    @property
    def log_path(self) -> Path:
        return self.desktop_dir / str(self._section("lab").get("log_file_name") or "lab_installer_log.txt")

    @property
    def html_shortcut_path(self) -> Path:
        return self.desktop_dir / "Open_Jupyter_Lab.html"

    @property
    def backup_launcher_path(self) -> Path:
        return self.desktop_dir / ("start_jupyter.ps1" if self.is_windows else "start_jupyter.sh")

    # -- jupyter ---------------------------------------------------------

    @property
    def token(self) -> str:
        return str(self._section("jupyter").get("token") or "airedteamlab")

    @property
    def port(self) -> int:
        return int(self._section("jupyter").get("port") or 8888)

    @property
    def ip(self) -> str:
        return str(self._section("jupyter").get("ip") or "127.0.0.1")

    @property
    def default_notebook(self) -> str:
        return str(self._section("jupyter").get("default_notebook") or "START_HERE.ipynb")

    @property
    def default_url(self) -> str:
        return f"/lab/tree/{self.default_notebook}"

    @property
    def jupyter_url(self) -> str:
        return f"http://localhost:{self.port}/lab?token={self.token}"

    @property
    def jupyter_config_dir(self) -> Path:
        return self.home / ".jupyter"

    @property
    def jupyter_config_files(self) -> List[Path]:
        names = self._section("jupyter").get("config_files") or [
            "jupyter_lab_configuration.py",
            "jupyter_server_configuration.py",
        ]
        return [self.jupyter_config_dir / str(n) for n in names]

    @property
    def service_name(self) -> str:
        return str(self._section("jupyter").get("service_name") or "jupyterlab")

    @property
    def systemd_unit_path(self) -> Path:
        return Path("/etc/systemd/system") / f"{self.service_name}.service"

    @property
    def launch_agent_label(self) -> str:
        return str(self._section("jupyter").get("launch_agent_label") or "com.airedteamlab.jupyterlab")

    @property
    def launch_agent_path(self) -> Path:
        return self.home / "Library" / "LaunchAgents" / f"{self.launch_agent_label}.plist"

    @property
    def task_name(self) -> str:
        return str(self._section("jupyter").get("task_name") or "AIRedTeamLab-JupyterLab")

    @property
    def task_xml_path(self) -> Path:
        return self.lab_dir / f"{self.task_name}.xml"

    # -- content ---------------------------------------------------------

    @property
    def python_packages(self) -> List[str]:
        return [str(p).strip() for p in (self.raw.get("python_packages") or []) if str(p).strip()]

    @property
    def verify_imports(self) -> List[Tuple[str, str]]:
        pairs = self.raw.get("verify_imports") or []
        return [(str(p[0]), str(p[1])) for p in pairs]

    @property
    def datasets(self) -> List[DatasetSpec]:
        return [DatasetSpec.from_raw(d) for d in (self.raw.get("datasets") or [])]

    @property
    def notebook_base_url(self) -> str:
        return str(self._section("notebooks").get("base_url") or "").rstrip("/")

    @property
    def notebooks(self) -> List[str]:
        return [str(n) for n in (self._section("notebooks").get("files") or [])]

    # -- python bootstrap ------------------------------------------------

    @property
    def python_min_minor(self) -> int:
        return int(self._section("python").get("min_minor") or 9)

    @property
    def macos_python_pkg_url(self) -> str:
        return str(self._section("python").get("macos_pkg_url") or "")

    @property
    def python_winget_id(self) -> str:
        return str(self._section("python").get("winget_id") or "Python.Python.3.12")

    # -- local LLM -------------------------------------------------------

    @property
    def llm_enabled(self) -> bool:
        return bool(self._section("llm").get("enabled", False))

    @property
    def llm_api_base(self) -> str:
        return str(self._section("llm").get("api_base") or "http://127.0.0.1:11434").rstrip("/")

    @property
    def llm_service_name(self) -> str:
        return str(self._section("llm").get("service_name") or "ollama")

    @property
    def llm_models(self) -> List[str]:
        return [str(m) for m in (self._section("llm").get("models") or [])]

    @property
    def llm_poll_interval_s(self) -> float:
        return float(self._section("llm").get("poll_interval_s") or 2)

    @property
    def llm_max_wait_s(self) -> float:
        return float(self._section("llm").get("max_wait_s") or 30)

    @property
    def llm_install_script(self) -> str:
        return str(self._section("llm").get("linux_install_script") or "https://ollama.com/install.sh")

    @property
    def llm_winget_id(self) -> str:
        return str(self._section("llm").get("winget_id") or "Ollama.Ollama")

    # -- platform manifest -----------------------------------------------

    @property
    def system_packages(self) -> List[str]:
        return [str(p) for p in (self.platform.get("system_packages") or [])]

    @property
    def autostart_kind(self) -> str:
        return str(self.platform.get("autostart") or "systemd")

    @property
    def refuse_root(self) -> bool:
        return bool(self.platform.get("refuse_root", False))


def lab_config_from_state(state: Dict[str, Any]) -> LabConfig:
    cfg = state.get("config") or {}
    platform_id = str(cfg.get("platform") or "ubuntu")
    return LabConfig(raw=cfg, platform=load_platform_manifest(platform_id))
