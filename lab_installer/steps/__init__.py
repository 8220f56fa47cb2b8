from .step_05_preflight import PreflightStep
from .step_10_system_update import SystemUpdateStep
from .step_12_desktop_environment import DesktopEnvironmentStep
from .step_14_remote_desktop import RemoteDesktopStep
from .step_16_browser import BrowserStep
from .step_18_emoji_font import EmojiFontStep
from .step_20_system_packages import SystemPackagesStep
from .step_30_create_venv import CreateVenvStep
from .step_32_upgrade_pip import UpgradePipStep
from .step_34_python_packages import PythonPackagesStep
from .step_40_lab_folders import LabFoldersStep
from .step_50_datasets import DatasetsStep
from .step_55_notebooks import NotebooksStep
from .step_60_local_llm import LocalLLMStep
from .step_70_jupyter_config import JupyterConfigStep
from .step_75_backup_launcher import BackupLauncherStep
from .step_80_autostart import AutostartStep
from .step_85_desktop_shortcut import DesktopShortcutStep
from .step_90_verify import VerifyStep

STEP_CLASSES = {
    cls.step_id: cls
    for cls in (
        PreflightStep,
        SystemUpdateStep,
        DesktopEnvironmentStep,
        RemoteDesktopStep,
        BrowserStep,
        EmojiFontStep,
        SystemPackagesStep,
        CreateVenvStep,
        UpgradePipStep,
        PythonPackagesStep,
        LabFoldersStep,
        DatasetsStep,
        NotebooksStep,
        LocalLLMStep,
        JupyterConfigStep,
        BackupLauncherStep,
        AutostartStep,
        DesktopShortcutStep,
        VerifyStep,
    )
}

__all__ = [
    "STEP_CLASSES",
    "PreflightStep",
    "SystemUpdateStep",
    "DesktopEnvironmentStep",
    "RemoteDesktopStep",
    "BrowserStep",
    "EmojiFontStep",
    "SystemPackagesStep",
    "CreateVenvStep",
    "UpgradePipStep",
    "PythonPackagesStep",
    "LabFoldersStep",
    "DatasetsStep",
    "NotebooksStep",
    "LocalLLMStep",
    "JupyterConfigStep",
    "BackupLauncherStep",
    "AutostartStep",
    "DesktopShortcutStep",
    "VerifyStep",
]
