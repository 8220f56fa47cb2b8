from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Every Azure VM reports this DMI chassis asset tag.
AZURE_ASSET_TAG = "7783-7084-3265-9085-8269-3286-77"


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").strip()
        return txt or None
    except OSError:
        return None


def is_azure_vm(dmi_dir: Path = Path("/sys/class/dmi/id")) -> bool:
    return _read_text(dmi_dir / "chassis_asset_tag") == AZURE_ASSET_TAG


def detect_platform(system: Optional[str] = None) -> str:
    """Return the platform id whose manifest should drive this run."""

    s = (system or platform.system()).lower()
    if s == "windows":
        return "windows"
    if s == "darwin":
        return "macos"
    if s == "linux":
        return "azure" if is_azure_vm() else "ubuntu"
    raise RuntimeError(f"Unsupported operating system: {system or platform.system()}")


def is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0
