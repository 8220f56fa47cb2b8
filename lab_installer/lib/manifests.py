from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

PLATFORMS = ("ubuntu", "azure", "macos", "windows")


def _manifests_root() -> Path:
    # lab_installer/lib/manifests.py -> lab_installer/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file relative to the bundled manifests directory."""
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML required to load manifests") from e

    p = _manifests_root() / rel_path.lstrip("/")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def load_lab_manifest() -> Dict[str, Any]:
    return load_yaml_rel("lab.yaml")


def load_platform_manifest(platform_id: str) -> Dict[str, Any]:
    if platform_id not in PLATFORMS:
        raise ValueError(f"Unknown platform {platform_id!r} (expected one of {', '.join(PLATFORMS)})")
    data = load_yaml_rel(f"platforms/{platform_id}.yaml")
    steps = data.get("steps") or []
    if not isinstance(steps, list) or not steps:
        raise ValueError(f"platforms/{platform_id}.yaml: steps must be a non-empty list")
    return data


def platform_step_ids(platform_id: str) -> List[str]:
    return [str(s) for s in load_platform_manifest(platform_id)["steps"]]
