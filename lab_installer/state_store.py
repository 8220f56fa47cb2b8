from __future__ import annotations

import copy
import getpass
import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def _yaml():
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("YAML state requested but PyYAML is not available. Use JSON state instead.") from e
    return yaml


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    if _detect_format(p) in {"yaml", "yml"}:
        data = _yaml().safe_load(p.read_text(encoding="utf-8")) or {}
    else:
        data = json.loads(p.read_text(encoding="utf-8"))

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(_yaml().safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True, default=str) + "\n", encoding="utf-8")


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a YAML overrides file for state['config']."""

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("config overrides must be YAML")
    raw = _yaml().safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")
    return raw


def merge_defaults(target: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively fill keys from defaults without overriding existing values."""

    for key, value in defaults.items():
        if key not in target:
            target[key] = copy.deepcopy(value)
        elif isinstance(target[key], dict) and isinstance(value, dict):
            merge_defaults(target[key], value)
    return target


def ensure_defaults(state: Dict[str, Any], *, lab_manifest: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding user values)."""

    state.setdefault("version", "1.0")
    state.setdefault("config", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    cfg.setdefault("platform", None)
    cfg.setdefault("dry_run", False)
    cfg.setdefault("user", getpass.getuser())
    cfg.setdefault("home", str(Path.home()))
    merge_defaults(cfg, lab_manifest)

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("warnings", [])
    exe.setdefault("errors", [])

    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def unmark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    completed = (state.get("execution") or {}).get("completed_steps") or []
    if step_id in completed:
        completed.remove(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed


def add_warning(state: Dict[str, Any], step_id: str, reason: str, **details: Any) -> None:
    entry: Dict[str, Any] = {"step": step_id, "reason": reason}
    entry.update(details)
    state.setdefault("execution", {}).setdefault("warnings", []).append(entry)


def warning_count(state: Dict[str, Any]) -> int:
    return len((state.get("execution") or {}).get("warnings") or [])


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value


def apply_overrides(target: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into target (override values win)."""

    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            apply_overrides(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
    return target
