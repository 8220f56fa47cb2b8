from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .command import run_cmd

logger = logging.getLogger(__name__)

# Runs inside the lab venv; prints {"name": "version" | null} as JSON.
_IMPORT_CHECK = """
import importlib, json, sys, warnings
warnings.filterwarnings("ignore")
out = {}
for name, mod in json.loads(sys.argv[1]):
    try:
        out[name] = getattr(importlib.import_module(mod), "__version__", "unknown")
    except Exception:
        out[name] = None
print(json.dumps(out))
"""


def normalize_dist_name(name: str) -> str:
    return re.sub(r"[-_.]+", "-", name).lower()


def create_venv(python_exe: str, venv_path: Path, *, dry_run: bool = False) -> None:
    run_cmd([python_exe, "-m", "venv", str(venv_path)], dry_run=dry_run)


def pip_upgrade(venv_python: Path, *, dry_run: bool = False) -> None:
    run_cmd([str(venv_python), "-m", "pip", "install", "--upgrade", "pip"], dry_run=dry_run)


def pip_install(venv_python: Path, packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    run_cmd([str(venv_python), "-m", "pip", "install", *packages], dry_run=dry_run)


def installed_distributions(venv_python: Path, *, dry_run: bool = False) -> Dict[str, str]:
    """Map normalized distribution name -> version for the venv."""

    if dry_run:
        return {}
    r = run_cmd([str(venv_python), "-m", "pip", "list", "--format=json", "--disable-pip-version-check"])
    try:
        rows = json.loads(r.stdout or "[]")
    except json.JSONDecodeError as e:
        raise RuntimeError(f"Unexpected pip list output: {r.stdout[:200]!r}") from e
    return {normalize_dist_name(row["name"]): str(row.get("version", "")) for row in rows}


def missing_packages(requested: Sequence[str], installed: Dict[str, str]) -> List[str]:
    # Requirement specifiers ("numpy>=1.26") are matched on the bare name.
    out: List[str] = []
    for req in requested:
        bare = re.split(r"[<>=!~;\[ ]", req, maxsplit=1)[0]
        if normalize_dist_name(bare) not in installed:
            out.append(req)
    return out


def import_versions(
    venv_python: Path,
    modules: Sequence[Tuple[str, str]],
    *,
    dry_run: bool = False,
) -> Dict[str, Optional[str]]:
    """Import each module inside the venv, returning display name -> version (None if missing)."""

    if dry_run:
        return {name: "dry-run" for name, _ in modules}
    r = run_cmd(
        [str(venv_python), "-c", _IMPORT_CHECK, json.dumps([list(m) for m in modules])],
        check=False,
    )
    if not r.ok:
        logger.warning("Import check failed: %s", r.stderr.strip())
        return {name: None for name, _ in modules}
    try:
        # Library import noise may precede the JSON line.
        return json.loads(r.stdout.strip().splitlines()[-1])
    except (IndexError, json.JSONDecodeError):
        logger.warning("Unexpected import check output: %r", r.stdout[:200])
        return {name: None for name, _ in modules}
