from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import lab_config_from_state
from .lib.manifests import PLATFORMS, load_lab_manifest, platform_step_ids
from .lib.platforms import detect_platform
from .logging_utils import configure_logging, log_run_banner
from .pipeline import Step, run_pipeline
from .state_store import apply_overrides, ensure_defaults, load_config_file, load_state, save_state
from .steps import STEP_CLASSES

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = str(Path.home() / ".lab_installer" / "state.json")


def build_steps(platform_id: str) -> List[Step]:
    """Instantiate the platform's steps in manifest order."""

    steps: List[Step] = []
    for step_id in platform_step_ids(platform_id):
        cls = STEP_CLASSES.get(step_id)
        if cls is None:
            raise ValueError(f"platforms/{platform_id}.yaml names unknown step {step_id!r}")
        steps.append(cls())
    return steps


def prepare_state(
    *,
    state_path: str,
    config_path: Optional[str] = None,
    platform_id: Optional[str] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    state = load_state(state_path)
    if config_path:
        apply_overrides(state.setdefault("config", {}), load_config_file(config_path))
    state = ensure_defaults(state, lab_manifest=load_lab_manifest())

    cfg = state["config"]
    if platform_id:
        cfg["platform"] = platform_id
    elif not cfg.get("platform"):
        cfg["platform"] = detect_platform()
    if dry_run:
        cfg["dry_run"] = True
    # Warnings describe the current run only.
    state["execution"]["warnings"] = []
    return state


def run(
    *,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: Optional[str] = None,
    config_path: Optional[str] = None,
    platform_id: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Run the installer pipeline, persisting state for resume."""

    state = prepare_state(state_path=state_path, config_path=config_path, platform_id=platform_id, dry_run=dry_run)
    lab_cfg = lab_config_from_state(state)

    requested_log = log_path or str(lab_cfg.log_path)
    actual_log_path = configure_logging(log_path=requested_log)
    state.setdefault("execution", {}).setdefault("paths", {})["log_path_requested"] = requested_log
    state.setdefault("execution", {}).setdefault("paths", {})["log_path_actual"] = actual_log_path
    log_run_banner(lab_cfg)

    steps = build_steps(lab_cfg.platform_id)

    try:
        result = run_pipeline(
            state=state,
            steps=steps,
            start_at=start_at,
            stop_after=stop_after,
            force=force,
        )
        state = result.state
        summary = state.setdefault("execution", {}).setdefault("summary", {})
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        summary["degraded_steps"] = result.degraded_steps
        warnings = (state.get("execution") or {}).get("warnings") or []
        if warnings:
            logger.warning("Completed with %d warning(s); see %s", len(warnings), actual_log_path)
        return state
    except Exception as e:
        logger.exception("Installer failed")
        logger.error("Installation failed. Check the log file for details: %s", actual_log_path)
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        if lab_cfg.dry_run:
            # A dry run must not mark steps completed for the real run.
            logger.info("Dry run: state not saved to %s", state_path)
        else:
            save_state(state_path, state)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="lab-installer", description="Provision the AI Red Team Lab environment.")
    p.add_argument("--platform", choices=PLATFORMS, default=None, help="Platform variant (default: auto-detect)")
    p.add_argument("--config", default=None, help="YAML file overriding lab settings")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=None, help="Path to installer log (default: Desktop/lab_installer_log.txt)")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 50_datasets)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", help="Log commands and files without changing the system")

    args = p.parse_args(argv)

    try:
        run(
            state_path=args.state,
            log_path=args.log,
            config_path=args.config,
            platform_id=args.platform,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
            dry_run=args.dry_run,
        )
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
