"""Shared fixtures: an isolated lab state under tmp_path and a fake command runner."""

import logging
from typing import List, Sequence, Tuple

import pytest

from lab_installer.lib.command import CmdResult
from lab_installer.lib.manifests import load_lab_manifest
from lab_installer.state_store import apply_overrides, ensure_defaults

# Modules that bind run_cmd at import time. sudo_cmd resolves run_cmd through
# lab_installer.lib.command, so patching that module covers it.
RUN_CMD_MODULES = (
    "lab_installer.lib.command",
    "lab_installer.bootstrap",
    "lab_installer.lib.pkg",
    "lab_installer.lib.services",
    "lab_installer.lib.venv",
    "lab_installer.lib.ollama",
    "lab_installer.steps.step_16_browser",
    "lab_installer.steps.step_18_emoji_font",
    "lab_installer.steps.step_90_verify",
)


def _contains(argv: Sequence[str], seq: Sequence[str]) -> bool:
    n = len(seq)
    return any(list(argv[i : i + n]) == list(seq) for i in range(len(argv) - n + 1))


class FakeRunner:
    """Stands in for run_cmd; records argv and answers from canned results."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self._results: List[Tuple[List[str], int, str]] = []

    def on(self, *tokens: str, returncode: int = 0, stdout: str = "") -> None:
        """Answer any command containing tokens (in order, adjacent)."""
        self._results.insert(0, (list(tokens), returncode, stdout))

    def __call__(self, argv, *, check=True, env=None, cwd=None, input_text=None, dry_run=False) -> CmdResult:
        argv_list = [str(a) for a in argv]
        self.calls.append(argv_list)
        if dry_run:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")
        rc, out = 0, ""
        for tokens, code, stdout in self._results:
            if _contains(argv_list, tokens):
                rc, out = code, stdout
                break
        if check and rc != 0:
            raise RuntimeError(f"Command failed ({rc}): {' '.join(argv_list)}")
        return CmdResult(argv=argv_list, returncode=rc, stdout=out, stderr="")

    def ran(self, *tokens: str) -> bool:
        return any(_contains(c, tokens) for c in self.calls)


@pytest.fixture
def fake_cmd(monkeypatch):
    runner = FakeRunner()
    for mod in RUN_CMD_MODULES:
        monkeypatch.setattr(f"{mod}.run_cmd", runner)
    return runner


@pytest.fixture
def lab_home(tmp_path):
    home = tmp_path / "home"
    (home / "Desktop").mkdir(parents=True)
    return home


@pytest.fixture
def make_state(lab_home):
    """Build a defaulted state for a platform with home under tmp_path."""

    def _make(platform: str = "ubuntu", **config):
        state = {"config": {"platform": platform, "user": "student", "home": str(lab_home)}}
        apply_overrides(state["config"], config)
        return ensure_defaults(state, lab_manifest=load_lab_manifest())

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    """configure_logging() is one-shot per process; undo it between tests."""

    root = logging.getLogger()
    before = list(root.handlers)
    yield
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    for attr in ("_lab_installer_configured", "_lab_installer_log_path"):
        if hasattr(root, attr):
            delattr(root, attr)
