from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr so callers can inspect or record them.
    - dry_run logs but does not execute.
    """

    argv_list = [str(a) for a in argv]
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        if check:
            raise RuntimeError(f"Command not found: {argv_list[0]}") from e
        return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

    if p.stdout:
        logger.debug("STDOUT %s", p.stdout.strip())
    if p.stderr:
        logger.debug("STDERR %s", p.stderr.strip())

    if check and p.returncode != 0:
        raise RuntimeError(f"Command failed ({p.returncode}): {_fmt_argv(argv_list)}\n{p.stderr}")

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


def sudo_cmd(argv: Sequence[str], **kwargs) -> CmdResult:
    """Run a command through sudo (the installer itself runs as the lab user)."""

    return run_cmd(["sudo", *argv], **kwargs)


def have_command(name: str) -> bool:
    return shutil.which(name) is not None


def run_passthrough(argv: Sequence[str], *, dry_run: bool = False) -> int:
    """Run a command attached to this terminal (for long, interactive runs)."""

    argv_list = [str(a) for a in argv]
    logger.info("CMD %s", _fmt_argv(argv_list))
    if dry_run:
        return 0
    return subprocess.run(argv_list).returncode
