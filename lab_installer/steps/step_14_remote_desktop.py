from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.command import sudo_cmd
from ..lib.files import write_file
from ..lib.pkg import apt_install_missing
from ..lib.services import systemd_enable, systemd_is_active, systemd_restart
from ..state_store import add_warning

logger = logging.getLogger(__name__)

XSESSION = "xfce4-session\n"


class RemoteDesktopStep:
    """xrdp server so students can RDP into the VM."""

    step_id = "14_remote_desktop"
    title = "xrdp Remote Desktop Server"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        dry_run = cfg.dry_run
        port = int(cfg.platform.get("rdp_port") or 3389)

        # Reconfigured on every run so a half-configured VM converges.
        apt_install_missing(["xrdp"], dry_run=dry_run)
        systemd_enable("xrdp", dry_run=dry_run)

        # xrdp needs the ssl-cert group to read its TLS key on Ubuntu 24.
        # adduser exits 1 when the membership already exists.
        sudo_cmd(["adduser", "xrdp", "ssl-cert"], check=False, dry_run=dry_run)

        # Without ~/.xsession xrdp does not know to start XFCE (grey screen).
        write_file(cfg.home / ".xsession", XSESSION, dry_run=dry_run)

        systemd_restart("xrdp", dry_run=dry_run)
        if systemd_is_active("xrdp", dry_run=dry_run):
            logger.info("xrdp is running and listening on port %s", port)
        else:
            logger.warning("xrdp did not start cleanly. Check: sudo systemctl status xrdp")
            add_warning(state, self.step_id, "xrdp_not_active")
        return state
