from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..config import lab_config_from_state
from ..lib.command import have_command, run_cmd, sudo_cmd
from ..lib.fetch import download
from ..lib.files import write_file
from ..lib.pkg import apt_install
from ..lib.templates import render_chrome_desktop_entry, render_chrome_wrapper

logger = logging.getLogger(__name__)

CHROME_BINARY = "/usr/bin/google-chrome-stable"
DEFAULT_CHROME_DEB = "https://dl.google.com/linux/direct/google-chrome-stable_current_amd64.deb"


class BrowserStep:
    """Google Chrome as the default browser.

    XFCE ships without a browser, so double-clicking the HTML shortcut fails
    with "failed to execute default web browser" until one is registered.
    """

    step_id = "16_browser"
    title = "Google Chrome Browser"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        dry_run = cfg.dry_run

        if have_command("google-chrome-stable") or have_command("google-chrome"):
            logger.info("Google Chrome already installed; skipping download")
        else:
            url = str(cfg.platform.get("chrome_deb_url") or DEFAULT_CHROME_DEB)
            deb = Path("/tmp/google-chrome-stable.deb")
            download(url, deb, dry_run=dry_run)
            try:
                # The .deb also adds Google's apt repo for future updates.
                apt_install([str(deb)], dry_run=dry_run)
            finally:
                if not dry_run:
                    deb.unlink(missing_ok=True)
            logger.info("Google Chrome installed")

        # Register as default at system and XDG level; both may already be set.
        sudo_cmd(["update-alternatives", "--set", "x-www-browser", CHROME_BINARY], check=False, dry_run=dry_run)
        run_cmd(["xdg-settings", "set", "default-web-browser", "google-chrome.desktop"], check=False, dry_run=dry_run)

        wrapper = cfg.home / ".local" / "bin" / "chrome-rdp"
        write_file(wrapper, render_chrome_wrapper(CHROME_BINARY), executable=True, dry_run=dry_run)

        apps_dir = cfg.home / ".local" / "share" / "applications"
        write_file(apps_dir / "chrome-rdp.desktop", render_chrome_desktop_entry(str(wrapper)), dry_run=dry_run)
        run_cmd(["update-desktop-database", str(apps_dir)], check=False, dry_run=dry_run)
        run_cmd(["xdg-mime", "default", "chrome-rdp.desktop", "text/html"], check=False, dry_run=dry_run)

        logger.info("Chrome wrapper set as handler for HTML files")
        return state
