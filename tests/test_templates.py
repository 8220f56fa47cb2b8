import plistlib
import xml.etree.ElementTree as ET

import pytest

from lab_installer.config import lab_config_from_state
from lab_installer.lib.templates import (
    _ps_quote,
    render_backup_launcher_ps1,
    render_backup_launcher_sh,
    render_chrome_wrapper,
    render_html_shortcut,
    render_jupyter_config,
    render_launch_agent,
    render_systemd_unit,
    render_task_xml,
)

TASK_NS = {"t": "http://schemas.microsoft.com/windows/2004/02/mit/task"}


@pytest.fixture
def cfg(make_state):
    return lab_config_from_state(make_state("ubuntu"))


def test_jupyter_config_sets_token_and_default_notebook(cfg):
    text = render_jupyter_config(cfg)
    lines = [l.replace(" ", "") for l in text.splitlines()]

    assert "c.ServerApp.token='airedteamlab'" in lines
    assert "c.ServerApp.open_browser=False" in lines
    assert "c.ServerApp.port=8888" in lines
    assert "c.ServerApp.default_url='/lab/tree/START_HERE.ipynb'" in lines
    assert render_jupyter_config(cfg) == text


def test_systemd_unit_carries_token_on_execstart(cfg):
    unit = render_systemd_unit(cfg)
    exec_block = unit.split("ExecStart=", 1)[1].split("\nRestart=", 1)[0]

    assert exec_block.startswith(f"{cfg.jupyter_exe} lab")
    assert "--ServerApp.token='airedteamlab'" in exec_block
    assert "User=student" in unit
    assert f"WorkingDirectory={cfg.notebooks_dir}" in unit
    assert "Restart=on-failure" in unit
    assert "WantedBy=multi-user.target" in unit


def test_launch_agent_is_valid_plist(make_state):
    cfg = lab_config_from_state(make_state("macos"))
    plist = plistlib.loads(render_launch_agent(cfg).encode("utf-8"))

    assert plist["Label"] == "com.airedteamlab.jupyterlab"
    assert plist["RunAtLoad"] is True
    assert plist["ProgramArguments"] == ["/bin/bash", str(cfg.backup_launcher_path)]


def test_task_xml_is_well_formed(make_state):
    cfg = lab_config_from_state(make_state("windows"))
    text = render_task_xml(cfg)
    assert text.startswith('<?xml version="1.0" encoding="UTF-16"?>')

    # ElementTree refuses str input carrying an encoding declaration.
    root = ET.fromstring(text.split("\n", 1)[1])
    assert root.find("t:Triggers/t:LogonTrigger/t:UserId", TASK_NS).text == "student"
    args = root.find("t:Actions/t:Exec/t:Arguments", TASK_NS).text
    assert str(cfg.backup_launcher_path) in args
    assert "-ExecutionPolicy Bypass" in args


def test_html_shortcut_redirects_to_lab(cfg):
    page = render_html_shortcut(cfg)
    url = "http://localhost:8888/lab?token=airedteamlab"

    assert f'content="2;url={url}"' in page
    assert f'href="{url}"' in page


def test_backup_launcher_sh_activates_venv(cfg):
    script = render_backup_launcher_sh(cfg)

    assert script.startswith("#!/bin/bash\n")
    assert f'. "{cfg.venv_bin}/activate"' in script
    assert f'cd "{cfg.notebooks_dir}"' in script
    assert "--ServerApp.token='airedteamlab'" in script


def test_backup_launcher_ps1_uses_venv_jupyter(make_state):
    cfg = lab_config_from_state(make_state("windows"))
    script = render_backup_launcher_ps1(cfg)

    assert f"& {_ps_quote(str(cfg.jupyter_exe))} @jupyterArgs" in script
    assert "'--ServerApp.token=''airedteamlab'''" in script


def test_ps_quote_doubles_single_quotes():
    assert _ps_quote("C:\\Users\\o'brien") == "'C:\\Users\\o''brien'"


def test_chrome_wrapper_disables_sandbox():
    assert render_chrome_wrapper("/usr/bin/google-chrome-stable").endswith(
        'exec /usr/bin/google-chrome-stable --no-sandbox "$@"\n'
    )
