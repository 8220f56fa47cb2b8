"""Text artifacts written by the installer.

Every renderer is a pure function of LabConfig (plus explicit arguments):
same inputs, byte-identical output. Paths are only rendered, never touched.
"""

from __future__ import annotations

import html
import plistlib
from typing import List
from xml.sax.saxutils import escape as xml_escape

from ..config import LabConfig

SYSTEM_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


def _server_settings(cfg: LabConfig) -> List[tuple]:
    return [
        ("token", cfg.token),
        ("open_browser", False),
        ("port", cfg.port),
        ("root_dir", str(cfg.notebooks_dir)),
        ("default_url", cfg.default_url),
        ("ip", cfg.ip),
        ("password", ""),
    ]


def jupyter_cli_args(cfg: LabConfig) -> List[str]:
    """--ServerApp.* flags, quoted for a POSIX shell / systemd ExecStart line."""

    args: List[str] = []
    for key, value in _server_settings(cfg):
        if isinstance(value, str):
            args.append(f"--ServerApp.{key}='{value}'")
        else:
            args.append(f"--ServerApp.{key}={value}")
    return args


def render_jupyter_config(cfg: LabConfig) -> str:
    settings = _server_settings(cfg)
    width = max(len(k) for k, _ in settings)
    lines = [
        f"# {cfg.title} - Jupyter Configuration",
        "# Generated by lab-installer; re-running the installer overwrites this file.",
    ]
    for key, value in settings:
        lines.append(f"c.ServerApp.{key.ljust(width)} = {value!r}")
    return "\n".join(lines) + "\n"


def render_systemd_unit(cfg: LabConfig) -> str:
    # The token goes on ExecStart itself so it applies regardless of which
    # config file name the installed Jupyter version discovers.
    exec_lines = " \\\n    ".join([f"{cfg.jupyter_exe} lab", *jupyter_cli_args(cfg)])
    return (
        "[Unit]\n"
        f"Description=JupyterLab - {cfg.title}\n"
        "After=network.target\n"
        "\n"
        "[Service]\n"
        f"User={cfg.user}\n"
        f"WorkingDirectory={cfg.notebooks_dir}\n"
        f"ExecStart={exec_lines}\n"
        "Restart=on-failure\n"
        "RestartSec=10\n"
        f"Environment=HOME={cfg.home}\n"
        f"Environment=PATH={cfg.venv_bin}:{SYSTEM_PATH}\n"
        "\n"
        "[Install]\n"
        "WantedBy=multi-user.target\n"
    )


def render_launch_agent(cfg: LabConfig) -> str:
    plist = {
        "Label": cfg.launch_agent_label,
        "ProgramArguments": ["/bin/bash", str(cfg.backup_launcher_path)],
        "RunAtLoad": True,
        "KeepAlive": True,
        "StandardOutPath": str(cfg.desktop_dir / "jupyter_stdout.log"),
        "StandardErrorPath": str(cfg.desktop_dir / "jupyter_stderr.log"),
        "WorkingDirectory": str(cfg.notebooks_dir),
    }
    return plistlib.dumps(plist, sort_keys=False).decode("utf-8")


def render_task_xml(cfg: LabConfig) -> str:
    """Task Scheduler definition: run the PowerShell launcher at logon."""

    user = xml_escape(cfg.user)
    arguments = xml_escape(
        f'-NoProfile -ExecutionPolicy Bypass -WindowStyle Hidden -File "{cfg.backup_launcher_path}"'
    )
    return (
        '<?xml version="1.0" encoding="UTF-16"?>\n'
        '<Task version="1.2" xmlns="http://schemas.microsoft.com/windows/2004/02/mit/task">\n'
        "  <RegistrationInfo>\n"
        f"    <Description>JupyterLab - {xml_escape(cfg.title)}</Description>\n"
        "  </RegistrationInfo>\n"
        "  <Triggers>\n"
        "    <LogonTrigger>\n"
        "      <Enabled>true</Enabled>\n"
        f"      <UserId>{user}</UserId>\n"
        "    </LogonTrigger>\n"
        "  </Triggers>\n"
        "  <Principals>\n"
        '    <Principal id="Author">\n'
        f"      <UserId>{user}</UserId>\n"
        "      <LogonType>InteractiveToken</LogonType>\n"
        "      <RunLevel>LeastPrivilege</RunLevel>\n"
        "    </Principal>\n"
        "  </Principals>\n"
        "  <Settings>\n"
        "    <MultipleInstancesPolicy>IgnoreNew</MultipleInstancesPolicy>\n"
        "    <DisallowStartIfOnBatteries>false</DisallowStartIfOnBatteries>\n"
        "    <StopIfGoingOnBatteries>false</StopIfGoingOnBatteries>\n"
        "    <ExecutionTimeLimit>PT0S</ExecutionTimeLimit>\n"
        "    <RestartOnFailure>\n"
        "      <Interval>PT1M</Interval>\n"
        "      <Count>3</Count>\n"
        "    </RestartOnFailure>\n"
        "  </Settings>\n"
        '  <Actions Context="Author">\n'
        "    <Exec>\n"
        "      <Command>powershell.exe</Command>\n"
        f"      <Arguments>{arguments}</Arguments>\n"
        f"      <WorkingDirectory>{xml_escape(str(cfg.notebooks_dir))}</WorkingDirectory>\n"
        "    </Exec>\n"
        "  </Actions>\n"
        "</Task>\n"
    )


def render_html_shortcut(cfg: LabConfig) -> str:
    url = html.escape(cfg.jupyter_url)
    title = html.escape(cfg.title)
    token = html.escape(cfg.token)
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>Opening {title}...</title>
    <meta http-equiv="refresh" content="2;url={url}">
    <style>
        body {{
            font-family: Arial, sans-serif;
            display: flex;
            justify-content: center;
            align-items: center;
            height: 100vh;
            margin: 0;
            background-color: #1a1a2e;
            color: #e0e0e0;
        }}
        .container {{
            text-align: center;
            padding: 40px;
            background-color: #16213e;
            border-radius: 12px;
            border: 2px solid #e94560;
        }}
        h1 {{ color: #e94560; margin-bottom: 10px; }}
        p  {{ color: #a0a0a0; }}
        a  {{ color: #e94560; }}
        .token {{
            font-family: monospace;
            background: #0f3460;
            padding: 8px 16px;
            border-radius: 4px;
            font-size: 1.1em;
            color: #ffffff;
        }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{title}</h1>
        <p>Opening JupyterLab in 2 seconds...</p>
        <p>If nothing happens, <a href="{url}">click here</a></p>
        <br>
        <p>Manual URL:</p>
        <p class="token">{url}</p>
        <br>
        <p style="font-size:0.85em; color:#606060;">
            Token: {token} &nbsp;|&nbsp; Port: {cfg.port}
        </p>
    </div>
</body>
</html>
"""


def render_backup_launcher_sh(cfg: LabConfig) -> str:
    jupyter_cmd = " \\\n    ".join(["jupyter lab", *jupyter_cli_args(cfg)])
    return f"""#!/bin/bash
# {cfg.title} - Backup Jupyter Launcher
# Use this if JupyterLab does not start automatically, or to restart it.
# Usage: bash {cfg.backup_launcher_path.name}

echo ""
echo "============================================="
echo "  {cfg.title} - Starting JupyterLab"
echo "============================================="
echo ""
echo "Once started, open your browser and go to:"
echo "  {cfg.jupyter_url}"
echo "Or double-click {cfg.html_shortcut_path.name} on the Desktop."
echo "Press Ctrl+C to stop JupyterLab."
echo ""

. "{cfg.venv_bin}/activate"
cd "{cfg.notebooks_dir}"

{jupyter_cmd}
"""


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def render_backup_launcher_ps1(cfg: LabConfig) -> str:
    args = []
    for key, value in _server_settings(cfg):
        if isinstance(value, str):
            # Jupyter parses the value; the inner quotes keep an empty password a string.
            args.append(_ps_quote(f"--ServerApp.{key}='{value}'"))
        else:
            args.append(_ps_quote(f"--ServerApp.{key}={value}"))
    arg_lines = ",\n    ".join(args)
    return f"""# {cfg.title} - Backup Jupyter Launcher
# Use this if JupyterLab does not start automatically at logon, or to restart it.
# Usage: powershell -ExecutionPolicy Bypass -File {cfg.backup_launcher_path.name}

Write-Host ""
Write-Host "============================================="
Write-Host "  {cfg.title} - Starting JupyterLab"
Write-Host "============================================="
Write-Host ""
Write-Host "Once started, open your browser and go to:"
Write-Host "  {cfg.jupyter_url}"
Write-Host "Or double-click {cfg.html_shortcut_path.name} on the Desktop."
Write-Host "Press Ctrl+C to stop JupyterLab."
Write-Host ""

Set-Location -LiteralPath {_ps_quote(str(cfg.notebooks_dir))}

$jupyterArgs = @(
    'lab',
    {arg_lines}
)
& {_ps_quote(str(cfg.jupyter_exe))} @jupyterArgs
"""


def render_chrome_wrapper(chrome_binary: str = "/usr/bin/google-chrome-stable") -> str:
    # Chrome's sandbox needs kernel namespaces an xrdp session may not provide.
    return f'#!/bin/bash\nexec {chrome_binary} --no-sandbox "$@"\n'


def render_chrome_desktop_entry(wrapper_path: str) -> str:
    return (
        "[Desktop Entry]\n"
        "Name=Chrome (RDP)\n"
        f"Exec={wrapper_path} %U\n"
        "Type=Application\n"
        "Terminal=false\n"
        "MimeType=text/html;application/xhtml+xml;x-scheme-handler/http;x-scheme-handler/https;\n"
    )
