from pathlib import Path

import pytest

from lab_installer.config import DatasetSpec, lab_config_from_state


def test_ubuntu_layout(make_state, lab_home):
    cfg = lab_config_from_state(make_state("ubuntu"))

    assert cfg.desktop_dir == lab_home / "Desktop"
    assert cfg.lab_dir == lab_home / "Desktop" / "AI_Red_Team_Lab"
    assert cfg.notebooks_dir == cfg.lab_dir / "notebooks"
    assert cfg.venv_python == lab_home / "lab_env" / "bin" / "python"
    assert cfg.log_path == lab_home / "Desktop" / "lab_installer_log.txt"
    assert cfg.backup_launcher_path.name == "start_jupyter.sh"
    assert cfg.systemd_unit_path == Path("/etc/systemd/system/jupyterlab.service")
    assert cfg.autostart_kind == "systemd"
    assert "python3-venv" in cfg.system_packages


def test_windows_layout(make_state, lab_home):
    cfg = lab_config_from_state(make_state("windows"))

    assert cfg.is_windows and not cfg.is_linux
    assert cfg.venv_python == lab_home / "lab_env" / "Scripts" / "python.exe"
    assert cfg.jupyter_exe.name == "jupyter.exe"
    assert cfg.backup_launcher_path.name == "start_jupyter.ps1"
    assert cfg.autostart_kind == "task_scheduler"
    assert cfg.system_packages == []


def test_jupyter_settings(make_state):
    cfg = lab_config_from_state(make_state("macos"))

    assert cfg.token == "airedteamlab"
    assert cfg.port == 8888
    assert cfg.ip == "127.0.0.1"
    assert cfg.jupyter_url == "http://localhost:8888/lab?token=airedteamlab"
    assert cfg.default_url == "/lab/tree/START_HERE.ipynb"
    assert [p.name for p in cfg.jupyter_config_files] == [
        "jupyter_lab_configuration.py",
        "jupyter_server_configuration.py",
    ]
    assert cfg.launch_agent_path.name == "com.airedteamlab.jupyterlab.plist"


def test_overrides_flow_through(make_state, tmp_path):
    state = make_state("ubuntu", jupyter={"port": 9999}, paths={"desktop": str(tmp_path / "elsewhere")})
    cfg = lab_config_from_state(state)

    assert cfg.port == 9999
    assert cfg.token == "airedteamlab"
    assert cfg.lab_dir == tmp_path / "elsewhere" / "AI_Red_Team_Lab"


def test_bundled_datasets(make_state):
    cfg = lab_config_from_state(make_state())
    by_name = {d.name: d for d in cfg.datasets}

    assert by_name["Nursery"].download_name == "nursery.data"
    sms = by_name["SMS Spam"]
    assert sms.archive == "zip"
    assert sms.download_name == "sms_spam.zip"
    assert sms.filename == "SMSSpamCollection"
    assert sms.cleanup == ("readme",)


def test_dataset_entry_requires_url():
    with pytest.raises(ValueError, match="url"):
        DatasetSpec.from_raw({"name": "x", "filename": "x.csv"})


def test_llm_defaults(make_state):
    cfg = lab_config_from_state(make_state())

    assert cfg.llm_enabled
    assert cfg.llm_api_base == "http://127.0.0.1:11434"
    assert cfg.llm_models == ["llama3.2:1b"]
    assert cfg.llm_max_wait_s == 30.0
