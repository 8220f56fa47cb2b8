import json

import pytest

from lab_installer.config import lab_config_from_state
from lab_installer.steps.step_30_create_venv import CreateVenvStep
from lab_installer.steps.step_34_python_packages import PythonPackagesStep

INSTALLED = ["numpy", "pandas", "scikit_learn", "jupyterlab", "matplotlib", "seaborn", "ipywidgets"]
VERSIONS = {"numpy": "1.26.4", "pandas": "2.2.2", "scikit-learn": "1.5.0", "matplotlib": "3.9.0", "ART": "1.18.0"}


def _pip_list(names):
    return json.dumps([{"name": n, "version": "1.0"} for n in names])


def test_existing_venv_is_left_alone(make_state, fake_cmd):
    state = make_state()
    lab_config_from_state(state).venv_path.mkdir(parents=True)

    CreateVenvStep().run(state)
    assert fake_cmd.calls == []


def test_venv_created_with_system_python(make_state, fake_cmd):
    state = make_state(dry_run=True)
    CreateVenvStep().run(state)

    cfg = lab_config_from_state(state)
    assert fake_cmd.calls == [["python3", "-m", "venv", str(cfg.venv_path)]]


def test_missing_venv_interpreter_is_fatal(make_state, fake_cmd):
    with pytest.raises(RuntimeError, match="Virtual environment creation failed"):
        CreateVenvStep().run(make_state())


def test_only_missing_packages_are_installed(make_state, fake_cmd):
    fake_cmd.on("pip", "list", stdout=_pip_list(INSTALLED))
    fake_cmd.on("-c", stdout="some import noise\n" + json.dumps(VERSIONS))

    state = PythonPackagesStep().run(make_state())

    installs = [c for c in fake_cmd.calls if c[2:4] == ["pip", "install"]]
    assert len(installs) == 1
    assert installs[0][4:] == ["adversarial-robustness-toolbox"]
    assert state["execution"]["decisions"]["python_packages_installed"] == ["adversarial-robustness-toolbox"]


def test_nothing_installed_when_complete(make_state, fake_cmd):
    fake_cmd.on("pip", "list", stdout=_pip_list(INSTALLED + ["adversarial_robustness_toolbox"]))
    fake_cmd.on("-c", stdout=json.dumps(VERSIONS))

    PythonPackagesStep().run(make_state())
    assert not fake_cmd.ran("pip", "install")
