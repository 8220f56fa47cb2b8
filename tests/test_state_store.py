import pytest

from lab_installer.state_store import (
    add_warning,
    apply_overrides,
    ensure_defaults,
    is_step_completed,
    load_config_file,
    load_state,
    mark_step_completed,
    save_state,
)


def test_ensure_defaults_keeps_user_values():
    manifest = {"jupyter": {"token": "airedteamlab", "port": 8888}}
    state = {"config": {"user": "alice", "jupyter": {"port": 9999}}}
    ensure_defaults(state, lab_manifest=manifest)

    cfg = state["config"]
    assert cfg["user"] == "alice"
    assert cfg["jupyter"] == {"port": 9999, "token": "airedteamlab"}
    assert state["execution"]["completed_steps"] == []


def test_ensure_defaults_does_not_share_manifest_objects():
    manifest = {"python_packages": ["numpy"]}
    state = ensure_defaults({}, lab_manifest=manifest)
    state["config"]["python_packages"].append("pandas")
    assert manifest["python_packages"] == ["numpy"]


def test_apply_overrides_wins_and_merges_nested():
    target = {"jupyter": {"token": "a", "port": 8888}, "llm": {"enabled": True}}
    apply_overrides(target, {"jupyter": {"token": "b"}, "llm": {"enabled": False}})
    assert target == {"jupyter": {"token": "b", "port": 8888}, "llm": {"enabled": False}}


def test_completion_bookkeeping_is_idempotent():
    state = {}
    mark_step_completed(state, "30_create_venv")
    mark_step_completed(state, "30_create_venv")
    assert state["execution"]["completed_steps"] == ["30_create_venv"]
    assert is_step_completed(state, "30_create_venv")
    assert not is_step_completed(state, "34_python_packages")


def test_add_warning_records_details():
    state = {}
    add_warning(state, "55_notebooks", "notebook_download_failed", notebook="Lab1.ipynb")
    assert state["execution"]["warnings"] == [
        {"step": "55_notebooks", "reason": "notebook_download_failed", "notebook": "Lab1.ipynb"}
    ]


@pytest.mark.parametrize("name", ["state.json", "state.yaml"])
def test_state_persists(tmp_path, name):
    path = str(tmp_path / "nested" / name)
    save_state(path, {"execution": {"completed_steps": ["05_preflight"]}})
    assert load_state(path)["execution"]["completed_steps"] == ["05_preflight"]


def test_missing_state_is_empty(tmp_path):
    assert load_state(str(tmp_path / "absent.json")) == {}


def test_config_file_must_be_yaml(tmp_path):
    p = tmp_path / "overrides.json"
    p.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config_file(str(p))


def test_config_file_loads_mapping(tmp_path):
    p = tmp_path / "overrides.yaml"
    p.write_text("jupyter:\n  port: 9000\n", encoding="utf-8")
    assert load_config_file(str(p)) == {"jupyter": {"port": 9000}}
