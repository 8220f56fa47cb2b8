import pytest

from lab_installer.pipeline import run_pipeline, select_steps
from lab_installer.state_store import add_warning, ensure_defaults


class RecordingStep:
    def __init__(self, step_id, log, *, always_run=False, fail=False, warn_times=0):
        self.step_id = step_id
        self.title = step_id
        self.always_run = always_run
        self._log = log
        self._fail = fail
        self._warn_times = warn_times

    def run(self, state):
        self._log.append(self.step_id)
        if self._fail:
            raise RuntimeError(f"{self.step_id} broke")
        if self._warn_times:
            self._warn_times -= 1
            add_warning(state, self.step_id, "flaky")
        return state


@pytest.fixture
def state():
    return ensure_defaults({}, lab_manifest={})


def _steps(log, **kw):
    return [RecordingStep(i, log, **kw.get(i, {})) for i in ("10_a", "20_b", "30_c")]


def test_runs_in_order_and_marks_completed(state):
    log = []
    result = run_pipeline(state=state, steps=_steps(log))
    assert log == ["10_a", "20_b", "30_c"]
    assert result.ran_steps == log
    assert result.state["execution"]["completed_steps"] == log
    assert result.state["execution"]["current_step"] is None


def test_completed_steps_are_skipped(state):
    state["execution"]["completed_steps"] = ["10_a"]
    log = []
    result = run_pipeline(state=state, steps=_steps(log))
    assert log == ["20_b", "30_c"]
    assert result.skipped_steps == ["10_a"]


def test_force_reruns_completed_steps(state):
    state["execution"]["completed_steps"] = ["10_a", "20_b", "30_c"]
    log = []
    run_pipeline(state=state, steps=_steps(log), force=True)
    assert log == ["10_a", "20_b", "30_c"]


def test_always_run_ignores_completion(state):
    state["execution"]["completed_steps"] = ["10_a", "20_b", "30_c"]
    log = []
    run_pipeline(state=state, steps=_steps(log, **{"30_c": {"always_run": True}}))
    assert log == ["30_c"]


def test_start_at_and_stop_after(state):
    log = []
    run_pipeline(state=state, steps=_steps(log), start_at="20_b", stop_after="20_b")
    assert log == ["20_b"]


def test_unknown_bound_is_rejected(state):
    with pytest.raises(ValueError, match="99_nope"):
        run_pipeline(state=state, steps=_steps([]), start_at="99_nope")


def test_failure_stops_and_leaves_step_incomplete(state):
    log = []
    with pytest.raises(RuntimeError, match="20_b broke"):
        run_pipeline(state=state, steps=_steps(log, **{"20_b": {"fail": True}}))
    assert log == ["10_a", "20_b"]
    assert state["execution"]["completed_steps"] == ["10_a"]
    assert state["execution"]["current_step"] == "20_b"


def test_step_with_warnings_is_retried_next_run(state):
    log = []
    steps = _steps(log, **{"20_b": {"warn_times": 1}})

    first = run_pipeline(state=state, steps=steps)
    assert first.degraded_steps == ["20_b"]
    assert first.state["execution"]["completed_steps"] == ["10_a", "30_c"]

    log.clear()
    second = run_pipeline(state=first.state, steps=steps)
    assert log == ["20_b"]
    assert second.skipped_steps == ["10_a", "30_c"]
    assert second.degraded_steps == []
    assert "20_b" in second.state["execution"]["completed_steps"]


def test_forced_rerun_with_warnings_unmarks_completion(state):
    state["execution"]["completed_steps"] = ["10_a", "20_b", "30_c"]
    result = run_pipeline(state=state, steps=_steps([], **{"30_c": {"warn_times": 1}}), force=True)

    assert result.degraded_steps == ["30_c"]
    assert result.state["execution"]["completed_steps"] == ["10_a", "20_b"]


def test_select_steps_is_inclusive():
    ids = [s.step_id for s in select_steps(_steps([]), start_at="10_a", stop_after="20_b")]
    assert ids == ["10_a", "20_b"]
