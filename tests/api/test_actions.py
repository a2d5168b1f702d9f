from __future__ import annotations

import pytest

from api.sketch_runner.actions import ACTIONS, WAVEFORM_SHORTCUTS, SketchSession, apply_action
from common.formula import FormulaEvaluator
from engine.core.scheduler import FrameScheduler, ManualTickSource
from engine.render.surface import RecordingSurface
from engine.render.types import StrokeCircle
from engine.ui.settings import SettingsStore


@pytest.fixture()
def session(store: SettingsStore) -> SketchSession:
    ev = FormulaEvaluator(listener=store.set_formula_error)
    sch = FrameScheduler(
        store.params,
        store.style,
        tick_source=ManualTickSource(),
        evaluator=ev,
        surface=RecordingSurface(400, 200),
    )
    s = SketchSession(store=store, scheduler=sch, evaluator=ev)
    s.wire()
    return s


def test_shortcut_table_covers_all_modes() -> None:
    assert WAVEFORM_SHORTCUTS == {
        "1": "sine",
        "2": "square",
        "3": "triangle",
        "4": "sawtooth",
        "5": "custom",
    }
    assert "waveform_5" in ACTIONS


def test_toggle_run(session: SketchSession) -> None:
    assert apply_action(session, "toggle_run") == "Playing"
    assert session.scheduler.is_running
    assert apply_action(session, "toggle_run") == "Paused"


def test_circle_count_actions_clamp_at_one(session: SketchSession) -> None:
    assert apply_action(session, "more_circles") == "Circles: 2"
    assert apply_action(session, "fewer_circles") == "Circles: 1"
    assert apply_action(session, "fewer_circles") == "Circles: 1"


def test_toggle_circles_redraws_when_paused(session: SketchSession) -> None:
    surface = session.scheduler.surface
    assert isinstance(surface, RecordingSurface)
    assert apply_action(session, "toggle_circles") == "Circles hidden"
    assert surface.of_type(StrokeCircle) == []
    apply_action(session, "toggle_circles")
    assert len(surface.of_type(StrokeCircle)) == 1


def test_waveform_actions(session: SketchSession) -> None:
    assert apply_action(session, "waveform_2") == "Waveform: square"
    assert apply_action(session, "waveform_5") == "Waveform: custom"
    assert session.store.params().waveform.formula == session.store.formula


def test_unknown_action(session: SketchSession) -> None:
    with pytest.raises(ValueError):
        apply_action(session, "waveform_9")
    with pytest.raises(ValueError):
        apply_action(session, "jump")


def test_unwire_stops_redraws(session: SketchSession) -> None:
    surface = session.scheduler.surface
    assert isinstance(surface, RecordingSurface)
    session.unwire()
    frames = surface.frames
    session.store.update_params(harmonic_count=3)
    assert surface.frames == frames
