import numpy as np
import pytest

from pose_canvas.app import MODE_KEYS, PoseCanvasApp, parse_args
from pose_canvas.config import PaintSettings
from pose_canvas.modes import PaintMode


class StubSource:
    def process(self, frame):
        return []

    def close(self):
        pass


@pytest.fixture
def app():
    return PoseCanvasApp(PaintSettings(mode="circles"), source=StubSource())


def test_number_keys_cover_every_mode():
    assert [MODE_KEYS[ord(str(i))] for i in range(1, 8)] == list(PaintMode)


def test_parse_args_defaults():
    args = parse_args([])
    assert args.mode == "keypoints"
    assert args.color == "#ff0000"
    assert not args.auto
    assert not args.fireworks_overlay


def test_parse_args_rejects_unknown_mode():
    with pytest.raises(SystemExit):
        parse_args(["--mode", "watercolor"])


def test_key_handling(app):
    orch = app.orchestrator
    assert app._handle_key(ord("6"))
    assert orch.mode is PaintMode.SMOKE
    app._handle_key(ord("4"))
    app._handle_key(ord(" "))
    assert orch.mode is PaintMode.FIREWORKS
    app._handle_key(ord("a"))
    assert orch.settings.auto_mode
    app._handle_key(ord("f"))
    assert orch.settings.firework_overlay
    app._handle_key(ord("h"))
    assert not app.show_hud
    assert not app._handle_key(ord("q"))
    assert not app._handle_key(27)


def test_mouse_wind_spans_both_directions(app):
    assert app._mouse_wind(200) == 0.0
    strength = app.orchestrator.smoke.wind_strength
    app.mouse_x = 0
    assert app._mouse_wind(200) == pytest.approx(-strength)
    app.mouse_x = 100
    assert app._mouse_wind(200) == pytest.approx(0.0)
    app.mouse_x = 400
    assert app._mouse_wind(200) == pytest.approx(strength)


def test_background_follows_camera_opacity():
    frame = np.full((4, 4, 3), 200, dtype=np.uint8)
    app = PoseCanvasApp(PaintSettings(), camera_opacity=50, source=StubSource())
    assert app._compose_background(frame)[0, 0, 0] == 100
    app = PoseCanvasApp(PaintSettings(), camera_opacity=0, source=StubSource())
    assert not app._compose_background(frame).any()
    app = PoseCanvasApp(PaintSettings(), source=StubSource())
    out = app._compose_background(frame)
    assert out is not frame and (out == frame).all()
