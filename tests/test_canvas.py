import numpy as np
import pytest

from pose_canvas.canvas import BlendMode, Canvas, OpenCVCanvas


@pytest.fixture
def canvas():
    return OpenCVCanvas.blank(200, 100)


def test_blank_dimensions(canvas):
    assert (canvas.width, canvas.height) == (200, 100)
    assert canvas.image.shape == (100, 200, 3)
    assert not canvas.image.any()


def test_opaque_circle_paints_bgr(canvas):
    canvas.circle(50, 50, 20, (255, 0, 0))
    assert canvas.image[50, 50].tolist() == [0, 0, 255]
    assert not canvas.image[5, 5].any()


def test_half_alpha_blends_with_background(canvas):
    canvas.clear((0, 0, 100))
    canvas.circle(50, 50, 20, (0, 0, 200), alpha=0.5)
    assert canvas.image[50, 50, 0] == pytest.approx(150, abs=1)


def test_additive_circles_accumulate(canvas):
    with canvas.additive():
        assert canvas.blend_mode is BlendMode.ADD
        canvas.circle(50, 50, 20, (0, 100, 0), alpha=0.5)
        canvas.circle(50, 50, 20, (0, 100, 0), alpha=0.5)
    assert canvas.blend_mode is BlendMode.NORMAL
    assert canvas.image[50, 50, 1] == 100


def test_additive_saturates(canvas):
    with canvas.additive():
        for _ in range(5):
            canvas.circle(50, 50, 20, (200, 200, 200))
    assert canvas.image[50, 50].tolist() == [255, 255, 255]


def test_opacity_scope_multiplies(canvas):
    with canvas.opacity(0.5):
        with canvas.opacity(0.5):
            assert canvas.effective_alpha(1.0) == 0.25
        assert canvas.effective_alpha(0.5) == 0.25
    assert canvas.effective_alpha(1.0) == 1.0
    assert canvas.effective_alpha(float("nan")) == 0.0


def test_line_paints_between_endpoints(canvas):
    canvas.line(10, 10, 90, 10, (255, 255, 255), width=3)
    assert canvas.image[10, 50].tolist() == [255, 255, 255]
    assert not canvas.image[50, 50].any()


def test_out_of_bounds_and_invalid_are_noops(canvas):
    canvas.circle(-500, -500, 20, (255, 255, 255))
    canvas.circle(float("nan"), 10, 20, (255, 255, 255))
    canvas.circle(10, 10, 0, (255, 255, 255))
    canvas.circle(10, 10, 10, (255, 255, 255), alpha=0.0)
    canvas.line(10, 10, float("inf"), 10, (255, 255, 255))
    canvas.radial_gradient_circle(1000, 1000, 30, (255, 255, 255), [(0.0, 1.0), (1.0, 0.5)])
    assert not canvas.image.any()


def test_partially_visible_circle_clips(canvas):
    canvas.circle(0, 0, 20, (255, 255, 255))
    assert canvas.image[0, 0].tolist() == [255, 255, 255]


def test_radial_gradient_falls_off_but_keeps_edge(canvas):
    canvas.radial_gradient_circle(100, 50, 40, (255, 255, 255),
                                  [(0.0, 1.0), (0.9, 0.9), (1.0, 0.4)])
    centre = int(canvas.image[50, 100, 0])
    edge = int(canvas.image[50, 138, 0])
    outside = int(canvas.image[50, 145, 0])
    assert centre == 255
    assert 0 < edge < centre
    assert outside == 0


def test_additive_gradients_stack(canvas):
    stops = [(0.0, 0.3), (1.0, 0.3)]
    with canvas.additive():
        canvas.radial_gradient_circle(100, 50, 20, (0, 0, 200), stops)
        first = int(canvas.image[50, 100, 0])
        canvas.radial_gradient_circle(100, 50, 20, (0, 0, 200), stops)
    assert int(canvas.image[50, 100, 0]) > first


def test_save_writes_png(canvas, tmp_path):
    canvas.circle(50, 50, 20, (255, 0, 0))
    path = tmp_path / "art.png"
    assert canvas.save(str(path))
    assert path.stat().st_size > 0


def test_wraps_existing_frame():
    frame = np.full((40, 60, 3), 7, dtype=np.uint8)
    canvas = OpenCVCanvas(frame)
    canvas.circle(30, 20, 10, (255, 255, 255))
    assert frame[20, 30].tolist() == [255, 255, 255]


def test_backend_must_provide_every_primitive():
    class CirclesOnly(Canvas):
        def circle(self, x, y, diameter, color, alpha=1.0):
            pass

    with pytest.raises(TypeError):
        Canvas(10, 10)
    with pytest.raises(TypeError):
        CirclesOnly(10, 10)
