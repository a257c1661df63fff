import pytest

from pose_canvas.config import WARM_COLORS, SmokeConfig
from pose_canvas.smoke import SmokeParticle, SmokeSystem

from conftest import RecordingCanvas, make_pose

DT = 1.0 / 60.0


@pytest.fixture
def smoke(rng):
    return SmokeSystem(SmokeConfig(), rng)


def test_emits_from_wrists_only(smoke):
    assert smoke.emit(make_pose(), 0.1, DT) == 2
    assert sorted((p.x, p.y) for p in smoke.particles) == [(250.0, 280.0), (390.0, 280.0)]


def test_untrusted_wrist_skipped(smoke):
    assert smoke.emit(make_pose({10: (390, 280, 0.05)}), 0.1, DT) == 1
    assert smoke.emit(make_pose({9: (0, 0, 0.0), 10: (0, 0, 0.0)}), 0.1, DT) == 0


def test_particle_cap(rng):
    smoke = SmokeSystem(SmokeConfig(max_particles=5), rng)
    smoke.set_density(2)
    for _ in range(3):
        smoke.emit(make_pose(), 0.1, DT)
    assert smoke.total_particles() == 5


def test_smoke_rises(smoke):
    for _ in range(10):
        smoke.emit(make_pose(), 0.1, DT)
    for _ in range(20):
        smoke.update(DT)
    mean_y = sum(p.y for p in smoke.particles) / len(smoke.particles)
    assert mean_y < 280


def test_particles_expire_without_poses(smoke):
    smoke.emit(make_pose(), 0.1, DT)
    for _ in range(51):
        smoke.run(RecordingCanvas(), DT)
    assert smoke.total_particles() == 0


def test_particle_force_is_consumed_each_update():
    p = SmokeParticle(0.0, 0.0, 0.0, 0.0, size=10.0)
    p.apply_force(1.0, 0.0)
    p.update(1.0, 2.0)
    assert (p.vx, p.x, p.life) == (1.0, 1.0, 98.0)
    p.update(1.0, 2.0)
    assert p.vx == 1.0
    assert p.x == 2.0


def test_external_force_applies_once(smoke):
    smoke.emit(make_pose(), 0.1, DT)
    before = [p.vx for p in smoke.particles]
    smoke.apply_force(0.5)
    smoke.update(DT)
    after = [p.vx for p in smoke.particles]
    assert after == pytest.approx([v + 0.5 for v in before])
    smoke.update(DT)
    assert [p.vx for p in smoke.particles] == pytest.approx(after)


def test_look_warms_grows_and_fades():
    fresh = SmokeParticle(0, 0, 0, 0, size=20.0)
    diameter, color, alpha = fresh.look(60.0)
    assert color == WARM_COLORS[0]
    assert diameter == pytest.approx(8.0)
    assert alpha == pytest.approx(100 / 255)

    mid = SmokeParticle(0, 0, 0, 0, size=20.0, life=50.0)
    diameter, color, alpha = mid.look(60.0)
    assert color == WARM_COLORS[1]
    assert diameter == pytest.approx(20.0)

    old = SmokeParticle(0, 0, 0, 0, size=200.0, life=0.0)
    diameter, color, alpha = old.look(60.0)
    assert color == WARM_COLORS[2]
    assert diameter == 60.0
    assert alpha == 0.0


def test_draw_uses_size_cap(smoke):
    smoke.set_smoke_size(500)
    smoke.emit(make_pose(), 0.1, DT)
    canvas = RecordingCanvas()
    smoke.run(canvas, DT)
    circles = canvas.of("circle")
    assert len(circles) == 2
    assert all(c["diameter"] <= smoke.size_cap for c in circles)


def test_stillness_grows_smoke_and_movement_shrinks_it(smoke):
    smoke.emit(make_pose(), 0.1, 0.1)
    previous = smoke.size_multiplier
    for _ in range(44):
        smoke.emit(make_pose(), 0.1, 0.1)
        assert smoke.size_multiplier >= previous
        previous = smoke.size_multiplier
    assert smoke.target_size_multiplier == pytest.approx(4.1)
    assert smoke.size_multiplier <= smoke.config.max_size_multiplier

    smoke.emit(make_pose(dx=50), 0.1, 0.1)
    assert smoke.stillness_time == 0.0
    assert smoke.target_size_multiplier == pytest.approx(0.3 + 50 / 30)
    assert smoke.target_size_multiplier < smoke.size_multiplier < previous


def test_wind_follows_motion_then_settles(smoke):
    smoke.emit(make_pose(), 0.1, DT)
    smoke.emit(make_pose(dx=20), 0.1, DT)
    wind_x, wind_y = smoke.current_wind
    assert wind_x > 0
    assert wind_y == pytest.approx(0.0)
    assert smoke.wind_info()["target_strength"] <= smoke.config.max_wind_strength * 1.2

    for _ in range(30):
        smoke.emit(make_pose(dx=20), 0.1, DT)
    assert abs(smoke.current_wind[0]) < 1e-4
    assert smoke.target_wind == (0.0, 0.0)


@pytest.mark.parametrize("size, factor, threshold, smoothing", [
    ((640, 480), 1.0, 10.0, 0.2),
    ((1280, 960), 2.0, 20.0, 0.4),
    ((2560, 1920), 4.0, 40.0, 0.5),
])
def test_resolution_scaling(rng, size, factor, threshold, smoothing):
    smoke = SmokeSystem(SmokeConfig(), rng, canvas_size=size)
    assert smoke.size_factor == pytest.approx(factor)
    assert smoke.movement_threshold == pytest.approx(threshold)
    assert smoke.wind_smoothing == pytest.approx(smoothing)
    assert smoke.size_cap == pytest.approx(60.0 * factor)


def test_tunables(smoke):
    smoke.set_wind_strength(50)
    assert smoke.wind_strength == 0.5
    smoke.set_density(0)
    assert smoke.density == 1
    smoke.set_smoke_size(-3)
    assert smoke.smoke_size == 0.0


def test_clear_resets_everything(smoke):
    for k in range(5):
        smoke.emit(make_pose(dx=k * 30), 0.1, DT)
    smoke.clear()
    assert smoke.total_particles() == 0
    assert smoke.stillness_time == 0.0
    assert smoke.current_wind == (0.0, 0.0)
    assert smoke.size_multiplier == smoke.config.initial_size_multiplier
    assert len(smoke.tracking) == 0


def two_people(dx=0):
    return [make_pose(), make_pose(dx=200 + dx)]


def test_two_still_people_count_as_still(smoke):
    for _ in range(120):
        smoke.emit_from_poses(two_people(), 0.1, DT)
    assert smoke.movement == 0.0
    assert smoke.stillness_time > 1.0
    assert smoke.target_size_multiplier > 0.6
    assert smoke.target_wind == (0.0, 0.0)


def test_one_moving_person_breaks_group_stillness(smoke):
    for _ in range(30):
        smoke.emit_from_poses(two_people(), 0.1, DT)
    smoke.emit_from_poses(two_people(dx=50), 0.1, DT)
    assert smoke.movement == pytest.approx(50.0)
    assert smoke.stillness_time == 0.0
    assert smoke.tracking.get(0).stillness_time > 0.0


def test_size_settles_once_per_frame_regardless_of_crowd(rng):
    alone = SmokeSystem(SmokeConfig(), rng)
    pair = SmokeSystem(SmokeConfig(), rng)
    for _ in range(30):
        alone.emit(make_pose(), 0.1, DT)
        pair.emit_from_poses(two_people(), 0.1, DT)
    assert pair.size_multiplier == pytest.approx(alone.size_multiplier)
    assert pair.total_particles() == 2 * alone.total_particles()


def test_tracking_slots_follow_pose_count(smoke):
    smoke.emit_from_poses(two_people(), 0.1, DT)
    assert 1 in smoke.tracking
    smoke.emit_from_poses([make_pose()], 0.1, DT)
    assert 1 not in smoke.tracking
