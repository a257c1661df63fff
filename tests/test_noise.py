from pose_canvas.noise import noise01, perlin_noise_1d


def test_noise_range():
    for i in range(2000):
        x = i * 0.137
        assert -1.0 <= perlin_noise_1d(x) <= 1.0
        assert 0.0 <= noise01(x) <= 1.0


def test_noise_is_zero_on_lattice():
    for i in range(10):
        assert perlin_noise_1d(float(i)) == 0.0


def test_noise_is_smooth_and_deterministic():
    for i in range(500):
        x = 3.0 + i * 0.01
        assert abs(perlin_noise_1d(x + 0.001) - perlin_noise_1d(x)) < 0.01
        assert perlin_noise_1d(x) == perlin_noise_1d(x)


def test_noise_is_not_constant():
    values = {round(perlin_noise_1d(i * 0.31 + 0.5), 4) for i in range(50)}
    assert len(values) > 10
