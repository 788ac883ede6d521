"""Unit tests for per-stream random numbers and the tent filter."""

import numpy as np
import pytest
import taichi as ti


class TestStreams:
    """Tests for PCG32 stream seeding and drawing."""

    def test_uniforms_in_unit_interval(self):
        """Draws lie in [0, 1)."""
        from pathtracer.core.sampler import draw_uniforms, seed_streams

        seed_streams(0, 4)
        values = draw_uniforms(10000, stream=1)
        assert values.shape == (10000,)
        assert np.all(values >= 0.0)
        assert np.all(values < 1.0)

    def test_uniforms_mean_and_spread(self):
        """Draws look uniform: mean near 0.5, all deciles populated."""
        from pathtracer.core.sampler import draw_uniforms, seed_streams

        seed_streams(3, 1)
        values = draw_uniforms(20000, stream=0)
        assert values.mean() == pytest.approx(0.5, abs=0.01)
        counts, _ = np.histogram(values, bins=10, range=(0.0, 1.0))
        assert np.all(counts > 1800)

    def test_same_seed_reproduces_sequence(self):
        """Reseeding with the same seed replays the same numbers."""
        from pathtracer.core.sampler import draw_uniforms, seed_streams

        seed_streams(11, 8)
        first = draw_uniforms(64, stream=5)
        seed_streams(11, 8)
        second = draw_uniforms(64, stream=5)
        np.testing.assert_array_equal(first, second)

    def test_streams_are_independent(self):
        """Different streams and different seeds give different sequences."""
        from pathtracer.core.sampler import draw_uniforms, seed_streams

        seed_streams(11, 8)
        stream_a = draw_uniforms(64, stream=0)
        stream_b = draw_uniforms(64, stream=1)
        seed_streams(12, 8)
        other_seed = draw_uniforms(64, stream=0)
        assert not np.array_equal(stream_a, stream_b)
        assert not np.array_equal(stream_a, other_seed)

    def test_drawing_advances_only_its_stream(self):
        """Drawing from one stream does not disturb another."""
        from pathtracer.core.sampler import draw_uniforms, seed_streams

        seed_streams(5, 2)
        expected = draw_uniforms(16, stream=1)
        seed_streams(5, 2)
        draw_uniforms(100, stream=0)
        np.testing.assert_array_equal(draw_uniforms(16, stream=1), expected)

    def test_seed_streams_rejects_bad_arguments(self):
        """Out-of-range counts and negative seeds are configuration errors."""
        from pathtracer.core.sampler import MAX_STREAMS, seed_streams

        with pytest.raises(ValueError):
            seed_streams(0, 0)
        with pytest.raises(ValueError):
            seed_streams(0, MAX_STREAMS + 1)
        with pytest.raises(ValueError):
            seed_streams(-1, 4)


class TestTentFilter:
    """Tests for the tent filter offset."""

    @pytest.mark.parametrize(
        ("u", "expected"),
        [(0.0, -1.0), (0.125, -0.5), (0.5, 0.0), (0.875, 0.5)],
    )
    def test_tent_offset_values(self, u, expected):
        """Test known points of the tent mapping."""
        from pathtracer.core.sampler import tent_offset

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(value: ti.f64):
            result[None] = tent_offset(value)

        test_kernel(u)
        assert result[None] == pytest.approx(expected)

    def test_tent_offsets_in_range_and_centred(self):
        """Offsets drawn from a stream stay in [-1, 1) and average to zero."""
        from pathtracer.core.sampler import next_uniform, seed_streams, tent_offset

        n = 4096
        offsets = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                offsets[i] = tent_offset(next_uniform(0))

        seed_streams(1, 1)
        test_kernel()
        values = offsets.to_numpy()
        assert np.all(values >= -1.0)
        assert np.all(values < 1.0)
        assert values.mean() == pytest.approx(0.0, abs=0.03)
