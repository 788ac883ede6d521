"""Per-stream random number generation and stratified sampling helpers.

Every rendering thread draws from its own PCG32 stream. The generator state
lives in a preallocated Taichi field indexed by stream id, and the renderer
maps one stream to one image row. No stream is ever shared between threads,
so rendering needs no synchronisation and a given seed always reproduces the
same image regardless of how rows are batched.

The generator is the PCG32 RXS-M-XS variant: a 32-bit LCG state step
followed by an output permutation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.core.sampler import draw_uniforms, seed_streams
    >>> seed_streams(seed=7, count=4)
    >>> values = draw_uniforms(count=8, stream=2)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from pathtracer.core.ray import real

# Maximum number of independent streams (rows, or parallel test lanes)
MAX_STREAMS = 4096

# PCG constants
PCG_MULTIPLIER = 747796405
PCG_INCREMENT = 2891336453
PCG_OUTPUT_MULTIPLIER = 277803737
SEED_MIX = 0x9E3779B9

# 2^32, maps a 32-bit word onto [0, 1)
_U32_RANGE = 4294967296.0

_stream_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)

# Scratch buffer for draw_uniforms()
_MAX_DRAWS = 65536
_draws = ti.field(dtype=ti.f64, shape=_MAX_DRAWS)


@ti.func
def pcg_permute(state: ti.u32) -> ti.u32:
    """Apply the PCG RXS-M-XS output permutation to a 32-bit state."""
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(
        PCG_OUTPUT_MULTIPLIER
    )
    return (word >> ti.u32(22)) ^ word


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with one LCG step and the output permutation."""
    state = value * ti.u32(PCG_MULTIPLIER) + ti.u32(PCG_INCREMENT)
    return pcg_permute(state)


@ti.func
def next_uniform(stream: ti.i32) -> real:
    """Advance a stream and return a uniform sample in [0, 1).

    Must only be called from the thread that owns the stream.

    Args:
        stream: Index of the stream to draw from.

    Returns:
        A double in [0, 1).
    """
    state = _stream_state[stream] * ti.u32(PCG_MULTIPLIER) + ti.u32(PCG_INCREMENT)
    _stream_state[stream] = state
    return ti.cast(pcg_permute(state), ti.f64) / _U32_RANGE


@ti.func
def tent_offset(u: real) -> real:
    """Map a uniform sample onto the tent filter over [-1, 1).

    With r = 2u, returns sqrt(r) - 1 for r < 1 and 1 - sqrt(2 - r) otherwise,
    which concentrates samples toward the sub-pixel centre.
    """
    r = 2.0 * u
    offset = 0.0
    if r < 1.0:
        offset = ti.sqrt(r) - 1.0
    else:
        offset = 1.0 - ti.sqrt(2.0 - r)
    return offset


@ti.kernel
def _seed_streams_kernel(seed: ti.i32, count: ti.i32):
    seed_hash = pcg_hash(ti.cast(seed, ti.u32) ^ ti.u32(SEED_MIX))
    for i in range(count):
        _stream_state[i] = pcg_hash(ti.cast(i, ti.u32) + seed_hash)


def seed_streams(seed: int, count: int = MAX_STREAMS) -> None:
    """Deterministically seed streams 0..count-1.

    Each stream state is a hash of its index combined with the hashed seed,
    so neighbouring streams are decorrelated and the same seed always
    produces the same states.

    Args:
        seed: Non-negative integer seed (only the low 31 bits are used).
        count: Number of streams to seed.

    Raises:
        ValueError: If count is outside [1, MAX_STREAMS] or seed is negative.
    """
    if not 1 <= count <= MAX_STREAMS:
        raise ValueError(f"Stream count {count} outside [1, {MAX_STREAMS}]")
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")
    _seed_streams_kernel(seed & 0x7FFFFFFF, count)


@ti.kernel
def _draw_uniforms_kernel(count: ti.i32, stream: ti.i32):
    # Serial on purpose: a stream belongs to a single thread.
    ti.loop_config(serialize=True)
    for i in range(count):
        _draws[i] = next_uniform(stream)


def draw_uniforms(count: int, stream: int = 0) -> npt.NDArray[np.float64]:
    """Draw uniforms from one stream on the host side.

    Args:
        count: Number of samples (at most 65536).
        stream: Stream index to advance.

    Returns:
        Array of shape (count,) with values in [0, 1).
    """
    if not 1 <= count <= _MAX_DRAWS:
        raise ValueError(f"Draw count {count} outside [1, {_MAX_DRAWS}]")
    _draw_uniforms_kernel(count, stream)
    return _draws.to_numpy()[:count].copy()
