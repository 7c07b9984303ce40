"""Per-stream random number generation for Taichi kernels.

Every parallel worker draws from its own random stream so that neighbouring
rows never share generator state. A stream is a single 32-bit PCG state held
in a Taichi field; kernels pass the stream index explicitly to every function
that consumes entropy, and each call advances only that stream.

Streams are derived deterministically from a run seed and the stream index,
so a render with a fixed seed is reproducible within a process.

Reference for the hash: Jarzynski and Olano, "Hash Functions for GPU
Rendering", JCGT 2020.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.sampler import seed_streams, random_float
    >>> seed_streams(1234, count=64)
    >>> @ti.kernel
    ... def noise():
    ...     for row in range(64):
    ...         x = random_float(row)  # stream `row` only
"""

import secrets

import taichi as ti

# Maximum number of independent streams (one per image row)
MAX_STREAMS = 2048

# PCG constants (all below 2**31 so they fit signed literals)
PCG_MULTIPLIER = 747796405
PCG_INCREMENT = 1013904223
PCG_OUTPUT_MULTIPLIER = 277803737

# Mixes the stream index into the seed before hashing
STREAM_MIX = 0x7FEB352D

# Scale mapping the top 24 bits of a 32-bit word to [0, 1)
INV_2_POW_24 = 1.0 / 16777216.0

_rng_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)
_stream_count = ti.field(dtype=ti.i32, shape=())


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """One PCG RXS-M-XS step applied to value."""
    state = value * ti.u32(PCG_MULTIPLIER) + ti.u32(PCG_INCREMENT)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(
        PCG_OUTPUT_MULTIPLIER
    )
    return (word >> ti.u32(22)) ^ word


@ti.func
def next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream and return its new 32-bit state."""
    state = pcg_hash(_rng_state[stream])
    _rng_state[stream] = state
    return state


@ti.func
def random_float(stream: ti.i32) -> ti.f32:
    """Uniform float in [0, 1) drawn from the given stream."""
    return ti.cast(next_u32(stream) >> ti.u32(8), ti.f32) * INV_2_POW_24


@ti.func
def random_range(stream: ti.i32, low: ti.f32, high: ti.f32) -> ti.f32:
    """Uniform float in [low, high) drawn from the given stream."""
    return low + (high - low) * random_float(stream)


@ti.kernel
def _seed_streams_kernel(seed: ti.u32, count: ti.i32):
    for i in range(count):
        mixed = ti.cast(i, ti.u32) * ti.u32(STREAM_MIX) ^ pcg_hash(seed)
        _rng_state[i] = pcg_hash(mixed)


def seed_streams(seed: int | None = None, count: int = MAX_STREAMS) -> int:
    """Initialize `count` independent streams from a run seed.

    Args:
        seed: The run seed. If None, a seed is drawn from OS entropy, so two
            runs will differ.
        count: Number of streams to initialize (typically the image height).

    Returns:
        The seed actually used, reduced to 32 bits.

    Raises:
        ValueError: If count is not in [1, MAX_STREAMS].
    """
    if count < 1 or count > MAX_STREAMS:
        raise ValueError(f"Stream count {count} must be in [1, {MAX_STREAMS}]")

    if seed is None:
        seed = secrets.randbits(32)
    seed &= 0xFFFFFFFF

    _seed_streams_kernel(seed, count)
    _stream_count[None] = count
    return seed


def get_stream_count() -> int:
    """Number of streams initialized by the last seed_streams() call."""
    return int(_stream_count[None])


def get_stream_state(stream: int) -> int:
    """Current raw state of one stream (for tests and debugging)."""
    return int(_rng_state[stream])
