"""Taichi backend selection.

The geometry code is backend-agnostic; which device it runs on is decided
once, when Taichi is initialized. ``init_runtime`` wraps ``ti.init`` with the
GPU-then-CPU fallback used by the example scripts.

Example:
    >>> from src.spheretrace.core.runtime import init_runtime
    >>> init_runtime("cpu")
    'cpu'
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)

# Backend names accepted by init_runtime, mapped to Taichi arch objects
BACKENDS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


def init_runtime(
    backend: str = "auto",
    debug: bool = False,
    fast_math: bool = False,
    random_seed: int = 0,
) -> str:
    """Initialize Taichi on the requested backend.

    Args:
        backend: One of ``"auto"``, ``"cpu"``, ``"gpu"``, ``"cuda"``,
            ``"vulkan"`` or ``"metal"``. ``"auto"`` tries the GPU first and
            falls back to the CPU if GPU initialization fails.
        debug: Enable Taichi debug mode. Kernel assertions (such as the
            hit precondition of ``get_intersection_point``) are only checked
            in debug mode.
        fast_math: Allow Taichi to relax IEEE semantics. Off by default so
            precondition violations reliably surface as NaN.
        random_seed: Seed for Taichi's random number generator.

    Returns:
        The name of the backend Taichi ended up running on (see
        ``current_backend``).

    Raises:
        ValueError: If ``backend`` is not a recognized name.
    """
    options = {"debug": debug, "fast_math": fast_math, "random_seed": random_seed}

    if backend == "auto":
        try:
            ti.init(arch=ti.gpu, **options)
        except Exception as e:
            logger.warning("GPU backend unavailable (%s), falling back to CPU", e)
            ti.init(arch=ti.cpu, **options)
    elif backend in BACKENDS:
        ti.init(arch=BACKENDS[backend], **options)
    else:
        raise ValueError(
            f"Unknown backend: {backend}. Expected 'auto' or one of {sorted(BACKENDS)}"
        )

    # Taichi itself may silently fall back to the CPU when no GPU is present
    active = current_backend()
    if backend not in ("auto", "cpu") and active == "cpu":
        logger.warning("Requested %s backend, running on CPU", backend)

    logger.info("Taichi initialized on %s backend (debug=%s)", active, debug)
    return active


def current_backend() -> str:
    """Name of the backend Taichi is currently running on.

    Returns ``"cpu"`` for any host architecture, otherwise the Taichi arch
    name (``"cuda"``, ``"vulkan"``, ``"metal"``, ...).
    """
    # No public accessor for the active arch; current_cfg is stable across 1.6-1.7
    arch = ti.lang.impl.current_cfg().arch
    if arch == ti.cpu:
        return "cpu"
    return arch.name
