from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

from .cognitive_core import Attempt, SeededRng, try_n_times

logger = logging.getLogger(__name__)

# Prompt view used by the rendering layer for the reference structure.
REFERENCE_CAMERA: tuple[float, float, float] = (10.0, 10.0, 10.0)


@dataclass(frozen=True, slots=True)
class Viewpoint:
    """Camera position on a sphere around the structure centroid (y-up)."""

    x: float
    y: float
    z: float
    theta: float  # azimuth
    phi: float  # polar angle from +y
    radius: float

    @classmethod
    def from_spherical(cls, *, radius: float, theta: float, phi: float) -> Viewpoint:
        sin_phi = math.sin(phi)
        return cls(
            x=radius * sin_phi * math.sin(theta),
            y=radius * math.cos(phi),
            z=radius * sin_phi * math.cos(theta),
            theta=theta,
            phi=phi,
            radius=radius,
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


def angle_between(a: Sequence[float], b: Sequence[float]) -> float:
    """Angle in radians between two 3D vectors.

    A zero-length vector is treated as perpendicular to everything, which is
    why :func:`sample_viewpoint` refuses a zero reference.
    """

    na = math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])
    nb = math.sqrt(b[0] * b[0] + b[1] * b[1] + b[2] * b[2])
    if na == 0.0 or nb == 0.0:
        return math.pi / 2.0
    cos_t = (a[0] * b[0] + a[1] * b[1] + a[2] * b[2]) / (na * nb)
    return math.acos(max(-1.0, min(1.0, cos_t)))


def sample_viewpoint(
    reference: Sequence[float] = REFERENCE_CAMERA,
    *,
    rng: SeededRng,
    radius: float = 14.0,
    min_angle: float = 0.8,
    max_attempts: int = 100,
) -> Attempt[Viewpoint]:
    """Rejection-sample a viewpoint more than ``min_angle`` away from ``reference``.

    When every draw is too close, the last one is returned with
    ``satisfied=False``.
    """

    if radius <= 0:
        raise ValueError("radius must be > 0")
    if not any(reference[i] for i in range(3)):
        raise ValueError("reference direction must be non-zero")

    def draw() -> Viewpoint:
        theta = rng.random() * math.pi * 2.0
        phi = rng.random() * math.pi
        return Viewpoint.from_spherical(radius=radius, theta=theta, phi=phi)

    result = try_n_times(
        max_attempts,
        draw,
        lambda v: angle_between(v.as_tuple(), reference) > min_angle,
    )
    if not result.satisfied:
        logger.debug("viewpoint fallback after %d draws", result.attempts)
    return result
