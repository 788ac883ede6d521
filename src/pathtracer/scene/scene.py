"""Immutable scene description: spheres, materials and lights.

A Scene is a fixed, ordered tuple of Sphere values built once at startup and
never mutated. It is plain Python data; `load_scene()` in
`pathtracer.scene.intersection` uploads it into the Taichi fields the kernels
read.

Validation happens at construction time so that malformed scene data is
rejected as a configuration error before any rendering starts.

Example:
    >>> from pathtracer.scene.scene import MaterialType, Scene, Sphere
    >>> light = Sphere(1.5, (0, 10, 0), emission=(400, 400, 400))
    >>> floor = Sphere(1e5, (0, -1e5, 0), colour=(0.75, 0.75, 0.75))
    >>> scene = Scene((floor, light))
    >>> scene.lights
    (1,)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum

Triple = tuple[float, float, float]

# Maximum number of spheres the Taichi-side storage holds
MAX_SPHERES = 64


class MaterialType(IntEnum):
    """Enumeration of supported surface materials.

    Used for material dispatch in the path tracer.
    """

    DIFFUSE = 0
    SPECULAR = 1
    REFRACTIVE = 2


def _as_triple(name: str, value: tuple[float, ...]) -> Triple:
    values = tuple(float(v) for v in value)
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    if not all(math.isfinite(v) for v in values):
        raise ValueError(f"{name} must be finite, got {values}")
    return values  # type: ignore[return-value]


@dataclass(frozen=True)
class Sphere:
    """A sphere with its surface properties.

    Attributes:
        radius: The sphere radius (positive).
        center: The centre point (x, y, z).
        emission: Emitted radiance per channel (each >= 0).
        colour: Reflectance per channel (each in [0, 1]).
        material: How the surface redirects light.

    Raises:
        ValueError: If any attribute violates the constraints above.
    """

    radius: float
    center: Triple
    emission: Triple = (0.0, 0.0, 0.0)
    colour: Triple = (0.0, 0.0, 0.0)
    material: MaterialType = MaterialType.DIFFUSE

    def __post_init__(self) -> None:
        radius = float(self.radius)
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")

        center = _as_triple("center", self.center)
        emission = _as_triple("emission", self.emission)
        colour = _as_triple("colour", self.colour)

        if any(c < 0.0 for c in emission):
            raise ValueError(f"Emission must be non-negative, got {emission}")
        if any(c < 0.0 or c > 1.0 for c in colour):
            raise ValueError(f"Colour channels must lie in [0, 1], got {colour}")

        # Normalise stored values (frozen, so bypass __setattr__)
        object.__setattr__(self, "radius", radius)
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "emission", emission)
        object.__setattr__(self, "colour", colour)
        object.__setattr__(self, "material", MaterialType(self.material))

    @property
    def is_light(self) -> bool:
        """Whether any emission channel is positive."""
        return any(c > 0.0 for c in self.emission)

    @property
    def max_reflectance(self) -> float:
        """Largest colour channel (the Russian-roulette survival probability)."""
        return max(self.colour)


@dataclass(frozen=True)
class Scene:
    """A fixed, ordered collection of spheres.

    Attributes:
        spheres: The scene members, in intersection order.

    Raises:
        ValueError: If the scene is empty or holds more than MAX_SPHERES.
    """

    spheres: tuple[Sphere, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        spheres = tuple(self.spheres)
        if not spheres:
            raise ValueError("Scene must contain at least one sphere")
        if len(spheres) > MAX_SPHERES:
            raise ValueError(
                f"Scene has {len(spheres)} spheres, maximum is {MAX_SPHERES}"
            )
        for sphere in spheres:
            if not isinstance(sphere, Sphere):
                raise ValueError(f"Scene members must be Sphere, got {type(sphere).__name__}")
        object.__setattr__(self, "spheres", spheres)

    def __len__(self) -> int:
        return len(self.spheres)

    def __getitem__(self, index: int) -> Sphere:
        return self.spheres[index]

    @property
    def lights(self) -> tuple[int, ...]:
        """Indices of emissive spheres."""
        return tuple(i for i, sphere in enumerate(self.spheres) if sphere.is_light)
