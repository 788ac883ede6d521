"""Monte Carlo path tracer for sphere scenes, built on Taichi.

This package renders a fixed Cornell box made of spheres with:
- Unbiased path tracing with Russian roulette termination
- Diffuse, mirror and glass materials
- Next-event estimation toward spherical lights
- 2x2 stratified, tent-filtered pixel sampling

Subpackages:
    core: Vector utilities, random streams, the integrator and renderer
    geometry: Ray-sphere intersection
    materials: Diffuse, specular and refractive interactions
    scene: Scene description, field storage and the Cornell box
    camera: Pinhole camera with primary ray generation
    output: Gamma encoding and image files

Taichi must be initialised (with default_fp=ti.f64) before importing any
subpackage that declares fields.
"""

__version__ = "0.1.0"
