"""
Pointer picking against the body scene.

Turns a click into a ray from the camera, tests it analytically against every
primitive, and returns the label of the nearest hit (or None).

Provides:
- Camera: perspective camera with projection / view matrices
- InvalidCameraState: raised for camera state that cannot produce a ray
- normalize_pointer: pixel coordinates -> normalized device coordinates
- cast_ray, intersect, intersect_scene
- resolve_pick: the whole click -> label query
"""

import logging
import math
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, ValidationError

from body_scene import Box, Cylinder, Primitive, Scene, Sphere, Vec3

logger = logging.getLogger("symptom_checker.picking")

EPSILON = 1e-9


class InvalidCameraState(ValueError):
    """Camera / projection state that cannot be unprojected."""


class Camera(BaseModel):
    model_config = ConfigDict(frozen=True)

    position: Vec3 = (0.0, 0.0, 5.0)
    target: Vec3 = (0.0, 0.0, 0.0)
    up: Vec3 = (0.0, 1.0, 0.0)
    fov: float = 50.0  # vertical, degrees
    aspect: float = 1.0
    near: float = 0.1
    far: float = 1000.0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Camera":
        """Build a camera from the state reported by the renderer."""
        try:
            camera = cls.model_validate(payload)
        except ValidationError as e:
            raise InvalidCameraState(f"malformed camera payload: {e.errors()[0]['msg']}") from e
        camera.validate_state()
        return camera

    def validate_state(self) -> None:
        values = [*self.position, *self.target, *self.up, self.fov, self.aspect, self.near, self.far]
        if not all(math.isfinite(v) for v in values):
            raise InvalidCameraState("camera contains non-finite values")
        if not 0.0 < self.fov < 180.0:
            raise InvalidCameraState(f"fov must be in (0, 180), got {self.fov}")
        if self.aspect <= 0.0:
            raise InvalidCameraState(f"aspect must be positive, got {self.aspect}")
        if self.near <= 0.0 or self.far <= self.near:
            raise InvalidCameraState(f"need 0 < near < far, got near={self.near} far={self.far}")
        forward = np.subtract(self.target, self.position)
        if np.linalg.norm(forward) < EPSILON:
            raise InvalidCameraState("camera position and target coincide")
        if np.linalg.norm(np.cross(forward, self.up)) < EPSILON:
            raise InvalidCameraState("up vector is parallel to the view direction")

    def projection_matrix(self) -> np.ndarray:
        f = 1.0 / math.tan(math.radians(self.fov) / 2.0)
        n, fa = self.near, self.far
        return np.array([
            [f / self.aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (fa + n) / (n - fa), 2.0 * fa * n / (n - fa)],
            [0.0, 0.0, -1.0, 0.0],
        ])

    def view_matrix(self) -> np.ndarray:
        eye = np.asarray(self.position, dtype=float)
        z = eye - np.asarray(self.target, dtype=float)
        z /= np.linalg.norm(z)
        x = np.cross(self.up, z)
        x /= np.linalg.norm(x)
        y = np.cross(z, x)
        view = np.identity(4)
        view[0, :3], view[1, :3], view[2, :3] = x, y, z
        view[:3, 3] = -view[:3, :3] @ eye
        return view

    def view_projection(self) -> np.ndarray:
        return self.projection_matrix() @ self.view_matrix()

    def project(self, point: Vec3) -> Tuple[float, float]:
        """World point -> (ndc_x, ndc_y)."""
        clip = self.view_projection() @ np.append(np.asarray(point, dtype=float), 1.0)
        return float(clip[0] / clip[3]), float(clip[1] / clip[3])


class Ray(NamedTuple):
    origin: np.ndarray
    direction: np.ndarray  # unit length


class Intersection(NamedTuple):
    primitive: Primitive
    distance: float


def normalize_pointer(px: float, py: float, width: float, height: float) -> Tuple[float, float]:
    """Viewport pixels -> NDC in [-1, 1]; pixel y grows downwards, NDC y upwards."""
    if width <= 0 or height <= 0:
        raise ValueError(f"viewport must have positive size, got {width}x{height}")
    return (px / width) * 2.0 - 1.0, -(py / height) * 2.0 + 1.0


def cast_ray(ndc_x: float, ndc_y: float, camera: Camera) -> Ray:
    camera.validate_state()
    vp = camera.view_projection()
    try:
        inverse = np.linalg.inv(vp)
    except np.linalg.LinAlgError as e:
        raise InvalidCameraState("view-projection matrix is not invertible") from e

    near_point = inverse @ np.array([ndc_x, ndc_y, -1.0, 1.0])
    if abs(near_point[3]) < EPSILON:
        raise InvalidCameraState("unprojected point lies at infinity")
    near_point = near_point[:3] / near_point[3]

    origin = np.asarray(camera.position, dtype=float)
    direction = near_point - origin
    length = np.linalg.norm(direction)
    if not np.isfinite(length) or length < EPSILON:
        raise InvalidCameraState("could not derive a ray direction")
    return Ray(origin, direction / length)


def _first_positive(candidates: List[float]) -> Optional[float]:
    hits = [t for t in candidates if t > 0.0]
    return min(hits) if hits else None


def _intersect_sphere(origin: np.ndarray, direction: np.ndarray, shape: Sphere) -> Optional[float]:
    b = float(origin @ direction)
    c = float(origin @ origin) - shape.radius ** 2
    disc = b * b - c
    if disc < 0.0:
        return None
    root = math.sqrt(disc)
    return _first_positive([-b - root, -b + root])


def _intersect_cylinder(origin: np.ndarray, direction: np.ndarray, shape: Cylinder) -> Optional[float]:
    ox, oy, oz = origin
    dx, dy, dz = direction
    half = shape.height / 2.0
    r2 = shape.radius ** 2
    candidates = []

    # side wall
    a = dx * dx + dz * dz
    if a > EPSILON:
        b = 2.0 * (ox * dx + oz * dz)
        c = ox * ox + oz * oz - r2
        disc = b * b - 4.0 * a * c
        if disc >= 0.0:
            root = math.sqrt(disc)
            for t in ((-b - root) / (2.0 * a), (-b + root) / (2.0 * a)):
                if abs(oy + t * dy) <= half + EPSILON:
                    candidates.append(t)

    # caps
    if abs(dy) > EPSILON:
        for cap_y in (-half, half):
            t = (cap_y - oy) / dy
            x, z = ox + t * dx, oz + t * dz
            if x * x + z * z <= r2 + EPSILON:
                candidates.append(t)

    return _first_positive(candidates)


def _intersect_box(origin: np.ndarray, direction: np.ndarray, shape: Box) -> Optional[float]:
    half = (shape.width / 2.0, shape.height / 2.0, shape.depth / 2.0)
    t_near, t_far = -math.inf, math.inf
    for o, d, h in zip(origin, direction, half):
        if abs(d) < EPSILON:
            if abs(o) > h:
                return None
            continue
        t1, t2 = (-h - o) / d, (h - o) / d
        t_near = max(t_near, min(t1, t2))
        t_far = min(t_far, max(t1, t2))
        if t_near > t_far:
            return None
    return _first_positive([t_near, t_far])


_INTERSECTORS = {
    Sphere: _intersect_sphere,
    Cylinder: _intersect_cylinder,
    Box: _intersect_box,
}


def intersect(ray: Ray, primitive: Primitive) -> Optional[float]:
    """Distance along the ray to the primitive's surface, or None when missed or behind."""
    transform = primitive.transform
    rotation = transform.rotation_matrix()
    # world -> local: rotations preserve length, so local t is world distance
    local_origin = rotation.T @ (ray.origin - np.asarray(transform.position, dtype=float))
    local_direction = rotation.T @ ray.direction
    return _INTERSECTORS[type(primitive.geometry)](local_origin, local_direction, primitive.geometry)


def intersect_scene(ray: Ray, scene: Scene) -> List[Intersection]:
    hits = []
    for primitive in scene.primitives:
        distance = intersect(ray, primitive)
        if distance is not None:
            hits.append(Intersection(primitive, distance))
    # stable: equal distances keep the scene's primitive order
    return sorted(hits, key=lambda hit: hit.distance)


def resolve_pick(ndc_x: float, ndc_y: float, camera: Camera, scene: Scene) -> Optional[str]:
    """Label of the nearest primitive under the pointer, or None."""
    if not (math.isfinite(ndc_x) and math.isfinite(ndc_y)):
        return None
    ray = cast_ray(ndc_x, ndc_y, camera)
    hits = intersect_scene(ray, scene)
    if not hits:
        logger.debug("pick (%.3f, %.3f): no selection", ndc_x, ndc_y)
        return None
    label = hits[0].primitive.label.value
    logger.debug("pick (%.3f, %.3f): %s at %.3f", ndc_x, ndc_y, label, hits[0].distance)
    return label
