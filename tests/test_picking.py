import math

import numpy as np
import pytest

from body_scene import BodyPart, Box, Cylinder, Primitive, Scene, Sphere, Transform, build_scene
from picking import (Camera, InvalidCameraState, Ray, cast_ray, intersect, intersect_scene,
                     normalize_pointer, resolve_pick)


@pytest.fixture
def scene():
    return build_scene()


@pytest.fixture
def camera():
    return Camera()


def _ray(origin, direction):
    d = np.asarray(direction, dtype=float)
    return Ray(np.asarray(origin, dtype=float), d / np.linalg.norm(d))


# --- pointer normalisation ---

def test_normalize_pointer_centre_and_corners():
    assert normalize_pointer(200, 150, 400, 300) == (0.0, 0.0)
    assert normalize_pointer(0, 0, 400, 300) == (-1.0, 1.0)
    assert normalize_pointer(400, 300, 400, 300) == (1.0, -1.0)


def test_normalize_pointer_inverts_y():
    _, y_top = normalize_pointer(0, 10, 100, 100)
    _, y_low = normalize_pointer(0, 90, 100, 100)
    assert y_top > y_low


@pytest.mark.parametrize("width,height", [(0, 100), (100, 0), (-5, 100)])
def test_normalize_pointer_rejects_empty_viewport(width, height):
    with pytest.raises(ValueError):
        normalize_pointer(1, 1, width, height)


# --- resolving picks with the default camera ---

def test_upper_centre_is_head(scene, camera):
    assert resolve_pick(0.0, 0.6, camera, scene) == "Head"


def test_centre_is_torso(scene, camera):
    assert resolve_pick(0.0, 0.0, camera, scene) == "Torso"


@pytest.mark.parametrize("x,label", [(-0.05, "Left Leg"), (0.05, "Right Leg")])
def test_lower_centre_is_leg_on_that_side(scene, camera, x, label):
    assert resolve_pick(x, -0.8, camera, scene) == label


@pytest.mark.parametrize("x,y", [(0.99, 0.99), (-0.99, 0.99), (0.99, -0.99), (-0.99, -0.99)])
def test_viewport_corners_select_nothing(scene, camera, x, y):
    assert resolve_pick(x, y, camera, scene) is None


@pytest.mark.parametrize("label", ["Head", "Torso", "Left Arm", "Right Arm", "Left Leg", "Right Leg"])
def test_projected_centre_selects_that_part(scene, camera, label):
    ndc_x, ndc_y = camera.project(scene[label].transform.position)
    assert -1.0 < ndc_x < 1.0 and -1.0 < ndc_y < 1.0
    assert resolve_pick(ndc_x, ndc_y, camera, scene) == label


def test_resolve_pick_is_deterministic(scene, camera):
    results = {resolve_pick(0.3, -0.1, camera, scene) for _ in range(20)}
    assert len(results) == 1


def test_aspect_ratio_changes_the_picked_part(scene):
    assert resolve_pick(0.5, 0.0, Camera(aspect=1.0), scene) == "Right Arm"
    assert resolve_pick(0.5, 0.0, Camera(aspect=2.0), scene) is None


def test_camera_from_above_hits_head_first(scene):
    top = Camera(position=(0.0, 10.0, 0.0), target=(0.0, 0.0, 0.0), up=(0.0, 0.0, -1.0))
    assert resolve_pick(0.0, 0.0, top, scene) == "Head"


def test_camera_from_side_sees_arm_first(scene):
    side = Camera(position=(5.0, 0.0, 0.0))
    assert resolve_pick(0.0, 0.0, side, scene) == "Right Arm"


def test_non_finite_pointer_selects_nothing(scene, camera):
    assert resolve_pick(math.nan, 0.0, camera, scene) is None


# --- rays ---

def test_cast_ray_through_centre_points_at_target(camera):
    ray = cast_ray(0.0, 0.0, camera)
    np.testing.assert_allclose(ray.origin, [0.0, 0.0, 5.0])
    np.testing.assert_allclose(ray.direction, [0.0, 0.0, -1.0], atol=1e-9)
    assert np.linalg.norm(ray.direction) == pytest.approx(1.0)


def test_project_then_cast_passes_through_point(camera):
    point = np.array([0.4, -0.7, 0.2])
    ray = cast_ray(*camera.project(point), camera)
    to_point = point - ray.origin
    np.testing.assert_allclose(np.cross(ray.direction, to_point), 0.0, atol=1e-9)


# --- shape intersections ---

def test_sphere_front_hit():
    sphere = Primitive(label=BodyPart.HEAD, geometry=Sphere(radius=0.5))
    assert intersect(_ray((0, 0, 5), (0, 0, -1)), sphere) == pytest.approx(4.5)


def test_sphere_from_inside_hits_exit():
    sphere = Primitive(label=BodyPart.HEAD, geometry=Sphere(radius=0.5))
    assert intersect(_ray((0, 0, 0), (0, 0, -1)), sphere) == pytest.approx(0.5)


def test_sphere_behind_ray_is_ignored():
    sphere = Primitive(label=BodyPart.HEAD, geometry=Sphere(radius=0.5))
    assert intersect(_ray((0, 0, 5), (0, 0, 1)), sphere) is None


def test_sphere_miss():
    sphere = Primitive(label=BodyPart.HEAD, geometry=Sphere(radius=0.5))
    assert intersect(_ray((0, 0.6, 5), (0, 0, -1)), sphere) is None


def test_cylinder_side_and_cap():
    cyl = Primitive(label=BodyPart.TORSO, geometry=Cylinder(radius=0.5, height=2.0))
    assert intersect(_ray((0, 0, 5), (0, 0, -1)), cyl) == pytest.approx(4.5)
    assert intersect(_ray((0.2, 5, 0), (0, -1, 0)), cyl) == pytest.approx(4.0)
    # passes above the capped top
    assert intersect(_ray((0, 1.2, 5), (0, 0, -1)), cyl) is None


def test_rotated_cylinder_lies_along_x():
    arm = Primitive(
        label=BodyPart.RIGHT_ARM,
        geometry=Cylinder(radius=0.2, height=1.5),
        transform=Transform(rotation=(0.0, 0.0, -math.pi / 2)),
    )
    assert intersect(_ray((5, 0, 0), (-1, 0, 0)), arm) == pytest.approx(4.25)
    assert intersect(_ray((0, 5, 0), (0, -1, 0)), arm) == pytest.approx(4.8)
    assert intersect(_ray((0, 0.5, 5), (0, 0, -1)), arm) is None


def test_translated_primitive():
    leg = Primitive(
        label=BodyPart.LEFT_LEG,
        geometry=Cylinder(radius=0.3, height=2.0),
        transform=Transform(position=(-0.3, -1.5, 0.0)),
    )
    assert intersect(_ray((-0.3, -1.5, 5), (0, 0, -1)), leg) == pytest.approx(4.7)


def test_box_slabs():
    box = Primitive(label=BodyPart.TORSO, geometry=Box(width=1.0, height=1.5, depth=0.5))
    assert intersect(_ray((0, 0, 5), (0, 0, -1)), box) == pytest.approx(4.75)
    assert intersect(_ray((0.6, 0, 5), (0, 0, -1)), box) is None
    assert intersect(_ray((0, 0, 0), (1, 0, 0)), box) == pytest.approx(0.5)


def test_intersect_scene_sorted_nearest_first(scene):
    # the arms reach x = +-0.05, so a ray down the centre line passes both behind the torso
    hits = intersect_scene(_ray((0, 0, 5), (0, 0, -1)), scene)
    assert [h.primitive.label.value for h in hits][0] == "Torso"
    assert sorted(h.primitive.label.value for h in hits) == ["Left Arm", "Right Arm", "Torso"]
    distances = [h.distance for h in hits]
    assert distances == sorted(distances)
    # slightly off the centre line, where both legs touch
    hits = intersect_scene(_ray((0, 5, 0.1), (0, -1, 0)), scene)
    labels = [h.primitive.label.value for h in hits]
    assert labels[:2] == ["Head", "Torso"]
    assert sorted(labels[2:]) == ["Left Arm", "Right Arm"]
    distances = [h.distance for h in hits]
    assert distances == sorted(distances)
    assert hits[0].distance < hits[1].distance < hits[2].distance


def test_equal_distances_keep_scene_order():
    base = build_scene()
    far = Transform(position=(50.0, 50.0, 50.0))
    twin = Sphere(radius=0.5)
    scene = Scene(
        head=Primitive(label=BodyPart.HEAD, geometry=twin),
        torso=Primitive(label=BodyPart.TORSO, geometry=twin),
        left_arm=base.left_arm.model_copy(update={"transform": far}),
        right_arm=base.right_arm.model_copy(update={"transform": far}),
        left_leg=base.left_leg.model_copy(update={"transform": far}),
        right_leg=base.right_leg.model_copy(update={"transform": far}),
    )
    hits = intersect_scene(_ray((0, 0, 5), (0, 0, -1)), scene)
    assert hits[0].distance == hits[1].distance
    assert resolve_pick(0.0, 0.0, Camera(), scene) == "Head"


# --- camera validation ---

@pytest.mark.parametrize("overrides", [
    {"fov": 0.0},
    {"fov": 180.0},
    {"aspect": 0.0},
    {"near": 0.0},
    {"near": 10.0, "far": 1.0},
    {"position": (0.0, 0.0, 0.0)},
    {"up": (0.0, 0.0, 1.0)},
    {"position": (0.0, math.inf, 5.0)},
])
def test_degenerate_camera_is_rejected(scene, overrides):
    camera = Camera(**overrides)
    with pytest.raises(InvalidCameraState):
        camera.validate_state()
    with pytest.raises(InvalidCameraState):
        resolve_pick(0.0, 0.0, camera, scene)


def test_camera_from_payload_round_trip():
    camera = Camera(position=(1.0, 2.0, 5.0), fov=60.0, aspect=1.5)
    assert Camera.from_payload(camera.model_dump(mode="json")) == camera


@pytest.mark.parametrize("payload", [
    {"position": "nowhere"},
    {"position": [0, 0, 5], "fov": -1},
])
def test_camera_from_bad_payload(payload):
    with pytest.raises(InvalidCameraState):
        Camera.from_payload(payload)
