"""
Body mannequin scene.

Six labelled primitives (sphere head, cylinder torso, limbs) arranged into a
rough human silhouette. The scene is only an illustration to click on:
dimensions are fixed constants in logical units.

Provides:
- BodyPart: the closed set of region labels
- Sphere / Cylinder / Box geometry, Transform, Material, Light
- Primitive and Scene models
- build_scene: the canonical mannequin
"""

import math
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

Vec3 = Tuple[float, float, float]


class BodyPart(str, Enum):
    HEAD = "Head"
    TORSO = "Torso"
    LEFT_ARM = "Left Arm"
    RIGHT_ARM = "Right Arm"
    LEFT_LEG = "Left Leg"
    RIGHT_LEG = "Right Leg"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Sphere(_Frozen):
    kind: Literal["sphere"] = "sphere"
    radius: float = Field(gt=0)


class Cylinder(_Frozen):
    # long axis along local +Y, centred on the origin, capped at both ends
    kind: Literal["cylinder"] = "cylinder"
    radius: float = Field(gt=0)
    height: float = Field(gt=0)


class Box(_Frozen):
    kind: Literal["box"] = "box"
    width: float = Field(gt=0)
    height: float = Field(gt=0)
    depth: float = Field(gt=0)


Geometry = Union[Sphere, Cylinder, Box]


class Transform(_Frozen):
    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)  # Euler XYZ, radians

    def rotation_matrix(self) -> np.ndarray:
        """Local-to-world rotation, R = Rx @ Ry @ Rz (intrinsic XYZ order)."""
        ax, ay, az = self.rotation
        cx, sx = math.cos(ax), math.sin(ax)
        cy, sy = math.cos(ay), math.sin(ay)
        cz, sz = math.cos(az), math.sin(az)
        rx = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=float)
        ry = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=float)
        rz = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]], dtype=float)
        return rx @ ry @ rz


class Material(_Frozen):
    color: int = 0xFFCC99
    shininess: float = 30.0


class Light(_Frozen):
    kind: Literal["ambient", "directional"]
    color: int = 0xFFFFFF
    intensity: float = 1.0
    position: Optional[Vec3] = None


class Primitive(_Frozen):
    label: BodyPart
    geometry: Geometry = Field(discriminator="kind")
    transform: Transform = Transform()
    material: Material = Material()


# field name on Scene -> label the primitive in that field must carry
PART_FIELDS: Dict[str, BodyPart] = {
    "head": BodyPart.HEAD,
    "torso": BodyPart.TORSO,
    "left_arm": BodyPart.LEFT_ARM,
    "right_arm": BodyPart.RIGHT_ARM,
    "left_leg": BodyPart.LEFT_LEG,
    "right_leg": BodyPart.RIGHT_LEG,
}
_FIELD_BY_PART: Dict[BodyPart, str] = {part: name for name, part in PART_FIELDS.items()}


class Scene(_Frozen):
    head: Primitive
    torso: Primitive
    left_arm: Primitive
    right_arm: Primitive
    left_leg: Primitive
    right_leg: Primitive
    lights: Tuple[Light, ...] = ()

    @model_validator(mode="after")
    def _labels_match_fields(self):
        for field_name, label in PART_FIELDS.items():
            actual = getattr(self, field_name).label
            if actual != label:
                raise ValueError(f"{field_name} must be labelled {label.value!r}, got {actual.value!r}")
        return self

    @property
    def primitives(self) -> Tuple[Primitive, ...]:
        return tuple(getattr(self, name) for name in PART_FIELDS)

    def __getitem__(self, label: Union[BodyPart, str]) -> Primitive:
        try:
            part = BodyPart(label)
        except ValueError:
            raise KeyError(label) from None
        return getattr(self, _FIELD_BY_PART[part])

    def labels(self) -> List[str]:
        return [p.label.value for p in self.primitives]

    def to_payload(self) -> dict:
        """JSON-ready description for the browser renderer."""
        return {
            "primitives": [p.model_dump(mode="json") for p in self.primitives],
            "lights": [light.model_dump(mode="json") for light in self.lights],
        }


# Canonical placement (logical units)
HEAD_RADIUS = 0.5
TORSO_RADIUS = 0.5
TORSO_HEIGHT = 2.0
ARM_RADIUS = 0.2
ARM_LENGTH = 1.5
ARM_OFFSET_X = 0.7
LEG_RADIUS = 0.3
LEG_LENGTH = 2.0
LEG_OFFSET_X = 0.3
LEG_OFFSET_Y = -1.5
SKIN = Material(color=0xFFCC99)


def _mirrored_limbs(label_left: BodyPart, label_right: BodyPart, geometry: Geometry,
                    offset_x: float, offset_y: float, rotation_z: float) -> Tuple[Primitive, Primitive]:
    left = Primitive(
        label=label_left,
        geometry=geometry,
        transform=Transform(position=(-offset_x, offset_y, 0.0), rotation=(0.0, 0.0, rotation_z)),
        material=SKIN,
    )
    right = Primitive(
        label=label_right,
        geometry=geometry,
        transform=Transform(position=(offset_x, offset_y, 0.0), rotation=(0.0, 0.0, -rotation_z)),
        material=SKIN,
    )
    return left, right


def build_scene() -> Scene:
    head = Primitive(
        label=BodyPart.HEAD,
        geometry=Sphere(radius=HEAD_RADIUS),
        # sits on the torso's top edge
        transform=Transform(position=(0.0, TORSO_HEIGHT / 2 + HEAD_RADIUS, 0.0)),
        material=SKIN,
    )
    torso = Primitive(
        label=BodyPart.TORSO,
        geometry=Cylinder(radius=TORSO_RADIUS, height=TORSO_HEIGHT),
        material=SKIN,
    )
    left_arm, right_arm = _mirrored_limbs(
        BodyPart.LEFT_ARM, BodyPart.RIGHT_ARM,
        Cylinder(radius=ARM_RADIUS, height=ARM_LENGTH),
        ARM_OFFSET_X, 0.0, math.pi / 2,
    )
    left_leg, right_leg = _mirrored_limbs(
        BodyPart.LEFT_LEG, BodyPart.RIGHT_LEG,
        Cylinder(radius=LEG_RADIUS, height=LEG_LENGTH),
        LEG_OFFSET_X, LEG_OFFSET_Y, 0.0,
    )
    lights = (
        Light(kind="ambient", intensity=0.5),
        Light(kind="directional", intensity=0.8, position=(1.0, 1.0, 1.0)),
    )
    return Scene(
        head=head,
        torso=torso,
        left_arm=left_arm,
        right_arm=right_arm,
        left_leg=left_leg,
        right_leg=right_leg,
        lights=lights,
    )
