"""
Hosting view for the clickable body model.

A BodyView owns one scene for as long as it is mounted. Mounting builds the
scene, acquires a render resource per primitive and registers the click
callback; unmounting releases all of it, also when mounting failed half way.

    with BodyView(on_part_selected=handle) as view:
        payload = view.render_payload()
        ...
        view.handle_click(px, py, width, height)
"""

import logging
from contextlib import ExitStack
from typing import Any, Callable, Dict, Optional

from body_scene import Primitive, Scene, build_scene
from picking import Camera, normalize_pointer, resolve_pick

logger = logging.getLogger("symptom_checker.body_view")

PartCallback = Callable[[str], None]


class RenderResource:
    """Geometry / material description handed to the renderer for one primitive."""

    def __init__(self, primitive: Primitive):
        self.label = primitive.label.value
        self.payload: Optional[Dict[str, Any]] = primitive.model_dump(mode="json")
        self.released = False

    def release(self) -> None:
        if self.released:
            return
        self.payload = None
        self.released = True
        logger.debug("released render resource for %s", self.label)


class BodyView:
    def __init__(self, on_part_selected: PartCallback, camera: Optional[Camera] = None,
                 resource_factory: Callable[[Primitive], RenderResource] = RenderResource):
        self._on_part_selected = on_part_selected
        self._resource_factory = resource_factory
        self.camera = camera or Camera()
        self.scene: Optional[Scene] = None
        self.resources: Dict[str, RenderResource] = {}
        self._listener: Optional[PartCallback] = None
        self._stack: Optional[ExitStack] = None

    @property
    def mounted(self) -> bool:
        return self._stack is not None

    def __enter__(self) -> "BodyView":
        self.mount()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    def mount(self) -> None:
        if self.mounted:
            raise RuntimeError("body view is already mounted")
        # the camera is checked once here, not on every click
        self.camera.validate_state()
        with ExitStack() as stack:
            stack.callback(self._clear)
            self.scene = build_scene()
            for primitive in self.scene.primitives:
                resource = self._resource_factory(primitive)
                stack.callback(resource.release)
                self.resources[resource.label] = resource
            self._listener = self._on_part_selected
            stack.callback(self._deregister)
            # nothing failed: keep everything until unmount
            self._stack = stack.pop_all()
        logger.debug("body view mounted with %d primitives", len(self.resources))

    def unmount(self) -> None:
        if self._stack is None:
            return
        stack, self._stack = self._stack, None
        stack.close()
        logger.debug("body view unmounted")

    def _deregister(self) -> None:
        self._listener = None

    def _clear(self) -> None:
        self.resources = {}
        self.scene = None

    def render_payload(self) -> Dict[str, Any]:
        if not self.mounted:
            raise RuntimeError("body view is not mounted")
        return {
            "primitives": [r.payload for r in self.resources.values()],
            "lights": [light.model_dump(mode="json") for light in self.scene.lights],
            "camera": self.camera.model_dump(mode="json"),
        }

    def handle_click(self, px: float, py: float, width: float, height: float,
                     camera: Optional[Camera] = None) -> Optional[str]:
        """Resolve a click in viewport pixels; notifies the callback when a part is hit."""
        if not self.mounted:
            raise RuntimeError("body view is not mounted")
        if camera is not None:
            self.camera = camera
        ndc_x, ndc_y = normalize_pointer(px, py, width, height)
        label = resolve_pick(ndc_x, ndc_y, self.camera, self.scene)
        if label is not None and self._listener is not None:
            self._listener(label)
        return label

    def handle_event(self, event: Dict[str, Any]) -> Optional[str]:
        """Click event as posted by the browser component."""
        camera = Camera.from_payload(event["camera"]) if event.get("camera") else None
        return self.handle_click(
            float(event["x"]), float(event["y"]),
            float(event["width"]), float(event["height"]),
            camera=camera,
        )
