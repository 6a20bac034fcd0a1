"""
Streamlit component that draws the body scene with three.js and reports clicks.

The browser only renders and reports {x, y, width, height, camera, nonce};
picking runs in Python (BodyView.handle_event).
"""
from pathlib import Path
from typing import Any, Dict, Optional

import streamlit.components.v1 as components

_FRONTEND_DIR = Path(__file__).parent / "body_model_frontend"

_body_model = components.declare_component("body_model", path=str(_FRONTEND_DIR))


def body_model(payload: Dict[str, Any], selected: Optional[str] = None,
               height: int = 500, key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Render the scene payload; returns the last click event, or None before the first click."""
    return _body_model(
        scene=payload,
        selected=selected,
        height=height,
        key=key,
        default=None,
    )
