"""
Interactive session for the LOP globe: view orientation, gestures and a
reference rasterizer.
"""

from interaction.view_state import ViewController, DragState
from interaction.rasterizer import (
    RenderConfig,
    ZoomTransform,
    Rasterizer,
    SolidBackground,
    ImageBackground,
    canvas_size,
    load_map_image,
    save_frame,
)

__all__ = [
    "ViewController",
    "DragState",
    "RenderConfig",
    "ZoomTransform",
    "Rasterizer",
    "SolidBackground",
    "ImageBackground",
    "canvas_size",
    "load_map_image",
    "save_frame",
]
