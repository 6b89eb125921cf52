"""Reading and writing images and evolution checkpoints."""

from breed_art.io.images import load_image, save_image, resize_image, to_pil_image
from breed_art.io.state import save_state, load_state

__all__ = [
    "load_image",
    "save_image",
    "resize_image",
    "to_pil_image",
    "save_state",
    "load_state",
]
