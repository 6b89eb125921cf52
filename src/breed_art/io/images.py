"""Image file I/O and resizing.

Arrays produced here use the layout (width, height, frames, channels) with
float values in [0, 1]. Pillow works in (height, width) order, so every
conversion transposes the first two axes.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, ImageSequence

from breed_art.errors import ConfigurationError

_GRAYSCALE_MODES = {"1", "L", "LA", "I", "I;16", "F"}


def load_image(
    path: str | Path,
    max_pixels: Optional[int] = None,
    grayscale: bool = False,
    verbose: bool = False,
) -> np.ndarray:
    """Load an image file as a (width, height, frames, channels) array.

    Args:
        path: Image file readable by Pillow.
        max_pixels: If given, shrink the image to at most this many pixels.
        grayscale: Force a single channel. Grayscale sources stay single
            channel regardless.
        verbose: Print what resizing did.

    Returns:
        Float64 array with values in [0, 1]. Every frame of an animated
        file becomes one entry along the frame axis.
    """
    frames = []
    with Image.open(path) as img:
        mode = "L" if grayscale or img.mode in _GRAYSCALE_MODES else "RGB"
        for frame in ImageSequence.Iterator(img):
            arr = np.asarray(frame.convert(mode), dtype=np.float64) / 255.0
            if arr.ndim == 2:
                arr = arr[:, :, np.newaxis]
            frames.append(arr.transpose(1, 0, 2))

    image = np.stack(frames, axis=2)

    if max_pixels is not None:
        image = resize_image(image, max_pixels, verbose=verbose)

    return image


def resize_image(image: np.ndarray, max_pixels: int, verbose: bool = False) -> np.ndarray:
    """Shrink an image to at most ``max_pixels`` pixels.

    Both spatial axes are scaled by ``sqrt(max_pixels / (width * height))``
    so the aspect ratio is kept; every frame and channel is resized alike.
    Images already at or below ``max_pixels`` are returned unchanged.

    Args:
        image: Array whose first two axes are width and height.
        max_pixels: Maximum width * height after resizing.
        verbose: Print whether the image was resized.

    Returns:
        The resized array, or ``image`` itself.
    """
    if max_pixels < 1:
        raise ConfigurationError(f"max_pixels must be >= 1, got {max_pixels}")

    image = np.asarray(image)
    if image.ndim < 2:
        raise ConfigurationError(f"Image needs width and height axes, got shape {image.shape}")

    width, height = image.shape[:2]
    orig_size = width * height
    if orig_size <= max_pixels:
        if verbose:
            print(f"Image is already below {max_pixels} pixels; returning unchanged")
        return image

    if verbose:
        print(f"Resizing image to below {max_pixels} pixels")

    scale = math.sqrt(max_pixels / orig_size)
    new_width = max(1, int(width * scale))
    new_height = max(1, int(height * scale))

    rest = image.shape[2:]
    planes = image.reshape(width, height, -1)
    resized = np.empty((new_width, new_height, planes.shape[2]), dtype=np.float64)

    for k in range(planes.shape[2]):
        plane = Image.fromarray(np.ascontiguousarray(planes[:, :, k].T, dtype=np.float32))
        plane = plane.resize((new_width, new_height), resample=Image.Resampling.BILINEAR)
        resized[:, :, k] = np.asarray(plane, dtype=np.float64).T

    np.clip(resized, 0.0, 1.0, out=resized)
    return resized.reshape((new_width, new_height) + rest)


def to_pil_image(image: np.ndarray, frame: int = 0) -> Image.Image:
    """Convert one frame of an image array to a Pillow image.

    Accepts (width, height), (width, height, channels) or
    (width, height, frames, channels) arrays with 1, 3 or 4 channels.
    """
    arr = np.asarray(image, dtype=np.float64)
    if arr.ndim == 2:
        arr = arr[:, :, np.newaxis]
    elif arr.ndim == 4:
        arr = arr[:, :, frame, :]
    elif arr.ndim != 3:
        raise ConfigurationError(f"Cannot convert array of shape {arr.shape} to an image")

    data = np.round(np.clip(arr, 0.0, 1.0) * 255).astype(np.uint8).transpose(1, 0, 2)
    channels = data.shape[2]

    if channels == 1:
        return Image.fromarray(np.ascontiguousarray(data[:, :, 0]))
    if channels in (3, 4):
        return Image.fromarray(np.ascontiguousarray(data))
    raise ConfigurationError(f"Unsupported channel count: {channels}")


def save_image(image: np.ndarray, path: str | Path, frame: int = 0) -> Path:
    """Save one frame of an image array to ``path`` (format from the suffix)."""
    path = Path(path)
    to_pil_image(image, frame=frame).save(path)
    return path
