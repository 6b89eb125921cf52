"""Image helpers: validation, random initialization and averaging.

An image is a float array with every dimension >= 1. Images read through
``breed_art.io`` are laid out as (width, height, frames, channels), but
nothing here depends on the number of axes. A population is one contiguous
array of shape ``(popsize, *image.shape)``.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from breed_art.errors import ConfigurationError, ShapeMismatchError


def check_image(image: np.ndarray, name: str = "image") -> np.ndarray:
    """Validate an image and return it as a float64 array."""
    arr = np.asarray(image)
    if arr.ndim == 0:
        raise ConfigurationError(f"{name} must have at least one dimension")
    if any(dim < 1 for dim in arr.shape):
        raise ConfigurationError(f"{name} dimensions must all be >= 1, got {arr.shape}")
    if not np.issubdtype(arr.dtype, np.number) or np.issubdtype(arr.dtype, np.complexfloating):
        raise ConfigurationError(f"{name} must be real-valued, got dtype {arr.dtype}")
    return arr.astype(np.float64, copy=False)


def random_image(shape: Sequence[int], rng: np.random.Generator) -> np.ndarray:
    """Create an image of the given shape with independent uniform [0, 1) values.

    Every element, including every channel of a pixel, is a separate draw.
    """
    return rng.random(tuple(shape))


def random_population(
    target: np.ndarray,
    popsize: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """Create ``popsize`` random images shaped like ``target``.

    Members are drawn one after another, so the result matches calling
    :func:`random_image` popsize times on the same generator.
    """
    if popsize < 1:
        raise ConfigurationError(f"popsize must be >= 1, got {popsize}")
    population = np.empty((popsize,) + target.shape, dtype=np.float64)
    for i in range(popsize):
        population[i] = random_image(target.shape, rng)
    return population


def average_images(images: Union[np.ndarray, Sequence[np.ndarray]]) -> np.ndarray:
    """Average a population elementwise.

    Args:
        images: A stacked population array or a sequence of equally
            shaped images.

    Returns:
        One image holding the arithmetic mean of every element.

    Raises:
        ConfigurationError: If ``images`` is empty.
        ShapeMismatchError: If the images do not share a shape.
    """
    if isinstance(images, np.ndarray):
        if images.ndim < 2 or images.shape[0] == 0:
            raise ConfigurationError("Cannot average an empty population")
        return images.astype(np.float64, copy=False).mean(axis=0)

    if len(images) == 0:
        raise ConfigurationError("Cannot average an empty population")

    first = np.asarray(images[0])
    total = first.astype(np.float64, copy=True)
    for img in images[1:]:
        arr = np.asarray(img)
        if arr.shape != first.shape:
            raise ShapeMismatchError(first.shape, arr.shape)
        total += arr
    return total / len(images)
