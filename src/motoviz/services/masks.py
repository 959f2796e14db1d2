"""
Generación de máscaras de región

Dibuja la elipse de la pieza sobre un lienzo en escala de grises, suaviza el
borde con un desenfoque gaussiano y la convierte al formato RGB que espera el
servicio de inpainting (blanco = zona a regenerar, negro = zona a conservar).
"""

import logging

from PIL import Image, ImageDraw, ImageFilter

from motoviz.config import MASK_BLUR_SIGMA
from motoviz.errors import GeometryError
from motoviz.services.images import decode_image
from motoviz.services.regions import (EllipseGeometry, Intensity, PartCategory,
                                      region_geometry)

logger = logging.getLogger(__name__)


def _check_canvas(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise GeometryError(f"Cannot create a mask for a {width}x{height} canvas")


def _draw_ellipse(width: int, height: int, ellipse: EllipseGeometry) -> Image.Image:
    # PIL clips anything outside the canvas
    mask = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(mask)
    draw.ellipse(ellipse.bounding_box, fill=255)
    return mask


def _feather(mask: Image.Image, sigma: float) -> Image.Image:
    if sigma <= 0:
        return mask
    return mask.filter(ImageFilter.GaussianBlur(radius=sigma))


def create_part_mask(
    width: int, height: int, category: PartCategory, intensity: Intensity
) -> Image.Image:
    """
    Create a feathered mask for a motorcycle part.

    Args:
        width (int): Width of the base image in pixels
        height (int): Height of the base image in pixels
        category (PartCategory): Part whose region is masked
        intensity (Intensity): How much the region is enlarged or shrunk

    Returns:
        Image.Image: Single channel ("L") mask with the same size as the base image
    """
    _check_canvas(width, height)
    ellipse = region_geometry(width, height, category, intensity)
    logger.debug(
        "Mask for %s/%s at %dx%d: center=(%.1f, %.1f) radii=(%.1f, %.1f)",
        category.value,
        intensity.value,
        width,
        height,
        ellipse.center_x,
        ellipse.center_y,
        ellipse.radius_x,
        ellipse.radius_y,
    )
    return _feather(_draw_ellipse(width, height, ellipse), MASK_BLUR_SIGMA)


def create_custom_mask(
    width: int,
    height: int,
    region_x: float,
    region_y: float,
    region_width: float,
    region_height: float,
    feather_radius: float,
) -> Image.Image:
    """
    Create an elliptical mask for an arbitrary region.

    Args:
        region_x (float): Center x, as a fraction of the width (0.0 - 1.0)
        region_y (float): Center y, as a fraction of the height (0.0 - 1.0)
        region_width (float): Horizontal radius, as a fraction of the width
        region_height (float): Vertical radius, as a fraction of the height
        feather_radius (float): Blur strength in pixels, 0 for a hard mask

    Returns:
        Image.Image: Single channel ("L") mask
    """
    _check_canvas(width, height)
    if region_width < 0 or region_height < 0:
        raise GeometryError("Region radii must not be negative")
    ellipse = EllipseGeometry(
        center_x=width * region_x,
        center_y=height * region_y,
        radius_x=width * region_width,
        radius_y=height * region_height,
    )
    return _feather(_draw_ellipse(width, height, ellipse), feather_radius)


def generate_mask_from_image(
    base_image_path: str, category: PartCategory, intensity: Intensity
) -> Image.Image:
    width, height, _ = decode_image(base_image_path)
    return create_part_mask(width, height, category, intensity)


def to_rgb_mask(gray_mask: Image.Image) -> Image.Image:
    """Replicate the single channel of a mask into the three RGB channels."""
    return Image.merge("RGB", (gray_mask, gray_mask, gray_mask))
