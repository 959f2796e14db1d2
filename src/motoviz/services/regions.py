"""
Geometría de las regiones de cada pieza

Cada categoría de pieza tiene una plantilla de elipse normalizada (fracciones
del ancho y alto de la imagen). Las coordenadas en píxeles solo se calculan
al rasterizar la máscara, por lo que las plantillas no dependen de la resolución.

Para añadir una categoría nueva basta con añadir una fila a REGION_TEMPLATES.
"""

from dataclasses import dataclass
from enum import Enum


class PartCategory(str, Enum):
    EXHAUST = "exhaust"
    SEAT = "seat"
    HANDLEBAR = "handlebar"


class Intensity(str, Enum):
    MINIMAL = "minimal"
    MEDIUM = "medium"
    AGGRESSIVE = "aggressive"

    @property
    def scale(self) -> float:
        return INTENSITY_SCALES[self]


@dataclass(frozen=True)
class RegionTemplate:
    center_x: float
    center_y: float
    radius_x: float
    radius_y: float


@dataclass(frozen=True)
class EllipseGeometry:
    """Absolute ellipse in pixels, before any feathering."""

    center_x: float
    center_y: float
    radius_x: float
    radius_y: float

    @property
    def bounding_box(self) -> tuple[float, float, float, float]:
        return (
            self.center_x - self.radius_x,
            self.center_y - self.radius_y,
            self.center_x + self.radius_x,
            self.center_y + self.radius_y,
        )


REGION_TEMPLATES: dict[PartCategory, RegionTemplate] = {
    PartCategory.EXHAUST: RegionTemplate(0.50, 0.65, 0.35, 0.25),  # lower right
    PartCategory.SEAT: RegionTemplate(0.50, 0.45, 0.15, 0.12),  # upper middle
    PartCategory.HANDLEBAR: RegionTemplate(0.40, 0.25, 0.20, 0.12),  # upper front
}

INTENSITY_SCALES: dict[Intensity, float] = {
    Intensity.MINIMAL: 0.8,
    Intensity.MEDIUM: 1.0,
    Intensity.AGGRESSIVE: 1.2,
}

# Canonical order used by batch generation
INTENSITY_ORDER: tuple[Intensity, ...] = (
    Intensity.MINIMAL,
    Intensity.MEDIUM,
    Intensity.AGGRESSIVE,
)

PART_NAMES: dict[PartCategory, str] = {
    PartCategory.EXHAUST: "exhaust system",
    PartCategory.SEAT: "seat",
    PartCategory.HANDLEBAR: "handlebars",
}


def resolve_region(category: PartCategory) -> RegionTemplate:
    return REGION_TEMPLATES[category]


def region_geometry(
    width: int, height: int, category: PartCategory, intensity: Intensity
) -> EllipseGeometry:
    """
    Convert the normalized template of a category into pixel geometry.

    The intensity scale only affects the radii, never the center.
    """
    template = resolve_region(category)
    scale = intensity.scale
    return EllipseGeometry(
        center_x=template.center_x * width,
        center_y=template.center_y * height,
        radius_x=template.radius_x * width * scale,
        radius_y=template.radius_y * height * scale,
    )


def parse_part_category(value: str) -> PartCategory:
    try:
        return PartCategory(value.strip().lower())
    except ValueError as e:
        valid = ", ".join(c.value for c in PartCategory)
        raise ValueError(f"Invalid part type '{value}' (expected one of: {valid})") from e


def parse_intensity(value: str) -> Intensity:
    try:
        return Intensity(value.strip().lower())
    except ValueError as e:
        valid = ", ".join(i.value for i in Intensity)
        raise ValueError(f"Invalid intensity '{value}' (expected one of: {valid})") from e
