"""
Servicios de visualización de piezas

Implementa el flujo completo de una instalación virtual: máscara de la región,
prompts, llamada al servicio de inpainting y limpieza de los ficheros temporales.

Responsabilidades:
- Generar y guardar la máscara temporal de cada llamada
- Construir los prompts positivo y negativo
- Garantizar el borrado de la máscara temporal en todos los casos
- Generar varias intensidades aislando los fallos de cada una
"""

import asyncio
import logging
import os
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Sequence

from PIL import Image

from motoviz.errors import ArtifactCleanupError, MotovizError
from motoviz.inpainting import InpaintingService
from motoviz.services.images import decode_image, encode_image
from motoviz.services.masks import create_part_mask, to_rgb_mask
from motoviz.services.regions import (INTENSITY_ORDER, PART_NAMES, Intensity,
                                      PartCategory)

logger = logging.getLogger(__name__)

NEGATIVE_PROMPT = (
    "different motorcycle model, changed body style, "
    "distorted proportions, unrealistic, blurry, low quality, "
    "cartoon, 3d render, wrong bike type, illustration"
)

CUSTOMIZATION_NEGATIVE_PROMPT = (
    "different motorcycle model, changed body style, "
    "distorted proportions, unrealistic integration, "
    "blurry, low quality, cartoon, 3d render"
)


def build_part_prompt(
    bike_description: str, category: PartCategory, part_description: str
) -> str:
    return (
        f"{bike_description} style motorcycle with custom {PART_NAMES[category]} installed, "
        f"{part_description}, seamlessly integrated aftermarket part, "
        "maintaining original frame geometry and proportions, "
        "professional product photography, photorealistic, "
        "high detail, studio lighting, 8k"
    )


def build_customization_prompt(
    bike_style: str, part_type: str, part_description: str
) -> str:
    return (
        f"{bike_style} style motorcycle with custom {part_type} installed, "
        f"{part_description}, seamlessly integrated aftermarket part, "
        "professional product photography, high detail, photorealistic, "
        "maintaining original frame geometry and proportions"
    )


def mask_artifact_path(directory: str, category: PartCategory) -> str:
    return os.path.join(directory, f"temp_mask_{category.value}_{uuid.uuid4().hex}.png")


@contextmanager
def temporary_mask_artifact(
    mask: Image.Image, category: PartCategory, directory: str
) -> Iterator[str]:
    """
    Persist a mask as a PNG file for the duration of the block.

    The file is removed when the block exits, whether it raised or not.
    A failed removal is logged and never hides the block's own result.
    """
    os.makedirs(directory, exist_ok=True)
    path = mask_artifact_path(directory, category)
    encode_image(mask, path)
    try:
        yield path
    finally:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("%s", ArtifactCleanupError(path, str(e)))


class BatchPolicy(str, Enum):
    CONTINUE_ON_ERROR = "continue_on_error"
    FAIL_FAST = "fail_fast"


@dataclass
class GenerationOutcome:
    image: Optional[bytes] = None
    error: Optional[MotovizError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


BatchResult = list[tuple[Intensity, GenerationOutcome]]


class MotorcycleCustomizer:
    """Drives mask + inpaint round trips against an inpainting service."""

    def __init__(
        self,
        inpainting_service: InpaintingService,
        temp_dir: str,
        batch_policy: BatchPolicy = BatchPolicy.CONTINUE_ON_ERROR,
        intensities: Sequence[Intensity] = INTENSITY_ORDER,
    ):
        self.inpainting_service = inpainting_service
        self.temp_dir = temp_dir
        self.batch_policy = batch_policy
        self.intensities = tuple(intensities)

    async def _inpaint(
        self, base_path: str, mask_path: str, prompt: str, negative_prompt: str
    ) -> bytes:
        return await asyncio.to_thread(
            self.inpainting_service.inpaint,
            base_path,
            mask_path,
            prompt,
            negative_prompt,
        )

    async def visualize_customization(
        self,
        base_motorcycle_path: str,
        mask_path: str,
        bike_style: str,
        part_type: str,
        part_description: str,
    ) -> bytes:
        """Inpaint with a mask file owned by the caller. The mask is left in place."""
        prompt = build_customization_prompt(bike_style, part_type, part_description)
        return await self._inpaint(
            base_motorcycle_path, mask_path, prompt, CUSTOMIZATION_NEGATIVE_PROMPT
        )

    async def visualize_custom_part(
        self,
        base_motorcycle_path: str,
        category: PartCategory,
        bike_description: str,
        part_description: str,
        intensity: Intensity,
    ) -> bytes:
        logger.info("Creating %s mask for %s", intensity.value, category.value)
        width, height, _ = decode_image(base_motorcycle_path)
        mask = to_rgb_mask(create_part_mask(width, height, category, intensity))

        prompt = build_part_prompt(bike_description, category, part_description)

        with temporary_mask_artifact(mask, category, self.temp_dir) as mask_path:
            logger.info("Sending %s request to the inpainting service", category.value)
            result = await self._inpaint(
                base_motorcycle_path, mask_path, prompt, NEGATIVE_PROMPT
            )

        logger.info("Generation complete (%d bytes)", len(result))
        return result

    async def generate_options(
        self,
        base_motorcycle_path: str,
        category: PartCategory,
        bike_description: str,
        part_description: str,
    ) -> BatchResult:
        """
        Generate one visualization per intensity, in order.

        With BatchPolicy.CONTINUE_ON_ERROR every intensity gets a slot in the
        result even if its generation failed. With BatchPolicy.FAIL_FAST the
        first failure is raised.
        """
        results: BatchResult = []

        for intensity in self.intensities:
            logger.info("Generating with %s intensity", intensity.value)
            try:
                image = await self.visualize_custom_part(
                    base_motorcycle_path,
                    category,
                    bike_description,
                    part_description,
                    intensity,
                )
            except MotovizError as e:
                if self.batch_policy is BatchPolicy.FAIL_FAST:
                    raise
                logger.warning("Failed with %s intensity: %s", intensity.value, e)
                results.append((intensity, GenerationOutcome(error=e)))
            else:
                results.append((intensity, GenerationOutcome(image=image)))

        return results
