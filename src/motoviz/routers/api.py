import asyncio
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from motoviz.config import settings
from motoviz.deps import get_customizer
from motoviz.errors import ConfigurationError, MotovizError
from motoviz.schemas import (CustomMaskRequest, CustomMaskResponse,
                             OptionResult, OptionsRequest, OptionsResponse,
                             VisualizeRequest, VisualizeResponse)
from motoviz.services.generation import MotorcycleCustomizer
from motoviz.services.images import prepare_img_bytes, save_upload
from motoviz.services.regions import (INTENSITY_ORDER, REGION_TEMPLATES,
                                      parse_intensity, parse_part_category)
from motoviz.utils import to_data_url

logger = logging.getLogger(__name__)

router = APIRouter()


def customizer_dependency() -> MotorcycleCustomizer:
    try:
        return get_customizer()
    except ConfigurationError as e:
        logger.error("Inpainting service not configured: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e


@asynccontextmanager
async def uploaded_image(img_data: str, img_type: str):
    # Fetching, re-encoding and writing the upload all block, keep them off the event loop
    img_bytes = await asyncio.to_thread(prepare_img_bytes, img_data, img_type)
    path = await asyncio.to_thread(save_upload, img_bytes, settings.temp_mask_dir)
    try:
        yield path
    finally:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Could not delete upload %s: %s", path, e)


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/parts")
async def get_parts():
    """Lists the supported parts with their regions and the available intensities."""
    return {
        "parts": [
            {"name": category.value, **asdict(template)}
            for category, template in REGION_TEMPLATES.items()
        ],
        "intensities": [
            {"name": intensity.value, "scale": intensity.scale}
            for intensity in INTENSITY_ORDER
        ],
    }


@router.post("/visualize", response_model=VisualizeResponse)
async def visualize(
    req: VisualizeRequest,
    customizer: MotorcycleCustomizer = Depends(customizer_dependency),
):
    """Install a part on the uploaded motorcycle photo."""
    try:
        category = parse_part_category(req.part)
        intensity = parse_intensity(req.intensity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        async with uploaded_image(req.image_b64, "base") as base_path:
            image = await customizer.visualize_custom_part(
                base_path,
                category,
                req.bike_description,
                req.part_description,
                intensity,
            )
    except MotovizError as e:
        logger.error("Visualization failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return VisualizeResponse(
        image=to_data_url(image), part=category.value, intensity=intensity.value
    )


@router.post("/visualize/custom-mask", response_model=CustomMaskResponse)
async def visualize_custom_mask(
    req: CustomMaskRequest,
    customizer: MotorcycleCustomizer = Depends(customizer_dependency),
):
    """Install a part inside a mask drawn by the client (white = area to regenerate)."""
    part = req.part.strip()
    if not part:
        raise HTTPException(status_code=400, detail="Missing part type")

    try:
        async with uploaded_image(req.image_b64, "base") as base_path:
            async with uploaded_image(req.mask_b64, "mask") as mask_path:
                image = await customizer.visualize_customization(
                    base_path,
                    mask_path,
                    req.bike_description,
                    part,
                    req.part_description,
                )
    except MotovizError as e:
        logger.error("Custom mask visualization failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return CustomMaskResponse(image=to_data_url(image), part=part)


@router.post("/visualize/options", response_model=OptionsResponse)
async def visualize_options(
    req: OptionsRequest,
    customizer: MotorcycleCustomizer = Depends(customizer_dependency),
):
    """Generate one visualization per intensity."""
    try:
        category = parse_part_category(req.part)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        async with uploaded_image(req.image_b64, "base") as base_path:
            results = await customizer.generate_options(
                base_path, category, req.bike_description, req.part_description
            )
    except MotovizError as e:
        logger.error("Option generation failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    options = []
    for intensity, outcome in results:
        if outcome.ok:
            options.append(
                OptionResult(
                    intensity=intensity.value,
                    status="success",
                    image=to_data_url(outcome.image),
                )
            )
        else:
            options.append(
                OptionResult(
                    intensity=intensity.value, status="error", error=str(outcome.error)
                )
            )

    return OptionsResponse(part=category.value, options=options)


def get_router():
    return router
