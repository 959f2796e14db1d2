"""
Proporciona instancias compartidas de servicios y clientes que pueden ser inyectados en cualquier punto de la aplicación

Gestiona:
- Cliente del servicio de inpainting
- Orquestador de visualizaciones

Las instancias se crean la primera vez que se piden, de modo que la aplicación
puede arrancar aunque las credenciales no estén configuradas
"""

from functools import lru_cache

from motoviz.config import settings
from motoviz.inpainting import StableDiffusionInpaintClient
from motoviz.services.generation import MotorcycleCustomizer


@lru_cache
def get_inpainting_client() -> StableDiffusionInpaintClient:
    return StableDiffusionInpaintClient(
        api_url=settings.inpaint_api_url,
        api_key=settings.inpaint_api_key,
        timeout=settings.inpaint_timeout,
        cfg_scale=settings.cfg_scale,
        steps=settings.steps,
        style_preset=settings.style_preset,
    )


@lru_cache
def get_customizer() -> MotorcycleCustomizer:
    return MotorcycleCustomizer(
        inpainting_service=get_inpainting_client(),
        temp_dir=settings.temp_mask_dir,
    )
