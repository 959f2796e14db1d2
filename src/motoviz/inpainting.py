"""
Cliente para el servicio de inpainting.

Este módulo contiene toda la comunicación con el servicio de Stable Diffusion, proporcionando métodos para generar imágenes a partir de texto, de otra imagen o de una imagen y una máscara.

Responsabilidades:
- Construir el cuerpo JSON de cada petición
- Codificar en base64 las imágenes de entrada
- Decodificar la imagen generada de la respuesta
- Traducir los errores de red y del servidor a ServiceError
"""

import base64
import binascii
import logging
from typing import Optional, Protocol

import requests

from motoviz.errors import ConfigurationError, ImageIOError, ServiceError
from motoviz.utils import define_seed

logger = logging.getLogger(__name__)

DEFAULT_CFG_SCALE: float = 7.0
INPAINT_CFG_SCALE: float = 8.0
DEFAULT_STEPS: int = 50
STYLE_PRESET: str = "photographic"
MASK_SOURCE: str = "MASK_IMAGE_WHITE"  # white pixels are regenerated


class InpaintingService(Protocol):
    def inpaint(
        self,
        base_image_path: str,
        mask_image_path: str,
        prompt: str,
        negative_prompt: Optional[str] = None,
    ) -> bytes: ...


def _text_prompts(prompt: str, negative_prompt: Optional[str]) -> list:
    text_prompts = [{"text": prompt, "weight": 1.0}]
    if negative_prompt:
        text_prompts.append({"text": negative_prompt, "weight": -1.0})
    return text_prompts


class StableDiffusionInpaintClient:

    def __init__(
        self,
        api_url: str,
        api_key: str,
        timeout: float = 120.0,
        cfg_scale: float = INPAINT_CFG_SCALE,
        steps: int = DEFAULT_STEPS,
        style_preset: str = STYLE_PRESET,
        seed: int = -1,
    ):
        if not api_url:
            raise ConfigurationError("The inpainting API URL is not configured")
        if not api_key:
            raise ConfigurationError("The inpainting API key is not configured")
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.cfg_scale = cfg_scale
        self.steps = steps
        self.style_preset = style_preset
        self.seed = seed

    def encode_image(self, image_path: str) -> str:
        try:
            with open(image_path, "rb") as f:
                return base64.b64encode(f.read()).decode("ascii")
        except OSError as e:
            raise ImageIOError(f"Could not read {image_path}: {e}") from e

    def generate_from_text(
        self, prompt: str, negative_prompt: Optional[str] = None
    ) -> bytes:
        """Generate an image from text only."""
        request = {
            "text_prompts": _text_prompts(prompt, negative_prompt),
            "cfg_scale": DEFAULT_CFG_SCALE,
            "steps": self.steps,
            "style_preset": self.style_preset,
        }
        return self.invoke_model(request)

    def generate_from_image(
        self, base_image_path: str, prompt: str, image_strength: float
    ) -> bytes:
        """Generate a variation of an image guided by a prompt."""
        request = {
            "text_prompts": _text_prompts(prompt, None),
            "init_image": self.encode_image(base_image_path),
            "image_strength": image_strength,
            "cfg_scale": DEFAULT_CFG_SCALE,
            "steps": self.steps,
            "style_preset": self.style_preset,
        }
        return self.invoke_model(request)

    def inpaint(
        self,
        base_image_path: str,
        mask_image_path: str,
        prompt: str,
        negative_prompt: Optional[str] = None,
    ) -> bytes:
        """Regenerate the white area of the mask, keeping the rest of the base image."""
        request = {
            "text_prompts": _text_prompts(prompt, negative_prompt),
            "init_image": self.encode_image(base_image_path),
            "mask_source": MASK_SOURCE,
            "mask_image": self.encode_image(mask_image_path),
            "cfg_scale": self.cfg_scale,
            "steps": self.steps,
            "style_preset": self.style_preset,
        }
        return self.invoke_model(request)

    def invoke_model(self, request: dict) -> bytes:
        request["seed"] = define_seed(self.seed)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            resp = requests.post(
                self.api_url, json=request, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error("Error calling the inpainting service: %s", e)
            raise ServiceError(0, f"Error calling the inpainting service: {e}") from e

        if not 200 <= resp.status_code < 300:
            logger.error("Inpainting service error: %s - %s", resp.status_code, resp.text)
            raise ServiceError(resp.status_code, resp.text)

        try:
            artifacts = resp.json().get("artifacts") or []
        except ValueError as e:
            raise ServiceError(resp.status_code, f"Invalid JSON response: {e}") from e

        if not artifacts:
            raise ServiceError(resp.status_code, "No image generated")

        artifact = artifacts[0]
        if artifact.get("finishReason") == "ERROR":
            raise ServiceError(resp.status_code, "The service reported a generation error")

        try:
            return base64.b64decode(artifact["base64"])
        except (KeyError, binascii.Error) as e:
            raise ServiceError(resp.status_code, f"Invalid image in response: {e}") from e
