"""
Servicios de lectura y escritura de imágenes

Proporciona las operaciones de E/S de imágenes que necesita el núcleo y la capa HTTP.

Características:
- Decodificación de la imagen base para conocer sus dimensiones
- Escritura de imágenes (máscaras temporales, resultados)
- Conversión de datos recibidos (URL, data URL, base64) a bytes PNG
"""

import base64
import binascii
import os
import uuid
from io import BytesIO

from fastapi import HTTPException
from PIL import Image, UnidentifiedImageError

from motoviz.errors import ImageIOError
from motoviz.utils import get_image_bytes_from_url, is_data_url, remove_b64_header


def decode_image(path: str) -> tuple[int, int, Image.Image]:
    """Open an image file and return its width, height and decoded pixels."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.width, img.height, img.copy()
    except FileNotFoundError as e:
        raise ImageIOError(f"Image not found: {path}") from e
    except (UnidentifiedImageError, OSError) as e:
        raise ImageIOError(f"Could not decode image {path}: {e}") from e


def encode_image(image: Image.Image, path: str) -> None:
    try:
        image.save(path, format="PNG")
    except (OSError, ValueError) as e:
        raise ImageIOError(f"Could not write image to {path}: {e}") from e


def normalize_image_bytes(img_bytes: bytes, img_type: str) -> bytes:
    # Re-encode whatever was uploaded as PNG so every collaborator sees one format
    try:
        img = Image.open(BytesIO(img_bytes))
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")

        output_buffer = BytesIO()
        img.save(output_buffer, format="PNG")
        return output_buffer.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageIOError(f"Could not process the {img_type} image: {e}") from e


def prepare_img_bytes(img_data: str, img_type: str) -> bytes:
    if not img_data:
        raise HTTPException(status_code=400, detail=f"Missing {img_type} image")
    if is_data_url(img_data):
        img_bytes = get_image_bytes_from_url(img_data)
    else:
        img_b64 = remove_b64_header(img_data)

        try:
            img_bytes = base64.b64decode(img_b64, validate=True)
        except binascii.Error as e:
            raise HTTPException(
                status_code=400, detail=f"Invalid base64 for {img_type}: {e}"
            ) from e

    return normalize_image_bytes(img_bytes, img_type)


def save_upload(img_bytes: bytes, directory: str) -> str:
    """Write uploaded image bytes to a uniquely named file and return its path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, f"upload_{uuid.uuid4().hex}.png")
    try:
        with open(path, "wb") as f:
            f.write(img_bytes)
    except OSError as e:
        raise ImageIOError(f"Could not write upload to {path}: {e}") from e
    return path
