"""
Modelos de datos y validación

Define los esquemas Pydantic utilizados para:
- Validar los datos de entrada en los endpoints
- Documentar automáticamente la API con OpenAPI
"""

from typing import Optional

from pydantic import BaseModel


class OptionsRequest(BaseModel):
    image_b64: str
    part: str
    bike_description: str
    part_description: str


class VisualizeRequest(OptionsRequest):
    intensity: str = "medium"


class VisualizeResponse(BaseModel):
    image: str
    part: str
    intensity: str


class OptionResult(BaseModel):
    intensity: str
    status: str
    image: Optional[str] = None
    error: Optional[str] = None


class OptionsResponse(BaseModel):
    part: str
    options: list[OptionResult]


class CustomMaskRequest(BaseModel):
    image_b64: str
    mask_b64: str
    part: str
    bike_description: str
    part_description: str


class CustomMaskResponse(BaseModel):
    image: str
    part: str
