"""Shared test fixtures."""

import os

import pytest
from PIL import Image

from motoviz.errors import ServiceError
from motoviz.services.generation import MotorcycleCustomizer

FAKE_RESULT = b"\x89PNG fake inpainting result"


class StubInpaintingService:
    """Records every call and the state of the mask file while it is in use."""

    def __init__(self, result=FAKE_RESULT, fail_on=()):
        self.result = result
        self.fail_on = set(fail_on)
        self.calls = []

    def inpaint(self, base_image_path, mask_image_path, prompt, negative_prompt=None):
        call = {
            "base": base_image_path,
            "mask": mask_image_path,
            "prompt": prompt,
            "negative_prompt": negative_prompt,
            "mask_existed": os.path.exists(mask_image_path),
        }
        if call["mask_existed"]:
            with Image.open(mask_image_path) as mask:
                call["mask_mode"] = mask.mode
                call["mask_size"] = mask.size
                call["mask_center"] = mask.getpixel((mask.width // 2, int(mask.height * 0.65)))
                call["mask_corner"] = mask.getpixel((0, 0))
        self.calls.append(call)

        if len(self.calls) in self.fail_on:
            raise ServiceError(503, "Service unavailable")
        return self.result


@pytest.fixture
def base_image_path(tmp_path) -> str:
    path = tmp_path / "base.jpg"
    Image.new("RGB", (96, 64), (120, 30, 30)).save(path, format="JPEG")
    return str(path)


@pytest.fixture
def mask_dir(tmp_path) -> str:
    return str(tmp_path / "masks")


@pytest.fixture
def stub_service() -> StubInpaintingService:
    return StubInpaintingService()


@pytest.fixture
def customizer(stub_service, mask_dir) -> MotorcycleCustomizer:
    return MotorcycleCustomizer(stub_service, temp_dir=mask_dir)
