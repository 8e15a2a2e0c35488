"""Unit tests for decoding uploads and JPEG encoding."""

import io

import numpy as np
import pytest
from PIL import Image

from core.exceptions import DecodeError
from services.image_codec import decode_image, encode_jpeg, to_grayscale


def test_decode_jpeg(face_image):
    raster = decode_image(face_image)

    assert raster.shape == (300, 300, 3)
    assert raster.dtype == np.uint8


def test_decode_gif_through_pillow_fallback():
    buf = io.BytesIO()
    Image.new("RGB", (64, 48), color=(255, 0, 0)).save(buf, format="GIF")

    raster = decode_image(buf.getvalue())

    assert raster.shape == (48, 64, 3)
    # BGR order: red ends up in the last channel
    assert raster[0, 0, 2] > 200 and raster[0, 0, 0] < 50


def test_decode_garbage_names_field():
    with pytest.raises(DecodeError) as exc:
        decode_image(b"definitely not an image", field="left")

    assert exc.value.code == "INVALID_IMAGE"
    assert exc.value.details["field"] == "left"
    assert exc.value.status_code == 422


def test_decode_empty():
    with pytest.raises(DecodeError):
        decode_image(b"")


@pytest.mark.parametrize("shape", [(40, 30), (40, 30, 1), (40, 30, 3), (40, 30, 4)])
def test_encode_any_channel_count(shape):
    data = encode_jpeg(np.full(shape, 128, dtype=np.uint8))

    assert data[:2] == b"\xff\xd8"
    assert decode_image(data).shape == (40, 30, 3)


def test_grayscale_of_bgra():
    bgra = np.zeros((10, 10, 4), dtype=np.uint8)

    assert to_grayscale(bgra).shape == (10, 10)
