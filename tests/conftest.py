"""Shared fixtures: small synthetic images and symbols."""

import pytest
from PIL import Image

from styledqr.encoder import encode_symbol


@pytest.fixture
def hello_symbol():
    return encode_symbol("HELLO", "M")


@pytest.fixture
def photo():
    """A 300x200 image with a dark blue left half and bright right half."""
    img = Image.new("RGB", (300, 200), (30, 60, 150))
    img.paste((250, 250, 250), (150, 0, 300, 200))
    return img


@pytest.fixture
def red_logo():
    return Image.new("RGB", (64, 64), (255, 0, 0))


@pytest.fixture
def animated_gif(tmp_path):
    """Three-frame GIF with distinct frame colours and 80ms delays."""
    path = tmp_path / "bg.gif"
    frames = [Image.new("RGB", (120, 120), c) for c in [(200, 30, 30), (30, 200, 30), (30, 30, 200)]]
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=80, loop=0)
    return path
