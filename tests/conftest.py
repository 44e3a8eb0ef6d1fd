"""Pytest configuration and shared fixtures for blockray tests."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add project root to path so imports work without installing
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from blockray.vec3 import Color, Point3  # noqa: E402
from blockray.textures import SolidColor  # noqa: E402
from blockray.materials import Material  # noqa: E402
from blockray.lights import PointLight  # noqa: E402
from blockray.environment import SolidColorEnvironment  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s [%(levelname)s] %(message)s",
    )


@pytest.fixture
def matte():
    """Plain diffuse grey material."""
    return Material(SolidColor(Color(0.5, 0.5, 0.5)), albedo=1.0)


@pytest.fixture
def sky():
    return SolidColorEnvironment(Color(0.2, 0.4, 0.8))


@pytest.fixture
def light():
    return PointLight(Point3(0, 10, 0), 1.0, Color(1, 1, 1))


@pytest.fixture
def face_dir(tmp_path):
    """Directory with six 3x3 skybox faces, each a distinct flat color
    except for a white center texel."""
    colors = {
        'right.png': (255, 0, 0),
        'back.png': (0, 255, 0),
        'top.png': (0, 0, 255),
        'bottom.png': (255, 255, 0),
        'front.png': (0, 255, 255),
        'left.png': (255, 0, 255),
    }
    for name, rgb in colors.items():
        pixels = np.zeros((3, 3, 3), dtype=np.uint8)
        pixels[:, :] = rgb
        pixels[1, 1] = (255, 255, 255)
        Image.fromarray(pixels, 'RGB').save(tmp_path / name)
    return tmp_path
