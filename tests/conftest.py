# tests/conftest.py
"""
Global pytest fixtures for wastewise tests.
"""

from unittest.mock import Mock

import cv2
import numpy as np
import pytest


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    image = np.zeros((32, 32, 3), dtype=np.uint8)
    image[8:24, 8:24] = (0, 200, 0)
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def png_file(tmp_path, png_bytes):
    """A PNG image written to disk."""
    path = tmp_path / "bottle.png"
    path.write_bytes(png_bytes)
    return path


def make_response(status_code=200, json_body=None, json_error=False):
    """Build a mock requests.Response."""
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def http_session():
    """Mock requests.Session whose post() results are set per test."""
    return Mock()


@pytest.fixture
def no_sleep():
    """Records requested delays instead of sleeping."""
    return Mock()
