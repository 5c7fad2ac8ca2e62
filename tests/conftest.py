from __future__ import annotations

import io
from typing import Dict, List, Optional, Tuple

import numpy as np
import pytest
from PIL import Image

from facescan.config import Config
from facescan.landmarks import FACE_MESH_POINTS, Landmark

WIDTH, HEIGHT = 320, 240
NOSE = (160.0, 120.0)

# x0, y0, x1, y1 of each painted region
BOXES = {
    "forehead": (120, 20, 200, 60),
    "left_cheek": (60, 100, 110, 150),
    "right_cheek": (210, 100, 260, 150),
    "jaw": (130, 170, 190, 200),
    "chin": (120, 205, 200, 235),
}

SYMMETRIC = {
    1: NOSE,
    234: (100.0, 120.0),
    454: (220.0, 120.0),
    33: (130.0, 100.0),
    263: (190.0, 100.0),
}


def build_landmarks(overrides: Optional[Dict[int, Tuple[float, float]]] = None) -> List[Landmark]:
    """468 points whose region bounding boxes are exactly BOXES."""
    points = [NOSE] * FACE_MESH_POINTS
    regions = Config().regions.model_dump()
    for name, (x0, y0, x1, y1) in BOXES.items():
        corners = [(x0, y0), (x1, y1), (x0, y1), (x1, y0)]
        centre = ((x0 + x1) / 2, (y0 + y1) / 2)
        for k, idx in enumerate(regions[name]):
            points[idx] = corners[k] if k < len(corners) else centre
    for idx, pt in {**SYMMETRIC, **(overrides or {})}.items():
        points[idx] = pt
    return [Landmark(x=float(x), y=float(y)) for x, y in points]


def paint_frame(background: int = 128, **values) -> np.ndarray:
    frame = np.full((HEIGHT, WIDTH, 3), background, dtype=np.uint8)
    for name, value in values.items():
        x0, y0, x1, y1 = BOXES[name]
        frame[y0:y1, x0:x1] = value
    return frame


def png_bytes(frame: np.ndarray) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(frame).save(buf, format="PNG")
    return buf.getvalue()


class FakeSource:
    """Landmark source returning a fixed result."""

    def __init__(self, landmarks: List[Landmark]):
        self.landmarks = landmarks
        self.calls = 0
        self.closed = False

    def detect(self, frame: np.ndarray) -> List[Landmark]:
        self.calls += 1
        return list(self.landmarks)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@pytest.fixture
def landmarks() -> List[Landmark]:
    return build_landmarks()


@pytest.fixture
def make_landmarks():
    return build_landmarks


@pytest.fixture
def paint():
    return paint_frame


@pytest.fixture
def boxes():
    return BOXES


@pytest.fixture
def face_frame() -> np.ndarray:
    # cheek 90, jaw 50 -> beard 80; forehead above the shine threshold
    return paint_frame(left_cheek=90, right_cheek=90, jaw=50, forehead=200)


@pytest.fixture
def face_png(face_frame) -> bytes:
    return png_bytes(face_frame)


@pytest.fixture
def fake_source(landmarks) -> FakeSource:
    return FakeSource(landmarks)


@pytest.fixture
def empty_source() -> FakeSource:
    return FakeSource([])
