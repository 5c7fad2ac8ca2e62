# SPDX-License-Identifier: Apache-2.0
"""Region-of-interest sampling over landmark bounding boxes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple

import numpy as np

from .config import RegionConfig
from .landmarks import Landmark


class RegionMap(Mapping[str, Tuple[int, ...]]):
    """Read-only table of named landmark index groups."""

    def __init__(self, regions: Mapping[str, Sequence[int]]):
        self._regions: Dict[str, Tuple[int, ...]] = {
            name: tuple(int(i) for i in indices) for name, indices in regions.items()
        }

    @classmethod
    def from_config(cls, config: RegionConfig | None = None) -> "RegionMap":
        return cls((config or RegionConfig()).model_dump())

    def __getitem__(self, name: str) -> Tuple[int, ...]:
        return self._regions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def members(self, names: Sequence[str]) -> frozenset[int]:
        """Union of the landmark indices of the given regions."""
        out: set[int] = set()
        for name in names:
            out.update(self._regions[name])
        return frozenset(out)

    def __repr__(self) -> str:
        return f"RegionMap({list(self._regions)})"


@dataclass(frozen=True)
class Box:
    """Integer pixel rectangle, ``x1``/``y1`` exclusive."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0


@dataclass(frozen=True)
class PixelBlock:
    """Pixels copied out of one region of one frame."""

    pixels: np.ndarray
    box: Box

    @property
    def size(self) -> int:
        return int(self.pixels.shape[0] * self.pixels.shape[1])

    def brightness(self) -> np.ndarray:
        """Per-pixel brightness, the plain mean of R, G and B."""
        rgb = self.pixels[:, :, :3].astype(np.float64)
        return rgb.sum(axis=2) / 3.0


def bounding_box(
    landmarks: Sequence[Landmark], indices: Sequence[int], width: int, height: int
) -> Optional[Box]:
    """Clamped bounding box over the selected landmarks.

    Returns ``None`` when the clamped box has no area, which covers
    degenerate selections and boxes lying entirely outside the frame.
    """
    if not indices:
        return None
    xs = [landmarks[i].x for i in indices]
    ys = [landmarks[i].y for i in indices]
    min_x, max_x = max(0.0, min(xs)), min(float(width), max(xs))
    min_y, max_y = max(0.0, min(ys)), min(float(height), max(ys))
    if max_x - min_x <= 0 or max_y - min_y <= 0:
        return None
    return Box(
        x0=int(math.floor(min_x)),
        y0=int(math.floor(min_y)),
        x1=min(width, int(math.ceil(max_x))),
        y1=min(height, int(math.ceil(max_y))),
    )


def sample_region(
    frame: np.ndarray, landmarks: Sequence[Landmark], indices: Sequence[int]
) -> Optional[PixelBlock]:
    """Copy the pixels under the landmarks' bounding box, or ``None``."""
    h, w = frame.shape[:2]
    box = bounding_box(landmarks, indices, w, h)
    if box is None:
        return None
    pixels = frame[box.y0:box.y1, box.x0:box.x1].copy()
    return PixelBlock(pixels=pixels, box=box)


def region_centroid(landmarks: Sequence[Landmark], indices: Sequence[int]) -> Tuple[float, float]:
    """Mean position of the selected landmarks."""
    cx = sum(landmarks[i].x for i in indices) / len(indices)
    cy = sum(landmarks[i].y for i in indices) / len(indices)
    return cx, cy
