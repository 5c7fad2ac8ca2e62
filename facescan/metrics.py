# SPDX-License-Identifier: Apache-2.0
"""Heuristic face scores from landmark distances and pixel sampling.

Every score is an integer in ``[0, 100]``. The functions here are pure:
the same frame and landmarks always produce the same scores.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .config import Config
from .landmarks import Landmark, check_frame
from .logging_utils import get_logger
from .regions import PixelBlock, RegionMap, sample_region

LOGGER = get_logger(__name__)


class AnalysisState(BaseModel):
    """Scores of one analysis pass. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    symmetry: int = Field(0, ge=0, le=100)
    texture: int = Field(0, ge=0, le=100, description="0 smooth, 100 rough")
    oiliness: int = Field(0, ge=0, le=100, description="0 matte, 100 oily")
    beard_density: int = Field(0, ge=0, le=100, description="0 clean shaven, 100 full beard")
    insight: Optional[str] = None


def to_score(value: float) -> int:
    """Round half up and clamp to ``[0, 100]``."""
    return int(min(100, max(0, math.floor(value + 0.5))))


def _distance(a: Landmark, b: Landmark) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def symmetry_score(
    landmarks: Sequence[Landmark], nose: int, pairs: Sequence[Tuple[int, int]]
) -> int:
    """Mean shorter/longer ratio of nose-to-feature distances, as a percentage.

    100 is reserved for exactly mirrored distances; near misses that would
    round up are reported as 99.
    """
    if not pairs:
        return 0
    ratios = []
    for left, right in pairs:
        d_left = _distance(landmarks[nose], landmarks[left])
        d_right = _distance(landmarks[nose], landmarks[right])
        longer = max(d_left, d_right)
        ratios.append(1.0 if longer == 0 else min(d_left, d_right) / longer)
    score = to_score(sum(ratios) / len(ratios) * 100)
    if score == 100 and any(r < 1.0 for r in ratios):
        score = 99
    return score


def mean_brightness(block: Optional[PixelBlock]) -> Optional[float]:
    if block is None or block.size == 0:
        return None
    return float(block.brightness().mean())


def texture_score(block: Optional[PixelBlock], scale: float = 2.0) -> int:
    """Population standard deviation of brightness, scaled."""
    if block is None or block.size == 0:
        return 0
    return to_score(float(np.std(block.brightness())) * scale)


def oiliness_score(block: Optional[PixelBlock], threshold: float = 190.0, boost: float = 3.0) -> int:
    """Share of pixels brighter than ``threshold``, in percent, boosted."""
    if block is None or block.size == 0:
        return 0
    shiny = float(np.count_nonzero(block.brightness() > threshold))
    return to_score(shiny / block.size * 100 * boost)


def beard_score(
    chin: Optional[PixelBlock], cheek: Optional[PixelBlock], scale: float = 2.0
) -> int:
    """How much darker the chin is than the cheek; 0 when it is not darker."""
    chin_mean = mean_brightness(chin)
    cheek_mean = mean_brightness(cheek)
    if chin_mean is None or cheek_mean is None:
        return 0
    diff = cheek_mean - chin_mean
    if diff <= 0:
        return 0
    return to_score(min(100.0, diff * scale))


class MetricEngine:
    """Scores a frame given its landmarks and a region table."""

    def __init__(self, config: Config | None = None, regions: RegionMap | None = None):
        self.config = config or Config()
        self.regions = regions or RegionMap.from_config(self.config.regions)
        indices = [i for group in self.regions.values() for i in group]
        indices.append(self.config.symmetry.nose)
        indices.extend(i for pair in self.config.symmetry.pairs for i in pair)
        self.required_landmarks = max(indices) + 1

    def sample(self, frame: np.ndarray, landmarks: Sequence[Landmark], region: str) -> Optional[PixelBlock]:
        return sample_region(frame, landmarks, self.regions[region])

    def analyze(
        self, frame: np.ndarray, landmarks: Sequence[Landmark], insight: Optional[str] = None
    ) -> AnalysisState:
        frame = check_frame(frame)
        if len(landmarks) < self.required_landmarks:
            raise ValueError(
                f"need at least {self.required_landmarks} landmarks, got {len(landmarks)}"
            )
        mc = self.config.metrics
        sym = self.config.symmetry

        texture_block = self.sample(frame, landmarks, mc.texture_region)
        oil_block = self.sample(frame, landmarks, mc.oiliness_region)
        beard_block = self.sample(frame, landmarks, mc.beard_region)
        reference_block = (
            texture_block
            if mc.beard_reference_region == mc.texture_region
            else self.sample(frame, landmarks, mc.beard_reference_region)
        )

        state = AnalysisState(
            symmetry=symmetry_score(landmarks, sym.nose, sym.pairs),
            texture=texture_score(texture_block, mc.texture_scale),
            oiliness=oiliness_score(oil_block, mc.oiliness_threshold, mc.oiliness_boost),
            beard_density=beard_score(beard_block, reference_block, mc.beard_scale),
            insight=insight,
        )
        LOGGER.debug("analysis pass", **state.model_dump(exclude={"insight"}))
        return state
