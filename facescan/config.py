# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Tuple

from pydantic import BaseModel
import yaml

# (r, g, b, alpha) with alpha in [0, 1]
Color = Tuple[int, int, int, float]


class CaptureConfig(BaseModel):
    width: int = 640
    height: int = 480
    camera_index: int = 0
    mirror: bool = True
    analysis_interval: int = 10


class DetectorConfig(BaseModel):
    static_image_mode: bool = False
    max_num_faces: int = 1
    refine_landmarks: bool = False
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


class RegionConfig(BaseModel):
    """Landmark index tables for the MediaPipe Face Mesh topology."""

    forehead: List[int] = [10, 297, 332, 284, 251, 21]
    left_cheek: List[int] = [123, 50, 205, 117, 118, 119, 120]
    right_cheek: List[int] = [352, 280, 425, 346, 347, 348, 349]
    chin: List[int] = [152, 148, 176, 149, 150, 136, 172, 58, 132, 93, 234]
    jaw: List[int] = [2, 164, 0, 11, 12, 13, 14, 15, 16, 17, 18]


class SymmetryConfig(BaseModel):
    nose: int = 1
    pairs: List[Tuple[int, int]] = [(234, 454), (33, 263)]


class MetricsConfig(BaseModel):
    texture_region: str = "left_cheek"
    texture_scale: float = 2.0
    oiliness_region: str = "forehead"
    oiliness_threshold: float = 190.0
    oiliness_boost: float = 3.0
    beard_region: str = "jaw"
    beard_reference_region: str = "left_cheek"
    beard_scale: float = 2.0


class HeatLayer(BaseModel):
    regions: List[str]
    color: Tuple[int, int, int]
    min_score: int


class OverlayConfig(BaseModel):
    blob_radius: float = 60.0
    opacity_divisor: float = 150.0
    heat_layers: Dict[str, HeatLayer] = {
        "oiliness": HeatLayer(regions=["forehead"], color=(255, 255, 0), min_score=30),
        "texture": HeatLayer(regions=["left_cheek", "right_cheek"], color=(255, 50, 50), min_score=15),
        "beard_density": HeatLayer(regions=["chin"], color=(50, 50, 255), min_score=20),
    }
    mesh_regions: List[str] = ["forehead", "left_cheek", "right_cheek"]
    mesh_highlight_color: Color = (79, 70, 229, 0.8)
    mesh_highlight_size: int = 2
    mesh_color: Color = (16, 185, 129, 0.4)
    mesh_size: int = 1
    mesh_stride: int = 6


class InsightConfig(BaseModel):
    symmetry_high: int = 90
    symmetry_low: int = 80
    texture_irregular: int = 30
    oiliness_high: int = 50
    beard_dense: int = 40
    beard_symmetry_boxed: int = 85


class Config(BaseModel):
    capture: CaptureConfig = CaptureConfig()
    detector: DetectorConfig = DetectorConfig()
    regions: RegionConfig = RegionConfig()
    symmetry: SymmetryConfig = SymmetryConfig()
    metrics: MetricsConfig = MetricsConfig()
    overlay: OverlayConfig = OverlayConfig()
    insights: InsightConfig = InsightConfig()


def load_config(path: Path | None = None) -> Config:
    env_path = os.getenv("FACESCAN_CONFIG")
    path = path or (Path(env_path) if env_path else Path(__file__).with_name("config.yaml"))
    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
        cfg = Config(**data)
    else:
        cfg = Config()

    # environment overrides
    interval = os.getenv("FACESCAN_ANALYSIS_INTERVAL")
    if interval:
        cfg.capture.analysis_interval = max(1, int(interval))
    camera = os.getenv("FACESCAN_CAMERA_INDEX")
    if camera:
        cfg.capture.camera_index = int(camera)
    return cfg
