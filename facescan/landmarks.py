# SPDX-License-Identifier: Apache-2.0
"""Face landmark sources.

A landmark source turns an RGB frame into an ordered list of
:class:`Landmark` points in pixel coordinates of that frame, or an empty
list when no face is found. The index-to-feature mapping belongs to the
detector (468 points for MediaPipe Face Mesh).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

import numpy as np

from .config import DetectorConfig
from .errors import InvalidFrameError
from .logging_utils import get_logger

LOGGER = get_logger(__name__)

FACE_MESH_POINTS = 468


@dataclass(frozen=True)
class Landmark:
    """Single detected face point in pixel coordinates."""

    x: float
    y: float
    z: float = 0.0
    name: Optional[str] = None


class LandmarkSource(Protocol):
    """Anything that can find face landmarks in a frame."""

    def detect(self, frame: np.ndarray) -> List[Landmark]:
        ...


def check_frame(frame: np.ndarray) -> np.ndarray:
    """Validate an ``HxWx3`` or ``HxWx4`` uint8 frame and return it."""
    if not isinstance(frame, np.ndarray) or frame.ndim != 3 or frame.shape[2] not in (3, 4):
        shape = getattr(frame, "shape", None)
        raise InvalidFrameError(f"expected HxWx3 or HxWx4 image, got shape {shape}")
    if frame.dtype != np.uint8:
        raise InvalidFrameError(f"expected uint8 pixels, got {frame.dtype}")
    return frame


class MediaPipeLandmarkSource:
    """MediaPipe Face Mesh landmark source (single face)."""

    def __init__(self, config: DetectorConfig | None = None):
        import mediapipe as mp

        self.config = config or DetectorConfig()
        self.face_mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=self.config.static_image_mode,
            max_num_faces=self.config.max_num_faces,
            refine_landmarks=self.config.refine_landmarks,
            min_detection_confidence=self.config.min_detection_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )
        LOGGER.info("face mesh initialized", static=self.config.static_image_mode)

    def detect(self, frame: np.ndarray) -> List[Landmark]:
        """Detect landmarks in an RGB frame."""
        frame = check_frame(frame)
        rgb = np.ascontiguousarray(frame[:, :, :3])
        results = self.face_mesh.process(rgb)
        if not results.multi_face_landmarks:
            LOGGER.debug("no face detected")
            return []

        h, w = rgb.shape[:2]
        face = results.multi_face_landmarks[0]
        return [Landmark(x=lm.x * w, y=lm.y * h, z=lm.z * w) for lm in face.landmark]

    def close(self) -> None:
        self.face_mesh.close()

    def __enter__(self) -> "MediaPipeLandmarkSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
