# SPDX-License-Identifier: Apache-2.0
"""Acquisition -> detection -> scoring -> overlay, for photos and cameras."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image

from .config import CaptureConfig, Config, load_config
from .errors import CameraUnavailableError, InvalidFrameError, NoFaceDetectedError
from .insights import Insights, build_insights
from .landmarks import Landmark, LandmarkSource, check_frame
from .logging_utils import get_logger
from .metrics import AnalysisState, MetricEngine
from .overlay import OverlayMode, OverlayRenderer, PillowSurface
from .regions import RegionMap
from .verdict import FaceVerdict

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class FrameResult:
    """Everything one pass produced for one frame."""

    state: AnalysisState
    landmarks: Tuple[Landmark, ...]
    overlay: Image.Image
    insights: Insights
    scored: bool = True


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (JPEG, PNG, ...) to an RGB array."""
    bgr = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
    if bgr is None:
        raise InvalidFrameError("could not decode image data")
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def load_image(path: Path | str) -> np.ndarray:
    """Read a photo from disk as an RGB array."""
    path = Path(path)
    if not path.is_file():
        raise InvalidFrameError(f"image not found: {path}")
    return decode_image(path.read_bytes())


class FaceScanPipeline:
    """Runs one analysis pass per frame with an injected landmark source."""

    def __init__(self, source: LandmarkSource, config: Config | None = None):
        self.source = source
        self.config = config or load_config()
        self.regions = RegionMap.from_config(self.config.regions)
        self.engine = MetricEngine(self.config, self.regions)
        self.renderer = OverlayRenderer(self.config.overlay, self.regions)

    def detect(self, frame: np.ndarray) -> List[Landmark]:
        landmarks = self.source.detect(check_frame(frame))
        if not landmarks:
            raise NoFaceDetectedError("no face detected")
        return landmarks

    def process(
        self,
        frame: np.ndarray,
        landmarks: Sequence[Landmark],
        mode: OverlayMode = OverlayMode.MESH,
        previous: Optional[AnalysisState] = None,
        verdict: Optional[FaceVerdict] = None,
    ) -> FrameResult:
        """Score (unless ``previous`` is reused) and render detected landmarks."""
        scored = previous is None
        state = self.engine.analyze(frame, landmarks) if scored else previous

        h, w = frame.shape[:2]
        surface = PillowSurface(w, h)
        self.renderer.render(surface, landmarks, state, mode)
        return FrameResult(
            state=state,
            landmarks=tuple(landmarks),
            overlay=surface.composite(frame),
            insights=build_insights(state, verdict, self.config.insights),
            scored=scored,
        )

    def analyze_frame(
        self,
        frame: np.ndarray,
        mode: OverlayMode = OverlayMode.MESH,
        verdict: Optional[FaceVerdict] = None,
    ) -> FrameResult:
        landmarks = self.detect(frame)
        result = self.process(frame, landmarks, mode, verdict=verdict)
        LOGGER.info("frame analyzed", landmarks=len(landmarks), **result.state.model_dump(exclude={"insight"}))
        return result

    def analyze_image(
        self,
        path: Path | str,
        mode: OverlayMode = OverlayMode.MESH,
        verdict: Optional[FaceVerdict] = None,
    ) -> FrameResult:
        return self.analyze_frame(load_image(path), mode, verdict)


FrameCallback = Callable[[np.ndarray, Optional[FrameResult]], None]


class CameraLoop:
    """Cooperative per-frame loop over an OpenCV capture device.

    Landmarks are detected on every frame; the pixel metrics run every
    ``analysis_interval`` frames with a face and the last state is reused
    for rendering in between. :meth:`stop` takes effect before the next
    iteration.
    """

    def __init__(
        self,
        pipeline: FaceScanPipeline,
        config: CaptureConfig | None = None,
        mode: OverlayMode = OverlayMode.MESH,
        capture_factory: Callable[[int], "cv2.VideoCapture"] = cv2.VideoCapture,
    ):
        self.pipeline = pipeline
        self.config = config or pipeline.config.capture
        self.mode = mode
        self.capture_factory = capture_factory
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._running = False

    def toggle_mode(self) -> OverlayMode:
        self.mode = OverlayMode.MESH if self.mode == OverlayMode.HEATMAP else OverlayMode.HEATMAP
        return self.mode

    def _open(self):
        cap = self.capture_factory(self.config.camera_index)
        if cap is None or not cap.isOpened():
            raise CameraUnavailableError(f"cannot open camera {self.config.camera_index}")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        return cap

    def run(self, on_frame: FrameCallback, max_frames: int | None = None) -> Optional[FrameResult]:
        cap = self._open()
        interval = max(1, self.config.analysis_interval)
        state: Optional[AnalysisState] = None
        last: Optional[FrameResult] = None
        frames = face_frames = 0
        self._running = True
        LOGGER.info("camera loop started", camera=self.config.camera_index, interval=interval)
        try:
            while self._running:
                ok, bgr = cap.read()
                if not ok or bgr is None:
                    raise CameraUnavailableError("camera stopped delivering frames")
                frame = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
                if self.config.mirror:
                    frame = cv2.flip(frame, 1)
                frames += 1

                try:
                    landmarks = self.pipeline.detect(frame)
                except NoFaceDetectedError:
                    on_frame(frame, None)
                else:
                    face_frames += 1
                    rescore = state is None or face_frames % interval == 0
                    last = self.pipeline.process(
                        frame, landmarks, self.mode, previous=None if rescore else state
                    )
                    state = last.state
                    on_frame(frame, last)

                if max_frames is not None and frames >= max_frames:
                    break
        finally:
            self._running = False
            cap.release()
            LOGGER.info("camera loop stopped", frames=frames, face_frames=face_frames)
        return last
