# SPDX-License-Identifier: Apache-2.0
"""Overlay rendering: landmark mesh dots or per-region heat blobs.

Rendering goes through a small drawable-surface protocol so the renderer
can be exercised without a display. :class:`PillowSurface` is the
concrete surface used by the CLI and the HTTP server.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, Sequence

import numpy as np
from PIL import Image, ImageDraw

from .config import Color, OverlayConfig
from .landmarks import Landmark
from .metrics import AnalysisState
from .regions import RegionMap, region_centroid


class OverlayMode(str, Enum):
    MESH = "mesh"
    HEATMAP = "heatmap"


class Surface(Protocol):
    """Minimal drawing capability needed by the renderer."""

    def clear(self) -> None:
        ...

    def draw_point(self, x: float, y: float, size: int, color: Color) -> None:
        ...

    def draw_gradient(self, cx: float, cy: float, radius: float, color: Color) -> None:
        ...


def _rgba(color: Color) -> tuple[int, int, int, int]:
    r, g, b, a = color
    return int(r), int(g), int(b), int(round(max(0.0, min(1.0, a)) * 255))


class PillowSurface:
    """Transparent RGBA layer the size of the frame."""

    def __init__(self, width: int, height: int):
        self.size = (int(width), int(height))
        self.image = Image.new("RGBA", self.size, (0, 0, 0, 0))

    def clear(self) -> None:
        self.image = Image.new("RGBA", self.size, (0, 0, 0, 0))

    def draw_point(self, x: float, y: float, size: int, color: Color) -> None:
        draw = ImageDraw.Draw(self.image)
        x0, y0 = int(x), int(y)
        draw.rectangle([x0, y0, x0 + size - 1, y0 + size - 1], fill=_rgba(color))

    def draw_gradient(self, cx: float, cy: float, radius: float, color: Color) -> None:
        """Radial blob: full ``color`` at the centre fading to transparent at ``radius``."""
        if radius <= 0:
            return
        w, h = self.size
        x0, x1 = max(0, int(cx - radius)), min(w, int(np.ceil(cx + radius)) + 1)
        y0, y1 = max(0, int(cy - radius)), min(h, int(np.ceil(cy + radius)) + 1)
        if x1 <= x0 or y1 <= y0:
            return

        ys, xs = np.mgrid[y0:y1, x0:x1]
        dist = np.hypot(xs - cx, ys - cy)
        falloff = np.clip(1.0 - dist / radius, 0.0, 1.0)
        r, g, b, a = _rgba(color)
        patch = np.zeros((y1 - y0, x1 - x0, 4), dtype=np.uint8)
        patch[..., 0] = r
        patch[..., 1] = g
        patch[..., 2] = b
        patch[..., 3] = np.round(falloff * a).astype(np.uint8)
        self.image.alpha_composite(Image.fromarray(patch), dest=(x0, y0))

    def composite(self, frame: np.ndarray) -> Image.Image:
        """Blend the layer over an RGB(A) frame and return an RGB image."""
        base = Image.fromarray(np.ascontiguousarray(frame[:, :, :3])).convert("RGBA")
        if base.size != self.size:
            base = base.resize(self.size)
        return Image.alpha_composite(base, self.image).convert("RGB")


class OverlayRenderer:
    """Draws the mesh or heatmap overlay for one frame."""

    def __init__(self, config: OverlayConfig | None = None, regions: RegionMap | None = None):
        self.config = config or OverlayConfig()
        self.regions = regions or RegionMap.from_config()

    def render(
        self,
        surface: Surface,
        landmarks: Sequence[Landmark],
        state: AnalysisState,
        mode: OverlayMode = OverlayMode.MESH,
    ) -> None:
        # gradients accumulate, so every render starts from a blank surface
        surface.clear()
        if mode == OverlayMode.HEATMAP:
            self.render_heatmap(surface, landmarks, state)
        else:
            self.render_mesh(surface, landmarks)

    def render_mesh(self, surface: Surface, landmarks: Sequence[Landmark]) -> None:
        cfg = self.config
        highlighted = self.regions.members(cfg.mesh_regions)
        for i, lm in enumerate(landmarks):
            if i in highlighted:
                surface.draw_point(lm.x, lm.y, cfg.mesh_highlight_size, cfg.mesh_highlight_color)
            elif i % cfg.mesh_stride == 0:
                surface.draw_point(lm.x, lm.y, cfg.mesh_size, cfg.mesh_color)

    def render_heatmap(self, surface: Surface, landmarks: Sequence[Landmark], state: AnalysisState) -> None:
        cfg = self.config
        for metric, layer in cfg.heat_layers.items():
            score = getattr(state, metric)
            if score <= layer.min_score:
                continue
            color = (*layer.color, score / cfg.opacity_divisor)
            for region in layer.regions:
                cx, cy = region_centroid(landmarks, self.regions[region])
                surface.draw_gradient(cx, cy, cfg.blob_radius, color)
