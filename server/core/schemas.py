# SPDX-License-Identifier: Apache-2.0
"""Pydantic schemas for the FaceScan API."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from facescan.insights import Insights, ScoreBar
from facescan.verdict import FaceVerdict


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    error: str = Field(..., description="Human-readable error message")


class MetricsResponse(BaseModel):
    """Local metric analysis of one photo."""
    scores: Dict[str, int] = Field(..., description="symmetry/texture/oiliness/beard_density in 0-100")
    bars: List[ScoreBar]
    insights: Insights
    mode: str = Field(..., description="Overlay mode used: mesh or heatmap")
    overlay_png_base64: str = Field(..., description="Photo with overlay, PNG, base64")
    landmarks: int = Field(..., description="Number of landmarks detected")
    request_id: Optional[str] = None


__all__ = ["ErrorResponse", "FaceVerdict", "MetricsResponse"]
