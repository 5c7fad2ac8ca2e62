# SPDX-License-Identifier: Apache-2.0
"""Turn scores into percentage bars and human-readable insights."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from .config import InsightConfig
from .metrics import AnalysisState
from .verdict import FaceVerdict, verdict_suggestion

DEFAULT_SUGGESTION = "You look great! Keep up your routine."

BAR_LABELS = {
    "symmetry": "Symmetry",
    "texture": "Texture",
    "oiliness": "Oiliness",
    "beard_density": "Beard",
}


class ScoreBar(BaseModel):
    key: str
    label: str
    value: int

    @property
    def text(self) -> str:
        return f"{self.value}%"


class Insights(BaseModel):
    items: List[str]
    suggestion: str
    source: str = "rules"


def score_bars(state: AnalysisState) -> List[ScoreBar]:
    return [ScoreBar(key=k, label=label, value=getattr(state, k)) for k, label in BAR_LABELS.items()]


def build_insights(
    state: AnalysisState,
    verdict: Optional[FaceVerdict] = None,
    config: InsightConfig | None = None,
) -> Insights:
    """Apply the insight rule table; remote suggestions win when present."""
    cfg = config or InsightConfig()
    items: List[str] = []
    tips: List[str] = []

    if state.symmetry > cfg.symmetry_high:
        items.append("Highly symmetric face.")
    elif state.symmetry < cfg.symmetry_low:
        items.append("Slight asymmetry detected.")

    if state.texture > cfg.texture_irregular:
        items.append("Irregular skin texture detected.")
        tips.append("Consider gentle exfoliation and hydration.")
    else:
        items.append("Skin looks even.")

    if state.oiliness > cfg.oiliness_high:
        items.append("High reflectivity in the T-zone.")
        tips.append("An oil-control cleanser is recommended.")

    if state.beard_density > cfg.beard_dense:
        items.append("Dense beard identified.")
        if state.symmetry > cfg.beard_symmetry_boxed:
            tips.append("A boxed beard style would highlight your symmetry.")
        else:
            tips.append("Let the beard grow on the sides to balance the face.")
    else:
        items.append("Keep the skin hydrated after shaving.")

    if state.insight:
        items.append(state.insight)

    remote = verdict_suggestion(verdict)
    if remote:
        return Insights(items=items, suggestion=remote, source="remote")
    return Insights(items=items, suggestion=" ".join(tips) if tips else DEFAULT_SUGGESTION)
