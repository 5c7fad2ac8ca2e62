# SPDX-License-Identifier: Apache-2.0
"""Remote classifier verdict: schema and extraction from free-text replies."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import orjson
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")
_NUMBER = re.compile(r"-?\d+(?:[.,]\d+)?")


class ScoreNote(BaseModel):
    """A 0-10 grade with a short justification."""

    model_config = ConfigDict(populate_by_name=True)

    score: float = Field(0.0, ge=0, le=10, validation_alias=AliasChoices("score", "nota", "note"))
    analysis: str = Field("", validation_alias=AliasChoices("analysis", "analise", "análise"))

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value: Any) -> float:
        # models sometimes answer "7/10" or "7,5" instead of a number
        if isinstance(value, str):
            match = _NUMBER.search(value)
            if not match:
                raise ValueError(f"no number in score {value!r}")
            value = float(match.group(0).replace(",", "."))
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"score must be a number, got {type(value).__name__}")
        return min(10.0, max(0.0, float(value)))


class FaceVerdict(BaseModel):
    """Structured answer of the vision model about one face photo."""

    model_config = ConfigDict(populate_by_name=True)

    symmetry: ScoreNote = Field(
        default_factory=ScoreNote, validation_alias=AliasChoices("symmetry", "simetria")
    )
    skin_quality: ScoreNote = Field(
        default_factory=ScoreNote, validation_alias=AliasChoices("skin_quality", "qualidade_pele")
    )
    face_shape: str = Field("", validation_alias=AliasChoices("face_shape", "formato_rosto"))
    strengths: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("strengths", "pontos_fortes")
    )
    suggestions: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("suggestions", "sugestoes_melhoria")
    )


class VerdictParseError(ValueError):
    """No usable JSON object in the model reply."""

    def __init__(self, message: str, raw_content: str = ""):
        super().__init__(message)
        self.raw_content = raw_content


def extract_json_block(text: str) -> Dict[str, Any]:
    """Parse the outermost ``{...}`` block of a free-text reply."""
    match = _JSON_BLOCK.search(text or "")
    if not match:
        raise VerdictParseError("no JSON object found in model reply", (text or "")[:500])
    try:
        data = orjson.loads(match.group(0))
    except orjson.JSONDecodeError as e:
        raise VerdictParseError(f"invalid JSON in model reply: {e}", match.group(0)[:500])
    if not isinstance(data, dict):
        raise VerdictParseError("model reply JSON is not an object", match.group(0)[:500])
    return data


def parse_verdict(text: str) -> FaceVerdict:
    return FaceVerdict.model_validate(extract_json_block(text))


def verdict_suggestion(verdict: Optional[FaceVerdict]) -> Optional[str]:
    """Joined suggestions of a verdict, or ``None`` when it has none."""
    if verdict is None:
        return None
    tips = [s.strip() for s in verdict.suggestions if s and s.strip()]
    return " ".join(tips) if tips else None
