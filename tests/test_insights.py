from facescan.insights import DEFAULT_SUGGESTION, build_insights, score_bars
from facescan.metrics import AnalysisState
from facescan.verdict import FaceVerdict


def test_calm_face_gets_default_suggestion():
    ins = build_insights(AnalysisState(symmetry=85, texture=10, oiliness=10, beard_density=10))
    assert ins.items == ["Skin looks even.", "Keep the skin hydrated after shaving."]
    assert ins.suggestion == DEFAULT_SUGGESTION
    assert ins.source == "rules"


def test_symmetry_messages():
    assert "Highly symmetric face." in build_insights(AnalysisState(symmetry=91)).items
    assert "Slight asymmetry detected." in build_insights(AnalysisState(symmetry=79)).items
    middle = build_insights(AnalysisState(symmetry=85)).items
    assert not any("symmetr" in i for i in middle)


def test_rough_oily_skin_tips():
    ins = build_insights(AnalysisState(symmetry=85, texture=31, oiliness=51))
    assert "Irregular skin texture detected." in ins.items
    assert "High reflectivity in the T-zone." in ins.items
    assert ins.suggestion == (
        "Consider gentle exfoliation and hydration. An oil-control cleanser is recommended."
    )


def test_beard_style_depends_on_symmetry():
    boxed = build_insights(AnalysisState(symmetry=95, beard_density=60))
    assert "Dense beard identified." in boxed.items
    assert "boxed beard" in boxed.suggestion
    sides = build_insights(AnalysisState(symmetry=85, beard_density=60))
    assert "grow on the sides" in sides.suggestion


def test_state_insight_is_appended():
    ins = build_insights(AnalysisState(symmetry=85, insight="Good lighting."))
    assert ins.items[-1] == "Good lighting."


def test_remote_suggestions_win():
    verdict = FaceVerdict(suggestions=["Try a fade.", " Use sunscreen. "])
    ins = build_insights(AnalysisState(texture=50), verdict)
    assert ins.source == "remote"
    assert ins.suggestion == "Try a fade. Use sunscreen."
    assert "Irregular skin texture detected." in ins.items


def test_empty_remote_suggestions_fall_back_to_rules():
    ins = build_insights(AnalysisState(symmetry=85), FaceVerdict(suggestions=["  "]))
    assert ins.source == "rules"
    assert ins.suggestion == DEFAULT_SUGGESTION


def test_score_bars():
    bars = score_bars(AnalysisState(symmetry=97, texture=12, oiliness=0, beard_density=80))
    assert [b.label for b in bars] == ["Symmetry", "Texture", "Oiliness", "Beard"]
    assert [b.text for b in bars] == ["97%", "12%", "0%", "80%"]
