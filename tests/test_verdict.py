import pytest

from facescan.verdict import FaceVerdict, VerdictParseError, extract_json_block, parse_verdict, verdict_suggestion

PT_REPLY = """Claro! Aqui está a análise:
```json
{
  "simetria": {"nota": 8, "analise": "Olhos alinhados."},
  "qualidade_pele": {"nota": "7/10", "analise": "Poucas manchas."},
  "formato_rosto": "Oval",
  "pontos_fortes": ["Mandíbula definida"],
  "sugestoes_melhoria": ["Barba curta", "Protetor solar", "Postura"]
}
```"""


def test_portuguese_reply_is_accepted():
    v = parse_verdict(PT_REPLY)
    assert v.symmetry.score == 8
    assert v.symmetry.analysis == "Olhos alinhados."
    assert v.skin_quality.score == 7
    assert v.face_shape == "Oval"
    assert v.strengths == ["Mandíbula definida"]
    assert len(v.suggestions) == 3


def test_english_reply():
    v = parse_verdict('{"symmetry": {"score": 6.5, "analysis": "ok"}, "face_shape": "Square", "suggestions": ["a"]}')
    assert v.symmetry.score == 6.5
    assert v.skin_quality.score == 0
    assert v.strengths == []


@pytest.mark.parametrize("raw,expected", [("7,5", 7.5), ("9/10", 9.0), (12, 10.0), (-1, 0.0)])
def test_score_coercion(raw, expected):
    v = FaceVerdict.model_validate({"symmetry": {"score": raw}})
    assert v.symmetry.score == expected


def test_score_without_number_is_rejected():
    with pytest.raises(ValueError):
        FaceVerdict.model_validate({"symmetry": {"score": "great"}})


@pytest.mark.parametrize("text", ["", "no json here", "[1, 2, 3]"])
def test_missing_json_block(text):
    with pytest.raises(VerdictParseError):
        extract_json_block(text)


def test_invalid_json_block():
    with pytest.raises(VerdictParseError) as exc:
        extract_json_block("here: {symmetry: 8,}")
    assert "{symmetry" in exc.value.raw_content


def test_verdict_suggestion():
    assert verdict_suggestion(None) is None
    assert verdict_suggestion(FaceVerdict()) is None
    assert verdict_suggestion(FaceVerdict(suggestions=["a", "", "b"])) == "a b"


@pytest.mark.parametrize("raw", [None, [8], {"value": 8}, True])
def test_non_numeric_score_is_rejected(raw):
    with pytest.raises(ValueError):
        FaceVerdict.model_validate({"simetria": {"nota": raw, "analise": "ok"}})
