"""Unit tests for text normalization and fuzzy dropdown matching."""
from src.core.listing import DropdownCandidate
from src.core.matching import EXACT_SCORE, PARTIAL_SCORE, best_match, normalize, score


class TestNormalize:
    def test_strips_diacritics_and_uppercases(self):
        assert normalize("Bogotá D.C.") == "BOGOTA D.C."
        assert normalize("  medellín ") == "MEDELLIN"

    def test_handles_enye(self):
        assert normalize("Nariño") == "NARINO"

    def test_none_and_blank_become_empty(self):
        assert normalize(None) == ""
        assert normalize("") == ""
        assert normalize("   ") == ""


class TestScore:
    def test_exact_after_normalization(self):
        assert score("bogota d.c.", "Bogotá D.C.") == EXACT_SCORE

    def test_containment_either_direction(self):
        assert score("bogota", "Bogotá D.C.") == PARTIAL_SCORE
        assert score("Bogotá D.C.", "bogota") == PARTIAL_SCORE

    def test_unrelated_scores_zero(self):
        assert score("Cali", "Medellín") == 0.0

    def test_empty_side_scores_zero(self):
        assert score("", "Bogotá") == 0.0
        assert score("Bogotá", None) == 0.0
        assert score("", "") == 0.0


class TestBestMatch:
    OPTIONS = [
        DropdownCandidate(label="Bogotá D.C.", value="11"),
        DropdownCandidate(label="Medellín", value="05"),
    ]

    def test_picks_containment_over_zero(self):
        option = best_match("bogota", self.OPTIONS, key=lambda o: o.label)
        assert option.value == "11"

    def test_exact_beats_partial(self):
        options = [
            DropdownCandidate(label="Santa Marta", value="47"),
            DropdownCandidate(label="Marta", value="99"),
        ]
        option = best_match("marta", options, key=lambda o: o.label)
        assert option.value == "99"

    def test_first_candidate_wins_ties(self):
        options = [
            DropdownCandidate(label="Cali Norte", value="1"),
            DropdownCandidate(label="Cali Sur", value="2"),
        ]
        option = best_match("cali", options, key=lambda o: o.label)
        assert option.value == "1"

    def test_returns_first_when_everything_scores_zero(self):
        option = best_match("Pasto", self.OPTIONS, key=lambda o: o.label)
        assert option.value == "11"

    def test_require_positive_rejects_zero_scores(self):
        assert best_match("Pasto", self.OPTIONS, key=lambda o: o.label, require_positive=True) is None

    def test_empty_candidates_returns_none(self):
        assert best_match("bogota", []) is None

    def test_plain_strings_use_default_key(self):
        assert best_match("martinez", ["CAROLINA MARTINEZ", "JORGE RAMIREZ"]) == "CAROLINA MARTINEZ"


class TestProperties:
    SAMPLES = ["Bogotá D.C.", "  medellín ", "ÑANDÚ", "Cúcuta", "San José del Guaviare"]

    def test_normalize_is_idempotent(self):
        for text in self.SAMPLES:
            assert normalize(normalize(text)) == normalize(text)

    def test_self_score_is_exact(self):
        for text in self.SAMPLES:
            assert score(text, text) == EXACT_SCORE
