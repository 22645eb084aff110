"""
Unit tests for the scoring calculator and scoring types
"""
from unittest.mock import patch

import pytest

from core.exceptions import InputError
from d1_extraction import MissingTelemetryField, UnknownGameType
from d3_scoring.calculator import calculate_scores, clamp_score, preview, score_environment
from d3_scoring.exceptions import ScoringError
from d3_scoring.types import CompetencyScore, ScoringConfiguration


class TestScoringConfiguration:
    def test_from_dict(self):
        config = ScoringConfiguration.from_dict(
            "focus_task",
            {"competency_formulas": {"focus": "hit_rate"}, "final_weights": {"focus": 1}, "settings": {"x": 1}},
        )
        assert config.competency_formulas == {"focus": "hit_rate"}
        assert config.final_weights == {"focus": 1.0}
        assert config.settings == {"x": 1}

    def test_to_dict_round_trips_payload(self, memory_config):
        assert ScoringConfiguration.from_dict("memory_match", memory_config.to_dict()) == memory_config

    def test_is_immutable(self, memory_config):
        with pytest.raises(TypeError):
            memory_config.competency_formulas["memory"] = "0"
        with pytest.raises(AttributeError):
            memory_config.game_type = "focus_task"

    def test_copies_caller_mappings(self):
        formulas = {"a": "1"}
        config = ScoringConfiguration("focus_task", formulas, {"a": 1})
        formulas["a"] = "2"
        assert config.competency_formulas["a"] == "1"

    @pytest.mark.parametrize(
        "formulas, weights",
        [
            ({"a": 1}, {}),
            ({"": "1"}, {}),
            ({"a": "1"}, {"a": -0.5}),
            ({"a": "1"}, {"a": "0.5"}),
            ({"a": "1"}, {"a": float("nan")}),
            ({"a": "1"}, {"a": True}),
            (["a"], {}),
        ],
    )
    def test_invalid_configurations(self, formulas, weights):
        with pytest.raises(InputError):
            ScoringConfiguration("focus_task", formulas, weights)

    def test_game_type_required(self):
        with pytest.raises(InputError):
            ScoringConfiguration("", {}, {})


class TestClampScore:
    @pytest.mark.parametrize("value, expected", [(-10, 0.0), (0, 0.0), (55.5, 55.5), (100, 100.0), (250, 100.0)])
    def test_clamp(self, value, expected):
        assert clamp_score(value) == expected


class TestScoreEnvironment:
    def test_weighted_composite(self):
        config = ScoringConfiguration(
            "preview",
            {"overall": "accuracy * 0.5 + speed * 0.5"},
            {"overall": 1},
        )
        result = score_environment(config, {"accuracy": 80, "speed": 60})
        assert result.competencies["overall"] == CompetencyScore(raw=70.0, weight=1.0, weighted=70.0)
        assert result.final_score == 70.0

    def test_raw_scores_are_clamped(self):
        config = ScoringConfiguration("preview", {"high": "a * 10", "low": "-a"}, {"high": 0.5, "low": 0.5})
        result = score_environment(config, {"a": 50})
        assert result.competencies["high"].raw == 100.0
        assert result.competencies["low"].raw == 0.0
        assert result.final_score == 50.0

    def test_missing_weight_scores_zero(self):
        config = ScoringConfiguration("preview", {"a": "40", "b": "60"}, {"a": 1})
        result = score_environment(config, {})
        assert result.competencies["b"] == CompetencyScore(raw=60.0, weight=0.0, weighted=0.0)
        assert result.final_score == 40.0

    def test_weight_without_formula_contributes_nothing(self):
        config = ScoringConfiguration("preview", {"a": "40"}, {"a": 1, "ghost": 1})
        result = score_environment(config, {})
        assert list(result.competencies) == ["a"]
        assert result.final_score == 40.0

    def test_final_score_rounded_half_up(self):
        config = ScoringConfiguration("preview", {"a": "x"}, {"a": 0.5})
        assert score_environment(config, {"x": 2.675 * 2}).final_score == 2.68

    def test_final_score_is_not_capped(self):
        config = ScoringConfiguration("preview", {"a": "100", "b": "100"}, {"a": 1, "b": 1})
        with patch("d3_scoring.calculator.logger") as mock_logger:
            result = score_environment(config, {})
        assert result.final_score == 200.0
        mock_logger.warning.assert_called_once()

    def test_competency_order_is_preserved(self):
        config = ScoringConfiguration("preview", {"z": "1", "a": "2", "m": "3"}, {})
        assert list(score_environment(config, {}).competencies) == ["z", "a", "m"]

    def test_failure_aborts_with_competency(self):
        config = ScoringConfiguration("preview", {"ok": "1", "broken": "a / b"}, {"ok": 1, "broken": 1})
        with pytest.raises(ScoringError) as exc_info:
            score_environment(config, {"a": 1, "b": 0})
        error = exc_info.value
        assert error.competency == "broken"
        assert error.details["kind"] == "DIVISION_BY_ZERO"
        assert error.message == "Formula error in broken: Division by zero"
        assert error.to_error_payload() == {
            "competency": "broken",
            "kind": "DIVISION_BY_ZERO",
            "message": "Division by zero",
        }

    def test_overflowing_weight_is_a_scoring_error(self):
        config = ScoringConfiguration("preview", {"a": "x"}, {"a": 1e307})
        with pytest.raises(ScoringError) as exc_info:
            score_environment(config, {"x": 100})
        assert exc_info.value.competency == "a"
        assert exc_info.value.details["kind"] == "DOMAIN_ERROR"

    def test_overflowing_total_is_a_scoring_error(self):
        config = ScoringConfiguration("preview", {"a": "100", "b": "100"}, {"a": 1e306, "b": 1.7e306})
        with pytest.raises(ScoringError) as exc_info:
            score_environment(config, {})
        assert exc_info.value.competency == "b"

    def test_invalid_stored_formula_surfaces_as_scoring_error(self):
        config = ScoringConfiguration("preview", {"bad": "a +"}, {"bad": 1})
        with pytest.raises(ScoringError) as exc_info:
            score_environment(config, {"a": 1})
        assert exc_info.value.details["kind"] == "FORMULA_VALIDATION_ERROR"

    def test_to_dict(self):
        config = ScoringConfiguration("preview", {"a": "50"}, {"a": 0.5})
        assert score_environment(config, {}).to_dict() == {
            "final_score": 25.0,
            "competencies": {"a": {"raw": 50.0, "weight": 0.5, "weighted": 25.0}},
        }


class TestCalculateScores:
    def test_scores_telemetry(self, memory_config, memory_payload):
        result = calculate_scores("memory_match", memory_config, memory_payload)
        # completion 75, efficiency 50 * 1.2 = 60
        assert result.competencies["memory"].raw == 75.0
        assert result.competencies["efficiency"].raw == pytest.approx(60.0)
        assert result.final_score == 69.0

    def test_game_type_mismatch(self, memory_config, memory_payload):
        with pytest.raises(InputError) as exc_info:
            calculate_scores("focus_task", memory_config, memory_payload)
        assert exc_info.value.field == "game_type"

    def test_unknown_game_type(self):
        config = ScoringConfiguration("chess", {"a": "1"}, {"a": 1})
        with pytest.raises(UnknownGameType):
            calculate_scores("chess", config, {})

    def test_missing_telemetry(self, memory_config):
        with pytest.raises(MissingTelemetryField):
            calculate_scores("memory_match", memory_config, {"pairs_total": 8})

    def test_undefined_variable(self, memory_payload):
        config = ScoringConfiguration("memory_match", {"speed": "avg_reaction_ms"}, {"speed": 1})
        with pytest.raises(ScoringError) as exc_info:
            calculate_scores("memory_match", config, memory_payload)
        assert exc_info.value.details["kind"] == "UNDEFINED_VARIABLE"

    def test_tracks_scoring_runs(self, memory_config, memory_payload):
        with patch("d3_scoring.calculator.metrics") as mock_metrics:
            calculate_scores("memory_match", memory_config, memory_payload)
        mock_metrics.track_scoring_run.assert_called_once_with("memory_match", "success")
        assert mock_metrics.track_formula_evaluation.call_count == 2


class TestPreview:
    def test_preview_matches_calculator(self):
        result = preview({"overall": "accuracy * 0.5 + speed * 0.5"}, {"overall": 1}, {"accuracy": 80, "speed": 60})
        assert result.final_score == 70.0

    def test_preview_rejects_bad_variables(self):
        with pytest.raises(InputError):
            preview({"a": "x"}, {"a": 1}, {"x": "eighty"})

    def test_preview_failure(self):
        with pytest.raises(ScoringError):
            preview({"a": "sqrt(x)"}, {"a": 1}, {"x": -1})
