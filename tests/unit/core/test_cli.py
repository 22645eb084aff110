"""
Tests for the command-line interface
"""

from click.testing import CliRunner
import pytest

from core.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


class TestValidateFormulaCommand:
    def test_valid_formula(self, runner):
        result = runner.invoke(cli, ["validate-formula", "accuracy * 0.5 + speed"])
        assert result.exit_code == 0
        assert "Formula is valid" in result.output
        assert "accuracy, speed" in result.output

    def test_evaluates_with_variables(self, runner):
        result = runner.invoke(cli, ["validate-formula", "a / b", "--var", "a=1", "--var", "b=4"])
        assert result.exit_code == 0
        assert "Result: 0.25" in result.output

    def test_invalid_formula(self, runner):
        result = runner.invoke(cli, ["validate-formula", "a +"])
        assert result.exit_code == 1

    def test_evaluation_error(self, runner):
        result = runner.invoke(cli, ["validate-formula", "a / b", "--var", "a=1", "--var", "b=0"])
        assert result.exit_code == 1

    def test_non_finite_variable_rejected(self, runner):
        result = runner.invoke(cli, ["validate-formula", "a * 2", "--var", "a=inf"])
        assert result.exit_code == 1
        assert "INPUT_ERROR" in result.output
        assert "Result:" not in result.output

    def test_bad_variable_option(self, runner):
        result = runner.invoke(cli, ["validate-formula", "a", "--var", "a"])
        assert result.exit_code == 2
        assert "name=value" in result.output


class TestCheckConfigCommand:
    def test_valid_config(self, runner, tmp_path):
        path = tmp_path / "focus.yaml"
        path.write_text(
            "game_type: focus_task\n"
            "competency_formulas:\n"
            "  focus: hit_rate\n"
            "  control: 100 - false_alarm_rate\n"
            "final_weights:\n"
            "  focus: 0.5\n"
            "  control: 0.5\n"
            "test_variables:\n"
            "  hit_rate: 90\n"
            "  false_alarm_rate: 10\n"
        )
        result = runner.invoke(cli, ["check-config", str(path)])
        assert result.exit_code == 0, result.output
        assert "focus_task: 2 formulas" in result.output
        assert '"final_score": 90.0' in result.output

    def test_invalid_formula_in_config(self, runner, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("game_type: focus_task\ncompetency_formulas:\n  focus: hit_rate +\n")
        result = runner.invoke(cli, ["check-config", str(path)])
        assert result.exit_code == 1

    def test_not_a_mapping(self, runner, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        result = runner.invoke(cli, ["check-config", str(path)])
        assert result.exit_code == 1


class TestInfoCommands:
    def test_variables(self, runner):
        result = runner.invoke(cli, ["variables", "memory_match"])
        assert result.exit_code == 0
        assert "pairs_per_minute" in result.output

    def test_unknown_game_type(self, runner):
        result = runner.invoke(cli, ["variables", "chess"])
        assert result.exit_code == 1

    def test_env_info(self, runner):
        result = runner.invoke(cli, ["env-info"])
        assert result.exit_code == 0
        assert "NeuRazor v" in result.output
        assert "reaction_time" in result.output
