"""Integration tests for the quote and analyze CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sheetnest.cli.main import app

FIXTURES_PATH = Path(__file__).parent.parent / "fixtures" / "configs"

STANDARD = ["--sheet-cost", "50"]


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


class TestQuoteCommand:
    """Tests for the quote command."""

    def test_text_quote(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["quote", "-W", "12", "-H", "12", "-q", "50", *STANDARD])

        assert result.exit_code == 0
        assert "PRICE QUOTE" in result.output
        assert "32 pieces (4 wide x 8 high)" in result.output
        assert "PARTIAL SHEET" in result.output

    def test_json_quote(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["quote", "-W", "12", "-H", "12", "-q", "50", *STANDARD, "--format", "json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["total_price"] == pytest.approx(78.125)
        assert data["billable_sheets"] == pytest.approx(1.5625)

    def test_rounding_override(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app,
            ["quote", "-W", "12", "-H", "12", "-q", "50", *STANDARD, "--rounding", "full", "-f", "json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["total_price"] == pytest.approx(100.0)

    def test_min_sheet_fraction_override(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app,
            ["quote", "-W", "12", "-H", "12", "-q", "1", *STANDARD, "--min-sheet-fraction", "0.5", "-f", "json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["total_price"] == pytest.approx(25.0)

    def test_min_price_override(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app,
            ["quote", "-W", "12", "-H", "12", "-q", "50", *STANDARD, "--min-price", "3", "-f", "json"],
        )

        data = json.loads(result.stdout)
        assert data["min_price_applied"] is True
        assert data["total_price"] == pytest.approx(150.0)

    def test_oversized_piece(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["quote", "-W", "100", "-H", "100", "-q", "1", *STANDARD])

        assert result.exit_code == 1
        assert "ERROR (oversized)" in result.output
        assert "exceeds our standard media dimensions" in result.output

    def test_oversized_piece_json(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["quote", "-W", "100", "-H", "100", "-q", "1", *STANDARD, "-f", "json"]
        )

        assert result.exit_code == 1
        assert '"kind": "oversized"' in result.output

    def test_sheet_cost_required_without_config(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["quote", "-W", "12", "-H", "12", "-q", "5"])

        assert result.exit_code == 1
        assert "--sheet-cost is required" in result.output

    def test_zero_quantity(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["quote", "-W", "12", "-H", "12", "-q", "0", *STANDARD])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_unknown_format(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["quote", "-W", "12", "-H", "12", "-q", "5", *STANDARD, "-f", "xml"]
        )

        assert result.exit_code == 1
        assert "unknown format" in result.output

    def test_invalid_sheet_override(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["quote", "-W", "12", "-H", "12", "-q", "5", *STANDARD, "--sheet-width", "0"]
        )

        assert result.exit_code == 1
        assert "invalid option value" in result.output

    def test_config_with_option_rules(self, runner: CliRunner) -> None:
        config_path = FIXTURES_PATH / "valid_full.json"
        result = runner.invoke(app, ["quote", "-W", "12", "-H", "12", "-q", "50", "-c", str(config_path)])

        assert result.exit_code == 0
        assert "OPTIONS" in result.output
        assert "Lamination" in result.output
        assert "Setup fee" in result.output
        assert "FINAL TOTAL" in result.output

    def test_config_with_option_rules_json(self, runner: CliRunner) -> None:
        config_path = FIXTURES_PATH / "valid_full.json"
        result = runner.invoke(
            app, ["quote", "-W", "12", "-H", "12", "-q", "50", "-c", str(config_path), "-f", "json"]
        )

        assert result.exit_code == 0
        breakdown = json.loads(result.stdout)["breakdown"]
        assert breakdown["order_adjustment"] == pytest.approx(15.0)
        assert breakdown["billable_sheets"] == pytest.approx(1.75)

    def test_config_without_option_rules(self, runner: CliRunner) -> None:
        config_path = FIXTURES_PATH / "valid_minimal.json"
        result = runner.invoke(
            app, ["quote", "-W", "12", "-H", "12", "-q", "50", "-c", str(config_path), "-f", "json"]
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["total_price"] == pytest.approx(78.125)

    def test_missing_config_file(self, runner: CliRunner) -> None:
        result = runner.invoke(
            app, ["quote", "-W", "12", "-H", "12", "-q", "5", "-c", str(FIXTURES_PATH / "nope.json")]
        )

        assert result.exit_code == 1
        assert "Error" in result.output


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_text_analysis(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["analyze", "-W", "10", "-H", "14", *STANDARD])

        assert result.exit_code == 0
        assert "NESTING ANALYSIS" in result.output
        assert "18 vertical (10x14) + 12 horizontal (14x10)" in result.output

    def test_json_analysis(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["analyze", "-W", "10", "-H", "14", *STANDARD, "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["best_option"]["total_pieces"] == 30
        assert data["sheet"]["sqft"] == pytest.approx(32.0)

    def test_piece_too_large(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["analyze", "-W", "100", "-H", "100", *STANDARD])

        assert result.exit_code == 1
        assert "No layout fits" in result.output

    def test_invalid_dimension(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["analyze", "-W", "0", "-H", "10", *STANDARD])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_config_rejected_by_validate_also_fails_quote(self, runner: CliRunner) -> None:
        config_path = FIXTURES_PATH / "negative_sheet_cost.json"
        result = runner.invoke(app, ["quote", "-W", "12", "-H", "12", "-q", "5", "-c", str(config_path)])

        assert result.exit_code == 1
        assert "non-negative" in result.output
