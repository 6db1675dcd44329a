"""Typer CLI for sheet nesting quotes."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from sheetnest.application import PricingPipeline
from sheetnest.application.config import (
    ConfigError,
    PricingConfiguration,
    config_to_calculator,
    config_to_charging_policy,
    config_to_option_rules,
    config_to_sheet_spec,
    config_to_volume_pricing,
    load_config,
    load_config_from_dict,
    merge_config_with_cli,
)
from sheetnest.cli.commands import validate_command
from sheetnest.domain import InvalidNestingRequestError, NestingFailure, RoundingMode
from sheetnest.infrastructure import (
    AnalysisFormatter,
    JsonExporter,
    PipelineFormatter,
    QuoteFormatter,
    format_failure,
)

OUTPUT_FORMATS = ("text", "json")

app = typer.Typer(
    name="sheetnest",
    help="Price flat pieces cut from rectangular sheet stock.",
)

app.command(name="validate")(validate_command)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if verbose:
        logging.getLogger("sheetnest").setLevel(logging.DEBUG)


def _check_format(output_format: str) -> None:
    if output_format not in OUTPUT_FORMATS:
        typer.echo(
            f"Error: unknown format '{output_format}'. "
            f"Choose from: {', '.join(OUTPUT_FORMATS)}",
            err=True,
        )
        raise typer.Exit(code=1)


def _resolve_config(
    config_file: Path | None,
    sheet_width: float | None,
    sheet_height: float | None,
    sheet_cost: float | None,
    min_price: float | None,
    rounding: RoundingMode | None,
    min_sheet_fraction: float | None,
) -> PricingConfiguration:
    """Load the config file (or build a bare one) and apply CLI overrides.

    Raises:
        typer.Exit: With code 1 when the configuration cannot be built.
    """
    try:
        if config_file is not None:
            config = load_config(config_file)
        else:
            if sheet_cost is None:
                typer.echo(
                    "Error: --sheet-cost is required when --config is not provided",
                    err=True,
                )
                raise typer.Exit(code=1)
            config = load_config_from_dict(
                {"schema_version": "1.0", "sheet": {"cost": sheet_cost}}
            )

        return merge_config_with_cli(
            config,
            sheet_width=sheet_width,
            sheet_height=sheet_height,
            sheet_cost=sheet_cost,
            min_price_per_item=min_price,
            rounding_mode=rounding,
            min_sheet_fraction=min_sheet_fraction,
        )
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    except ValueError as e:
        # Pydantic rejects invalid CLI overrides during the merge.
        typer.echo(f"Error: invalid option value: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def quote(
    piece_width: Annotated[
        float, typer.Option("--piece-width", "-W", help="Piece width in inches")
    ],
    piece_height: Annotated[
        float, typer.Option("--piece-height", "-H", help="Piece height in inches")
    ],
    quantity: Annotated[
        int, typer.Option("--quantity", "-q", help="Number of pieces")
    ],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to JSON pricing configuration"),
    ] = None,
    sheet_width: Annotated[
        float | None, typer.Option("--sheet-width", help="Sheet width in inches")
    ] = None,
    sheet_height: Annotated[
        float | None, typer.Option("--sheet-height", help="Sheet height in inches")
    ] = None,
    sheet_cost: Annotated[
        float | None, typer.Option("--sheet-cost", help="Base cost per sheet")
    ] = None,
    min_price: Annotated[
        float | None, typer.Option("--min-price", help="Minimum price per piece")
    ] = None,
    rounding: Annotated[
        RoundingMode | None,
        typer.Option("--rounding", help="Sheet rounding: exact, quarter, half, full"),
    ] = None,
    min_sheet_fraction: Annotated[
        float | None,
        typer.Option("--min-sheet-fraction", help="Minimum billable sheet fraction"),
    ] = None,
    output_format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text, json")
    ] = "text",
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log pricing diagnostics")
    ] = False,
) -> None:
    """Quote an order of identical pieces.

    Sheet settings come from --config when given; CLI options override
    config file values. Option rules in the config are applied around
    the nesting calculation.

    Examples:
        sheetnest quote -W 12 -H 12 -q 50 --sheet-cost 50
        sheetnest quote -W 20 -H 30 -q 10 --config pricing.json --rounding half
    """
    _configure_logging(verbose)
    _check_format(output_format)

    config = _resolve_config(
        config_file,
        sheet_width,
        sheet_height,
        sheet_cost,
        min_price,
        rounding,
        min_sheet_fraction,
    )

    try:
        if config.option_rules:
            result = PricingPipeline().execute(
                config_to_sheet_spec(config),
                piece_width,
                piece_height,
                quantity,
                min_price_per_item=config.min_price_per_item,
                volume_pricing=config_to_volume_pricing(config.volume_pricing),
                charging_policy=config_to_charging_policy(config.sheet_charging),
                option_rules=config_to_option_rules(config.option_rules),
            )
            formatter = PipelineFormatter()
        else:
            result = config_to_calculator(config).calculate_pricing_with_waste(
                piece_width, piece_height, quantity
            )
            formatter = QuoteFormatter()
    except ValueError as e:
        # Bad piece size or quantity, or option rules pricing the sheet below zero.
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if output_format == "json":
        typer.echo(JsonExporter().export(result))
    elif isinstance(result, NestingFailure):
        typer.echo(format_failure(result), err=True)
    else:
        typer.echo(formatter.format(result))

    if result.is_error:
        raise typer.Exit(code=1)


@app.command()
def analyze(
    piece_width: Annotated[
        float, typer.Option("--piece-width", "-W", help="Piece width in inches")
    ],
    piece_height: Annotated[
        float, typer.Option("--piece-height", "-H", help="Piece height in inches")
    ],
    config_file: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to JSON pricing configuration"),
    ] = None,
    sheet_width: Annotated[
        float | None, typer.Option("--sheet-width", help="Sheet width in inches")
    ] = None,
    sheet_height: Annotated[
        float | None, typer.Option("--sheet-height", help="Sheet height in inches")
    ] = None,
    sheet_cost: Annotated[
        float | None, typer.Option("--sheet-cost", help="Base cost per sheet")
    ] = None,
    output_format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: text, json")
    ] = "text",
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log search diagnostics")
    ] = False,
) -> None:
    """Rank every layout of a piece on one sheet.

    Example:
        sheetnest analyze -W 10 -H 14 --sheet-cost 50
    """
    _configure_logging(verbose)
    _check_format(output_format)

    config = _resolve_config(
        config_file, sheet_width, sheet_height, sheet_cost, None, None, None
    )

    try:
        analysis = config_to_calculator(config).analyze(piece_width, piece_height)
    except InvalidNestingRequestError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if analysis is None:
        typer.echo(AnalysisFormatter().format(None), err=True)
        raise typer.Exit(code=1)

    if output_format == "json":
        typer.echo(JsonExporter().export(analysis))
    else:
        typer.echo(AnalysisFormatter().format(analysis))


if __name__ == "__main__":
    app()
