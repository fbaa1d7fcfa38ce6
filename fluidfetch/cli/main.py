# -*- coding: utf-8 -*-
"""
fluids CLI
==========

Get fluid properties from the NIST Chemistry WebBook.

Examples:
    # Isotherm of water at 725.5 K from 1 to 10 MPa in 0.5 MPa steps, SI units
    fluids isotherm --id C7732185 -T 725.5 --pl 1.0 --ph 10.0 -i 0.5 --si

    # List the substances the service knows about
    fluids catalogue show
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional, Type

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fluidfetch._version import __version__
from fluidfetch.calculations import (
    CalculationRequest,
    IsobarRequest,
    IsochoreRequest,
    IsothermRequest,
    SaturationByPressureRequest,
    SaturationByTemperatureRequest,
)
from fluidfetch.cli.cmd_catalogue import app as catalogue_app
from fluidfetch.config import FluidsSettings, load_settings
from fluidfetch.connectors import WebBookClient
from fluidfetch.exceptions import FluidsException, UsageError
from fluidfetch.pipeline import FluidsPipeline
from fluidfetch.units import describe_units, resolve, select_units

app = typer.Typer(
    name="fluids",
    help="fluids: get fluid properties from the NIST Chemistry WebBook",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)

app.add_typer(catalogue_app, name="catalogue", help="Show, refresh and search the substance catalogue")


def fail(error: Exception, hint: Optional[str] = None) -> NoReturn:
    """Report an error and exit non-zero."""
    console.print(f"[red]Error! {escape(str(error))}[/red]")
    if hint:
        console.print(hint)
    logger.debug("Command failed", exc_info=error)
    raise typer.Exit(1)


def get_settings(ctx: typer.Context) -> FluidsSettings:
    if ctx.obj is None:
        ctx.obj = load_settings()
    return ctx.obj


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with settings"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed logs"),
):
    """
    fluids - get fluid properties from NIST Chemistry WebBook
    """
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        logging.basicConfig(level=logging.WARNING)

    if version:
        _print_version()
        raise typer.Exit(0)

    try:
        ctx.obj = load_settings(config)
    except UsageError as e:
        fail(e)

    if ctx.invoked_subcommand is None:
        fail(
            UsageError("You must select a calculation type: isobar, isotherm, isochore, sat-pressure or sat-temperature."),
            hint="Type 'fluids --help' for further help.",
        )


def _print_version() -> None:
    console.print(f"fluids version {__version__}")
    console.print("fluids comes with ABSOLUTELY NO WARRANTY.")
    console.print("You may redistribute copies of fluids under the terms of the MIT License (MIT).")


@app.command()
def version():
    """Show fluids version"""
    _print_version()


@app.command()
def units(
    ctx: typer.Context,
    si: bool = typer.Option(False, "--si", help="Show the SI preset"),
    unit_codes: Optional[str] = typer.Option(None, "--units", "-u", help="Seven unit codes, e.g. '1 2 3 1 1 2 1'"),
):
    """Explain unit codes and show the active units"""
    settings = get_settings(ctx)
    try:
        selection, heading = select_units(si, unit_codes, settings.default_selection())
    except UsageError as e:
        fail(e)
    console.print()
    console.print(escape(describe_units(selection, heading)))
    console.print()


# ------------------------------------------------------------------------------
# Calculation commands
# ------------------------------------------------------------------------------

@dataclass
class CommonOptions:
    substance_id: str
    increment: Optional[float]
    digits: Optional[int]
    output: Optional[Path]
    ref_state: Optional[str]
    si: bool
    unit_codes: Optional[str]
    resolve_name: bool
    renew: bool


ID_OPTION = typer.Option(..., "--id", help="NIST ID of the substance (e.g. C7732185 = Water)")
INC_OPTION = typer.Option(None, "--inc", "-i", help="Increment (default: 1.0)")
DIGITS_OPTION = typer.Option(None, "--digits", "-s", min=1, help="Number of digits in output (default: 5)")
OUTPUT_OPTION = typer.Option(None, "--output", "-o", help="Output file (default: fluids_<type>.dat)")
REF_OPTION = typer.Option(None, "--ref", help="Standard state convention (default: DEF)")
SI_OPTION = typer.Option(False, "--si", help="Use SI units instead of the defaults")
UNITS_OPTION = typer.Option(None, "--units", "-u", help="Seven unit codes, see 'fluids units'")
RESOLVE_OPTION = typer.Option(False, "--resolve", "-r", help="Resolve the substance name of the ID")
RENEW_OPTION = typer.Option(False, "--renew", "-R", help="Like --resolve and force a catalogue renewal")


def _welcome() -> None:
    console.print()
    console.print(Panel.fit(
        "[bold cyan]fluids[/bold cyan] - get fluid properties from NIST Chemistry WebBook",
        border_style="cyan"
    ))


def _run_calculation(
    ctx: typer.Context,
    request_cls: Type[CalculationRequest],
    sweep: Dict[str, Any],
    common: CommonOptions,
) -> None:
    """Validate input, echo it, run the pipeline and report the outcome."""
    settings = get_settings(ctx)

    try:
        selection, _ = select_units(common.si, common.unit_codes, settings.default_selection())
        increment = common.increment if common.increment is not None else settings.default_increment
        increment_field = "t_inc" if "t_low" in sweep else "p_inc"
        request = request_cls(
            substance_id=common.substance_id,
            ref_state=common.ref_state or settings.default_ref_state,
            digits=common.digits or settings.default_digits,
            units=selection,
            **{increment_field: increment},
            **sweep,
        )
    except UsageError as e:
        fail(e, hint="Type 'fluids units' for information about unit codes.")
    except ValidationError as e:
        fail(UsageError(f"Invalid parameters: {e}"))

    _welcome()
    labels = resolve(request.units)

    console.print(f" ** {request.TITLE} **")
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Parameter", style="cyan")
    table.add_column("Value")
    table.add_row("NIST ID", f"= {request.substance_id}")
    for label, value in request.summary(labels):
        table.add_row(escape(label), f"= {value}")
    table.add_row("Digits/#", f"= {request.digits}")
    console.print(table)

    with WebBookClient(settings) as client:
        pipeline = FluidsPipeline(
            settings,
            client,
            progress=lambda message: console.print(f" <=> {message} ..."),
        )
        try:
            result = pipeline.run(
                request,
                output=common.output,
                resolve_name=common.resolve_name,
                renew=common.renew,
            )
        except FluidsException as e:
            fail(e)

    if result.catalogue is not None:
        if result.catalogue.refreshed:
            console.print(f" -> {result.catalogue.reason}: catalogue renewed")
        else:
            age = result.catalogue.age
            console.print(
                f" -> catalogue file is {result.catalogue.age_days:.2f} days "
                f"({age.total_seconds():.0f} sec.) old"
            )
        console.print(f" -> resolve ID:{request.substance_id} = {escape(result.substance_label)}")

    if result.format_error is None:
        console.print(f" -> found {result.column_count} columns")
    else:
        console.print(f"[yellow]Warning! {escape(str(result.format_error))}[/yellow]")

    console.print(f" -> table with {result.data_points} data points written to {result.output_path}!")


@app.command()
def isobar(
    ctx: typer.Context,
    substance_id: str = ID_OPTION,
    pressure: float = typer.Option(..., "--pressure", "-p", help="Pressure"),
    t_low: float = typer.Option(..., "--t-low", "--tl", help="Lowest temperature"),
    t_high: float = typer.Option(..., "--t-high", "--th", help="Highest temperature"),
    increment: Optional[float] = INC_OPTION,
    digits: Optional[int] = DIGITS_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    ref_state: Optional[str] = REF_OPTION,
    si: bool = SI_OPTION,
    unit_codes: Optional[str] = UNITS_OPTION,
    resolve_name: bool = RESOLVE_OPTION,
    renew: bool = RENEW_OPTION,
):
    """Isobaric properties: constant pressure, temperature sweep"""
    _run_calculation(
        ctx,
        IsobarRequest,
        {"pressure": pressure, "t_low": t_low, "t_high": t_high},
        CommonOptions(substance_id, increment, digits, output, ref_state, si, unit_codes, resolve_name, renew),
    )


@app.command()
def isotherm(
    ctx: typer.Context,
    substance_id: str = ID_OPTION,
    temperature: float = typer.Option(..., "--temperature", "-T", help="Temperature"),
    p_low: float = typer.Option(..., "--p-low", "--pl", help="Lowest pressure"),
    p_high: float = typer.Option(..., "--p-high", "--ph", help="Highest pressure"),
    increment: Optional[float] = INC_OPTION,
    digits: Optional[int] = DIGITS_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    ref_state: Optional[str] = REF_OPTION,
    si: bool = SI_OPTION,
    unit_codes: Optional[str] = UNITS_OPTION,
    resolve_name: bool = RESOLVE_OPTION,
    renew: bool = RENEW_OPTION,
):
    """Isothermal properties: constant temperature, pressure sweep"""
    _run_calculation(
        ctx,
        IsothermRequest,
        {"temperature": temperature, "p_low": p_low, "p_high": p_high},
        CommonOptions(substance_id, increment, digits, output, ref_state, si, unit_codes, resolve_name, renew),
    )


@app.command()
def isochore(
    ctx: typer.Context,
    substance_id: str = ID_OPTION,
    density: float = typer.Option(..., "--density", "-d", help="Density"),
    t_low: float = typer.Option(..., "--t-low", "--tl", help="Lowest temperature"),
    t_high: float = typer.Option(..., "--t-high", "--th", help="Highest temperature"),
    increment: Optional[float] = INC_OPTION,
    digits: Optional[int] = DIGITS_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    ref_state: Optional[str] = REF_OPTION,
    si: bool = SI_OPTION,
    unit_codes: Optional[str] = UNITS_OPTION,
    resolve_name: bool = RESOLVE_OPTION,
    renew: bool = RENEW_OPTION,
):
    """Isochoric properties: constant density, temperature sweep"""
    _run_calculation(
        ctx,
        IsochoreRequest,
        {"density": density, "t_low": t_low, "t_high": t_high},
        CommonOptions(substance_id, increment, digits, output, ref_state, si, unit_codes, resolve_name, renew),
    )


@app.command("sat-pressure")
def sat_pressure(
    ctx: typer.Context,
    substance_id: str = ID_OPTION,
    p_low: float = typer.Option(..., "--p-low", "--pl", help="Lowest pressure"),
    p_high: float = typer.Option(..., "--p-high", "--ph", help="Highest pressure"),
    increment: Optional[float] = INC_OPTION,
    digits: Optional[int] = DIGITS_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    ref_state: Optional[str] = REF_OPTION,
    si: bool = SI_OPTION,
    unit_codes: Optional[str] = UNITS_OPTION,
    resolve_name: bool = RESOLVE_OPTION,
    renew: bool = RENEW_OPTION,
):
    """Saturation properties at pressure increments"""
    _run_calculation(
        ctx,
        SaturationByPressureRequest,
        {"p_low": p_low, "p_high": p_high},
        CommonOptions(substance_id, increment, digits, output, ref_state, si, unit_codes, resolve_name, renew),
    )


@app.command("sat-temperature")
def sat_temperature(
    ctx: typer.Context,
    substance_id: str = ID_OPTION,
    t_low: float = typer.Option(..., "--t-low", "--tl", help="Lowest temperature"),
    t_high: float = typer.Option(..., "--t-high", "--th", help="Highest temperature"),
    increment: Optional[float] = INC_OPTION,
    digits: Optional[int] = DIGITS_OPTION,
    output: Optional[Path] = OUTPUT_OPTION,
    ref_state: Optional[str] = REF_OPTION,
    si: bool = SI_OPTION,
    unit_codes: Optional[str] = UNITS_OPTION,
    resolve_name: bool = RESOLVE_OPTION,
    renew: bool = RENEW_OPTION,
):
    """Saturation properties at temperature increments"""
    _run_calculation(
        ctx,
        SaturationByTemperatureRequest,
        {"t_low": t_low, "t_high": t_high},
        CommonOptions(substance_id, increment, digits, output, ref_state, si, unit_codes, resolve_name, renew),
    )


def main():
    """Main entry point for the fluids command"""
    app()


if __name__ == "__main__":
    main()
