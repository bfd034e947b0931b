"""
CLI interface for Agent Cost Projector.

Renders projection results as tables. All numbers come from the core
engine; this module only formats them.
"""

import logging
import sys
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from agent_cost_projector.config.loader import (
    ProjectionConfig,
    default_config,
    load_projection_config,
)
from agent_cost_projector.core.adoption import project_monthly
from agent_cost_projector.core.breakpoint import BreakpointStatus, LicensingBreakpoint
from agent_cost_projector.core.rollout import project_rollout, project_workload_rollout
from agent_cost_projector.core.scenarios import generate_scenarios

app = typer.Typer()
console = Console()

EXIT_CODE_OK = 0
EXIT_CODE_ERROR = 1

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="YAML projection config; built-in defaults are used when omitted"
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine debug logging")
):
    """Agent Cost Projector CLI."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)]
        )
    if ctx.invoked_subcommand is None:
        console.print("Agent Cost Projector - Use --help to see available commands")


def _load_config(path: Optional[str]) -> ProjectionConfig:
    """Load the config file, or the defaults when no path is given."""
    if path is None:
        return default_config()
    return load_projection_config(path)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/] {error}")
    sys.exit(EXIT_CODE_ERROR)


def format_currency(amount: float) -> str:
    """Format whole currency units with a thousands separator."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_number(value: float) -> str:
    return f"{value:,.0f}"


@app.command()
def breakeven(
    seat_price: Optional[float] = typer.Option(
        None, "--seat-price", "-p", help="Flat-seat price per user per month (25-35)"
    ),
    config_path: Optional[str] = CONFIG_OPTION
):
    """Show the credits per user per month at which PAYG equals a seat."""
    try:
        pricing = _load_config(config_path).pricing
        if seat_price is not None:
            pricing = pricing.with_seat_price(seat_price)
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        _fail(e)

    console.print(
        f"Breakeven at [bold]{format_number(pricing.breakeven_credits)}[/] credits/user/month "
        f"({format_currency(pricing.flat_seat_price)} seat at ${pricing.payg_rate} per credit)"
    )
    sys.exit(EXIT_CODE_OK)


@app.command()
def monthly(config_path: Optional[str] = CONFIG_OPTION):
    """Project 24 months of adoption and PAYG vs flat-seat cost."""
    try:
        config = _load_config(config_path)
        records = project_monthly(config.monthly)
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        _fail(e)

    table = Table(title="Monthly Adoption Projection")
    for column in ("Month", "Year", "Adoption", "Active Users", "Credits",
                   "PAYG", "Packs", "Flat Seat", "Savings"):
        table.add_column(column, justify="right")

    for record in records:
        table.add_row(
            str(record.month),
            record.year,
            f"{record.adoption:g}%",
            format_number(record.active_users),
            format_number(record.total_credits),
            format_currency(record.payg_cost),
            format_currency(record.pack_cost),
            format_currency(record.flat_seat_cost),
            format_currency(record.savings)
        )

    console.print(table)
    sys.exit(EXIT_CODE_OK)


@app.command()
def scenarios(config_path: Optional[str] = CONFIG_OPTION):
    """Compare yearly costs across user, agent and complexity scenarios."""
    try:
        config = _load_config(config_path)
        records = generate_scenarios(
            config.scenarios.user_counts,
            config.scenarios.agent_counts,
            config.scenarios.complexity_ratios,
            config.monthly.simple_credits_per_user,
            config.monthly.complex_credits_per_user,
            config.monthly.steady_state_adoption,
            pricing=config.pricing
        )
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        _fail(e)

    table = Table(title="Scenario Comparison")
    for column in ("Users", "Agents", "Ratio", "Active", "Credits/User",
                   "Yearly PAYG", "Yearly Flat Seat", "Savings", "Savings %"):
        table.add_column(column, justify="right")

    for record in records:
        table.add_row(
            format_number(record.users),
            str(record.agents),
            record.ratio,
            format_number(record.active_users),
            format_number(record.credits_per_user_month),
            format_currency(record.yearly_payg),
            format_currency(record.yearly_flat_seat),
            format_currency(record.savings),
            f"{record.savings_percent}%"
        )

    console.print(table)
    sys.exit(EXIT_CODE_OK)


@app.command()
def rollout(
    seat_price: Optional[float] = typer.Option(
        None, "--seat-price", "-p", help="Flat-seat price per user per month (25-35)"
    ),
    hybrid_users: Optional[float] = typer.Option(
        None, "--hybrid-users", "-u", help="Users on seat licenses in the hybrid models"
    ),
    workload: bool = typer.Option(
        False, "--workload", "-w", help="Project a single uniform workload instead of the agent portfolio"
    ),
    config_path: Optional[str] = CONFIG_OPTION
):
    """Project 36 months of staged rollout under five pricing models."""
    try:
        config = _load_config(config_path)
        price = config.pricing.flat_seat_price if seat_price is None else seat_price
        seats = config.rollout.hybrid_seat_users if hybrid_users is None else hybrid_users

        if workload:
            months = project_workload_rollout(
                config.stages,
                config.usage,
                hybrid_seat_users=seats,
                flat_seat_price=price,
                autonomous_action_ratio=config.rollout.autonomous_action_ratio,
                pricing=config.pricing
            )
            projection = None
        else:
            projection = project_rollout(
                config.stages,
                config.agents,
                hybrid_seat_users=seats,
                flat_seat_price=price,
                autonomous_action_ratio=config.rollout.autonomous_action_ratio,
                usage=config.usage,
                pricing=config.pricing
            )
            months = projection.monthly
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        _fail(e)

    table = Table(title="Rollout Projection")
    for column in ("Month", "Phase", "Users", "DAU", "Active", "Credits", "PAYG",
                   "P3", "PAYG + Seats", "P3 + Seats", "Seats for All"):
        table.add_column(column, justify="right")

    for record in months:
        table.add_row(
            str(record.month),
            record.phase.value,
            format_number(record.users),
            f"{record.dau_percent:.0f}%",
            format_number(record.active_users),
            format_number(record.credits),
            format_currency(record.payg_cost),
            format_currency(record.p3_cost),
            format_currency(record.payg_seat_cost),
            format_currency(record.p3_seat_cost),
            format_currency(record.seat_all_cost)
        )
    console.print(table)

    if projection is not None:
        _display_pricing_summary(projection)
        _display_agent_summaries(projection)
        _display_breakpoint(projection.breakpoint)

    sys.exit(EXIT_CODE_OK)


@app.command("breakpoint")
def breakpoint_command(
    seat_price: Optional[float] = typer.Option(
        None, "--seat-price", "-p", help="Flat-seat price per user per month (25-35)"
    ),
    config_path: Optional[str] = CONFIG_OPTION
):
    """Show how many more agents fit before seats for everyone are cheaper."""
    try:
        config = _load_config(config_path)
        projection = project_rollout(
            config.stages,
            config.agents,
            hybrid_seat_users=config.rollout.hybrid_seat_users,
            flat_seat_price=config.pricing.flat_seat_price if seat_price is None else seat_price,
            autonomous_action_ratio=config.rollout.autonomous_action_ratio,
            usage=config.usage,
            pricing=config.pricing
        )
    except (FileNotFoundError, yaml.YAMLError, ValueError) as e:
        _fail(e)

    _display_breakpoint(projection.breakpoint)
    sys.exit(EXIT_CODE_OK)


def _display_pricing_summary(projection) -> None:
    table = Table(title="3-Year Cost Summary")
    table.add_column("Pricing Model")
    for column in ("Year 1", "Year 2", "Year 3", "Total", ""):
        table.add_column(column, justify="right")

    cheapest = projection.cheapest_model
    for summary in projection.pricing_summary:
        is_cheapest = summary.model == cheapest.model
        note = "Cheapest" if is_cheapest else f"+{format_currency(summary.total - cheapest.total)}"
        table.add_row(
            summary.label,
            format_currency(summary.year1),
            format_currency(summary.year2),
            format_currency(summary.year3),
            format_currency(summary.total),
            note,
            style="bold green" if is_cheapest else None
        )
    console.print(table)


def _display_agent_summaries(projection) -> None:
    if not projection.agent_summaries:
        return

    table = Table(title="Per-Agent PAYG Cost")
    table.add_column("Agent")
    for column in ("Year 1", "Year 2", "Year 3", "Total"):
        table.add_column(column, justify="right")

    for summary in projection.agent_summaries:
        table.add_row(
            summary.name,
            format_currency(summary.year1),
            format_currency(summary.year2),
            format_currency(summary.year3),
            format_currency(summary.total)
        )
    console.print(table)


def _display_breakpoint(result: LicensingBreakpoint) -> None:
    console.print("\n[bold]Licensing Breakpoint[/bold]")
    console.print(f"3-year PAYG total: {format_currency(result.payg_total)}")
    console.print(f"3-year seats-for-all total: {format_currency(result.seat_total)}")

    if result.status == BreakpointStatus.ALREADY_EXCEEDED:
        console.print("[yellow]PAYG already costs at least as much as seats for everyone[/]")
    elif result.status == BreakpointStatus.FOUND:
        console.print(
            f"Seats for everyone become cheaper after [bold]{result.additional_agents}[/] "
            f"more agents ({format_currency(result.incremental_cost_per_agent)} each)"
        )
    elif result.status == BreakpointStatus.NOT_WITHIN_CAP:
        console.print(f"No breakpoint within {result.cap} additional agents")
    else:
        console.print("[dim]No enabled agents to base the estimate on[/]")


if __name__ == "__main__":
    app()
