"""CLI entry point for the UX comparison tool."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ux_compare.errors import CaptureError, ConfigError
from ux_compare.models.actions import GotoAction, WaitForTimeoutAction
from ux_compare.models.config import CompareConfig, PageConfig, ViewportConfig
from ux_compare.models.results import Classification, RunSummary, Verdict
from ux_compare.orchestrator import Orchestrator

console = Console()

_STATUS = {
    Classification.MATCH: "[green]MATCH[/green]",
    Classification.ACCEPTABLE: "[yellow]ACCEPTABLE[/yellow]",
    Classification.FAILURE: "[red]FAIL[/red]",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def print_summary(summary: RunSummary) -> None:
    console.print("\n[bold]Summary[/bold]")

    if summary.warnings:
        console.print(f"\n[yellow]Warnings ({len(summary.warnings)}):[/yellow]")
        for warning in summary.warnings:
            console.print(f"  - {warning}")

    table = Table(title="Results")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Total comparisons", str(summary.total))
    table.add_row("Perfect matches", f"[green]{summary.matches}[/green]")
    table.add_row("Acceptable differences", f"[yellow]{summary.acceptable}[/yellow]")
    table.add_row("Failures", f"[red]{summary.failures}[/red]")
    if summary.total:
        table.add_row("Average difference", f"{summary.average_diff:.2f}%")
        table.add_row("Maximum difference", f"{summary.max_diff:.2f}%")
        table.add_row("Failure threshold", f"{summary.failure_threshold}%")
    table.add_row("Duration", f"{summary.duration_seconds:.2f}s")
    console.print(table)

    if summary.outcomes:
        details = Table(title="Details")
        details.add_column("Status")
        details.add_column("Name")
        details.add_column("Difference", justify="right")
        details.add_column("Pixels", justify="right")
        for outcome in summary.outcomes:
            details.add_row(
                _STATUS[outcome.classification],
                outcome.name,
                f"{outcome.diff_percentage:.2f}%",
                f"{outcome.diff_pixels:,}" if outcome.diff_pixels else "",
            )
        console.print(details)

    if summary.verdict is Verdict.FAIL:
        console.print(
            f"[red]Visual comparison FAILED: {summary.failures} comparison(s) exceeded "
            f"{summary.failure_threshold}% threshold "
            f"(avg {summary.average_failure_diff:.2f}% difference)[/red]"
        )
    elif summary.acceptable:
        console.print(
            f"[green]Visual comparison PASSED: {summary.acceptable} comparison(s) with "
            f"acceptable differences (avg {summary.average_acceptable_diff:.2f}%, "
            f"within {summary.failure_threshold}% threshold)[/green]"
        )
    else:
        console.print("[green]Visual comparison PASSED: All images match 100%![/green]")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Screenshot pages in a headless browser and compare them to design images."""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default="config.json", help="Config file path")
def run(config: str) -> None:
    """Capture screenshots, compare them to designs, and report."""
    config_path = Path(config).resolve()
    try:
        cfg = CompareConfig.load(config_path)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(f"Base URL: {cfg.base_url}")
    console.print(f"Output Directory: {cfg.output_dir}")
    console.print(f"Threshold: {cfg.threshold}")
    console.print(f"Viewports: {', '.join(v.name for v in cfg.viewports)}")
    console.print(f"Pages: {len(cfg.pages)}")

    orchestrator = Orchestrator(cfg, config_path.parent)
    try:
        summary = orchestrator.run()
    except CaptureError as e:
        console.print(f"[red]Run aborted: {e}[/red]")
        sys.exit(1)

    print_summary(summary)
    sys.exit(summary.exit_code)


@cli.command()
@click.option("--target", "-t", prompt="Base URL", help="Base URL of the site under test")
@click.option("--config", "-c", default="config.json", help="Config file path")
def init(target: str, config: str) -> None:
    """Create a starter configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = CompareConfig(
        base_url=target,
        viewports=[
            ViewportConfig(name="desktop", width=1440, height=900),
            ViewportConfig(name="mobile", width=390, height=844, device_scale_factor=1),
        ],
        pages=[
            PageConfig(
                name="Home",
                path="/",
                design_images={"desktop": "designs/home-desktop.png",
                               "mobile": "designs/home-mobile.png"},
                actions=[WaitForTimeoutAction(type="waitForTimeout", timeout=500)],
            ),
        ],
        global_actions=[GotoAction(type="goto", url="/")],
    )
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd your pages and design images, then run:")
    console.print(f"  [blue]ux-compare run --config {config_path}[/blue]")


if __name__ == "__main__":
    cli()
