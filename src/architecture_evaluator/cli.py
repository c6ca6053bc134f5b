"""CLI for the Architecture Evaluator.

Provides command-line interface for evaluating architecture records and
descriptions, running what-if simulations, validating record files and
serving the HTTP API.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .app_logging import setup_logging
from .config import EvaluatorConfig, load_config_if_present, save_default_config
from .engine import EvaluationEngine
from .errors import EvaluatorError, InvalidRequest
from .normalizer import RecordNormalizer
from .schema import EvaluationResult, RiskSeverity
from .service import AnalysisResponse, AnalysisService, parse_request

console = Console()


def simulation_options(f):
    """Attach the what-if simulation options to a command."""
    f = click.option(
        "--cost-target",
        type=float,
        help="Monthly budget; projected totals are clamped to it"
    )(f)
    f = click.option(
        "--add-regions",
        type=int,
        help="Number of additional regions to deploy into"
    )(f)
    f = click.option(
        "--traffic-multiplier",
        type=float,
        help="Scale expected traffic (e.g. 2.5 for 2.5x users)"
    )(f)
    return f


def build_simulation(
    traffic_multiplier: Optional[float],
    add_regions: Optional[int],
    cost_target: Optional[float],
) -> Optional[dict[str, Any]]:
    """Collect simulation options into a payload, or None if none were given."""
    simulation: dict[str, Any] = {}
    if traffic_multiplier is not None:
        simulation["traffic_multiplier"] = traffic_multiplier
    if add_regions is not None:
        simulation["add_regions"] = add_regions
    if cost_target is not None:
        simulation["cost_target"] = cost_target
    return simulation or None


def load_json_file(path: str) -> Any:
    """Read a JSON document from disk."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidRequest(f"{path} is not valid JSON: {e.msg} (line {e.lineno})") from e
        except UnicodeDecodeError as e:
            raise InvalidRequest(f"{path} is not valid UTF-8 text") from e


def load_text_file(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRequest(f"{path} is not valid UTF-8 text") from e


def load_cli_config(config_path: Optional[str]) -> EvaluatorConfig:
    return load_config_if_present(Path(config_path) if config_path else None)


def build_service(config: EvaluatorConfig) -> AnalysisService:
    return AnalysisService.from_config(config)


@click.group()
@click.version_option(version=__version__, prog_name="architecture-evaluator")
def main():
    """Cloud Architecture Evaluator.

    Scores cloud deployment architectures for scalability, reliability,
    security and cost efficiency, and explains every point.
    """
    pass


@main.command("evaluate")
@click.option(
    "--record", "-r",
    type=click.Path(exists=True),
    help="Path to a structured architecture record (JSON)"
)
@click.option(
    "--description", "-d",
    help="Free-text architecture description (requires a language-model provider)"
)
@click.option(
    "--description-file",
    type=click.Path(exists=True),
    help="Read the free-text description from a file"
)
@simulation_options
@click.option(
    "--out", "-o",
    type=click.Path(),
    help="Output file for JSON results"
)
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show scoring explanations and violated principles"
)
@click.option(
    "--explain/--no-explain",
    default=None,
    help="Request a narrative explanation for descriptions (default: from config)"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Path to evaluator configuration YAML"
)
def evaluate_cmd(
    record: Optional[str],
    description: Optional[str],
    description_file: Optional[str],
    traffic_multiplier: Optional[float],
    add_regions: Optional[int],
    cost_target: Optional[float],
    out: Optional[str],
    json_output: bool,
    verbose: bool,
    explain: Optional[bool],
    config_path: Optional[str],
):
    """Evaluate an architecture record or description.

    Examples:
        architecture-evaluator evaluate -r record.json
        architecture-evaluator evaluate -r record.json --traffic-multiplier 3 -v
        architecture-evaluator evaluate -d "EC2 behind an ALB with RDS Multi-AZ"
    """
    setup_logging(level="DEBUG" if verbose else "WARNING", dev_mode=True)

    try:
        config = load_cli_config(config_path)

        payload: dict[str, Any] = {"simulation": build_simulation(traffic_multiplier, add_regions, cost_target)}
        if record:
            payload["architecture_summary"] = load_json_file(record)
        elif description_file:
            payload["description"] = load_text_file(description_file)
        else:
            payload["description"] = description
        request = parse_request(payload)

        service = build_service(config)
        if explain is not None:
            service.explain = explain

        status = "Analyzing architecture..." if request.has_description else "Evaluating architecture..."
        if json_output:
            response = service.analyze(request)
        else:
            with console.status(status):
                response = service.analyze(request)

        if json_output:
            output_json(response, out)
        else:
            display_result(response, verbose)
            if out:
                output_json(response, out)
                console.print(f"\n[green]Results saved to {out}[/green]")

    except (EvaluatorError, OSError) as e:
        console.print(f"[red]Error:[/red] {getattr(e, 'message', e)}")
        sys.exit(1)


@main.command("simulate")
@click.option(
    "--record", "-r",
    required=True,
    type=click.Path(exists=True),
    help="Path to a structured architecture record (JSON)"
)
@simulation_options
@click.option(
    "--json-output", "-j",
    is_flag=True,
    help="Output raw JSON instead of formatted text"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Path to evaluator configuration YAML"
)
def simulate_cmd(
    record: str,
    traffic_multiplier: Optional[float],
    add_regions: Optional[int],
    cost_target: Optional[float],
    json_output: bool,
    config_path: Optional[str],
):
    """Compare a record's baseline evaluation with a what-if scenario.

    Example:
        architecture-evaluator simulate -r record.json --traffic-multiplier 5 --add-regions 1
    """
    setup_logging(level="WARNING", dev_mode=True)

    try:
        simulation = build_simulation(traffic_multiplier, add_regions, cost_target)
        if simulation is None:
            raise InvalidRequest(
                "Specify at least one of --traffic-multiplier, --add-regions or --cost-target"
            )
        request = parse_request({"architecture_summary": load_json_file(record), "simulation": simulation})

        config = load_cli_config(config_path)
        engine = EvaluationEngine(config.category_weights.to_weights())
        arch = RecordNormalizer().normalize(request.architecture_summary)

        baseline = engine.evaluate(arch)
        simulated = engine.evaluate(arch, request.simulation)
    except (EvaluatorError, OSError) as e:
        console.print(f"[red]Error:[/red] {getattr(e, 'message', e)}")
        sys.exit(1)

    rows = comparison_rows(baseline, simulated)

    if json_output:
        print(json.dumps({
            "simulation": request.simulation.model_dump(mode="json"),
            "baseline": baseline.model_dump(mode="json"),
            "simulated": simulated.model_dump(mode="json"),
            "deltas": {name: delta for name, _, _, delta in rows if delta is not None},
        }, indent=2))
        return

    table = Table(title="What-if Simulation")
    table.add_column("Metric", style="bold")
    table.add_column("Baseline", justify="right")
    table.add_column("Simulated", justify="right")
    table.add_column("Change", justify="right")

    for name, before, after, delta in rows:
        if delta is None:
            change = "" if before == after else "[yellow]changed[/yellow]"
        elif delta > 0:
            change = f"[green]+{delta}[/green]" if not name.endswith("cost") else f"[red]+{delta}[/red]"
        elif delta < 0:
            change = f"[red]{delta}[/red]" if not name.endswith("cost") else f"[green]{delta}[/green]"
        else:
            change = "[dim]0[/dim]"
        table.add_row(name, str(before), str(after), change)

    console.print(table)


def comparison_rows(baseline: EvaluationResult, simulated: EvaluationResult) -> list[tuple]:
    """(metric, baseline, simulated, numeric delta or None) for the simulate table."""
    numeric = [
        ("overall", baseline.scores.overall, simulated.scores.overall),
        ("scalability", baseline.scores.scalability.score, simulated.scores.scalability.score),
        ("reliability", baseline.scores.reliability.score, simulated.scores.reliability.score),
        ("security", baseline.scores.security.score, simulated.scores.security.score),
        ("cost_efficiency", baseline.scores.cost_efficiency.score, simulated.scores.cost_efficiency.score),
        ("estimated_users", baseline.architecture_summary.estimated_users,
         simulated.architecture_summary.estimated_users),
        ("current cost", baseline.cost_analysis.total_current, simulated.cost_analysis.total_current),
        ("optimized cost", baseline.cost_analysis.total_optimized, simulated.cost_analysis.total_optimized),
    ]
    rows = [(name, before, after, after - before) for name, before, after in numeric]
    rows.append(("risk_level", baseline.risk_analysis.risk_level.value,
                 simulated.risk_analysis.risk_level.value, None))
    rows.append(("maturity", baseline.maturity_level.value, simulated.maturity_level.value, None))
    return rows


@main.command("validate")
@click.option(
    "--record", "-r",
    required=True,
    type=click.Path(exists=True),
    help="Path to a structured architecture record (JSON)"
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 if any field was coerced or unrecognized"
)
def validate_cmd(record: str, strict: bool):
    """Validate an architecture record file.

    Reports fields whose values could not be interpreted and were replaced
    with defaults, and keys that are not part of the record.

    Example:
        architecture-evaluator validate -r record.json --strict
    """
    try:
        report = RecordNormalizer().normalize_with_report(load_json_file(record))
    except (EvaluatorError, OSError) as e:
        console.print(f"[red]✗ Record invalid: {record}[/red]")
        console.print(f"  - {getattr(e, 'message', e)}")
        sys.exit(1)

    if report.is_clean:
        console.print(f"[green]✓ Record valid: {record}[/green]")
        return

    console.print(f"[yellow]⚠ Record normalized with changes: {record}[/yellow]")
    for name in report.coerced_fields:
        value = getattr(report.record, name)
        shown = value.value if hasattr(value, "value") else value
        console.print(
            f"  - {name}: could not interpret {report.original_values.get(name)!r}, using {shown!r}"
        )
    for key in report.unknown_fields:
        console.print(f"  - {key}: not a record field (ignored)")

    if strict:
        sys.exit(1)


@main.command("init-config")
@click.option(
    "--out", "-o",
    type=click.Path(),
    default="evaluator-config.yaml",
    help="Output path for the configuration file"
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing config file"
)
def init_config_cmd(out: str, force: bool):
    """Generate a default evaluator configuration file.

    Example:
        architecture-evaluator init-config --out my-config.yaml
    """
    out_path = Path(out)
    if out_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists: {out}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        save_default_config(out_path)
    except OSError as e:
        console.print(f"[red]Error creating config:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Config file created: {out}")
    console.print("\nThis file configures:")
    console.print("  • category_weights - How category scores combine into the overall score")
    console.print("  • bedrock / chat_completions - Language-model providers")
    console.print("  • decomposition / explanation - Description handling")
    console.print("  • server / logging - HTTP server and log output")
    console.print("\nThe evaluator will look for config in this order:")
    console.print("  1. ARCHITECTURE_EVALUATOR_CONFIG environment variable")
    console.print("  2. ./evaluator-config.yaml (current directory)")
    console.print("  3. ~/.config/architecture-evaluator/config.yaml")


@main.command("serve")
@click.option("--host", default=None, help="Bind address (default: from config)")
@click.option("--port", default=None, type=int, help="Port to run the server on (default: from config)")
@click.option("--log-level", default=None, help="Log level (default: from config)")
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Path to evaluator configuration YAML"
)
def serve_cmd(host: Optional[str], port: Optional[int], log_level: Optional[str], config_path: Optional[str]):
    """Run the HTTP API server."""
    from .server import run_server

    config = load_cli_config(config_path)
    level = log_level or config.logging.level
    setup_logging(level=level, dev_mode=config.logging.dev_mode)

    run_server(
        build_service(config),
        host=host or config.server.host,
        port=port or config.server.port,
        cors_origins=config.server.cors_origins,
        log_level=level,
    )


# =============================================================================
# Output
# =============================================================================


SEVERITY_COLORS = {
    RiskSeverity.CRITICAL: "bold red",
    RiskSeverity.HIGH: "red",
    RiskSeverity.MEDIUM: "yellow",
    RiskSeverity.LOW: "dim",
}


def _score_color(score: int) -> str:
    if score >= 75:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def display_result(result: AnalysisResponse, verbose: bool):
    """Display an analysis result in formatted text."""
    scores = result.scores
    color = _score_color(scores.overall)

    summary = (
        f"Overall Score: [bold {color}]{scores.overall}/100[/bold {color}]\n"
        f"Maturity: [bold]{result.maturity_level.value}[/bold]\n"
        f"Risk Level: {result.risk_analysis.risk_level.value}\n"
        f"Confidence: {result.confidence_score:.0%}"
    )
    if result.ai_provider:
        summary += f"\nDecomposed by: {result.ai_provider}"
    if result.simulation is not None:
        sim = result.simulation
        summary += (
            f"\nSimulation: traffic x{sim.traffic_multiplier:g}, "
            f"+{sim.add_regions} region(s)"
        )
        if sim.has_cost_target:
            summary += f", cost target {sim.cost_target:g}"
    console.print(Panel(summary, title="Architecture Evaluation"))

    # Category scores
    table = Table(title="Category Scores")
    table.add_column("Category", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Violated Principles")
    for name in ("scalability", "reliability", "security", "cost_efficiency"):
        category = getattr(scores, name)
        c = _score_color(category.score)
        table.add_row(
            name.replace("_", " ").title(),
            f"[{c}]{category.score}[/{c}]",
            ", ".join(category.violated_principles) or "-",
        )
    console.print(table)

    if verbose:
        for name in ("scalability", "reliability", "security", "cost_efficiency"):
            console.print(f"\n[bold]{name.replace('_', ' ').title()}:[/bold]")
            for line in getattr(scores, name).explanation:
                console.print(f"  • {line}")

    # Risks
    if result.risk_analysis.risks:
        console.print("\n[bold]Risks:[/bold]")
        for risk in result.risk_analysis.risks:
            style = SEVERITY_COLORS[risk.severity]
            console.print(
                f"  [{style}]{risk.severity.value.upper()}[/{style}] "
                f"{risk.type} ({risk.component})"
            )
            if verbose:
                console.print(f"     [dim]{risk.impact}[/dim]")

    # Costs
    cost = result.cost_analysis
    cost_table = Table(title="Monthly Cost Projection")
    cost_table.add_column("Category")
    cost_table.add_column("Current", justify="right")
    cost_table.add_column("Optimized", justify="right")
    for line in cost.breakdown:
        cost_table.add_row(line.category, f"${line.current:,}", f"${line.optimized:,}")
    cost_table.add_row(
        "[bold]Total[/bold]",
        f"[bold]${cost.total_current:,}[/bold]",
        f"[bold]${cost.total_optimized:,}[/bold]",
    )
    console.print()
    console.print(cost_table)
    console.print(f"Potential savings: [green]${cost.monthly_savings:,}/month[/green]")
    if cost.region_multiplier != 1.0:
        console.print(f"[dim]Region multiplier: x{cost.region_multiplier:g}[/dim]")
    if cost.cost_target_applied:
        console.print("[dim]Totals clamped to the cost target[/dim]")

    # Roadmap
    console.print("\n[bold]Improvement Roadmap:[/bold]")
    for phase in result.improvement_plan:
        console.print(f"  [bold cyan]Phase {phase.phase}: {phase.title}[/bold cyan] [dim]({phase.impact})[/dim]")
        for action in phase.actions:
            console.print(f"     - {action}")

    if result.ai_explanation:
        console.print()
        console.print(Panel(result.ai_explanation, title="Expert Explanation"))


def output_json(result: EvaluationResult, out_path: Optional[str]):
    """Output result as JSON."""
    json_str = result.model_dump_json(indent=2)

    if out_path:
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(json_str)
    else:
        print(json_str)


if __name__ == "__main__":
    main()
