"""
Score Command - Confidence score for a set of evidence.
"""

import json
import sys

import click
from rich.console import Console

from ...core.evidence import ConfidenceLevel
from ...scoring.service import ScoringService
from ..utils import load_evidence

console = Console()

LEVEL_STYLES = {
    ConfidenceLevel.CERTAIN: "bold green",
    ConfidenceLevel.HIGH: "green",
    ConfidenceLevel.MEDIUM: "yellow",
    ConfidenceLevel.LOW: "red",
    ConfidenceLevel.UNCERTAIN: "dim",
}


@click.command()
@click.argument("evidence_file", type=click.Path())
@click.option("--no-rules", is_flag=True, help="Skip the built-in scoring rules")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def score(settings, evidence_file: str, no_rules: bool, as_json: bool) -> None:
    """Score the evidence in EVIDENCE_FILE."""
    evidence = load_evidence(evidence_file)
    if evidence is None:
        sys.exit(1)

    service = ScoringService(
        config=settings.scoring if settings is not None else None,
        enable_rules=not no_rules,
    )
    result = service.calculate_confidence(evidence)

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    style = LEVEL_STYLES[result.level]
    console.print(f"\n[bold]Confidence:[/bold] {result.value} [{style}]({result.level.value})[/{style}]")
    for factor in result.positive_factors:
        console.print(f"  [green]+[/green] {factor}")
    for factor in result.negative_factors:
        console.print(f"  [red]-[/red] {factor}")
