"""
iacgraph CLI - Main entry point.

Each command is implemented in its own module under cli/commands/.
"""

import logging
import sys
from typing import Optional

import click

from ..core.exceptions import ConfigError
from ..settings import find_config, load_settings
from .commands import cycles, impact, path, score, stats, validate
from .utils import echo_error


@click.group()
@click.version_option(package_name="iacgraph")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False),
              help="Path to config.yaml (defaults to the nearest .iacgraph/config.yaml)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: Optional[str]):
    """iacgraph: Dependency graphs for infrastructure-as-code.

    \b
    Quick Start:
      iacgraph validate graph.json
      iacgraph impact graph.json aws_vpc.main
      iacgraph score evidence.json
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        ctx.obj = load_settings(config_path or find_config())
    except ConfigError as e:
        echo_error(f"Invalid configuration: {e}")
        sys.exit(1)


main.add_command(validate.validate)
main.add_command(cycles.cycles)
main.add_command(impact.impact)
main.add_command(path.path)
main.add_command(stats.stats)
main.add_command(score.score)

if __name__ == "__main__":
    main()
