"""
DropForge - Command Line Interface

Publishes image batches, inspects on-chain collections and assembles
unsigned collection, mint and token launch transactions.
"""

from typing import Optional

import click

from .. import __version__
from .commands.collection import create, mint, publish
from .commands.registry import collections, publishers, show
from .commands.token import launch
from .context import CLIContext, handle_cli_error, pass_context
from .output import OUTPUT_FORMATS


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c',
              type=click.Path(dir_okay=False),
              help='Path to configuration file')
@click.option('--network', '-n',
              help='Network preset (mainnet, testnet, devnet)')
@click.option('--output-format', '-o',
              type=click.Choice(OUTPUT_FORMATS),
              help='Output format')
@click.option('--verbose', '-v',
              count=True,
              help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.version_option(__version__, prog_name='dropforge')
@pass_context
@handle_cli_error
def cli(ctx: CLIContext, config_file: Optional[str], network: Optional[str],
        output_format: Optional[str], verbose: int):
    """
    DropForge Command Line Interface

    Publish NFT collections to Walrus and the Sui registry, inspect them,
    and assemble mint and token launch transactions.

    Examples:
        dropforge publish art/*.png
        dropforge collections 0x123...
        dropforge show 0xabc...
        dropforge mint 0xabc... --payer 0x123...
        dropforge launch --name Forge --symbol FRG --initial-supply 1000 --icon icon.png
    """
    ctx.config_file = config_file
    ctx.network = network
    ctx.output_format = output_format
    ctx.verbose = verbose

    ctx.setup_logging()
    ctx.load_config()
    click.get_current_context().call_on_close(ctx.close)

    ctx.logger.debug("CLI initialized with context")


cli.add_command(publish)
cli.add_command(create)
cli.add_command(mint)
cli.add_command(collections)
cli.add_command(show)
cli.add_command(publishers)
cli.add_command(launch)


if __name__ == '__main__':
    cli()
