"""
DropForge - Token Commands

Launching fungible tokens. The icon is uploaded to the blob store first and
the launch_token transaction is printed unsigned.
"""

from dataclasses import replace
from typing import Optional

import click

from ...exceptions import TransactionAssemblyError
from ...nft.storage import Asset
from ...transactions.builder import TokenLaunchParams, assemble_launch_token
from ..context import CLIContext, handle_cli_error, pass_context


@click.command('launch')
@click.option('--name', required=True, help='Token name')
@click.option('--symbol', required=True, help='Token symbol')
@click.option('--decimals', type=int, default=9, show_default=True, help='Decimal places (0-18)')
@click.option('--initial-supply', type=int, required=True, help='Initial supply in whole tokens')
@click.option('--max-supply', type=int, default=0, show_default=True,
              help='Supply cap in whole tokens (0 for uncapped)')
@click.option('--icon', type=click.Path(exists=True, dir_okay=False),
              help='Icon image to upload')
@click.option('--icon-url', help='URL of an already uploaded icon')
@click.option('--local-dir', type=click.Path(file_okay=False),
              help='Stage the icon in a local directory instead of Walrus')
@click.option('--sender', help='Address submitting the transaction')
@pass_context
@handle_cli_error
def launch(ctx: CLIContext, name: str, symbol: str, decimals: int, initial_supply: int,
           max_supply: int, icon: Optional[str], icon_url: Optional[str],
           local_dir: Optional[str], sender: Optional[str]):
    """
    Assemble an unsigned launch_token transaction.

    Examples:
        dropforge launch --name Forge --symbol FRG --initial-supply 1000000 --icon icon.png
    """
    if bool(icon) == bool(icon_url):
        raise TransactionAssemblyError("Exactly one of --icon and --icon-url is required")

    # Validate against the local path first so bad parameters fail before the upload
    params = TokenLaunchParams(
        name=name,
        symbol=symbol,
        icon_url=icon_url or icon,
        initial_supply=initial_supply,
        decimals=decimals,
        max_supply=max_supply,
    )

    if icon:
        asset = Asset.from_file(icon)
        ref = ctx.store(local_dir).put(asset.content, asset.content_type)
        ctx.logger.info(f"Uploaded icon {icon} as {ref.blob_id}")
        params = replace(params, icon_url=ref.url)

    tx = assemble_launch_token(ctx.network_config, params, sender=sender)
    ctx.output(tx.to_dict())
