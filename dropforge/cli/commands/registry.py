"""
DropForge - Registry Commands

Read-only queries against the on-chain registry and collections.
"""

import click

from ...registry.collections import CollectionReconstructor
from ...registry.resolver import RegistryResolver
from ..context import CLIContext, handle_cli_error, pass_context


@click.command('collections')
@click.argument('account')
@click.option('--scan', is_flag=True, help='Scan the registry table instead of a keyed lookup')
@click.option('--ids-only', is_flag=True, help='Print collection ids without loading them')
@pass_context
@handle_cli_error
def collections(ctx: CLIContext, account: str, scan: bool, ids_only: bool):
    """
    List the collections created by an account.

    Examples:
        dropforge collections 0x123...
        dropforge -o json collections 0x123... --ids-only
    """
    config = ctx.network_config
    resolver = RegistryResolver(ctx.ledger())
    registry_id = config.require_registry()

    if scan:
        collection_ids = resolver.scan_owned_collections(registry_id, account)
    else:
        collection_ids = resolver.resolve_owned_collections(registry_id, account)

    if ids_only:
        ctx.output(collection_ids)
        return

    reconstructor = CollectionReconstructor(ctx.ledger(), ctx.store(), config)
    results = reconstructor.load_collections(
        collection_ids,
        max_workers=ctx.get_config('cli.max_workers', 4)
    )

    rows = []
    for result in results:
        if result.ok:
            rows.append(reconstructor.summarize(result.state).to_dict())
        else:
            rows.append({"collection_id": result.collection_id, "error": str(result.error)})
    ctx.output(rows)


@click.command('show')
@click.argument('collection_id')
@pass_context
@handle_cli_error
def show(ctx: CLIContext, collection_id: str):
    """
    Show a collection and every token in it.

    Examples:
        dropforge show 0xabc...
    """
    reconstructor = CollectionReconstructor(ctx.ledger(), ctx.store(), ctx.network_config)
    state = reconstructor.load_collection(collection_id)

    if ctx.format_type != 'table':
        ctx.output(state.to_dict())
        return

    summary = reconstructor.summarize(state).to_dict()
    summary["manifest_url"] = state.manifest_url
    ctx.output(summary)
    click.echo()
    ctx.output([
        {"#": item.number, "name": item.name, "minted": item.minted, "image_url": item.image_url}
        for item in state.items
    ])
    for warning in state.warnings:
        click.echo(f"Warning: {warning.message}", err=True)


@click.command('publishers')
@pass_context
@handle_cli_error
def publishers(ctx: CLIContext):
    """List every account that has created a collection."""
    resolver = RegistryResolver(ctx.ledger())
    ctx.output(resolver.list_publishers(ctx.network_config.require_registry()))
