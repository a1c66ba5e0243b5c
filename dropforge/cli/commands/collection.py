"""
DropForge - Collection Commands

Publishing asset batches and assembling create/mint transactions. The
transactions are printed unsigned, for a wallet to sign and submit.
"""

from typing import Optional, Tuple

import click

from ...exceptions import TransactionAssemblyError
from ...nft.manifest import fetch_manifest
from ...nft.publisher import AssetPublisher
from ...nft.storage import Asset, BlobRef
from ...registry.collections import CollectionReconstructor
from ...transactions.builder import CollectionParams, assemble_create_collection
from ...transactions.state import CollectionView, MintStatus
from ..context import CLIContext, handle_cli_error, pass_context


@click.command('publish')
@click.argument('files', nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option('--local-dir', type=click.Path(file_okay=False),
              help='Stage blobs in a local directory instead of Walrus')
@click.option('--verify-content', is_flag=True,
              help='Read every asset back and compare hashes')
@pass_context
@handle_cli_error
def publish(ctx: CLIContext, files: Tuple[str, ...], local_dir: Optional[str], verify_content: bool):
    """
    Publish images as an ordered collection manifest.

    Files are uploaded in the order given; that order becomes the mint
    order of the tokens.

    Examples:
        dropforge publish art/1.png art/2.png art/3.png
        dropforge publish --local-dir ./staging art/*.png
    """
    assets = [Asset.from_file(path) for path in files]
    store = ctx.store(local_dir)
    publisher = AssetPublisher(
        store,
        verify_content=verify_content or ctx.get_config('cli.verify_content', False)
    )

    def progress(index: int, total: int, ref: BlobRef):
        click.echo(f"[{index + 1}/{total}] {files[index]} -> {ref.blob_id}", err=True)

    # Keep machine-readable output clean
    result = publisher.publish_detailed(
        assets,
        progress=progress if ctx.format_type == 'table' else None
    )
    ctx.output(result.to_dict())


@click.command('create')
@click.option('--name', required=True, help='Collection name')
@click.option('--description', default='', help='Collection description')
@click.option('--max-supply', type=int, required=True, help='Maximum number of tokens')
@click.option('--royalty-bps', type=int, default=0, show_default=True,
              help='Royalty in basis points (0-10000)')
@click.option('--manifest-url', required=True, help='URL of the published manifest')
@click.option('--mint-price', type=int, default=0, show_default=True, help='Mint price in MIST')
@click.option('--sender', help='Address submitting the transaction')
@click.option('--check-manifest', is_flag=True,
              help='Fetch the manifest and compare its length with --max-supply')
@pass_context
@handle_cli_error
def create(ctx: CLIContext, name: str, description: str, max_supply: int, royalty_bps: int,
           manifest_url: str, mint_price: int, sender: Optional[str], check_manifest: bool):
    """
    Assemble an unsigned create_collection transaction.

    Examples:
        dropforge create --name "Forge" --max-supply 3 --manifest-url https://...
    """
    params = CollectionParams(
        name=name,
        description=description,
        max_supply=max_supply,
        royalty_bps=royalty_bps,
        manifest_url=manifest_url,
        mint_price=mint_price,
    )

    manifest_length = None
    if check_manifest:
        _, manifest = fetch_manifest(ctx.store(), manifest_url)
        manifest_length = len(manifest)

    tx = assemble_create_collection(ctx.network_config, params, sender=sender,
                                    manifest_length=manifest_length)
    ctx.output(tx.to_dict())


@click.command('mint')
@click.argument('collection_id')
@click.argument('ordinal', type=int, required=False)
@click.option('--payer', required=True, help='Address paying for and receiving the token')
@pass_context
@handle_cli_error
def mint(ctx: CLIContext, collection_id: str, ordinal: Optional[int], payer: str):
    """
    Assemble an unsigned mint transaction for one token.

    Without ORDINAL the first token not yet minted is used.

    Examples:
        dropforge mint 0xabc... 0 --payer 0x123...
    """
    config = ctx.network_config
    reconstructor = CollectionReconstructor(ctx.ledger(), ctx.store(), config)
    view = CollectionView(reconstructor.load_collection(collection_id))

    if ordinal is None:
        available = view.available()
        if not available:
            raise TransactionAssemblyError(f"Collection {collection_id} is sold out")
        ordinal = available[0].ordinal

    status = view.status(ordinal)
    if status is not MintStatus.AVAILABLE:
        raise TransactionAssemblyError(f"Token {ordinal} of {collection_id} is {status.value}")

    request = view.mint_request(ordinal, payer)
    ctx.logger.info(f"Minting {request.item.name} for {request.price} MIST")
    ctx.output(request.assemble(config).to_dict())
