"""
Scrooge CLI - Command Line Interface for the UTXO ledger validator

Main entry point for all CLI commands.
"""

import json
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from scrooge import __version__
from scrooge.core.config import load_config
from scrooge.utils.logger import get_logger, setup_from_config


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help="dotenv file with SCROOGE_* settings")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, env_file):
    """Scrooge - UTXO ledger-consistency validator"""
    try:
        config = load_config(env_file)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    setup_from_config(config, debug=debug)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# =============================================================================
# Key Commands
# =============================================================================


@cli.command("keygen")
@click.option("--out", "out_path", default=None, type=click.Path(dir_okay=False), help="Write the keypair JSON here")
def keygen(out_path: Optional[str]):
    """Generate a secp256k1 keypair"""
    from scrooge.crypto import generate_keypair

    kp = generate_keypair()
    data = {
        "address": kp.address,
        "public_key": kp.public_key_hex,
        "private_key": kp.private_key_hex,
    }

    if out_path:
        path = Path(out_path)
        path.write_text(json.dumps(data, indent=2))
        click.echo(f"✓ Keypair written to {path}")
        click.echo(f"  Public key: {kp.public_key_hex}")
    else:
        click.echo(json.dumps(data, indent=2))


# =============================================================================
# Epoch Processing
# =============================================================================


@cli.command("process")
@click.argument("pool_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("batch_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--out", "out_path", default=None, type=click.Path(dir_okay=False), help="Write the resulting pool here")
@click.pass_context
def process(ctx, pool_file, batch_file, out_path):
    """Run one epoch: apply BATCH_FILE to POOL_FILE"""
    from scrooge.cli.schemas import BatchFileModel, PoolFileModel
    from scrooge.core.state import PoolInvariantError, TxHandler
    from scrooge.crypto import bytes_to_hex

    logger = get_logger("cli")
    config = ctx.obj["config"]

    try:
        pool = PoolFileModel.model_validate_json(Path(pool_file).read_text()).to_pool()
        txs = BatchFileModel.model_validate_json(Path(batch_file).read_text()).to_transactions()
    except (ValidationError, PoolInvariantError, ValueError) as e:
        raise click.ClickException(f"Invalid input file: {e}")

    logger.info(f"Loaded pool with {len(pool)} UTXOs and batch of {len(txs)} transactions")

    handler = TxHandler(pool, config=config)
    try:
        accepted = handler.handle_txs(txs)
    except (ValueError, PoolInvariantError) as e:
        raise click.ClickException(str(e))

    result_pool = handler.get_utxo_pool()
    click.echo(f"Accepted {len(accepted)}/{len(txs)} transactions")
    for tx in accepted:
        click.echo(f"  ✓ {bytes_to_hex(tx.tx_hash)}")
    click.echo(f"Pool: {result_pool.stats()}")

    if out_path:
        Path(out_path).write_text(json.dumps(result_pool.to_dict(), indent=2))
        click.echo(f"Resulting pool written to {out_path}")


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
def demo():
    """Walk through acceptance and rejection scenarios"""
    from scrooge.crypto import generate_keypair
    from scrooge.core.state import TxHandler, UTXOPool, create_coinbase, create_transfer

    click.echo("=" * 60)
    click.echo("  SCROOGE - DEMO")
    click.echo("=" * 60)
    click.echo()

    alice = generate_keypair()
    bob = generate_keypair()
    mallory = generate_keypair()

    # Genesis
    pool = UTXOPool()
    genesis = create_coinbase(alice.public_key, 10)
    (u1,) = pool.add_transaction(genesis)
    click.echo(f"🏛️  Genesis: Alice owns {pool.get_balance(alice.public_key)} at {u1!r}")
    click.echo()

    handler = TxHandler(pool)

    honest = create_transfer([(u1, alice.private_key)], [(bob.public_key, 10)])
    forged = create_transfer([(u1, mallory.private_key)], [(mallory.public_key, 10)])
    inflated = create_transfer([(u1, alice.private_key)], [(bob.public_key, 11)])

    click.echo("🔍 Validating against the genesis pool...")
    click.echo(f"  Alice -> Bob (10):         {handler.is_valid_tx(honest)}")
    click.echo(f"  Signed by Mallory:         {handler.is_valid_tx(forged)}")
    click.echo(f"  Alice -> Bob (11 > 10):    {handler.is_valid_tx(inflated)}")
    click.echo()

    click.echo("⚖️  Processing epoch [honest, honest-again]...")
    replay = create_transfer([(u1, alice.private_key)], [(alice.public_key, 9)])
    accepted = handler.handle_txs([honest, replay])
    click.echo(f"  ✓ Accepted {len(accepted)} of 2 (second spend of the same UTXO is dropped)")
    result = handler.get_utxo_pool()
    click.echo(f"  ✓ Alice: {result.get_balance(alice.public_key)}")
    click.echo(f"  ✓ Bob: {result.get_balance(bob.public_key)}")
    click.echo(f"  ✓ Caller's pool untouched: {len(pool)} UTXO, Alice {pool.get_balance(alice.public_key)}")
    click.echo()
    click.echo("✅ Demo complete!")


if __name__ == "__main__":
    cli()
