"""
Clearhouse CLI - Command Line Interface for the auction clearinghouse

Every command is one call against the auction stored in --data-dir.
"""

import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from clearhouse.utils.logger import setup_logging, get_logger

logger = get_logger("cli")


def _open_house(ctx):
    """Load the persisted auction and a fresh local host."""
    from clearhouse.core.auction import AuctionHouse
    from clearhouse.core.host import LocalHost
    from clearhouse.core.storage import StorageManager

    config = ctx.obj["config"]
    host = LocalHost()
    storage = StorageManager(ctx.obj["data_dir"], config.db_name)
    return AuctionHouse(host, config=config, storage_manager=storage), host


def _fail(error) -> None:
    click.echo(f"❌ {error}", err=True)
    sys.exit(1)


def _echo_transfers(transfers) -> None:
    for t in transfers:
        click.echo(f"  → {t.account}: {t.amount} ({t.reason})")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, help="Data directory (default: CLEARHOUSE_DATA_DIR or ./data)")
@click.option("--env-file", default=None, help="Optional .env file with CLEARHOUSE_* settings")
@click.option("--log-file", is_flag=True, help="Also write logs to <log-dir>/clearhouse.log")
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx, debug, data_dir, env_file, log_file):
    """Clearhouse - sealed-round auction clearinghouse"""
    import logging
    from clearhouse.core.config import load_config

    config = load_config(env_file)
    level = logging.DEBUG if debug else logging.WARNING
    setup_logging(level=level, log_dir=config.log_dir if log_file else None)

    if data_dir:
        config.data_dir = Path(data_dir).expanduser()

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["data_dir"] = config.data_dir
    ctx.obj["data_dir"].mkdir(parents=True, exist_ok=True)


# =============================================================================
# Round Commands
# =============================================================================


@cli.command("start")
@click.option("--as", "caller", default="operator", help="Calling account")
@click.pass_context
def start(ctx, caller):
    """Open a new round"""
    from clearhouse.core.errors import AuctionError

    house, host = _open_house(ctx)
    try:
        with host.call(caller):
            number = house.start_round()
    except AuctionError as e:
        _fail(e)

    click.echo(f"✓ Round {number} opened")


@cli.command("clear")
@click.option("--as", "caller", default="operator", help="Calling account")
@click.pass_context
def clear(ctx, caller):
    """Clear the open round: award items, pay suppliers, refund the rest"""
    from clearhouse.core.errors import AuctionError

    house, host = _open_house(ctx)
    try:
        with host.call(caller):
            plan = house.clear_round()
    except AuctionError as e:
        _fail(e)

    click.echo(f"✓ Round {plan.round_number} cleared")
    for award in plan.awards:
        click.echo(f"  🏆 {award.winner} wins {award.content!r} from {award.supplier} for {award.amount}")
    _echo_transfers(host.transfers)
    click.echo(f"  Total transferred: {plan.total_transferred}")


# =============================================================================
# Listing & Bidding Commands
# =============================================================================


@cli.command("list")
@click.argument("content")
@click.option("--as", "caller", required=True, help="Supplier account")
@click.option("--reserve", default=0, type=int, help="Reserve price")
@click.pass_context
def list_item(ctx, content, caller, reserve):
    """List an item for the open round"""
    from clearhouse.core.errors import AuctionError

    house, host = _open_house(ctx)
    try:
        with host.call(caller):
            key = house.list_item(content, reserve)
    except (AuctionError, ValueError) as e:
        _fail(e)

    click.echo(f"✓ Listed {content!r}")
    click.echo(f"  Item ID: {key}")
    click.echo(f"  Reserve: {house.listing(key).reserve_price}")


@cli.command("withdraw")
@click.argument("item_id")
@click.option("--as", "caller", required=True, help="Supplier account")
@click.pass_context
def withdraw(ctx, item_id, caller):
    """Withdraw one of your listings"""
    from clearhouse.core.errors import AuctionError

    house, host = _open_house(ctx)
    try:
        with host.call(caller):
            item = house.withdraw_item(item_id)
    except (AuctionError, ValueError) as e:
        _fail(e)

    click.echo(f"✓ Withdrew {item.content!r}")


@cli.command("bid")
@click.argument("item_id")
@click.option("--as", "caller", required=True, help="Bidder account")
@click.option("--amount", required=True, type=int, help="Amount attached to the bid")
@click.pass_context
def bid(ctx, item_id, caller, amount):
    """Bid on an item by its identifier"""
    from clearhouse.core.errors import AuctionError

    house, host = _open_house(ctx)
    try:
        with host.call(caller, deposit=amount):
            placed = house.place_bid(item_id)
    except (AuctionError, ValueError) as e:
        _fail(e)

    click.echo(f"✓ Bid {placed.amount} by {placed.bidder}")
    click.echo(f"  Holding: {house.hold_of(caller)}")


# =============================================================================
# Query Commands
# =============================================================================


@cli.command("winnings")
@click.argument("account")
@click.pass_context
def winnings(ctx, account):
    """Show the items an account has won"""
    house, _ = _open_house(ctx)
    items = house.winnings_of(account)
    if not items:
        click.echo(f"{account} has not won anything.")
        return

    click.echo(f"{account} has won {len(items)} item(s):")
    for content in items:
        click.echo(f"  {content}")


@cli.command("bids")
@click.pass_context
def bids(ctx):
    """Show the current bid on every item"""
    house, _ = _open_house(ctx)
    current = house.get_bids()
    if not current:
        click.echo("No bids.")
        return

    for key, b in current.items():
        click.echo(f"  {key[:16]}... → {b.bidder}: {b.amount}")


@cli.command("stats")
@click.pass_context
def stats(ctx):
    """Show auction statistics"""
    house, _ = _open_house(ctx)
    click.echo("Clearhouse Statistics")
    click.echo("-" * 40)
    for key, value in house.stats().items():
        click.echo(f"  {key}: {value}")


# =============================================================================
# Script & Demo Commands
# =============================================================================


@cli.command("run")
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--keep-going", is_flag=True, help="Continue after a rejected request")
@click.pass_context
def run(ctx, script, keep_going):
    """Execute a JSON list of requests"""
    from clearhouse.core.auction import dispatch
    from clearhouse.core.errors import AuctionError

    try:
        payloads = json.loads(script.read_text())
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON in {script}: {e}")
    if not isinstance(payloads, list):
        _fail("Script must contain a JSON list of requests")

    house, host = _open_house(ctx)
    failures = 0
    for i, payload in enumerate(payloads):
        try:
            result = dispatch(house, host, payload)
        except ValidationError as e:
            failures += 1
            click.echo(json.dumps({"index": i, "error": "INVALID_REQUEST", "message": str(e)}))
        except AuctionError as e:
            failures += 1
            click.echo(json.dumps({"index": i, **e.to_dict()}))
        else:
            click.echo(json.dumps({"index": i, **result}))
            continue

        if not keep_going:
            sys.exit(1)

    if failures:
        sys.exit(1)


@cli.command("demo")
def demo():
    """Run an in-memory two-round demo"""
    from clearhouse.core.auction import AuctionHouse
    from clearhouse.core.host import LocalHost

    click.echo("=" * 60)
    click.echo("  CLEARHOUSE - DEMO")
    click.echo("=" * 60)
    click.echo()

    host = LocalHost()
    house = AuctionHouse(host)

    for round_no, content in enumerate(("vintage lamp", "oak table"), start=1):
        with host.call("operator"):
            house.start_round()
        click.echo(f"🔔 Round {round_no} opened")

        with host.call("seller"):
            key = house.list_item(content, 5)
        click.echo(f"  📦 seller lists {content!r} (reserve 5)")

        with host.call("loser", deposit=6):
            house.place_bid(key)
        with host.call("winner", deposit=10):
            house.place_bid(key)
        click.echo("  💸 loser bids 6, winner bids 10")

        with host.call("operator"):
            plan = house.clear_round()
        _echo_transfers(plan.transfers)
        click.echo()

    click.echo("📊 Final Statistics:")
    click.echo(f"  winner owns: {house.winnings_of('winner')}")
    click.echo(f"  seller received: {host.paid_to('seller')}")
    click.echo(f"  loser refunded: {host.paid_to('loser')}")
    click.echo()
    click.echo("✅ Demo complete!")


if __name__ == "__main__":
    cli()
