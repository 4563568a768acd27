#!/usr/bin/env python3
import asyncio
import time

import click

from enclave_client import ApiClient, EnclaveError
from enclave_client.config import settings
from enclave_client.models import AddOrderReq, BidAsk, FillParams, GetBalanceReq, OrderState, OrderType
from enclave_client.utils.logger import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


async def run_status() -> None:
    async with ApiClient.from_settings(settings) as client:
        await client.wait_for_endpoint()
        status = await client.get_public_status()
        for market, state in status.market_statuses.items():
            click.echo(f"{market}: {state}")


async def run_smoke(symbol: str, market: str) -> None:
    """Manual walk through the main endpoints against the sandbox."""
    async with ApiClient.from_settings(settings) as client:
        await client.wait_for_endpoint()
        await client.authed_hello()

        balance = await client.get_balance(GetBalanceReq(symbol=symbol))
        logger.info("Balance", symbol=symbol, total=balance.result.total_balance)

        # smallest order sizes for the market
        markets = await client.markets()
        pair = markets.result.find_spot_market(market)
        if pair is None:
            logger.error("Market not found", market=market)
            return
        base_min, quote_min = pair.base_increment, pair.quote_increment
        logger.info("Increments", base_min=str(base_min), quote_min=str(quote_min))

        book = (await client.get_spot_depth_book(market)).result
        best_ask = book.best_ask
        if best_ask is None:
            logger.error("No asks are resting on the book", market=market)
            return
        logger.info("Best ask", price=str(best_ask.price), size=str(best_ask.quantity))

        # sell one tick above the top of book so it rests
        order = await client.add_spot_order(
            AddOrderReq(
                market=market,
                side=BidAsk.ASK,
                price=best_ask.price + quote_min,
                size=base_min,
                type=OrderType.LIMIT,
            )
        )
        logger.info("Order placed", state=str(order.result.state))

        await client.cancel_all_spot_orders()
        order = await client.get_spot_order(order.result.order_id)
        logger.info("Order after cancel all", state=str(order.result.state))

        side = BidAsk.BID if book.asks else BidAsk.ASK
        client_order_id = str(time.time_ns())
        order = await client.add_spot_order(
            AddOrderReq(
                market=market,
                side=side,
                size=base_min,
                type=OrderType.MARKET,
                client_order_id=client_order_id,
            )
        )
        if order.result.state is not OrderState.FULLY_FILLED:
            logger.error("Market order did not fill", state=str(order.result.state))
            return

        fills = await client.get_spot_fills_by_order_id(order.result.order_id)
        logger.info("Fills by order id", count=len(fills.result))

        fills = await client.get_spot_fills_by_client_order_id(client_order_id)
        logger.info("Fills by client order id", count=len(fills.result))

        all_fills = await client.get_spot_fills(FillParams())
        logger.info("All fills", count=len(all_fills.result), next_cursor=all_fills.page_info.next_cursor)


@click.group()
def cli():
    """Enclave Markets API client CLI."""
    pass


@cli.command()
def status():
    """Wait for the venue and print market statuses."""
    asyncio.run(run_status())


@cli.command()
@click.option("--symbol", default="AVAX", help="Coin to check the balance of")
@click.option("--market", default="AVAX-USDC", help="Spot market to trade")
def smoke(symbol: str, market: str):
    """Run the manual smoke test (places real sandbox orders)."""
    if not settings.has_credentials:
        raise click.UsageError("ENCLAVE_KEY and ENCLAVE_SECRET must be set")
    try:
        asyncio.run(run_smoke(symbol, market))
    except EnclaveError as e:
        logger.error("Smoke test failed", error=str(e))
        raise SystemExit(1) from e


if __name__ == "__main__":
    cli()
