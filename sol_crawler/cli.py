"""
sol-crawler CLI - crawl an address's history from the command line
"""

import asyncio
import dataclasses
import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import DEFAULT_TIMEOUT, RPC_URL, CrawlerConfig
from .crawler import Crawler
from .errors import CrawlError
from .extractor import ExtractionRule, MultiMatchPolicy
from .filters import (
    IxHasAccountFilter,
    IxNumberAccounts,
    IxProgramIdFilter,
    SuccessfulTxFilter,
    TxHasProgramId,
    TxLogContains,
)
from .logging_config import setup_logging
from .models import CrawlDiagnostics, CrawledAccounts, Encoding
from .presets import candy_machine_v1_crawler, candy_machine_v2_crawler, token_mint_to_crawler
from .rpc import SolanaClient

logger = logging.getLogger("sol_crawler")

CONTEXT_SETTINGS = dict(help_option_names=['-h', '--help'])


async def _crawl(rpc_url: str, timeout: float, build: Callable[[SolanaClient], Crawler]) -> Tuple[CrawledAccounts, CrawlDiagnostics]:
    async with SolanaClient(rpc_url, timeout=timeout) as client:
        crawler = build(client)
        accounts = await crawler.run()
        return accounts, crawler.diagnostics


def _to_json(accounts: CrawledAccounts) -> Dict[str, List[str]]:
    return {label: sorted(addresses) for label, addresses in sorted(accounts.items())}


def _display_summary(console: Console, accounts: CrawledAccounts, diagnostics: CrawlDiagnostics):
    table = Table(title="Crawl Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Signatures", str(diagnostics.signatures_found))
    table.add_row("Transactions fetched", str(diagnostics.transactions_fetched))
    table.add_row("Transactions accepted", str(diagnostics.transactions_accepted))
    table.add_row("Instructions matched", str(diagnostics.instructions_matched))
    table.add_row("Fetch failures", str(len(diagnostics.fetch_failures)))
    table.add_row("Undecodable transactions", str(len(diagnostics.decode_errors)))
    table.add_row("Multi-match transactions", str(len(diagnostics.ambiguous_matches)))
    if diagnostics.average_latency is not None:
        table.add_row("Average RPC latency", f"{diagnostics.average_latency * 1000:.0f} ms")
    for label, addresses in sorted(accounts.items()):
        table.add_row(f"'{label}' addresses", str(len(addresses)))

    console.print(table)


def _run(ctx, build: Callable[[SolanaClient], Crawler], output: Optional[str]):
    """Run a crawl and write its result"""
    console = ctx.obj['console']
    try:
        accounts, diagnostics = asyncio.run(_crawl(ctx.obj['rpc_url'], ctx.obj['timeout'], build))
    except CrawlError as e:
        logger.debug("Crawl failed", exc_info=True)
        raise click.ClickException(f"Crawl failed: {e}")

    data = _to_json(accounts)
    if output:
        Path(output).write_text(json.dumps(data, indent=2))
        console.print(f"[green]Results saved to {output}[/green]")
    else:
        click.echo(json.dumps(data, indent=2))

    _display_summary(console, accounts, diagnostics)


def _parse_rule(value: str) -> ExtractionRule:
    label, sep, locator = value.partition('=')
    if not sep or not label or not locator:
        raise click.BadParameter(f"expected LABEL=INDEX or LABEL=FIELD.PATH, got {value!r}")
    if locator.isdigit():
        return ExtractionRule.at_index(label, int(locator))
    return ExtractionRule.at_path(label, locator)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--rpc-url', default=RPC_URL, show_default=True, help='Solana RPC endpoint')
@click.option('--timeout', type=float, default=DEFAULT_TIMEOUT, show_default=True, help='Per-request timeout in seconds')
@click.option('--concurrency', type=click.IntRange(min=1), help='Maximum in-flight transaction requests')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Also write logs to this file')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, rpc_url, timeout, concurrency, log_file, no_color):
    """sol-crawler - extract accounts from the history of a Solana address"""
    setup_logging('sol_crawler', logging.DEBUG if debug else logging.INFO, log_file)

    config = CrawlerConfig.from_env()
    if concurrency:
        config = dataclasses.replace(config, fetch_concurrency=concurrency)

    ctx.ensure_object(dict)
    ctx.obj['console'] = Console(stderr=True, color_system=None if no_color else "auto")
    ctx.obj['rpc_url'] = rpc_url
    ctx.obj['timeout'] = timeout
    ctx.obj['config'] = config


@cli.command('cmv1')
@click.argument('candy_machine_id')
@click.option('--output', type=click.Path(dir_okay=False), help='Save results to a JSON file')
@click.pass_context
def cmv1(ctx, candy_machine_id, output):
    """Metadata and mint accounts of a Candy Machine v1"""
    config = ctx.obj['config']
    _run(ctx, lambda client: candy_machine_v1_crawler(client, candy_machine_id, config), output)


@cli.command('cmv2')
@click.argument('candy_machine_id')
@click.option('--output', type=click.Path(dir_okay=False), help='Save results to a JSON file')
@click.pass_context
def cmv2(ctx, candy_machine_id, output):
    """Metadata and mint accounts of a Candy Machine v2"""
    config = ctx.obj['config']
    _run(ctx, lambda client: candy_machine_v2_crawler(client, candy_machine_id, config), output)


@cli.command('mint-to')
@click.argument('address')
@click.option('--output', type=click.Path(dir_okay=False), help='Save results to a JSON file')
@click.pass_context
def mint_to(ctx, address, output):
    """Mints touched by SPL token mintTo instructions"""
    config = ctx.obj['config']
    _run(ctx, lambda client: token_mint_to_crawler(client, address, config), output)


@cli.command('custom')
@click.argument('address')
@click.option('--program-id', help='Only instructions of this program (and transactions touching it)')
@click.option('--min-accounts', type=int, help='Positional instructions need at least this many accounts')
@click.option('--exact-accounts', type=int, help='Positional instructions need exactly this many accounts')
@click.option('--any-account', multiple=True, help='Instruction must reference one of these accounts')
@click.option('--reject-log', help='Drop transactions whose logs contain this text')
@click.option('--include-failed', is_flag=True, help='Keep transactions that failed')
@click.option('--rule', 'rules', multiple=True, required=True,
              help='Extraction rule, LABEL=INDEX or LABEL=FIELD.PATH (repeatable)')
@click.option('--policy', type=click.Choice([p.value for p in MultiMatchPolicy]),
              default=MultiMatchPolicy.REPORT.value, show_default=True,
              help='Handling of transactions with several matching instructions')
@click.option('--encoding', type=click.Choice(['raw', 'decoded']), default='decoded', show_default=True)
@click.option('--output', type=click.Path(dir_okay=False), help='Save results to a JSON file')
@click.pass_context
def custom(ctx, address, program_id, min_accounts, exact_accounts, any_account, reject_log,
           include_failed, rules, policy, encoding, output):
    """Crawl with filters and rules given on the command line"""
    config = ctx.obj['config']
    parsed_rules = [_parse_rule(rule) for rule in rules]

    def build(client):
        crawler = Crawler(client, address, config=config)
        crawler.with_multi_match_policy(MultiMatchPolicy(policy))
        crawler.with_encoding(Encoding.RAW if encoding == 'raw' else Encoding.DECODED)
        if not include_failed:
            crawler.add_tx_filter(SuccessfulTxFilter())
        if reject_log:
            crawler.add_tx_filter(TxLogContains(reject_log))
        if program_id:
            crawler.add_tx_filter(TxHasProgramId(program_id))
            crawler.add_ix_filter(IxProgramIdFilter(program_id))
        if min_accounts is not None:
            crawler.add_ix_filter(IxNumberAccounts.greater_than_or_equal(min_accounts))
        if exact_accounts is not None:
            crawler.add_ix_filter(IxNumberAccounts.equal_to(exact_accounts))
        for account in any_account:
            crawler.add_alternative_ix_filter(IxHasAccountFilter(account))
        return crawler.account_indices(parsed_rules)

    _run(ctx, build, output)


if __name__ == '__main__':
    cli()
