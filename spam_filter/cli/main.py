"""Command-line interface for the Bitcoin spam filter."""

import sys
import json
from pathlib import Path
import click
import structlog

from spam_filter.core.filter_engine import FilterEngine
from spam_filter.core.transaction_parser import TransactionParser
from spam_filter.models.config import FilterConfig
from spam_filter.models.transaction import MalformedTransactionError, Transaction
from spam_filter.utils.logging import setup_logging

logger = structlog.get_logger(__name__)

EXIT_ACCEPT = 0
EXIT_REJECT = 1
EXIT_ERROR = 2


def _load_transaction(tx_input: str, json_file: bool) -> Transaction:
    """Decode the TX argument: a JSON file path, inline JSON or raw hex."""
    if json_file:
        try:
            tx_json = json.loads(Path(tx_input).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise MalformedTransactionError(f"Could not read transaction JSON file: {e}")
        return TransactionParser.parse_json(tx_json)
    return TransactionParser.parse(tx_input)


def _configure(overrides: dict) -> FilterConfig:
    """Build the configuration and set up logging; exit 2 if it is invalid."""
    try:
        config = FilterConfig(**overrides)
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(EXIT_ERROR)
    
    setup_logging(config)
    return config


def _load_or_exit(tx_input: str, json_file: bool) -> Transaction:
    try:
        return _load_transaction(tx_input, json_file)
    except MalformedTransactionError as e:
        logger.error("Transaction decoding failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)


@click.group()
@click.option('--log-level', '-l', default='WARNING',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level')
@click.version_option(package_name='bitcoin-spam-filter')
@click.pass_context
def cli(ctx, log_level: str):
    """Scriptable Bitcoin mempool policy filter for UTXO spam."""
    ctx.ensure_object(dict)
    ctx.obj['log_level'] = log_level


@cli.command(name='filter')
@click.argument('tx_input', metavar='TX')
@click.option('--threshold', '-t', type=float, default=None,
              help='Spam score threshold for rejection (default: configured, 80)')
@click.option('--no-p2wsh', is_flag=True, help='Disable P2WSH fake multisig detection')
@click.option('--no-opreturn', is_flag=True, help='Disable chained OP_RETURN detection')
@click.option('--json-file', '-j', is_flag=True, help='TX is a path to a JSON file')
@click.option('--verbose', '-v', is_flag=True, help='Show detailed detection results')
@click.option('--output-json', is_flag=True, help='Print the verdict as JSON')
@click.pass_context
def filter_command(ctx, tx_input: str, threshold, no_p2wsh: bool, no_opreturn: bool,
                   json_file: bool, verbose: bool, output_json: bool):
    """Filter a Bitcoin transaction (hex, inline JSON or JSON file)."""
    overrides = {'log_level': ctx.obj['log_level']}
    if threshold is not None:
        overrides['threshold'] = threshold
    if no_p2wsh:
        overrides['enable_p2wsh_detection'] = False
    if no_opreturn:
        overrides['enable_opreturn_detection'] = False
    
    config = _configure(overrides)
    tx = _load_or_exit(tx_input, json_file)
    
    engine = FilterEngine(config)
    verdict = engine.evaluate_transaction(tx)
    
    if output_json:
        click.echo(json.dumps(verdict.to_dict(), indent=2, default=str))
    else:
        click.echo("\n=== Filter Result ===")
        click.echo(f"Decision: {'ACCEPT' if verdict.accept else 'REJECT'}")
        click.echo(f"Spam Score: {verdict.score:.2f} / {config.threshold:g}")
        click.echo(f"Message: {verdict.message}")
        
        if verbose and verdict.detections:
            click.echo("\n=== Detections ===")
            for i, detection in enumerate(verdict.detections, start=1):
                click.echo(f"\n{i}. [{detection.source}] {detection.reason}")
                click.echo(f"   Confidence: {detection.confidence:.2f}%")
                if detection.details:
                    click.echo(f"   Details: {json.dumps(detection.details, indent=2, default=str)}")
        
        for note in verdict.notes:
            click.echo(f"Note: {note}", err=True)
    
    sys.exit(EXIT_ACCEPT if verdict.accept else EXIT_REJECT)


@cli.command()
@click.argument('tx_input', metavar='TX')
@click.option('--json-file', '-j', is_flag=True, help='TX is a path to a JSON file')
@click.pass_context
def analyze(ctx, tx_input: str, json_file: bool):
    """Analyze transaction structure without filtering."""
    _configure({'log_level': ctx.obj['log_level']})
    tx = _load_or_exit(tx_input, json_file)
    
    click.echo("\n=== Transaction Analysis ===")
    click.echo(f"TXID: {tx.txid}")
    click.echo(f"Version: {tx.version}")
    click.echo(f"Locktime: {tx.locktime}")
    click.echo(f"Size: {tx.size} bytes")
    click.echo(f"Virtual Size: {tx.vsize} vbytes")
    click.echo(f"Weight: {tx.weight} WU")
    
    click.echo(f"\nInputs: {len(tx.inputs)}")
    for i, tx_input_data in enumerate(tx.inputs):
        click.echo(f"  {i}: {tx_input_data.previous_txid}:{tx_input_data.previous_index}")
        if tx_input_data.witness_item_count:
            click.echo(f"     Witness items: {tx_input_data.witness_item_count}")
    
    click.echo(f"\nOutputs: {len(tx.outputs)}")
    for i, output in enumerate(tx.outputs):
        click.echo(f"  {i}: {output.value_satoshis} sats ({output.script_type or 'unknown'})")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
