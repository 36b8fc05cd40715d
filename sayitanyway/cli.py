"""
sayitanyway/cli.py
Command-line interface for the Say It Anyway core.
Drives the same ledger / screening / subscription code the app UI uses.

USAGE:
  sayitanyway screen "text to check"
  sayitanyway time
  sayitanyway deduct 90
  sayitanyway buy-extra
  sayitanyway unlock DEV123
  sayitanyway status
  sayitanyway serve --port 8765

EXAMPLES:
  # Use a SQLite store instead of the configured one
  sayitanyway --backend sqlite --store ./data.db time

  # Debug logging
  sayitanyway -v screen "I'm struggling today"
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sayitanyway.compose.transcription import format_recording_time
from sayitanyway.config import build_store, load_config
from sayitanyway.entitlements.ledger import RecordingTimeLedger
from sayitanyway.entitlements.subscription import (
    BillingUnavailableError,
    SubscriptionManager,
)
from sayitanyway.screening.engine import screen
from sayitanyway.storage.base import StorageError

logger = logging.getLogger(__name__)

# ANSI colors
GREEN  = '\033[92m'
YELLOW = '\033[93m'
RED    = '\033[91m'
CYAN   = '\033[96m'
RESET  = '\033[0m'
BOLD   = '\033[1m'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog        = 'sayitanyway',
        description = 'Say It Anyway — message screening & recording-time ledger',
        formatter_class = argparse.RawDescriptionHelpFormatter,
        epilog = """
SAFETY NOTE:
  Screening is a rule-based heuristic, not a clinical assessment.
  If you are in crisis, call or text 988 (US) or text HOME to 741741.
        """
    )
    parser.add_argument(
        '--config', '-c',
        type    = Path,
        default = None,
        help    = 'Directory holding sayitanyway_config.json (default: cwd)',
    )
    parser.add_argument(
        '--backend',
        choices = ['json', 'sqlite', 'memory'],
        default = None,
        help    = 'Override the configured store backend',
    )
    parser.add_argument(
        '--store', '-s',
        default = None,
        help    = 'Override the configured store path',
    )
    parser.add_argument(
        '--verbose', '-v',
        action  = 'store_true',
        help    = 'Enable debug logging',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    p_screen = sub.add_parser('screen', help='Screen text for self-harm risk')
    p_screen.add_argument('text', help='Text to screen')

    sub.add_parser('time', help='Show recording time balance')

    p_deduct = sub.add_parser('deduct', help='Deduct recording seconds')
    p_deduct.add_argument('seconds', type=int, help='Seconds to deduct')

    sub.add_parser('buy-extra', help='Record an extra-time purchase (+60 min)')

    p_unlock = sub.add_parser('unlock', help='Unlock subscriber access with a code')
    p_unlock.add_argument('code', help='Access code')

    sub.add_parser('status', help='Show subscription status')

    p_serve = sub.add_parser('serve', help='Run the local HTTP API')
    p_serve.add_argument('--host', default=None, help='Host (default from config: 127.0.0.1)')
    p_serve.add_argument('--port', type=int, default=None, help='Port (default from config: 8765)')

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # ── LOGGING SETUP ────────────────────────────────────────
    config = load_config(args.config)
    log_level = logging.DEBUG if args.verbose else getattr(
        logging, str(config.get('log_level', 'INFO')).upper(), logging.INFO
    )
    logging.basicConfig(
        level   = log_level,
        format  = '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt = '%H:%M:%S',
    )

    if args.backend:
        config['store_backend'] = args.backend
    if args.store:
        config['store_path'] = args.store

    # ── SCREEN (no store needed) ─────────────────────────────
    if args.command == 'screen':
        return _cmd_screen(args.text)

    if args.command == 'serve':
        from sayitanyway.api import serve
        serve(
            host   = args.host or config['api_host'],
            port   = args.port or int(config['api_port']),
            config = config,
        )
        return 0

    try:
        store = build_store(config)
    except ValueError as e:
        _print(f"{RED}Error: {e}{RESET}")
        return 2

    ledger  = RecordingTimeLedger(store)
    manager = SubscriptionManager(
        store, ledger=ledger, billing_available=bool(config.get('billing_available', True)),
    )

    try:
        return asyncio.run(_dispatch(args, ledger, manager))
    except StorageError as e:
        logger.error(f"Storage failure: {e}", exc_info=args.verbose)
        _print(f"{RED}Storage error: {e}{RESET}")
        return 1
    except BillingUnavailableError as e:
        _print(f"{YELLOW}{e}{RESET}")
        return 1


async def _dispatch(args, ledger: RecordingTimeLedger, manager: SubscriptionManager) -> int:
    if args.command == 'time':
        await _show_time(ledger)
        return 0

    if args.command == 'deduct':
        if await ledger.deduct_recording_time(args.seconds):
            _ok(f"Deducted {format_recording_time(args.seconds)}")
            await _show_time(ledger)
            return 0
        total = await ledger.get_total_recording_time()
        _print(
            f"{YELLOW}Not enough recording time: requested "
            f"{format_recording_time(args.seconds)}, available {format_recording_time(total)}{RESET}"
        )
        return 1

    if args.command == 'buy-extra':
        record = await manager.purchase_extra_time()
        _ok(f"Extra time added — purchased pool now {format_recording_time(record.purchased_extra)}")
        return 0

    if args.command == 'unlock':
        if await manager.unlock_with_code(args.code):
            _ok("Subscriber access unlocked")
            return 0
        _print(f"{RED}Invalid access code{RESET}")
        return 1

    if args.command == 'status':
        status = await manager.get_status()
        _print(f"\n{BOLD}Subscription{RESET}")
        _print(f"  Tier       : {CYAN}{status.tier}{RESET}")
        _print(f"  Unlocked   : {status.is_unlocked}")
        _print(f"  Store sub  : {status.store_subscription_active}")
        _print(f"  Show ads   : {await manager.should_show_ads()}")
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def _cmd_screen(text: str) -> int:
    result = screen(text)
    if result.is_flagged:
        _print(f"\n{BOLD}{RED}⚠ FLAGGED{RESET} — confidence {result.confidence.upper()}")
    else:
        _print(f"\n{BOLD}{GREEN}✓ Not flagged{RESET} — confidence {result.confidence.upper()}")
    if result.reason:
        _print(f"  Reason : {result.reason}")
    for pattern in result.matched_patterns:
        _print(f"    • {pattern}")
    if result.is_flagged:
        _print(f"\n{YELLOW}Support is available: call or text 988, or text HOME to 741741.{RESET}")
    return 0


async def _show_time(ledger: RecordingTimeLedger) -> None:
    record = await ledger.get_recording_time()
    info   = await ledger.get_next_pool_info()
    _print(f"\n{BOLD}Recording time{RESET}")
    _print(f"  Free monthly       : {format_recording_time(record.free_monthly)}")
    _print(f"  Subscriber monthly : {format_recording_time(record.subscriber_monthly)}")
    _print(f"  Purchased extra    : {format_recording_time(record.purchased_extra)}")
    _print(f"  Total              : {CYAN}{format_recording_time(record.total)}{RESET}")
    _print(f"  Next pool          : {info.pool_name} ({format_recording_time(info.available)})")


# ── PRINT HELPERS ────────────────────────────────────────────

def _ok(msg):    _print(f"  {GREEN}✓{RESET} {msg}")
def _print(msg): print(msg)


if __name__ == '__main__':
    sys.exit(main())
