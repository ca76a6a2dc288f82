#!/usr/bin/env python3
"""
Vanity address miner - command line front end.

Searches for Base58 (Solana) or hex (EVM) addresses matching a prefix,
suffix and/or substring, in-process or in an isolated worker process.
"""

import argparse
import secrets
import signal
import sys
import traceback
from typing import List, Optional, Tuple

from . import __version__, config
from .errors import ErrorKind, UnsupportedVariantError, ValidationError
from .estimator import format_duration, format_number, format_probability
from .facade import SearchRequest, VanityFacade
from .models import UNBOUNDED, OutcomeKind, ProgressEvent, SearchBudget, SearchCriteria

# ============================================================
# Environment Checks
# ============================================================

def check_system_entropy() -> Tuple[bool, str]:
    """Check system entropy pool status"""
    try:
        with open('/proc/sys/kernel/random/entropy_avail', 'r') as f:
            entropy = int(f.read().strip())
            if entropy < 256:
                return False, f"Insufficient system entropy: {entropy} bits"
            return True, f"System entropy pool healthy: {entropy} bits"
    except (FileNotFoundError, PermissionError, ValueError):
        pass

    try:
        test_bytes = secrets.token_bytes(1000)
    except (OSError, NotImplementedError) as e:
        return False, f"Entropy check failed: {e}"
    if len(set(test_bytes)) < 200:
        return False, "Abnormal random number distribution"
    return True, "Random number generator normal"


def check_environment() -> Tuple[bool, List[str]]:
    warnings = []
    is_secure = True

    if hasattr(sys, 'gettrace') and sys.gettrace() is not None:
        warnings.append("⚠️  Debugger attachment detected")
        is_secure = False

    entropy_ok, entropy_msg = check_system_entropy()
    if entropy_ok:
        warnings.append(f"✓ {entropy_msg}")
    else:
        warnings.append(f"⚠️  {entropy_msg}")
        is_secure = False

    return is_secure, warnings


# ============================================================
# Display Helpers
# ============================================================

def progress_bar(current: int, total, width: int = 20) -> str:
    if total is UNBOUNDED or total <= 0:
        percent = 0
    else:
        percent = min(current / total, 1.0)
    filled = int(width * percent)
    bar = '█' * filled + '░' * (width - filled)
    return f"[{bar}] {percent*100:.1f}%"


def display_sensitive(label: str, data: str, mask: bool = True) -> None:
    if mask:
        n = config.SHOW_PARTIAL_CHARS
        if len(data) > n * 2:
            masked = data[:n] + '*' * (len(data) - n * 2) + data[-n:]
        else:
            masked = '*' * len(data)
        print(f"   {label}: {masked}")
    else:
        print(f"   {label}: {data}")


def safe_input_yn(prompt: str, default: bool = False) -> bool:
    try:
        return input(prompt).strip().lower() == 'y'
    except (KeyboardInterrupt, EOFError):
        print("\n")
        return default


class ProgressPrinter:
    """Progress sink rendering a single status line."""

    def __init__(self, expected):
        self.expected = expected

    def __call__(self, event: ProgressEvent) -> None:
        rate = event.attempts / (event.elapsed_ms / 1000) if event.elapsed_ms else 0
        if rate > 0 and self.expected is not UNBOUNDED:
            eta = format_duration(max(0, self.expected - event.attempts) / rate * 1000)
        else:
            eta = "Calculating..."
        bar = progress_bar(event.attempts, self.expected, 15)
        line = (f"   {bar} | {format_number(event.attempts)} tried | "
                f"{format_number(rate)}/s | ETA: {eta}")
        sys.stdout.write(f"\r{line:<75}")
        sys.stdout.flush()


def display_outcome(facade: VanityFacade, outcome, show_secret: bool) -> int:
    print("\n\n" + "=" * 60)
    print("📋 Generation Results:")
    print("=" * 60)

    if outcome.kind is OutcomeKind.FOUND:
        info = facade.describe(outcome.result)
        print(f"\n   Address: {info['address']}")
        print(f"   Attempts: {info['attempts']:,}")
        print(f"   Time: {format_duration(info['elapsed_ms'])}")
        display_sensitive("Private Key", info['private_key'], mask=not show_secret)
        if info['mnemonic']:
            display_sensitive("Mnemonic", info['mnemonic'], mask=not show_secret)

        if not show_secret and safe_input_yn("\nDisplay full private key? [y/N]: "):
            display_sensitive("Private Key", info['private_key'], mask=False)
            if info['mnemonic']:
                display_sensitive("Mnemonic", info['mnemonic'], mask=False)

        print("\n⚠️  Security Reminders:")
        print("   1. Immediately write down or save private key offline")
        print("   2. Never screenshot or transmit over network")
        print("   3. Verify address on testnet before using")
        return 0

    if outcome.kind is OutcomeKind.NOT_FOUND:
        messages = {
            "attempts_exhausted": "Attempt limit reached",
            "time_exhausted": "Time limit reached",
            "cancelled": "Search cancelled",
        }
        print(f"\n⚠️  No matching result found ({messages[outcome.reason.value]})")
        print(f"   Attempts: {outcome.attempts:,} | Time: {format_duration(outcome.elapsed_ms)}")
        return 1

    if outcome.error is ErrorKind.WORKER_CRASHED:
        print(f"\n❌ Worker process crashed: {outcome.message}")
    else:
        print(f"\n❌ Key generation failed: {outcome.message}")
    return 2


# ============================================================
# Main Program
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vanity-miner",
        description="Search for Base58 (Solana) or hex (EVM) vanity addresses.")
    parser.add_argument("--variant", default="base58",
                        help="Address variant: base58/solana or hex/evm (default: base58)")
    parser.add_argument("--prefix", default="", help="Address must start with this")
    parser.add_argument("--suffix", default="", help="Address must end with this")
    parser.add_argument("--contains", default="", help="Address must contain this")
    parser.add_argument("--case-sensitive", action="store_true",
                        help="Match letter case exactly")
    parser.add_argument("--max-attempts", type=int, default=config.DEFAULT_MAX_ATTEMPTS,
                        help="Give up after this many keys (default: %(default)s)")
    parser.add_argument("--max-time", type=float, default=config.DEFAULT_MAX_DURATION_MS / 1000,
                        help="Give up after this many seconds (default: %(default)s)")
    parser.add_argument("--mnemonic", action="store_true",
                        help="Derive keys from 12-word BIP-39 mnemonics (slower, recoverable)")
    parser.add_argument("--isolated", action="store_true",
                        help="Run the search in a separate worker process")
    parser.add_argument("--estimate-only", action="store_true",
                        help="Print the difficulty estimate and exit")
    parser.add_argument("--show-secret", action="store_true",
                        help="Print private material unmasked")
    parser.add_argument("--debug", action="store_true",
                        help="Verbose logging and full tracebacks")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    config.setup_logging(args.debug)

    facade = VanityFacade()
    criteria = SearchCriteria(prefix=args.prefix, suffix=args.suffix,
                              substring=args.contains, case_sensitive=args.case_sensitive)

    try:
        issues = facade.validate(args.variant, criteria)
    except UnsupportedVariantError as e:
        print(f"❌ {e}")
        return 2
    if issues:
        print("❌ Invalid criteria:")
        for issue in issues:
            print(f"   - {issue}")
        return 2

    probability = facade.estimate_probability(args.variant, criteria)
    expected = facade.estimate_expected_attempts(args.variant, criteria)
    duration = facade.estimate_expected_duration(args.variant, criteria, args.mnemonic)

    print("\n" + "=" * 60)
    print("     🚀 Vanity Address Miner")
    print("=" * 60)
    print(f"   Variant: {args.variant}")
    for label, pattern in criteria.constraints():
        print(f"   {label}: {pattern}")
    print(f"   Case sensitive: {'yes' if criteria.case_sensitive else 'no'}")
    print(f"   Generation mode: {'📝 Mnemonic' if args.mnemonic else '🔑 Private Key'}")
    print(f"\n📊 Probability {format_probability(probability)} | "
          f"Expected attempts {format_number(expected)} | Est. {format_duration(duration)}")
    print("=" * 60)

    if args.estimate_only:
        return 0

    is_secure, warnings = check_environment()
    for w in warnings:
        print(f"   {w}")
    if not is_secure and not safe_input_yn("\n⚠️  Security risks detected, continue? [y/N]: "):
        print("Cancelled")
        return 1

    budget = SearchBudget(max_attempts=args.max_attempts,
                          max_duration_ms=max(1, int(args.max_time * 1000)))
    request = SearchRequest(variant=args.variant, criteria=criteria, budget=budget,
                            progress=ProgressPrinter(expected),
                            use_mnemonic=args.mnemonic)

    def graceful_exit_handler(signum, frame):
        print("\n\n⏹️  Interrupt signal received, stopping safely...")
        facade.stop()

    previous = signal.signal(signal.SIGINT, graceful_exit_handler)
    print("\n💡 Tip: Press Ctrl+C to safely stop\n")
    try:
        outcome = facade.run_isolated(request) if args.isolated else facade.run(request)
    except ValidationError as e:
        print(f"❌ {e}")
        return 2
    except Exception as e:
        print(f"\n\n❌ Error occurred: {e}")
        if args.debug:
            traceback.print_exc()
        else:
            print("   (use --debug for traceback)")
        return 2
    finally:
        signal.signal(signal.SIGINT, previous)

    return display_outcome(facade, outcome, args.show_secret)
