"""
Command line entry point

    personal-banking create savings "Asha Rao" 1000 --daily-limit 500
    personal-banking deposit 1000 250
    personal-banking withdraw 1000 300
    personal-banking balance 1000
    personal-banking info 1000
    personal-banking passbook 1000 --from 2024-01-01 --to 2024-01-31
    personal-banking serve --port 8001
"""

import argparse
import sys
from typing import List, Optional

from .api import run_server
from .backends import select_backend
from .config import get_config
from .logging_config import setup_logging


def format_entry(entry: dict) -> str:
    return f"{entry['date']} | {entry['type']} | {entry['amount']} | Balance: {entry['balance']}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="personal-banking",
        description="Savings and current accounts with a passbook"
    )
    parser.add_argument(
        "--local",
        action="store_true",
        help="Skip the remote service even if it is reachable",
    )
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="SQLite file holding the local ledger (default: BANK_DATABASE_PATH)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="Open an account")
    create.add_argument("type", choices=["savings", "current"], type=str.lower)
    create.add_argument("holder", help="Account holder name")
    create.add_argument("deposit", nargs="?", default="0", help="Initial deposit (default: 0)")
    create.add_argument("--daily-limit", default=None, help="Savings daily withdrawal cap")

    for name, help_text in (("deposit", "Deposit money"), ("withdraw", "Withdraw money")):
        op = sub.add_parser(name, help=help_text)
        op.add_argument("account", help="Account number")
        op.add_argument("amount")

    for name, help_text in (("balance", "Check balance"), ("info", "Display account information")):
        op = sub.add_parser(name, help=help_text)
        op.add_argument("account", help="Account number")

    passbook = sub.add_parser("passbook", help="Print passbook")
    passbook.add_argument("account", help="Account number")
    passbook.add_argument("--from", dest="from_date", default=None, help="First day, YYYY-MM-DD")
    passbook.add_argument("--to", dest="to_date", default=None, help="Last day, YYYY-MM-DD")

    serve = sub.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    return parser


def run_command(args: argparse.Namespace, backend) -> List[str]:
    """Execute one command against a backend, returning output lines"""
    if args.command == "create":
        holder = args.holder.strip() or "Anonymous"
        created = backend.create_account(args.type, holder, args.deposit, args.daily_limit)
        return [f"Created {args.type} account #{created['accountNumber']}"]

    if args.command == "deposit":
        return [backend.deposit(args.account, args.amount)]

    if args.command == "withdraw":
        return [backend.withdraw(args.account, args.amount)]

    if args.command == "balance":
        account = backend.get_account(args.account)
        return [f"Account: {account['accountNumber']} | Holder: {account['holderName']} | Balance: {account['balance']}"]

    if args.command == "info":
        account = backend.get_account(args.account)
        return [
            f"Account: {account['accountNumber']}",
            f"Holder: {account['holderName']}",
            f"Balance: {account['balance']}",
            f"Type: {account['type'].capitalize()}",
        ]

    if args.command == "passbook":
        entries = backend.list_transactions(args.account, args.from_date, args.to_date)
        if not entries:
            return ["-- no transactions --"]
        return [format_entry(entry) for entry in entries]

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_config()
    if args.db:
        config = config.model_copy(update={"database_path": args.db})

    if args.command == "serve":
        run_server(config, host=args.host, port=args.port)
        return 0

    setup_logging(config.log_level, "bank", config.log_format, config.log_file)

    backend = select_backend(config, prefer_remote=not args.local)
    try:
        for line in run_command(args, backend):
            print(line)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        backend.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
