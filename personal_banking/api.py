"""
FastAPI REST API Module

Serves the remote banking contract on top of a local Bank:

    GET  /ping
    POST /create                          form: type, holder, deposit, dailyLimit?
    GET  /account/{id}
    POST /account/{id}/deposit            form: amount
    POST /account/{id}/withdraw           form: amount
    GET  /account/{id}/passbook?from=&to=

Errors come back as plain text: 404 for unknown accounts, 400 for
rejected operations.
"""

from typing import Optional
from fastapi import FastAPI, Depends, Form, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
import uvicorn

from . import __version__
from .bank import Bank
from .config import BankConfig, get_config
from .exceptions import AccountNotFound
from .logging_config import get_logger, setup_logging
from .storage import SQLiteStore


logger = get_logger("bank.api")


def get_bank(request: Request) -> Bank:
    """Bank bound to the running application"""
    return request.app.state.bank


def create_app(bank: Bank) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Personal Banking API",
        description="Savings and current accounts with a date-filtered passbook",
        version=__version__
    )
    app.state.bank = bank

    # The browser client is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AccountNotFound)
    async def account_not_found_handler(request: Request, exc: AccountNotFound):
        return PlainTextResponse(str(exc), status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(ValueError)
    async def rejected_operation_handler(request: Request, exc: ValueError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)

    @app.get("/ping")
    async def ping():
        """Liveness check"""
        return {"status": "ok", "bank": bank.name}

    @app.post("/create", status_code=status.HTTP_201_CREATED)
    async def create_account(
        type: str = Form(...),
        holder: str = Form("Anonymous"),
        deposit: str = Form("0"),
        daily_limit: Optional[str] = Form(None, alias="dailyLimit"),
        bank: Bank = Depends(get_bank)
    ):
        """Open a savings or current account"""
        account = bank.create_account(
            type, holder.strip() or "Anonymous", deposit or "0", daily_limit or None
        )
        return account.summary()

    @app.get("/account/{account_number}")
    async def get_account(account_number: int, bank: Bank = Depends(get_bank)):
        """Account information"""
        return bank.require_account(account_number).summary()

    @app.post("/account/{account_number}/deposit", response_class=PlainTextResponse)
    async def deposit(
        account_number: int,
        amount: str = Form(...),
        bank: Bank = Depends(get_bank)
    ):
        account = bank.deposit(account_number, amount)
        return f"Deposited {account.transactions[-1].amount}. Balance: {account.balance}"

    @app.post("/account/{account_number}/withdraw", response_class=PlainTextResponse)
    async def withdraw(
        account_number: int,
        amount: str = Form(...),
        bank: Bank = Depends(get_bank)
    ):
        account = bank.withdraw(account_number, amount)
        return f"Withdrawn {account.transactions[-1].amount}. Balance: {account.balance}"

    @app.get("/account/{account_number}/passbook")
    async def passbook(
        account_number: int,
        from_date: Optional[str] = Query(None, alias="from"),
        to_date: Optional[str] = Query(None, alias="to"),
        bank: Bank = Depends(get_bank)
    ):
        """Passbook entries, inclusive of both dates"""
        return bank.list_transactions(account_number, from_date, to_date).to_list()

    return app


def run_server(config: Optional[BankConfig] = None, host: Optional[str] = None,
               port: Optional[int] = None):
    """Run the API server against the configured SQLite store"""
    config = config or get_config()
    setup_logging(config.log_level, "bank", config.log_format, config.log_file)

    bank = Bank(SQLiteStore(config.database_path), config=config)
    app = create_app(bank)

    uvicorn.run(
        app,
        host=host or config.api_host,
        port=port or config.api_port,
        log_level=config.log_level.lower()
    )
