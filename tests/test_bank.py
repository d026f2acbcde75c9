"""
Test suite for the bank ledger

Tests account creation and numbering, persistence round-trips, recovery
from corrupt storage, and passbook filtering.
"""

import json
import pytest
from decimal import Decimal
from datetime import date, datetime, timedelta
from unittest.mock import patch

from personal_banking.accounts import AccountType
from personal_banking.bank import Bank, Passbook
from personal_banking.config import BankConfig
from personal_banking.exceptions import (
    AccountNotFound, InvalidAmount, InsufficientBalance, DailyLimitExceeded, PersistenceCorrupt
)
from personal_banking.storage import InMemoryStore
from personal_banking.transactions import Transaction, TransactionKind


def local_dt(year, month, day, hour=12, minute=0, second=0):
    return datetime(year, month, day, hour, minute, second).astimezone()


class TestBankAccounts:
    """Test account creation and lookup"""

    def setup_method(self):
        """Set up test fixtures"""
        self.config = BankConfig(bank_name="Test Bank")
        self.store = InMemoryStore()
        self.bank = Bank(self.store, config=self.config)

    def test_empty_bank(self):
        assert self.bank.name == "Test Bank"
        assert self.bank.accounts == {}
        assert self.bank.load_error is None
        assert self.bank.next_account_number == 1000

    def test_create_accounts(self):
        savings = self.bank.create_account("savings", "Asha Rao", 1000, daily_limit=500)
        current = self.bank.create_account("Current", "Ben Okafor", "250.75")

        assert savings.account_number == 1000
        assert current.account_number == 1001
        assert savings.account_type == AccountType.SAVINGS
        assert savings.policy.daily_limit == Decimal('500')
        assert current.account_type == AccountType.CURRENT
        assert current.balance == Decimal('250.75')
        assert self.bank.get_account(1000) is savings
        assert self.bank.get_account("1001") is current

    def test_savings_default_limit_from_config(self):
        config = BankConfig(default_daily_limit="750")
        bank = Bank(InMemoryStore(), config=config)

        account = bank.create_account(AccountType.SAVINGS, "Asha", 100)

        assert account.policy.daily_limit == Decimal('750')

    def test_create_persists_immediately(self):
        self.bank.create_account("current", "Ben", 10)

        document = json.loads(self.store.read(self.config.storage_key))
        assert document["name"] == "Test Bank"
        assert document["accounts"][0]["accountNumber"] == 1000

    def test_rejected_creation_does_not_consume_number(self):
        with pytest.raises(InvalidAmount):
            self.bank.create_account("current", "Ben", -10)
        with pytest.raises(ValueError):
            self.bank.create_account("checking", "Ben", 10)

        assert self.bank.accounts == {}
        assert self.bank.next_account_number == 1000

    def test_get_unknown_account(self):
        assert self.bank.get_account(4242) is None
        assert self.bank.get_account("not-a-number") is None
        with pytest.raises(AccountNotFound, match="4242"):
            self.bank.require_account(4242)

    def test_deposit_and_withdraw_persist(self):
        account = self.bank.create_account("current", "Ben", 100)

        self.bank.deposit(account.account_number, 50)
        self.bank.withdraw(account.account_number, 30)

        reloaded = Bank(self.store, config=self.config)
        assert reloaded.get_account(1000).balance == Decimal('120')
        assert len(reloaded.get_account(1000).transactions) == 3

    def test_failed_operations_leave_store_unchanged(self):
        account = self.bank.create_account("current", "Ben", 100)
        before = self.store.read(self.config.storage_key)

        with pytest.raises(InsufficientBalance):
            self.bank.withdraw(account.account_number, 150)
        with pytest.raises(InvalidAmount):
            self.bank.deposit(account.account_number, -5)
        with pytest.raises(AccountNotFound):
            self.bank.deposit(9999, 5)

        assert self.store.read(self.config.storage_key) == before
        assert account.balance == Decimal('100')

    def test_savings_daily_limit_through_bank(self):
        account = self.bank.create_account("savings", "Asha", 1000, daily_limit=500)

        with patch("personal_banking.accounts.local_today", return_value=date(2024, 5, 1)):
            self.bank.withdraw(account.account_number, 300)
            with pytest.raises(DailyLimitExceeded):
                self.bank.withdraw(account.account_number, 250)

        assert account.balance == Decimal('700')


class TestBankPersistence:
    """Test save/load round-trips and corrupt storage"""

    def setup_method(self):
        """Set up test fixtures"""
        self.config = BankConfig()
        self.store = InMemoryStore()

    def test_round_trip(self):
        bank = Bank(self.store, name="Round Trip Bank", config=self.config)
        with patch("personal_banking.accounts.local_today", return_value=date(2024, 5, 1)):
            savings = bank.create_account("savings", "Asha", 1000, daily_limit=500)
            bank.withdraw(savings.account_number, 300)
        current = bank.create_account("current", "Ben", 100)
        bank.deposit(current.account_number, "0.10")

        reloaded = Bank(self.store, config=self.config)

        assert reloaded.name == "Round Trip Bank"
        assert reloaded.next_account_number == bank.next_account_number == 1002
        assert set(reloaded.accounts) == {1000, 1001}
        for number, original in bank.accounts.items():
            restored = reloaded.accounts[number]
            assert restored.account_type == original.account_type
            assert restored.holder_name == original.holder_name
            assert restored.balance == original.balance
            assert restored.transactions == original.transactions
            assert restored.policy == original.policy

    def test_numbering_survives_reload(self):
        bank = Bank(self.store, config=self.config)
        bank.create_account("current", "A", 1)
        bank.create_account("current", "B", 1)

        reloaded = Bank(self.store, config=self.config)
        created = reloaded.create_account("current", "C", 1)

        assert created.account_number == 1002

    def test_numbering_skips_existing_accounts_if_counter_lost(self):
        bank = Bank(self.store, config=self.config)
        bank.create_account("current", "A", 1)
        bank.create_account("current", "B", 1)
        self.store.write(self.config.sequence_key, "garbage")

        reloaded = Bank(self.store, config=self.config)

        assert reloaded.create_account("current", "C", 1).account_number == 1002

    def test_load_browser_document(self):
        """Test loading a document written with numeric amounts"""
        document = {
            "name": "OOP Bank",
            "accounts": [
                {
                    "accountNumber": 1000,
                    "holderName": "Asha",
                    "balance": 700,
                    "transactions": [
                        {"date": "2024-05-01T09:00:00.000Z", "type": "OPEN", "amount": 1000, "balance": 1000},
                        {"date": "2024-05-01T10:00:00.000Z", "type": "WITHDRAW", "amount": 300, "balance": 700},
                    ],
                    "dailyLimit": 20000,
                    "withdrawnToday": 300,
                    "today": "2024-05-01",
                },
                {
                    "accountNumber": 1001,
                    "holderName": "Ben",
                    "balance": 50,
                    "transactions": [
                        {"date": "2024-05-02T09:00:00.000Z", "type": "OPEN", "amount": 50, "balance": 50},
                    ],
                },
            ],
        }
        self.store.write(self.config.storage_key, json.dumps(document))

        bank = Bank(self.store, config=self.config)

        assert bank.load_error is None
        assert bank.get_account(1000).account_type == AccountType.SAVINGS
        assert bank.get_account(1000).policy.withdrawn_today == Decimal('300')
        assert bank.get_account(1001).account_type == AccountType.CURRENT
        assert [t.kind for t in bank.get_account(1000).transactions] == [
            TransactionKind.OPEN, TransactionKind.WITHDRAW
        ]

    @pytest.mark.parametrize("raw", [
        "{not json",
        "[]",
        json.dumps({"name": "X", "accounts": [{"holderName": "no number"}]}),
        json.dumps({"name": "X", "accounts": [{"accountNumber": 1, "holderName": "a", "balance": "abc"}]}),
        json.dumps({"name": "X", "accounts": [
            {"accountNumber": 1, "holderName": "a", "balance": "1"},
            {"accountNumber": 1, "holderName": "b", "balance": "1"},
        ]}),
    ])
    def test_corrupt_store_yields_empty_bank(self, raw):
        self.store.write(self.config.storage_key, raw)

        bank = Bank(self.store, name="Fallback", config=self.config)

        assert bank.name == "Fallback"
        assert bank.accounts == {}
        assert isinstance(bank.load_error, PersistenceCorrupt)

    def test_corrupt_store_is_logged(self):
        self.store.write(self.config.storage_key, "{not json")

        with patch("personal_banking.bank.get_logger") as mock_get_logger:
            Bank(self.store, config=self.config)

        mock_get_logger.return_value.error.assert_called_once()

    def test_save_failure_is_not_raised(self):
        bank = Bank(self.store, config=self.config)

        with patch.object(self.store, "write", return_value=False):
            account = bank.create_account("current", "Ben", 10)
            assert bank.save() is False

        assert account.balance == Decimal('10')


class TestPassbook:
    """Test passbook filtering"""

    def setup_method(self):
        """Set up an account with one record per day from 1 to 5 March"""
        self.bank = Bank(InMemoryStore(), config=BankConfig())
        self.account = self.bank.create_account("current", "Asha", 100)
        self.account.transactions[:] = [
            Transaction(TransactionKind.OPEN, Decimal('100'), Decimal('100'), local_dt(2024, 3, 1, 0, 0, 0)),
            Transaction(TransactionKind.DEPOSIT, Decimal('10'), Decimal('110'), local_dt(2024, 3, 2)),
            Transaction(TransactionKind.WITHDRAW, Decimal('20'), Decimal('90'), local_dt(2024, 3, 3)),
            Transaction(TransactionKind.DEPOSIT, Decimal('5'), Decimal('95'), local_dt(2024, 3, 4, 23, 59, 59)),
            Transaction(TransactionKind.DEPOSIT, Decimal('5'), Decimal('100'), local_dt(2024, 3, 5)),
        ]

    def test_unbounded(self):
        passbook = self.bank.list_transactions(self.account.account_number)

        assert isinstance(passbook, Passbook)
        assert len(passbook) == 5
        assert not passbook.is_empty

    def test_bounds_are_inclusive(self):
        passbook = self.bank.list_transactions(
            self.account.account_number, date(2024, 3, 1), date(2024, 3, 4)
        )

        assert [t.timestamp.day for t in passbook] == [1, 2, 3, 4]

    def test_open_ended_sides(self):
        since = self.bank.list_transactions(self.account.account_number, from_date="2024-03-04")
        until = self.bank.list_transactions(self.account.account_number, to_date="2024-03-02")

        assert [t.timestamp.day for t in since] == [4, 5]
        assert [t.timestamp.day for t in until] == [1, 2]

    def test_preserves_chronological_order(self):
        passbook = self.bank.list_transactions(self.account.account_number, "2024-03-02", "2024-03-05")

        stamps = [t.timestamp for t in passbook]
        assert stamps == sorted(stamps)

    def test_out_of_range_is_empty_not_error(self):
        passbook = self.bank.list_transactions(self.account.account_number, "2025-01-01", "2025-01-31")

        assert passbook.is_empty
        assert passbook.to_list() == []
        assert passbook.lines() == ["-- no transactions --"]

    def test_inverted_range_is_empty(self):
        passbook = self.bank.list_transactions(self.account.account_number, "2024-03-05", "2024-03-01")

        assert passbook.is_empty

    def test_unknown_account(self):
        with pytest.raises(AccountNotFound):
            self.bank.list_transactions(9999)

    def test_invalid_date(self):
        with pytest.raises(ValueError):
            self.bank.list_transactions(self.account.account_number, "03/01/2024")

    def test_to_list_shape(self):
        entries = self.bank.list_transactions(self.account.account_number, "2024-03-03", "2024-03-03").to_list()

        assert len(entries) == 1
        assert entries[0]["type"] == "WITHDRAW"
        assert entries[0]["amount"] == "20"
        assert entries[0]["balance"] == "90"

    def test_datetime_bounds_use_their_calendar_day(self):
        passbook = self.bank.list_transactions(
            self.account.account_number, datetime(2024, 3, 2, 18, 0), datetime(2024, 3, 3, 6, 0)
        )

        assert [t.timestamp.day for t in passbook] == [2, 3]
        assert passbook.from_date == date(2024, 3, 2)
