"""Tests for account balance derivation."""

from datetime import date
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from budgetline.domain.balance import (
    accumulate_rollups,
    calculate_financial_summary,
    compute_balances,
)
from budgetline.domain.entities import (
    Account,
    AccountType,
    Transaction,
    TransactionType,
)
from budgetline.domain.errors import ValidationError


def _account(account_id, account_type=AccountType.CHECKING, initial="0", is_active=True):
    return Account(
        id=account_id,
        account_type=account_type,
        account_name=f"Account {account_id}",
        initial_balance=Decimal(initial),
        is_active=is_active,
    )


def _txn(txn_id, txn_type, amount, account_id, to_account_id=None, category="other"):
    return Transaction(
        id=txn_id,
        date=date(2025, 3, 1),
        description=f"Transaction {txn_id}",
        amount=Decimal(amount) if isinstance(amount, str) else amount,
        category=category,
        type=txn_type,
        account_id=account_id,
        transfer_to_account_id=to_account_id,
    )


def _by_id(balances):
    return {b.account_id: b for b in balances}


def test_transfer_between_asset_accounts_conserves_money():
    """A 300 transfer moves money from checking to savings."""
    accounts = [
        _account(1, AccountType.CHECKING, "1200"),
        _account(2, AccountType.SAVINGS, "0"),
    ]
    transactions = [_txn("t1", TransactionType.TRANSFER, "300", 1, 2)]

    balances = _by_id(compute_balances(accounts, transactions))

    assert balances[1].balance == Decimal("900")
    assert balances[2].balance == Decimal("300")
    assert balances[1].total_transfers_out == Decimal("300")
    assert balances[2].total_transfers_in == Decimal("300")
    assert balances[1].balance + balances[2].balance == Decimal("1200")


def test_transfer_counts_once_for_source_only():
    accounts = [_account(1), _account(2, AccountType.SAVINGS)]
    transactions = [_txn("t1", TransactionType.TRANSFER, "50", 1, 2)]

    balances = _by_id(compute_balances(accounts, transactions))

    assert balances[1].transaction_count == 1
    assert balances[2].transaction_count == 0


def test_income_and_expense_on_asset_account():
    accounts = [_account(1, AccountType.CHECKING, "100")]
    transactions = [
        _txn("t1", TransactionType.INCOME, "2500", 1),
        _txn("t2", TransactionType.EXPENSE, "75.25", 1),
    ]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("2524.75")
    assert balance.total_income == Decimal("2500")
    assert balance.total_expenses == Decimal("75.25")
    assert balance.transaction_count == 2


def test_debt_account_expense_increases_amount_owed():
    accounts = [_account(1, AccountType.CREDIT_CARD, "500")]
    transactions = [_txn("t1", TransactionType.EXPENSE, "80", 1)]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("580")


def test_payment_to_debt_account_reduces_amount_owed():
    """Paying a card from checking lowers both balances."""
    accounts = [
        _account(1, AccountType.CHECKING, "1000"),
        _account(2, AccountType.CREDIT_CARD, "500"),
    ]
    transactions = [_txn("t1", TransactionType.TRANSFER, "200", 1, 2)]

    balances = _by_id(compute_balances(accounts, transactions))

    assert balances[1].balance == Decimal("800")
    assert balances[2].balance == Decimal("300")


def test_transfer_out_of_debt_account_increases_amount_owed():
    """A cash advance from a loan into checking raises the debt."""
    accounts = [
        _account(1, AccountType.STUDENT_LOAN, "10000"),
        _account(2, AccountType.CHECKING, "0"),
    ]
    transactions = [_txn("t1", TransactionType.TRANSFER, "1500", 1, 2)]

    balances = _by_id(compute_balances(accounts, transactions))

    assert balances[1].balance == Decimal("11500")
    assert balances[2].balance == Decimal("1500")


def test_income_on_debt_account_reduces_amount_owed():
    accounts = [_account(1, AccountType.CREDIT_CARD, "100")]
    transactions = [_txn("t1", TransactionType.INCOME, "30", 1)]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("70")


def test_display_balance_of_overpaid_debt_is_absolute():
    accounts = [_account(1, AccountType.CREDIT_CARD, "0")]
    transactions = [_txn("t1", TransactionType.INCOME, "40", 1)]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("-40")
    assert balance.display_balance == Decimal("40")


def test_initial_balance_shifts_result_linearly():
    transactions = [
        _txn("t1", TransactionType.INCOME, "10", 1),
        _txn("t2", TransactionType.EXPENSE, "3", 1),
    ]

    [low] = compute_balances([_account(1, initial="0")], transactions)
    [high] = compute_balances([_account(1, initial="250")], transactions)

    assert high.balance - low.balance == Decimal("250")


def test_no_transactions_keeps_initial_balance():
    accounts = [_account(1, initial="42.50"), _account(2, AccountType.CREDIT_CARD, "99")]

    balances = _by_id(compute_balances(accounts, []))

    assert balances[1].balance == Decimal("42.50")
    assert balances[2].balance == Decimal("99")
    assert balances[1].transaction_count == 0


def test_results_follow_input_order():
    accounts = [_account(3), _account(1), _account(2)]

    balances = compute_balances(accounts, [])

    assert [b.account_id for b in balances] == [3, 1, 2]


def test_inactive_accounts_are_still_computed():
    accounts = [_account(1, initial="10", is_active=False)]
    transactions = [_txn("t1", TransactionType.INCOME, "5", 1)]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("15")


def test_transactions_without_account_are_ignored():
    accounts = [_account(1, initial="100")]
    transactions = [
        _txn("t1", TransactionType.EXPENSE, "40", None),
        _txn("t2", TransactionType.EXPENSE, "10", 1),
    ]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("90")
    assert balance.transaction_count == 1


def test_transactions_for_unknown_accounts_are_ignored():
    accounts = [_account(1, initial="100")]
    transactions = [_txn("t1", TransactionType.EXPENSE, "40", 99)]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("100")


def test_transfer_to_untracked_account_still_debits_source():
    accounts = [_account(1, initial="100")]
    transactions = [_txn("t1", TransactionType.TRANSFER, "40", 1, 99)]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("60")


def test_invalid_amount_counts_as_zero_and_warns():
    accounts = [_account(1, initial="100")]
    transactions = [
        _txn("bad", TransactionType.EXPENSE, Decimal("NaN"), 1),
        _txn("good", TransactionType.EXPENSE, "10", 1),
    ]

    with capture_logs() as logs:
        [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("90")
    warnings = [entry for entry in logs if entry["event"] == "transaction_amount_invalid"]
    assert len(warnings) == 1
    assert warnings[0]["transaction_id"] == "bad"
    assert warnings[0]["log_level"] == "warning"


def test_string_amounts_are_coerced():
    accounts = [_account(1, initial="0")]
    transactions = [
        Transaction(
            id="t1",
            date="2025-03-01",
            description="Legacy row",
            amount="1,234.50",
            category="salary",
            type="income",
            account_id=1,
        )
    ]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("1234.50")


def test_transfer_to_same_account_is_skipped_with_warning():
    accounts = [_account(1, initial="100")]
    transactions = [_txn("t1", TransactionType.TRANSFER, "40", 1, 1)]

    with capture_logs() as logs:
        [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("100")
    assert balance.transaction_count == 0
    assert any(entry["event"] == "transfer_skipped" for entry in logs)


def test_unknown_transaction_type_is_skipped_with_warning():
    accounts = [_account(1, initial="100")]
    transactions = [_txn("t1", "refund", "40", 1)]

    with capture_logs() as logs:
        [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("100")
    assert any(entry["event"] == "transaction_type_invalid" for entry in logs)


def test_missing_collections_raise():
    with pytest.raises(ValidationError):
        compute_balances(None, [])
    with pytest.raises(ValidationError):
        compute_balances([], None)


def test_empty_accounts_give_empty_result():
    assert compute_balances([], [_txn("t1", TransactionType.INCOME, "5", 1)]) == []


def test_transfer_with_detached_destination_still_debits_source():
    accounts = [_account(1, initial="1000")]
    transactions = [_txn("t1", TransactionType.TRANSFER, "300", 1, None)]

    with capture_logs() as logs:
        [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("700")
    assert balance.total_transfers_out == Decimal("300")
    assert balance.transaction_count == 1
    assert not any(entry["event"] == "transfer_skipped" for entry in logs)


def test_transfer_with_detached_source_still_credits_destination():
    accounts = [_account(2, initial="0")]
    transactions = [_txn("t1", TransactionType.TRANSFER, "300", None, 2)]

    [balance] = compute_balances(accounts, transactions)

    assert balance.balance == Decimal("300")
    assert balance.total_transfers_in == Decimal("300")
    assert balance.transaction_count == 0


def test_accumulate_rollups_only_tracks_requested_accounts():
    transactions = [
        _txn("t1", TransactionType.INCOME, "10", 1),
        _txn("t2", TransactionType.INCOME, "20", 2),
    ]

    rollups = accumulate_rollups([1], transactions)

    assert set(rollups) == {1}
    assert rollups[1]["income"] == Decimal("10")
    assert rollups[1]["count"] == 1


def test_financial_summary_totals_and_net_worth():
    accounts = [
        _account(1, AccountType.CHECKING, "2300"),
        _account(2, AccountType.SAVINGS, "300"),
        _account(3, AccountType.CREDIT_CARD, "380"),
        _account(4, AccountType.STUDENT_LOAN, "1000"),
        _account(5, AccountType.CHECKING, "999", is_active=False),
    ]

    summary = calculate_financial_summary(compute_balances(accounts, []))

    assert summary.total_checking == Decimal("2300")
    assert summary.total_savings == Decimal("300")
    assert summary.total_debt == Decimal("1380")
    assert summary.net_worth == Decimal("1220")
    assert [b.account_id for b in summary.checking_accounts] == [1]
    assert [b.account_id for b in summary.debt_accounts] == [3, 4]


def test_financial_summary_counts_overpaid_debt_by_absolute_value():
    accounts = [_account(1, AccountType.CREDIT_CARD, "-25")]

    summary = calculate_financial_summary(compute_balances(accounts, []))

    assert summary.total_debt == Decimal("25")


class TestBalanceService:
    """Tests for BalanceService against a real database."""

    def test_balances_from_store(self, balance_service, sample_accounts, sample_transactions):
        balances = {b.account.account_name: b for b in balance_service.get_account_balances()}

        assert balances["Checking"].balance == Decimal("2300")
        assert balances["Savings"].balance == Decimal("300")
        assert balances["Visa"].balance == Decimal("380")
        assert balances["Checking"].transaction_count == 4

    def test_financial_summary_from_store(
        self, balance_service, sample_accounts, sample_transactions
    ):
        summary = balance_service.get_financial_summary()

        assert summary.total_checking == Decimal("2300")
        assert summary.total_savings == Decimal("300")
        assert summary.total_debt == Decimal("380")
        assert summary.net_worth == Decimal("2220")

    def test_single_account_balance(self, balance_service, sample_accounts, sample_transactions):
        balance = balance_service.get_account_balance(sample_accounts["Savings"].id)

        assert balance.balance == Decimal("300")
        assert balance_service.get_account_balance(999) is None

    def test_deleted_account_drops_out_of_summary(
        self, balance_service, account_service, sample_accounts, sample_transactions
    ):
        account_service.delete_account(sample_accounts["Visa"].id)

        names = [b.account.account_name for b in balance_service.get_account_balances()]
        assert "Visa" not in names
        assert balance_service.get_financial_summary().total_debt == Decimal("0")

        all_names = [
            b.account.account_name
            for b in balance_service.get_account_balances(include_inactive=True)
        ]
        assert "Visa" in all_names

    def test_detaching_destination_keeps_source_history(
        self, balance_service, account_service, sample_accounts, sample_transactions
    ):
        detached = account_service.delete_account(
            sample_accounts["Savings"].id, detach_transactions=True
        )

        assert detached == 1
        checking = balance_service.get_account_balance(sample_accounts["Checking"].id)
        # The transfer still left Checking even though Savings was detached
        assert checking.balance == Decimal("2300")
        assert checking.total_transfers_out == Decimal("500")
