"""Domain model entities for equitrack.

These are pure data classes representing business concepts, independent of
database schema. Planner and ledger outputs are transient and never stored.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Role of an account in the equity engine."""

    EQUITY = "EQUITY"
    BANK = "BANK"
    OTHER = "OTHER"


class TransactionType(str, Enum):
    """Kind of a transaction in the single-entry log."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    LOAN = "LOAN"


class Purpose(str, Enum):
    """Explicit economic meaning stored on a transaction at creation time."""

    INVESTMENT = "INVESTMENT"
    WITHDRAWAL = "WITHDRAWAL"
    PROFIT_SHARE = "PROFIT_SHARE"
    PROFIT_DISTRIBUTION = "PROFIT_DISTRIBUTION"
    PM_FEE = "PM_FEE"
    EQUITY_MOVE_OUT = "EQUITY_MOVE_OUT"
    EQUITY_MOVE_IN = "EQUITY_MOVE_IN"
    CAPITAL_PAYOUT = "CAPITAL_PAYOUT"
    EQUITY_TRANSFER = "EQUITY_TRANSFER"


class LegRole(str, Enum):
    """Role of a transaction inside a linked batch."""

    DIST_EXPENSE = "DIST_EXPENSE"
    DIST_TRANSFER = "DIST_TRANSFER"
    DIVEST = "DIVEST"
    INVEST = "INVEST"
    PAYOUT = "PAYOUT"


class BatchMode(str, Enum):
    """Semantic mode of a resolved batch."""

    SIMPLE = "SIMPLE"
    BATCH_DIST = "BATCH_DIST"
    BATCH_MOVE = "BATCH_MOVE"
    BATCH_PAYOUT = "BATCH_PAYOUT"


class TransferType(str, Enum):
    """Destination of an equity transfer."""

    PROJECT = "PROJECT"
    PAYOUT = "PAYOUT"


class ScopeKind(str, Enum):
    """Selection scope of a ledger view."""

    ALL_INVESTORS = "ALL_INVESTORS"
    PROJECT = "PROJECT"
    INVESTOR = "INVESTOR"


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: int
    name: str
    account_type: AccountType
    is_permanent: bool
    created_at: datetime
    system_role: Optional[str] = None

    @property
    def is_equity(self) -> bool:
        return self.account_type == AccountType.EQUITY


@dataclass(frozen=True)
class Project:
    """Project (cost center) domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: int
    name: str
    category_type: TransactionType
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    The amount is always positive; direction comes from the transaction type
    and the roles of the accounts involved.
    """

    id: int
    unique_id: str
    transaction_type: TransactionType
    amount: Decimal
    date: date
    description: Optional[str]
    account_id: int
    from_account_id: Optional[int] = None
    to_account_id: Optional[int] = None
    project_id: Optional[int] = None
    category_id: Optional[int] = None
    contact_id: Optional[int] = None
    batch_id: Optional[str] = None
    purpose: Optional[Purpose] = None
    leg_role: Optional[LegRole] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewTransaction:
    """A transaction that has not been written to the store yet."""

    unique_id: str
    transaction_type: TransactionType
    amount: Decimal
    date: date
    description: Optional[str]
    account_id: int
    from_account_id: Optional[int] = None
    to_account_id: Optional[int] = None
    project_id: Optional[int] = None
    category_id: Optional[int] = None
    contact_id: Optional[int] = None
    batch_id: Optional[str] = None
    purpose: Optional[Purpose] = None
    leg_role: Optional[LegRole] = None


@dataclass(frozen=True)
class BalanceSnapshot:
    """Derived balances; always recomputable from the transaction log."""

    project_balances: dict[int, Decimal]
    investor_total_balances: dict[int, Decimal]
    investor_project_balances: dict[int, dict[int, Decimal]]


@dataclass(frozen=True)
class EquityTreeNode:
    """Node of the investor/project navigation tree."""

    id: int | str
    name: str
    kind: str
    amount: Decimal
    children: tuple["EquityTreeNode", ...] = ()


ROOT_INVESTORS_ID = "root-investors"


@dataclass(frozen=True)
class LedgerScope:
    """Selection scope for a ledger view."""

    kind: ScopeKind
    target_id: Optional[int] = None
    parent_project_id: Optional[int | str] = None

    @classmethod
    def all_investors(cls) -> "LedgerScope":
        return cls(ScopeKind.ALL_INVESTORS)

    @classmethod
    def project(cls, project_id: int) -> "LedgerScope":
        return cls(ScopeKind.PROJECT, target_id=project_id)

    @classmethod
    def investor(
        cls, investor_id: int, parent_project_id: Optional[int | str] = None
    ) -> "LedgerScope":
        return cls(ScopeKind.INVESTOR, target_id=investor_id, parent_project_id=parent_project_id)

    @property
    def restricted_project_id(self) -> Optional[int]:
        """Parent project that limits an investor drill-down, if any."""
        if self.kind != ScopeKind.INVESTOR:
            return None
        if self.parent_project_id is None or self.parent_project_id == ROOT_INVESTORS_ID:
            return None
        return self.parent_project_id


@dataclass(frozen=True)
class LedgerRow:
    """One classified row of an equity ledger."""

    transaction: Transaction
    payment_type: str
    is_deposit: bool
    is_withdrawal: bool
    amount: Decimal
    balance: Decimal
    info: str
    project_name: str


@dataclass(frozen=True)
class BatchEdit:
    """New field values for a batch edit. None keeps the current value."""

    amount: Optional[Decimal] = None
    date: Optional[date] = None
    description: Optional[str] = None
    project_id: Optional[int] = None
    target_project_id: Optional[int] = None
    investor_id: Optional[int] = None
    bank_account_id: Optional[int] = None


@dataclass(frozen=True)
class ResolvedBatch:
    """A transaction together with its batch siblings and inferred mode.

    ``legs`` maps leg roles to the transactions an edit rewrites. ``SIMPLE``
    and ``BATCH_PAYOUT`` batches only carry the main transaction.
    """

    main: Transaction
    siblings: tuple[Transaction, ...]
    mode: BatchMode
    legs: dict[LegRole, Transaction] = field(default_factory=dict)

    @property
    def all_transactions(self) -> tuple[Transaction, ...]:
        return (self.main,) + self.siblings


@dataclass(frozen=True)
class ProjectFinancials:
    """Operating and distribution figures for one project."""

    income: Decimal
    expense: Decimal
    net_operating: Decimal
    distributed: Decimal
    available: Decimal
    invested_capital: Decimal


@dataclass(frozen=True)
class DistributionPlan:
    """Planned profit share for one investor."""

    investor_id: int
    principal: Decimal
    share_percentage: Decimal
    profit_share: Decimal
    new_equity_balance: Decimal


@dataclass
class TransferRow:
    """Transferable equity for one investor; editable before commit."""

    investor_id: int
    current_equity: Decimal
    transfer_amount: Decimal
    selected: bool = True


@dataclass(frozen=True)
class InvestorReportRow:
    """Equity position of one investor."""

    account_id: int
    investor_name: str
    equity_invested: Decimal
    ownership_percentage: Decimal
    profit_distributed: Decimal
    withdrawals: Decimal
    net_balance: Decimal


@dataclass(frozen=True)
class InvestorReport:
    """Investor positions with totals."""

    rows: tuple[InvestorReportRow, ...]
    total_equity_raised: Decimal
    total_profit_distributed: Decimal
