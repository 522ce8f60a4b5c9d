"""Economic classification of individual transactions.

Rows written by equitrack carry an explicit ``purpose`` and, inside a batch,
a ``leg_role``. Rows that predate those tags (or were imported from the
legacy application) only have a free-text description and a structural
``unique_id``; the ``legacy_*`` helpers below infer their meaning the way the
legacy application did. They are kept in this module only, so that no other
module depends on description text.
"""

from typing import Iterable, Optional

from equitrack.config import CLEARING_ACCOUNT_NAME, CLEARING_SYSTEM_ROLE
from equitrack.domain.entities import Account, LegRole, Purpose, Transaction, TransactionType
from equitrack.utils.ids import LEG_PREFIXES

PROFIT_KEYWORD = "profit"
PM_FEE_KEYWORD = "pm fee"
MOVE_KEYWORD = "move"
DIVESTMENT_MARKER = "Equity Move out"

# Structural unique_id prefixes of batch legs; "divest" is checked before "invest"
LEG_ID_PREFIXES = tuple(LEG_PREFIXES.items())

PROFIT_PURPOSES = {Purpose.PROFIT_SHARE, Purpose.PM_FEE}


def _description(txn: Transaction) -> str:
    return (txn.description or "").lower()


def legacy_mentions_profit(txn: Transaction) -> bool:
    """Description contains "profit" (case-insensitive)."""
    return PROFIT_KEYWORD in _description(txn)


def legacy_mentions_pm_fee(txn: Transaction) -> bool:
    """Description contains "pm fee" (case-insensitive)."""
    return PM_FEE_KEYWORD in _description(txn)


def legacy_mentions_move(txn: Transaction) -> bool:
    """Description contains "move" (case-insensitive)."""
    return MOVE_KEYWORD in _description(txn)


def legacy_is_divestment(txn: Transaction) -> bool:
    """Description contains "Equity Move out" (case-sensitive)."""
    return DIVESTMENT_MARKER in (txn.description or "")


def legacy_leg_role(txn: Transaction) -> Optional[LegRole]:
    """Infer a leg role from the structural unique_id convention."""
    for role, prefix in LEG_ID_PREFIXES:
        if prefix in txn.unique_id:
            return role
    return None


def leg_role_of(txn: Transaction) -> Optional[LegRole]:
    """Explicit leg role, falling back to the unique_id convention."""
    if txn.leg_role is not None:
        return txn.leg_role
    return legacy_leg_role(txn)


def leg_pair_key(txn: Transaction) -> Optional[str]:
    """Part of unique_id shared by the legs of one investor inside a batch.

    Engine-created legs use "<prefix>-<batch_id>-<investor_id>", so the
    divest/invest (or expense/transfer) legs of one investor share the
    suffix after the prefix.
    """
    for _role, prefix in LEG_ID_PREFIXES:
        marker = prefix + "-"
        if txn.unique_id.startswith(marker):
            return txn.unique_id[len(marker):]
    return None


def is_profit_share(txn: Transaction) -> bool:
    """Whether a transfer into an equity account credits the investor.

    Used by the balance aggregator: tagged rows count profit shares and PM
    fee deposits; untagged rows only count descriptions mentioning profit.
    """
    if txn.purpose is not None:
        return txn.purpose in PROFIT_PURPOSES
    return legacy_mentions_profit(txn)


def is_pm_fee(txn: Transaction) -> bool:
    """Whether a transfer is a project-management fee paid into equity."""
    if txn.purpose is not None:
        return txn.purpose == Purpose.PM_FEE
    return legacy_mentions_pm_fee(txn)


def is_ledger_profit_share(txn: Transaction) -> bool:
    """Whether a ledger row into an investor reads as a profit share."""
    if txn.purpose is not None:
        return txn.purpose == Purpose.PROFIT_SHARE
    return legacy_mentions_profit(txn)


def is_divestment(txn: Transaction) -> bool:
    """Whether a transfer is the outgoing leg of an equity move."""
    if txn.purpose is not None or txn.leg_role is not None:
        return txn.purpose == Purpose.EQUITY_MOVE_OUT or txn.leg_role == LegRole.DIVEST
    return legacy_is_divestment(txn)


def is_clearing_account(account: Optional[Account], clearing_ids: Iterable[int] = ()) -> bool:
    """Whether an account is the internal clearing account.

    An account counts as clearing when its ID is one of the resolved clearing
    IDs, when it carries the clearing system role, or (legacy data) when it
    is named "Internal Clearing".
    """
    if account is None:
        return False
    if account.id in set(clearing_ids):
        return True
    if account.system_role == CLEARING_SYSTEM_ROLE:
        return True
    return account.name == CLEARING_ACCOUNT_NAME


def infer_purpose(
    txn: Transaction, accounts_by_id: dict[int, Account]
) -> Optional[Purpose]:
    """Infer an explicit purpose for an untagged legacy transaction.

    Returns None when the row has no equity meaning.
    """
    account = accounts_by_id.get(txn.account_id)
    if txn.transaction_type == TransactionType.INCOME:
        if account is not None and account.is_equity:
            return Purpose.PROFIT_SHARE
        return None
    if txn.transaction_type == TransactionType.EXPENSE:
        if legacy_leg_role(txn) == LegRole.DIST_EXPENSE:
            return Purpose.PROFIT_DISTRIBUTION
        return None
    if txn.transaction_type != TransactionType.TRANSFER:
        return None

    source = accounts_by_id.get(txn.from_account_id) if txn.from_account_id else None
    target = accounts_by_id.get(txn.to_account_id) if txn.to_account_id else None
    from_equity = source is not None and source.is_equity
    to_equity = target is not None and target.is_equity

    if from_equity and to_equity:
        return Purpose.EQUITY_TRANSFER
    if from_equity:
        if legacy_leg_role(txn) == LegRole.INVEST:
            return Purpose.EQUITY_MOVE_IN
        return Purpose.INVESTMENT
    if to_equity:
        if is_clearing_account(source) and legacy_mentions_pm_fee(txn):
            return Purpose.PM_FEE
        if legacy_mentions_profit(txn):
            return Purpose.PROFIT_SHARE
        if legacy_is_divestment(txn) or legacy_leg_role(txn) == LegRole.DIVEST:
            return Purpose.EQUITY_MOVE_OUT
        if legacy_leg_role(txn) == LegRole.PAYOUT:
            return Purpose.CAPITAL_PAYOUT
        return Purpose.WITHDRAWAL
    return None
