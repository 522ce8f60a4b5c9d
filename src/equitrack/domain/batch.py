"""Batch resolution, batch edits and batch deletes.

A batch is the set of transactions sharing a ``batch_id``: one atomic
economic event such as a profit-distribution cycle or an equity move. Its
legs are always edited and deleted together.
"""

import logging
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from equitrack.database.base import Database
from equitrack.domain.classification import (
    leg_pair_key,
    leg_role_of,
    legacy_leg_role,
    legacy_mentions_move,
    legacy_mentions_profit,
)
from equitrack.domain.entities import (
    Account,
    BatchEdit,
    BatchMode,
    LegRole,
    Project,
    ResolvedBatch,
    Transaction,
    TransactionType,
)
from equitrack.domain.errors import (
    AmbiguousBatchError,
    NotFoundError,
    ValidationError,
    ambiguous_batch,
    not_an_equity_account,
    transaction_not_found,
)
from equitrack.utils.amount_parser import require_positive_amount

logger = logging.getLogger(__name__)

DIST_ROLES = {LegRole.DIST_EXPENSE, LegRole.DIST_TRANSFER}
MOVE_ROLES = {LegRole.DIVEST, LegRole.INVEST}


def find_batch_members(
    main_transaction_id: int, transactions: Iterable[Transaction]
) -> tuple[Transaction, list[Transaction]]:
    """Find a transaction and the other transactions sharing its batch ID.

    Raises:
        NotFoundError: If the transaction doesn't exist
    """
    transactions = list(transactions)
    main = next((t for t in transactions if t.id == main_transaction_id), None)
    if main is None:
        raise NotFoundError(transaction_not_found(main_transaction_id))
    if not main.batch_id:
        return main, []
    siblings = [t for t in transactions if t.batch_id == main.batch_id and t.id != main.id]
    return main, siblings


def infer_batch_mode(main: Transaction, siblings: Sequence[Transaction]) -> Optional[BatchMode]:
    """Infer the mode of a multi-leg batch, or None if it is not recognised.

    Explicit leg roles win; untagged batches fall back to the legacy rules on
    the descriptions of the main transaction and its first sibling, then to
    payout-tagged unique IDs.
    """
    roles = {t.leg_role for t in [main, *siblings] if t.leg_role is not None}
    if roles & DIST_ROLES:
        return BatchMode.BATCH_DIST
    if roles & MOVE_ROLES:
        return BatchMode.BATCH_MOVE
    if LegRole.PAYOUT in roles:
        return BatchMode.BATCH_PAYOUT

    first = siblings[0] if siblings else None
    pair = [main] if first is None else [main, first]
    if any(legacy_mentions_profit(t) for t in pair):
        return BatchMode.BATCH_DIST
    if any(legacy_mentions_move(t) for t in pair):
        return BatchMode.BATCH_MOVE
    if any(legacy_leg_role(t) == LegRole.PAYOUT for t in pair):
        return BatchMode.BATCH_PAYOUT
    return None


def _pair_candidates(main: Transaction, members: list[Transaction]) -> list[Transaction]:
    """Legs that belong to the same investor as main, or all members if unknown."""
    key = leg_pair_key(main)
    if key is None:
        return members
    paired = [t for t in members if leg_pair_key(t) == key]
    return paired if len(paired) > 1 else members


def _locate_legs(
    mode: BatchMode, main: Transaction, siblings: list[Transaction]
) -> dict[LegRole, Transaction]:
    members = [main, *siblings]
    candidates = _pair_candidates(main, members)

    if mode == BatchMode.BATCH_MOVE:
        divest = next((t for t in candidates if leg_role_of(t) == LegRole.DIVEST), None)
        invest = next((t for t in candidates if leg_role_of(t) == LegRole.INVEST), None)
        if divest is None or invest is None:
            raise AmbiguousBatchError(
                f"Equity move batch '{main.batch_id}' is missing its divest or invest leg"
            )
        return {LegRole.DIVEST: divest, LegRole.INVEST: invest}

    if mode == BatchMode.BATCH_DIST:
        expense = next(
            (t for t in candidates if t.transaction_type == TransactionType.EXPENSE), None
        )
        transfer = next(
            (t for t in candidates if t.transaction_type == TransactionType.TRANSFER), None
        )
        if expense is None or transfer is None:
            raise AmbiguousBatchError(
                f"Distribution batch '{main.batch_id}' is missing its expense or transfer leg"
            )
        return {LegRole.DIST_EXPENSE: expense, LegRole.DIST_TRANSFER: transfer}

    if mode == BatchMode.BATCH_PAYOUT:
        return {LegRole.PAYOUT: main}

    return {}


def resolve_batch(
    main_transaction_id: int, transactions: Iterable[Transaction]
) -> ResolvedBatch:
    """Find a transaction's batch siblings and infer the batch mode.

    Args:
        main_transaction_id: ID of the transaction the user selected
        transactions: Transaction log

    Returns:
        ResolvedBatch

    Raises:
        NotFoundError: If the transaction doesn't exist
        AmbiguousBatchError: If a multi-leg batch matches no known mode
    """
    main, siblings = find_batch_members(main_transaction_id, transactions)
    if not siblings:
        return ResolvedBatch(main=main, siblings=(), mode=BatchMode.SIMPLE)

    mode = infer_batch_mode(main, siblings)
    if mode is None:
        logger.warning(
            "Batch '%s' (%d legs) matches no known batch type; refusing to treat it as simple",
            main.batch_id,
            len(siblings) + 1,
        )
        raise AmbiguousBatchError(ambiguous_batch(main.batch_id, len(siblings) + 1))

    return ResolvedBatch(
        main=main,
        siblings=tuple(siblings),
        mode=mode,
        legs=_locate_legs(mode, main, siblings),
    )


def _check_investor(investor_id: Optional[int], accounts_by_id: dict[int, Account]) -> None:
    if investor_id is None:
        return
    account = accounts_by_id.get(investor_id)
    if account is None or not account.is_equity:
        raise ValidationError(not_an_equity_account(investor_id))


def _check_bank(bank_account_id: Optional[int], accounts_by_id: dict[int, Account]) -> None:
    if bank_account_id is None:
        return
    account = accounts_by_id.get(bank_account_id)
    if account is None or account.is_equity:
        raise ValidationError(f"Account {bank_account_id} is not a bank account")


def _common_fields(txn: Transaction, edit: BatchEdit) -> Transaction:
    """Apply amount, date, description and project edits to one leg."""
    changes = {}
    if edit.amount is not None:
        changes["amount"] = edit.amount
    if edit.date is not None:
        changes["date"] = edit.date
    if edit.description is not None:
        changes["description"] = edit.description
    if edit.project_id is not None:
        changes["project_id"] = edit.project_id
    return replace(txn, **changes)


def _edit_single(txn: Transaction, edit: BatchEdit, accounts_by_id: dict[int, Account]) -> Transaction:
    """Rewrite one investment, withdrawal or income leg in place."""
    updated = _common_fields(txn, edit)

    if txn.transaction_type == TransactionType.INCOME:
        if edit.investor_id is not None:
            updated = replace(updated, account_id=edit.investor_id)
        return updated

    source = accounts_by_id.get(txn.from_account_id)
    target = accounts_by_id.get(txn.to_account_id)
    from_equity = source is not None and source.is_equity
    to_equity = target is not None and target.is_equity

    from_id, to_id = txn.from_account_id, txn.to_account_id
    if from_equity and not to_equity:
        # Investment: investor -> bank
        from_id = edit.investor_id or from_id
        to_id = edit.bank_account_id or to_id
    elif to_equity and not from_equity:
        # Withdrawal: bank -> investor
        from_id = edit.bank_account_id or from_id
        to_id = edit.investor_id or to_id

    return replace(updated, from_account_id=from_id, to_account_id=to_id, account_id=from_id)


def _project_name(project_id: Optional[int], projects_by_id: dict[int, Project]) -> Optional[str]:
    project = projects_by_id.get(project_id)
    return project.name if project is not None else None


def commit_edit(
    batch: ResolvedBatch,
    edit: BatchEdit,
    accounts: Sequence[Account],
    projects: Sequence[Project],
) -> list[Transaction]:
    """Apply an edit consistently to every leg of a resolved batch.

    Args:
        batch: Resolved batch
        edit: New field values (None keeps the current value)
        accounts: All accounts, to validate investor and bank selections
        projects: All projects, for move descriptions

    Returns:
        Updated transactions, keeping their IDs

    Raises:
        ValidationError: If the amount is not positive or a selection is invalid
    """
    if edit.amount is not None:
        edit = replace(edit, amount=require_positive_amount(edit.amount))

    accounts_by_id = {acc.id: acc for acc in accounts}
    projects_by_id = {p.id: p for p in projects}
    _check_investor(edit.investor_id, accounts_by_id)
    _check_bank(edit.bank_account_id, accounts_by_id)
    for project_id in (edit.project_id, edit.target_project_id):
        if project_id is not None and project_id not in projects_by_id:
            raise ValidationError(f"Project {project_id} not found")

    if batch.mode in (BatchMode.SIMPLE, BatchMode.BATCH_PAYOUT):
        return [_edit_single(batch.main, edit, accounts_by_id)]

    if batch.mode == BatchMode.BATCH_MOVE:
        divest = batch.legs[LegRole.DIVEST]
        invest = batch.legs[LegRole.INVEST]
        investor_id = edit.investor_id or divest.to_account_id
        source_project_id = edit.project_id or divest.project_id
        target_project_id = edit.target_project_id or invest.project_id

        source_name = _project_name(source_project_id, projects_by_id)
        target_name = _project_name(target_project_id, projects_by_id)
        move_edit = replace(edit, description=None, project_id=None)

        updated_divest = replace(
            _common_fields(divest, move_edit),
            project_id=source_project_id,
            to_account_id=investor_id,
        )
        if source_name is not None:
            updated_divest = replace(updated_divest, description=f"Equity Move out of {source_name}")

        updated_invest = replace(
            _common_fields(invest, move_edit),
            project_id=target_project_id,
            from_account_id=investor_id,
            account_id=investor_id,
        )
        if target_name is not None:
            updated_invest = replace(updated_invest, description=f"Equity Move in to {target_name}")
        return [updated_divest, updated_invest]

    expense = batch.legs[LegRole.DIST_EXPENSE]
    transfer = batch.legs[LegRole.DIST_TRANSFER]
    updated_transfer = _common_fields(transfer, edit)
    if edit.investor_id is not None:
        updated_transfer = replace(updated_transfer, to_account_id=edit.investor_id)
    return [_common_fields(expense, edit), updated_transfer]


class BatchService:
    """Service for editing and deleting batches as a unit."""

    def __init__(self, db: Database):
        """Initialize batch service.

        Args:
            db: Database instance
        """
        self.db = db

    def resolve(self, transaction_id: int) -> ResolvedBatch:
        """Resolve a transaction's batch from the store."""
        return resolve_batch(transaction_id, self.db.list_transactions())

    def edit(self, transaction_id: int, edit: BatchEdit) -> list[Transaction]:
        """Rewrite every leg of a transaction's batch in one store call.

        Returns:
            Updated transactions
        """
        batch = self.resolve(transaction_id)
        updated = commit_edit(batch, edit, self.db.list_accounts(), self.db.list_projects())
        self.db.update_transactions(updated)
        logger.info(
            "Updated %d leg(s) of %s transaction %d",
            len(updated),
            batch.mode.value,
            transaction_id,
        )
        return updated

    def delete(self, transaction_id: int) -> list[int]:
        """Delete a transaction together with all of its batch siblings.

        Ambiguous batches are deleted too, since deleting needs no mode.

        Returns:
            IDs of the deleted transactions
        """
        main, siblings = find_batch_members(transaction_id, self.db.list_transactions())
        ids = [main.id] + [t.id for t in siblings]
        self.db.delete_transactions(ids)
        logger.info("Deleted %d transaction(s) of batch %s", len(ids), main.batch_id or "-")
        return ids
