"""Mapper functions to convert between domain models and SQLAlchemy models.

Enum-typed columns are stored as plain strings; the conversion happens here
so that the rest of the code only sees domain enums.
"""

from equitrack.domain import entities as domain
from equitrack.database.models import (
    Account as ORMAccount,
    Project as ORMProject,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        is_permanent=bool(orm_account.is_permanent),
        created_at=orm_account.created_at,
        system_role=orm_account.system_role,
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        name=orm_project.name,
        created_at=orm_project.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        category_type=domain.TransactionType(orm_category.category_type),
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        unique_id=orm_transaction.unique_id,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        amount=orm_transaction.amount,
        date=orm_transaction.date,
        description=orm_transaction.description,
        account_id=orm_transaction.account_id,
        from_account_id=orm_transaction.from_account_id,
        to_account_id=orm_transaction.to_account_id,
        project_id=orm_transaction.project_id,
        category_id=orm_transaction.category_id,
        contact_id=orm_transaction.contact_id,
        batch_id=orm_transaction.batch_id,
        purpose=domain.Purpose(orm_transaction.purpose) if orm_transaction.purpose else None,
        leg_role=domain.LegRole(orm_transaction.leg_role) if orm_transaction.leg_role else None,
        created_at=orm_transaction.created_at,
    )


def transaction_to_orm(
    txn: domain.NewTransaction | domain.Transaction,
    orm_transaction: ORMTransaction | None = None,
) -> ORMTransaction:
    """Copy domain transaction fields onto an ORM row.

    Creates a new row when orm_transaction is None; the id is never copied.
    """
    if orm_transaction is None:
        orm_transaction = ORMTransaction()
    orm_transaction.unique_id = txn.unique_id
    orm_transaction.transaction_type = txn.transaction_type.value
    orm_transaction.amount = txn.amount
    orm_transaction.date = txn.date
    orm_transaction.description = txn.description
    orm_transaction.account_id = txn.account_id
    orm_transaction.from_account_id = txn.from_account_id
    orm_transaction.to_account_id = txn.to_account_id
    orm_transaction.project_id = txn.project_id
    orm_transaction.category_id = txn.category_id
    orm_transaction.contact_id = txn.contact_id
    orm_transaction.batch_id = txn.batch_id
    orm_transaction.purpose = txn.purpose.value if txn.purpose else None
    orm_transaction.leg_role = txn.leg_role.value if txn.leg_role else None
    return orm_transaction
