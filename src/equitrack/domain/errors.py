"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class NoCapitalError(DomainError):
    """A distribution was requested for a project with no positive capital."""


class NoEquityError(DomainError):
    """A transfer was requested for a project with no positive equity."""


class AmbiguousBatchError(DomainError):
    """A linked batch could not be mapped to a known batch mode."""


class StoreWriteError(DomainError):
    """A write against the transaction store failed and was rolled back."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def not_an_equity_account(account_id: int) -> str:
    """Return message when an investor selection is not an equity account."""
    return f"Account {account_id} is not an equity account"


def invalid_amount(amount: object) -> str:
    """Return message for non-positive or non-numeric amounts."""
    return f"Invalid amount '{amount}': amount must be a positive number"


def ambiguous_batch(batch_id: str, leg_count: int) -> str:
    """Return message for a batch whose mode cannot be inferred."""
    return (
        f"Batch '{batch_id}' has {leg_count} linked transactions but its type "
        "could not be determined, so it can only be deleted as a whole."
    )


def batch_member_delete_blocked(transaction_id: int, batch_id: str) -> str:
    """Return message when a single leg of a batch is deleted directly."""
    return (
        f"Transaction {transaction_id} belongs to batch '{batch_id}'. "
        "Use 'batch delete' to remove all linked entries together."
    )
