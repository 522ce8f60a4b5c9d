"""Utilities for resolving account and project names to IDs."""

from typing import Protocol, Sequence

from equitrack.domain.errors import NotFoundError


class _Named(Protocol):
    id: int
    name: str


def _resolve(items: Sequence[_Named], value: str | int, label: str) -> int:
    """Resolve a name or ID (int or numeric string) against a list of entities."""
    known_ids = {item.id for item in items}

    if isinstance(value, int):
        if value not in known_ids:
            raise NotFoundError(f"{label} ID {value} not found")
        return value

    # Try to parse as integer (handles string IDs like "1")
    try:
        item_id = int(value)
    except (ValueError, TypeError):
        pass
    else:
        if item_id not in known_ids:
            raise NotFoundError(f"{label} ID {item_id} not found")
        return item_id

    for item in items:
        if item.name == value:
            return item.id

    raise NotFoundError(f"{label} '{value}' not found")


def resolve_account(account_service, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    return _resolve(account_service.list_accounts(), account, "Account")


def resolve_project(project_service, project: str | int) -> int:
    """Resolve project name or ID to project ID.

    Raises:
        NotFoundError: If project is not found
    """
    return _resolve(project_service.list_projects(), project, "Project")
