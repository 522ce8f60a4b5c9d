"""Runtime settings for equitrack.

Settings come from environment variables so that the CLI, scripts and tests
share one configuration surface.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional

CLEARING_ACCOUNT_NAME = "Internal Clearing"
CLEARING_SYSTEM_ROLE = "clearing"
DEFAULT_DISTRIBUTION_CATEGORY = "Owner Equity"
EQUITY_CATEGORY_NAMES = ("Owner Equity", "Owner Withdrawn", "Profit Share", "Dividend")
DEFAULT_ROUNDING_UNIT = Decimal("100")


@dataclass(frozen=True)
class Settings:
    """Engine settings."""

    database_path: Optional[str] = None
    clearing_account_id: Optional[int] = None
    rounding_unit: Decimal = DEFAULT_ROUNDING_UNIT
    distribution_category: str = DEFAULT_DISTRIBUTION_CATEGORY
    equity_category_names: tuple[str, ...] = EQUITY_CATEGORY_NAMES


def default_database_path() -> str:
    """Return ~/.equitrack/equitrack.db, creating the directory if needed."""
    db_dir = Path.home() / ".equitrack"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "equitrack.db")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance

    Raises:
        ValueError: If a variable holds a value of the wrong type
    """
    if environ is None:
        environ = os.environ

    clearing_account_id = None
    raw_clearing = environ.get("EQUITRACK_CLEARING_ACCOUNT_ID")
    if raw_clearing:
        try:
            clearing_account_id = int(raw_clearing)
        except ValueError:
            raise ValueError(
                f"EQUITRACK_CLEARING_ACCOUNT_ID must be an account ID, got '{raw_clearing}'"
            )

    rounding_unit = DEFAULT_ROUNDING_UNIT
    raw_unit = environ.get("EQUITRACK_ROUNDING_UNIT")
    if raw_unit:
        try:
            rounding_unit = Decimal(raw_unit)
        except InvalidOperation:
            raise ValueError(f"EQUITRACK_ROUNDING_UNIT must be a number, got '{raw_unit}'")
        if not rounding_unit.is_finite() or rounding_unit <= 0:
            raise ValueError(f"EQUITRACK_ROUNDING_UNIT must be positive, got '{raw_unit}'")

    return Settings(
        database_path=environ.get("EQUITRACK_DB_PATH") or None,
        clearing_account_id=clearing_account_id,
        rounding_unit=rounding_unit,
        distribution_category=environ.get(
            "EQUITRACK_DISTRIBUTION_CATEGORY", DEFAULT_DISTRIBUTION_CATEGORY
        ),
    )
