"""Identifier generation for transactions and batches."""

from uuid import uuid4

from equitrack.domain.entities import LegRole

# unique_id prefixes of batch legs
LEG_PREFIXES = {
    LegRole.DIST_EXPENSE: "prof-exp",
    LegRole.DIST_TRANSFER: "prof-inc",
    LegRole.DIVEST: "divest",
    LegRole.INVEST: "invest",
    LegRole.PAYOUT: "payout",
}


def new_batch_id(prefix: str) -> str:
    """Return a fresh batch ID such as "dist-cycle-1f0c...".

    Args:
        prefix: Batch kind prefix (e.g. "dist-cycle", "eq-move", "eq-payout")
    """
    return f"{prefix}-{uuid4().hex}"


def leg_unique_id(role: LegRole, batch_id: str, investor_id: int) -> str:
    """Structural unique_id of one batch leg."""
    return f"{LEG_PREFIXES[role]}-{batch_id}-{investor_id}"


def entry_unique_id(prefix: str = "eq-tx") -> str:
    """unique_id of a single (non-batch) entry."""
    return f"{prefix}-{uuid4().hex}"
