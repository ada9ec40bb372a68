"""Human-readable display IDs such as ``ACT-alpha-042``.

A per-prefix counter lives in ``display_id_counters``. Counter 1 is
``alpha-001``, 999 is ``alpha-999``, 1000 rolls over to ``beta-001``, and
the last valid value is ``omega-999``.
"""

import logging
from typing import Any, cast

from supabase import Client

from humans_api.core.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

GREEK_ALPHABET: tuple[str, ...] = (
    "alpha",
    "beta",
    "gamma",
    "delta",
    "epsilon",
    "zeta",
    "eta",
    "theta",
    "iota",
    "kappa",
    "lambda",
    "mu",
    "nu",
    "xi",
    "omicron",
    "pi",
    "rho",
    "sigma",
    "tau",
    "upsilon",
    "phi",
    "chi",
    "psi",
    "omega",
)

NUMBERS_PER_LETTER = 999
MAX_COUNTER = len(GREEK_ALPHABET) * NUMBERS_PER_LETTER

ACTIVITY_PREFIX = "ACT"
FRONT_SYNC_RUN_PREFIX = "FRY"


def format_display_id(prefix: str, counter: int) -> str:
    """Format a 1-based counter as ``PREFIX-letter-NNN``.

    Raises:
        ValidationError: If the counter is outside ``1..MAX_COUNTER``.
    """
    if counter < 1 or counter > MAX_COUNTER:
        raise ValidationError(
            f"Counter {counter} out of range (1-{MAX_COUNTER})", field="counter"
        )
    letter = GREEK_ALPHABET[(counter - 1) // NUMBERS_PER_LETTER]
    number = (counter - 1) % NUMBERS_PER_LETTER + 1
    return f"{prefix}-{letter}-{number:03d}"


class DisplayIdAllocator:
    """Allocates the next display ID for a prefix."""

    def __init__(self, client: Client) -> None:
        self._db = client

    async def next_display_id(self, prefix: str) -> str:
        """Increment the prefix counter and return the formatted ID.

        The read and the upsert are two statements; concurrent allocations
        for the same prefix can collide and are rejected by the unique
        ``display_id`` column on the target table.

        Raises:
            DatabaseError: If the counter cannot be read or written.
        """
        try:
            result = (
                self._db.table("display_id_counters")
                .select("counter")
                .eq("prefix", prefix)
                .maybe_single()
                .execute()
            )
            row = cast(dict[str, Any] | None, result.data if result is not None else None)
            counter = int(row["counter"]) + 1 if row else 1
            self._db.table("display_id_counters").upsert(
                {"prefix": prefix, "counter": counter}, on_conflict="prefix"
            ).execute()
        except Exception as e:
            logger.exception("Error allocating display ID", extra={"prefix": prefix})
            raise DatabaseError(f"Failed to allocate display ID for {prefix}: {e}") from e
        return format_display_id(prefix, counter)
