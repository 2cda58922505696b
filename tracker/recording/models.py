"""Result type for bulk recording."""

from dataclasses import dataclass


@dataclass
class RecordResult:
    """
    Outcome of recording one batch of listings.

    Attributes:
        attempted: Inserts tried
        successful: Inserts that committed
        failed: Inserts that raised
        skipped: Listings not attempted because their URL was already recorded
    """

    attempted: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
