"""Example Index - links canonical tokens to the lines and forms they appeared in."""

from dataclasses import dataclass
from typing import List

from vocab_cache.core import Example, NormalizedToken
from vocab_cache.io import DatabaseManager


@dataclass(frozen=True)
class Observation:
    """A normalized token seen inside a stored line."""

    token: NormalizedToken
    line_id: int


class ExampleIndex:
    """Application service for token/seen-form/example bookkeeping.

    Depends on DatabaseManager for persistence; every write is insert-if-absent,
    so replaying the same observations is a no-op.
    """

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db
        self.new_examples = 0

    def record_token(self, normalized: NormalizedToken) -> None:
        """Ensure the Token row exists without indexing a form or example."""
        self._db.ensure_token(normalized.token, normalized.type_label)

    def record(self, observation: Observation) -> bool:
        """
        Record one observation.

        Returns:
            True if a new Example row was created, False if it already existed
        """
        normalized = observation.token
        self.record_token(normalized)
        seen_form_id = self._db.ensure_seen_form(normalized)
        created = self._db.ensure_example(
            token=normalized.token,
            seen_form=normalized.surface,
            seen_form_id=seen_form_id,
            line_id=observation.line_id,
        )
        if created:
            self.new_examples += 1
        return created

    def list_examples(self, token: str) -> List[Example]:
        return self._db.list_examples_for_token(token)
