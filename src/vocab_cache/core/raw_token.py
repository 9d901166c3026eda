"""Morphological token records before and after normalization."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RawToken:
    """A single token as emitted by the tokenizer, before any filtering."""

    surface: str
    """Text as it appears in the line (e.g., "好きです" splits into "好き" + "です")"""

    canonical_form: str
    """Dictionary form (e.g., "走る" for "走った"); "*" when the tokenizer does not know the word"""

    category: str
    subcategory1: str = "*"
    subcategory2: str = "*"
    subcategory3: str = "*"
    conjugation_type: str = "*"
    conjugation_form: str = "*"
    reading: str = ""
    pronunciation: str = ""


@dataclass(frozen=True)
class NormalizedToken:
    """A content token keyed by its canonical form, carrying the seen-form metadata."""

    token: str
    type_label: str
    surface: str
    category: str
    subcategory1: str
    subcategory2: str
    subcategory3: str
    conjugation_type: str
    conjugation_form: str
    reading: str
    pronunciation: str

    def form_key(self) -> Tuple[str, ...]:
        """Columns that make a SeenForm unique, in schema order."""
        return (
            self.token,
            self.surface,
            self.category,
            self.subcategory1,
            self.subcategory2,
            self.subcategory3,
            self.conjugation_type,
            self.conjugation_form,
            self.reading,
            self.pronunciation,
        )
