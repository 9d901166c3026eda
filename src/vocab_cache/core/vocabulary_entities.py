"""Vocabulary cache entities used across services and persistence."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Token:
    id: Optional[int]
    token: str
    type_label: str
    date_added: Optional[str]


@dataclass
class SeenForm:
    """One distinct inflected realization of a Token."""

    id: Optional[int]
    token: str
    surface: str
    category: str
    subcategory1: str
    subcategory2: str
    subcategory3: str
    conjugation_type: str
    conjugation_form: str
    reading: str
    pronunciation: str


@dataclass
class Line:
    id: Optional[int]
    source_text: str
    translation: str


@dataclass
class Example:
    id: Optional[int]
    token: str
    seen_form: str
    seen_form_id: int
    line_id: int
    source_text: Optional[str] = None
    translation: Optional[str] = None


@dataclass
class DictionaryEntry:
    """Cached best match of a dictionary lookup for a Token."""

    id: Optional[int]
    token: str
    best_match: Dict[str, Any] = field(default_factory=dict)
    multiple_results: bool = False
    direct_match: bool = False
    date_added: Optional[str] = None


@dataclass
class UnresolvedToken:
    id: Optional[int]
    token: str
    resolved: bool
    date_added: Optional[str]
