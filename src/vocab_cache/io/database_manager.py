"""SQLite-backed vocabulary cache persistence."""

import json
import sqlite3
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set

from vocab_cache.core import (
    DictionaryEntry,
    Example,
    Line,
    NormalizedToken,
    SeenForm,
    Token,
    UnresolvedToken,
)
from vocab_cache.exceptions import StoreOpenError


# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds (999).
IN_CLAUSE_CHUNK_SIZE = 500

TABLE_NAMES = (
    "tokens",
    "seen_forms",
    "lines",
    "examples",
    "dictionary_entries",
    "unresolved_tokens",
)


def _chunked(values: Sequence[str], size: int = IN_CLAUSE_CHUNK_SIZE) -> Iterator[Sequence[str]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class DatabaseManager:
    """Owns the SQLite connection, schema, and insert-if-absent helpers.

    Every write is an ``INSERT ... ON CONFLICT DO NOTHING`` followed, where the
    caller needs it, by a ``SELECT`` for the existing row. The only UPDATE is
    :meth:`mark_resolved`, used by the manual review process.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        try:
            self.connection = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreOpenError(f"Cannot open cache database {self.db_path}: {e}") from e
        self.connection.row_factory = sqlite3.Row
        self.connection.execute("PRAGMA foreign_keys = ON;")

    def ensure_schema(self) -> None:
        """Create tables, indexes and triggers if they do not exist."""
        try:
            self._create_schema()
        except sqlite3.Error as e:
            raise StoreOpenError(f"Cannot initialise schema in {self.db_path}: {e}") from e

    def _create_schema(self) -> None:
        cur = self.connection.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS tokens (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                token TEXT NOT NULL UNIQUE,
                type_label TEXT NOT NULL DEFAULT '',
                date_added TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS seen_forms (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                token TEXT NOT NULL,
                surface TEXT NOT NULL,
                category TEXT NOT NULL,
                subcategory1 TEXT NOT NULL,
                subcategory2 TEXT NOT NULL,
                subcategory3 TEXT NOT NULL,
                conjugation_type TEXT NOT NULL,
                conjugation_form TEXT NOT NULL,
                reading TEXT NOT NULL,
                pronunciation TEXT NOT NULL,

                FOREIGN KEY(token) REFERENCES tokens(token),
                UNIQUE(
                    token, surface, category, subcategory1, subcategory2, subcategory3,
                    conjugation_type, conjugation_form, reading, pronunciation
                )
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS lines (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source_text TEXT NOT NULL,
                translation TEXT NOT NULL,
                UNIQUE(source_text, translation)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS examples (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                token TEXT NOT NULL,
                seen_form TEXT NOT NULL,
                seen_form_id INTEGER NOT NULL,
                line_id INTEGER NOT NULL,

                FOREIGN KEY(token) REFERENCES tokens(token),
                FOREIGN KEY(seen_form_id) REFERENCES seen_forms(id),
                FOREIGN KEY(line_id) REFERENCES lines(id),
                UNIQUE(token, seen_form_id, line_id)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS dictionary_entries (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                token TEXT NOT NULL UNIQUE,
                best_match TEXT NOT NULL,
                multiple_results INTEGER NOT NULL DEFAULT 0,
                direct_match INTEGER NOT NULL DEFAULT 0,
                date_added TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,

                FOREIGN KEY(token) REFERENCES tokens(token)
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS unresolved_tokens (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                token TEXT NOT NULL UNIQUE,
                resolved INTEGER NOT NULL DEFAULT 0,
                date_added TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,

                FOREIGN KEY(token) REFERENCES tokens(token)
            );
            """
        )
        # A token is either a dictionary entry or an unresolved token, never both.
        cur.execute(
            """
            CREATE TRIGGER IF NOT EXISTS trg_dictionary_entry_exclusive
            BEFORE INSERT ON dictionary_entries
            WHEN EXISTS (SELECT 1 FROM unresolved_tokens WHERE token = NEW.token)
            BEGIN
                SELECT RAISE(IGNORE);
            END;
            """
        )
        cur.execute(
            """
            CREATE TRIGGER IF NOT EXISTS trg_unresolved_token_exclusive
            BEFORE INSERT ON unresolved_tokens
            WHEN EXISTS (SELECT 1 FROM dictionary_entries WHERE token = NEW.token)
            BEGIN
                SELECT RAISE(IGNORE);
            END;
            """
        )
        cur.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_lines_source_text
            ON lines(source_text);
            """
        )
        cur.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_examples_token
            ON examples(token);
            """
        )
        self.connection.commit()

    # -- tokens and seen forms -------------------------------------------------

    def ensure_token(self, token: str, type_label: str = "") -> bool:
        """Insert a Token row if absent. Returns True when a row was created."""
        cur = self.connection.cursor()
        cur.execute(
            """
            INSERT INTO tokens (token, type_label)
            VALUES (?, ?)
            ON CONFLICT(token) DO NOTHING
            """,
            (token, type_label or ""),
        )
        self.connection.commit()
        return cur.rowcount > 0

    def ensure_seen_form(self, normalized: NormalizedToken) -> int:
        """Insert a SeenForm row if absent and return its id."""
        key = normalized.form_key()
        cur = self.connection.cursor()
        cur.execute(
            """
            INSERT INTO seen_forms (
                token, surface, category, subcategory1, subcategory2, subcategory3,
                conjugation_type, conjugation_form, reading, pronunciation
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT DO NOTHING
            """,
            key,
        )
        self.connection.commit()
        cur.execute(
            """
            SELECT id FROM seen_forms
            WHERE token = ? AND surface = ? AND category = ?
              AND subcategory1 = ? AND subcategory2 = ? AND subcategory3 = ?
              AND conjugation_type = ? AND conjugation_form = ?
              AND reading = ? AND pronunciation = ?
            """,
            key,
        )
        return cur.fetchone()["id"]

    def get_token(self, token: str) -> Optional[Token]:
        cur = self.connection.cursor()
        cur.execute(
            "SELECT id, token, type_label, date_added FROM tokens WHERE token = ?",
            (token,),
        )
        row = cur.fetchone()
        return self._row_to_token(row) if row else None

    def list_tokens(self) -> List[Token]:
        cur = self.connection.cursor()
        cur.execute("SELECT id, token, type_label, date_added FROM tokens ORDER BY id ASC")
        return [self._row_to_token(row) for row in cur.fetchall()]

    def list_seen_forms(self, token: str) -> List[SeenForm]:
        cur = self.connection.cursor()
        cur.execute(
            """
            SELECT id, token, surface, category, subcategory1, subcategory2, subcategory3,
                   conjugation_type, conjugation_form, reading, pronunciation
            FROM seen_forms
            WHERE token = ?
            ORDER BY id ASC
            """,
            (token,),
        )
        return [SeenForm(**dict(row)) for row in cur.fetchall()]

    # -- lines -----------------------------------------------------------------

    def get_line(self, source_text: str) -> Optional[Line]:
        """Return the cached Line for an exact source text, if any."""
        cur = self.connection.cursor()
        cur.execute(
            """
            SELECT id, source_text, translation FROM lines
            WHERE source_text = ?
            ORDER BY id ASC
            LIMIT 1
            """,
            (source_text,),
        )
        row = cur.fetchone()
        return self._row_to_line(row) if row else None

    def find_lines(self, source_texts: Iterable[str]) -> Dict[str, Line]:
        """Batch lookup of cached lines keyed by source text."""
        texts = list(dict.fromkeys(source_texts))
        found: Dict[str, Line] = {}
        cur = self.connection.cursor()
        for chunk in _chunked(texts):
            cur.execute(
                f"""
                SELECT id, source_text, translation FROM lines
                WHERE source_text IN ({_placeholders(len(chunk))})
                ORDER BY id ASC
                """,
                tuple(chunk),
            )
            for row in cur.fetchall():
                # Keep the earliest row if two writers raced on the same text.
                found.setdefault(row["source_text"], self._row_to_line(row))
        return found

    def insert_line(self, source_text: str, translation: str) -> Line:
        """Insert a (source, translation) pair if absent and return the stored Line."""
        cur = self.connection.cursor()
        cur.execute(
            """
            INSERT INTO lines (source_text, translation)
            VALUES (?, ?)
            ON CONFLICT(source_text, translation) DO NOTHING
            """,
            (source_text, translation),
        )
        self.connection.commit()
        cur.execute(
            """
            SELECT id, source_text, translation FROM lines
            WHERE source_text = ? AND translation = ?
            """,
            (source_text, translation),
        )
        return self._row_to_line(cur.fetchone())

    # -- examples --------------------------------------------------------------

    def ensure_example(self, token: str, seen_form: str, seen_form_id: int, line_id: int) -> bool:
        """Insert an Example link if absent. Returns True when a row was created."""
        cur = self.connection.cursor()
        cur.execute(
            """
            INSERT INTO examples (token, seen_form, seen_form_id, line_id)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(token, seen_form_id, line_id) DO NOTHING
            """,
            (token, seen_form, seen_form_id, line_id),
        )
        self.connection.commit()
        return cur.rowcount > 0

    def list_examples_for_token(self, token: str) -> List[Example]:
        cur = self.connection.cursor()
        cur.execute(
            """
            SELECT
                ex.id,
                ex.token,
                ex.seen_form,
                ex.seen_form_id,
                ex.line_id,
                ln.source_text,
                ln.translation
            FROM examples ex
            JOIN lines ln ON ex.line_id = ln.id
            WHERE ex.token = ?
            ORDER BY ex.line_id ASC, ex.id ASC
            """,
            (token,),
        )
        return [Example(**dict(row)) for row in cur.fetchall()]

    # -- dictionary resolution -------------------------------------------------

    def find_settled_tokens(self, tokens: Iterable[str]) -> Set[str]:
        """Return the subset of tokens with a DictionaryEntry or UnresolvedToken row."""
        values = list(dict.fromkeys(tokens))
        settled: Set[str] = set()
        cur = self.connection.cursor()
        for chunk in _chunked(values):
            marks = _placeholders(len(chunk))
            cur.execute(
                f"""
                SELECT token FROM dictionary_entries WHERE token IN ({marks})
                UNION
                SELECT token FROM unresolved_tokens WHERE token IN ({marks})
                """,
                tuple(chunk) * 2,
            )
            settled.update(row["token"] for row in cur.fetchall())
        return settled

    def insert_dictionary_entry(
        self,
        token: str,
        best_match: Dict,
        multiple_results: bool,
        direct_match: bool,
    ) -> bool:
        cur = self.connection.cursor()
        cur.execute(
            """
            INSERT INTO dictionary_entries (token, best_match, multiple_results, direct_match)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(token) DO NOTHING
            """,
            (
                token,
                json.dumps(best_match, ensure_ascii=False),
                int(multiple_results),
                int(direct_match),
            ),
        )
        self.connection.commit()
        return cur.rowcount > 0

    def get_dictionary_entry(self, token: str) -> Optional[DictionaryEntry]:
        cur = self.connection.cursor()
        cur.execute(
            """
            SELECT id, token, best_match, multiple_results, direct_match, date_added
            FROM dictionary_entries
            WHERE token = ?
            """,
            (token,),
        )
        row = cur.fetchone()
        return self._row_to_dictionary_entry(row) if row else None

    def insert_unresolved_token(self, token: str) -> bool:
        cur = self.connection.cursor()
        cur.execute(
            """
            INSERT INTO unresolved_tokens (token, resolved)
            VALUES (?, 0)
            ON CONFLICT(token) DO NOTHING
            """,
            (token,),
        )
        self.connection.commit()
        return cur.rowcount > 0

    def get_unresolved_token(self, token: str) -> Optional[UnresolvedToken]:
        cur = self.connection.cursor()
        cur.execute(
            "SELECT id, token, resolved, date_added FROM unresolved_tokens WHERE token = ?",
            (token,),
        )
        row = cur.fetchone()
        return self._row_to_unresolved(row) if row else None

    def list_unresolved_tokens(self, include_resolved: bool = False) -> List[UnresolvedToken]:
        cur = self.connection.cursor()
        if include_resolved:
            cur.execute(
                "SELECT id, token, resolved, date_added FROM unresolved_tokens ORDER BY id ASC"
            )
        else:
            cur.execute(
                """
                SELECT id, token, resolved, date_added FROM unresolved_tokens
                WHERE resolved = 0
                ORDER BY id ASC
                """
            )
        return [self._row_to_unresolved(row) for row in cur.fetchall()]

    def mark_resolved(self, token: str) -> bool:
        """Flip the manual-review flag. Returns False when the token is not listed."""
        cur = self.connection.cursor()
        cur.execute(
            "UPDATE unresolved_tokens SET resolved = 1 WHERE token = ?",
            (token,),
        )
        self.connection.commit()
        return cur.rowcount > 0

    # -- housekeeping ----------------------------------------------------------

    def count_rows(self) -> Dict[str, int]:
        cur = self.connection.cursor()
        counts: Dict[str, int] = {}
        for table in TABLE_NAMES:
            cur.execute(f"SELECT COUNT(*) FROM {table}")
            counts[table] = cur.fetchone()[0]
        return counts

    def close(self) -> None:
        self.connection.close()

    @staticmethod
    def _row_to_token(row: sqlite3.Row) -> Token:
        return Token(
            id=row["id"],
            token=row["token"],
            type_label=row["type_label"],
            date_added=row["date_added"],
        )

    @staticmethod
    def _row_to_line(row: sqlite3.Row) -> Line:
        return Line(
            id=row["id"],
            source_text=row["source_text"],
            translation=row["translation"],
        )

    @staticmethod
    def _row_to_dictionary_entry(row: sqlite3.Row) -> DictionaryEntry:
        return DictionaryEntry(
            id=row["id"],
            token=row["token"],
            best_match=json.loads(row["best_match"] or "{}"),
            multiple_results=bool(row["multiple_results"]),
            direct_match=bool(row["direct_match"]),
            date_added=row["date_added"],
        )

    @staticmethod
    def _row_to_unresolved(row: sqlite3.Row) -> UnresolvedToken:
        return UnresolvedToken(
            id=row["id"],
            token=row["token"],
            resolved=bool(row["resolved"]),
            date_added=row["date_added"],
        )
