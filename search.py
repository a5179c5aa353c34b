"""Substring search over the catalog, roster and ledger.

There is no persistent index: both helpers do a linear scan over the records
they are given, which is cheap enough to run on every keystroke for a
library-sized collection.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from book import Book
from loan import Loan
from member import Member

SUGGESTION_LIMIT = 20

T = TypeVar("T")

# Fields checked per record type, in the order their values are suggested.
SEARCH_FIELDS: Dict[type, Tuple[Callable[[Any], str], ...]] = {
    Book: (lambda b: b.title, lambda b: b.author, lambda b: b.id),
    Member: (lambda m: m.name, lambda m: m.id),
    Loan: (lambda l: l.loan_id, lambda l: l.book_id, lambda l: l.member_id),
}


def _normalize(query: Optional[str]) -> str:
    if query is None:
        return ""
    return query.strip().lower()


def _field_values(record: Any) -> Iterable[str]:
    try:
        getters = SEARCH_FIELDS[type(record)]
    except KeyError:
        raise TypeError(f"Cannot search records of type {type(record).__name__}") from None
    for getter in getters:
        value = getter(record)
        if value:
            yield value


def suggest(records: Iterable[Any], query: Optional[str], limit: int = SUGGESTION_LIMIT) -> List[str]:
    """Return distinct field values containing ``query``, first seen first.

    A blank query yields no suggestions at all.
    """
    term = _normalize(query)
    if not term or limit <= 0:
        return []
    seen: Dict[str, None] = {}
    for record in records:
        for value in _field_values(record):
            if term in value.lower() and value not in seen:
                seen[value] = None
                if len(seen) >= limit:
                    return list(seen)
    return list(seen)


def filter_records(records: Iterable[T], query: Optional[str]) -> List[T]:
    """Return every record with a field containing ``query``.

    Unlike ``suggest`` this is uncapped and a blank query matches everything.
    """
    term = _normalize(query)
    if not term:
        return list(records)
    return [r for r in records if any(term in value.lower() for value in _field_values(r))]
