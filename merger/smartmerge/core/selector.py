"""Document selection: builds the ordered working set for one merge run."""
import unicodedata
from typing import Iterable, List, Tuple

from ..adapters.vault import DocumentRef, DocumentStore


def path_sort_key(path: str) -> Tuple[str, str]:
    """
    Locale-aware ordering for vault paths.

    Compares on the case-folded, compatibility-decomposed form so that
    ``alpha.md`` sorts next to ``Alpha.md`` and accented names sit with
    their base letters. Ties are broken on the case-swapped path, which puts
    lowercase before uppercase and keeps the order total.
    """
    folded = unicodedata.normalize("NFKD", path).casefold()
    return (folded, path.swapcase())


def sort_documents(docs: Iterable[DocumentRef]) -> List[DocumentRef]:
    return sorted(docs, key=lambda d: path_sort_key(d.full_path))


def select_all(store: DocumentStore) -> List[DocumentRef]:
    return sort_documents(store.list_documents())


def select_by_names(store: DocumentStore, names: Iterable[str]) -> List[DocumentRef]:
    """
    Documents whose base name or full path equals one of ``names``.

    Exact, case-sensitive comparison. Output follows path order, not the
    order of ``names``; an empty list means nothing matched.
    """
    wanted = set(names)
    if not wanted:
        return []
    hits = [d for d in store.list_documents() if d.base_name in wanted or d.full_path in wanted]
    return sort_documents(hits)
