import unicodedata
from typing import Iterable, List, Sequence, Tuple

from plugins.llms_docsets.matcher import first_match


def collation_key(text: str) -> Tuple[str, str]:
    """
    Locale-independent collation key: accents and case are ignored first,
    the raw text breaks ties so the order stays total and deterministic.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text


def priority(path: str, promote: Sequence[str] = (), demote: Sequence[str] = ()) -> int:
    """
    Priority bucket of a path; higher sorts first.

    Non-demoted paths get ``len(demote)`` plus their promote depth, demoted
    paths get less than ``len(demote)`` no matter what they promote-match.
    """
    promote = list(promote or ())
    demote = list(demote or ())

    demoted = first_match(path, demote)
    promoted = -1 if demoted > -1 else first_match(path, promote)

    depth = len(promote) - promoted if promoted > -1 else 0
    return depth + len(demote) - demoted - 1


def rank(path: str, promote: Sequence[str] = (), demote: Sequence[str] = ()):
    return -priority(path, promote, demote), collation_key(path)


def sort_paths(
    paths: Iterable[str], promote: Sequence[str] = (), demote: Sequence[str] = ()
) -> List[str]:
    """
    Order paths by priority bucket, then by `collation_key`.

    The ordering does not depend on the site or system locale, so the same
    pages always come out in the same order.
    """
    return sorted(paths, key=lambda p: rank(p, promote, demote))
