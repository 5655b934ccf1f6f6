from collections.abc import Iterable, Sequence

from .types import RefSpec, Reference


def difference(have: Iterable[Reference], want: Iterable[Reference]) -> list[Reference]:
    """Return the references in `have` whose names are missing from `want`.

    Names are compared exactly: targets are ignored and no normalization happens.
    """
    wanted_names = {ref.name for ref in want}
    return [ref for ref in have if ref.name not in wanted_names]


def to_delete_refspecs(refs: Iterable[Reference]) -> list[RefSpec]:
    return [RefSpec.delete(ref.name) for ref in refs]


def is_excluded(name: str, prefixes: Sequence[str]) -> bool:
    return any(name.startswith(prefix) for prefix in prefixes)
