"""
Hierarchical path matching.

Paths are written ``domain:resource:action`` and held as tuples of
lowercase segments. A pattern matches a target only when both have the same
number of segments; ``*`` in the pattern matches any single segment.
"""

from typing import Iterable, Tuple, Union

Path = Tuple[str, ...]

SEPARATOR = ":"
ANY_SEGMENT = "*"


def parse_path(value: Union[str, Iterable[str], None]) -> Path:
    """Split a ``a:b:c`` string (or normalize a sequence) into a path tuple.

    ``None`` yields the empty path, which matches no real target.
    """
    if value is None:
        return ()
    segments = value.split(SEPARATOR) if isinstance(value, str) else list(value)
    return tuple(str(segment).strip().lower() for segment in segments)


def format_path(path: Path) -> str:
    return SEPARATOR.join(path)


class PathMatcher:
    """Fixed-arity wildcard matcher."""

    def matches(self, pattern: Union[Path, str], target: Union[Path, str]) -> bool:
        if isinstance(pattern, str):
            pattern = parse_path(pattern)
        if isinstance(target, str):
            target = parse_path(target)

        if len(pattern) != len(target):
            return False

        for expected, actual in zip(pattern, target):
            if expected != ANY_SEGMENT and expected.casefold() != actual.casefold():
                return False
        return True

    def matches_any(self, patterns: Iterable[Path], target: Path) -> bool:
        """Whether any of ``patterns`` matches ``target``."""
        return any(self.matches(pattern, target) for pattern in patterns)


DEFAULT_PATH_MATCHER = PathMatcher()
