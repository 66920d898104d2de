"""
glob_rules.py - Glob Filter Module

Decides whether a path (relative to the base directory) is a candidate,
from an ordered list of include and `!`-exclude glob patterns.
"""

from typing import Iterable, Optional

from wcmatch import glob

from .errors import InvalidPattern
from .models_fs import GlobPattern, GlobSpec


GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB | glob.FORCEUNIX


class GlobFilter:
    """Last matching pattern wins; no match excludes; no patterns admits all"""

    def __init__(self, spec: Optional[GlobSpec] = None):
        self.patterns = tuple(spec.patterns) if spec else ()
        for p in self.patterns:
            if not p.pattern:
                raise InvalidPattern("Glob pattern cannot be empty")

    @classmethod
    def from_strings(cls, texts: Iterable[str]) -> "GlobFilter":
        return cls(GlobSpec.from_strings(texts))

    def last_match(self, rel_path: str) -> Optional[GlobPattern]:
        """Last pattern in declaration order matching rel_path"""
        for p in reversed(self.patterns):
            if glob.globmatch(rel_path, p.pattern, flags=GLOB_FLAGS):
                return p
        return None

    def is_candidate(self, rel_path: str) -> bool:
        """
        Check if a relative POSIX path passes the filter

        Args:
            rel_path: Path relative to the base directory, `/`-separated

        Returns:
            Whether the path is a candidate
        """
        if not self.patterns:
            return True
        p = self.last_match(rel_path)
        return p is not None and p.include
