"""
text_match.py - Text Matching Tools

Matches a base name against a literal or regex pattern and computes
its replacement, keeping track of which spans changed.
"""

from dataclasses import dataclass
from typing import Optional, List, Tuple
import os
import re

from .errors import InvalidPattern, InvalidRegex
from .models_fs import MatchSpec, Span


_TEMPLATE_TOKEN = re.compile(
    r"\$(?:\$|\{(?P<braced>[^}]*)\}|(?P<num>\d+)|(?P<name>[A-Za-z_]\w*))"
)

_SEPARATORS = tuple(c for c in ("/", os.sep, os.altsep, "\0") if c)


@dataclass(frozen=True)
class Rewrite:
    """Result of rewriting one base name"""
    new_name: str
    old_spans: Tuple[Span, ...]
    new_spans: Tuple[Span, ...]


def compile_template(template: str, regex: re.Pattern) -> str:
    """
    Translate a `$1` / `$name` / `${name}` template into `re` expand syntax

    Args:
        template: Replacement template
        regex: Compiled pattern the template will be expanded against

    Returns:
        Template usable with Match.expand()

    Raises:
        InvalidPattern: A reference names a group the pattern lacks
    """
    out: List[str] = []
    pos = 0
    for m in _TEMPLATE_TOKEN.finditer(template):
        out.append(template[pos:m.start()].replace("\\", "\\\\"))
        pos = m.end()

        ref = next((r for r in m.group("num", "braced", "name") if r is not None), None)
        if ref is None:
            # "$$"
            out.append("$")
            continue

        if ref.isdigit():
            if int(ref) > regex.groups:
                raise InvalidPattern(f"Replacement references missing group ${ref}")
        elif ref not in regex.groupindex:
            raise InvalidPattern(f"Replacement references unknown group ${{{ref}}}")
        out.append(f"\\g<{ref}>")

    out.append(template[pos:].replace("\\", "\\\\"))
    return "".join(out)


class PatternMatcher:
    """Literal or regex matcher over base names"""

    def __init__(self, spec: MatchSpec, replacement: Optional[str] = None):
        if not spec.pattern:
            raise InvalidPattern("Pattern cannot be empty")

        self.spec = spec
        self.replacement = replacement
        flags = 0 if spec.case_sensitive else re.IGNORECASE

        if spec.regex:
            try:
                self._regex = re.compile(spec.pattern, flags)
            except re.error as e:
                raise InvalidRegex(f"Invalid regex pattern {spec.pattern!r}: {e}") from e
            self._template = (
                compile_template(replacement, self._regex)
                if replacement is not None else None
            )
        else:
            self._regex = re.compile(re.escape(spec.pattern), flags)
            self._template = None

    def matches(self, name: str) -> bool:
        """Check if name contains the pattern"""
        return self._regex.search(name) is not None

    def spans(self, name: str) -> List[Span]:
        """Matched regions of name (non-empty ones only)"""
        return [m.span() for m in self._regex.finditer(name) if m.end() > m.start()]

    def _expand(self, m: re.Match) -> str:
        if self._template is None:
            return self.replacement
        return m.expand(self._template)

    def rewrite(self, name: str) -> Optional[Rewrite]:
        """
        Replace every non-overlapping match in name

        Args:
            name: Base name

        Returns:
            Rewrite, or None if nothing matched or the name is unchanged
        """
        if self.replacement is None:
            raise ValueError("No replacement configured")

        pieces: List[str] = []
        old_spans: List[Span] = []
        new_spans: List[Span] = []
        pos = 0
        length = 0

        for m in self._regex.finditer(name):
            kept = name[pos:m.start()]
            pieces.append(kept)
            length += len(kept)

            inserted = self._expand(m)
            pieces.append(inserted)
            old_spans.append(m.span())
            new_spans.append((length, length + len(inserted)))
            length += len(inserted)
            pos = m.end()

        if not old_spans:
            return None

        pieces.append(name[pos:])
        new_name = "".join(pieces)
        if new_name == name:
            return None

        return Rewrite(
            new_name=new_name,
            old_spans=tuple(s for s in old_spans if s[1] > s[0]),
            new_spans=tuple(s for s in new_spans if s[1] > s[0]),
        )


def build_matcher(spec: MatchSpec, replacement: Optional[str] = None) -> PatternMatcher:
    """Compile a matcher; raises InvalidPattern / InvalidRegex"""
    return PatternMatcher(spec, replacement)


def is_valid_filename(name: str) -> Tuple[bool, Optional[str]]:
    """
    Check if a computed base name can be used for an in-place rename

    Args:
        name: Filename

    Returns:
        (is_valid, error_reason)
    """
    if not name:
        return False, "Filename cannot be empty"

    if name in (".", ".."):
        return False, f"Filename cannot be {name!r}"

    for char in _SEPARATORS:
        if char in name:
            return False, f"Filename contains invalid character: {char!r}"

    if len(name.encode("utf-8", "surrogateescape")) > 255:
        return False, "Filename exceeds 255 bytes"

    return True, None
