"""
Exception types for wikimorph.

Only StructuralMismatch is allowed to escape a decomposition. The other
anomalies met while splitting a word are recorded as diagnostics on the
result (see wikimorph.models.DiagnosticKind).
"""

from typing import Sequence


class WikimorphError(Exception):
    """Base class for all wikimorph errors."""
    pass


class StructuralMismatch(WikimorphError):
    """Raised when heading detection and body segmentation disagree.

    This means the markup contains a heading form the section grammar does
    not handle. The analysis of the affected word is aborted.
    """

    def __init__(self, depth: int, names: Sequence[str], segments: Sequence[str]):
        self.depth = depth
        self.names = list(names)
        self.segments = list(segments)
        super().__init__(
            f"Section length mismatch at depth {depth}: "
            f"{len(self.names)} heading(s) ({', '.join(self.names)}) "
            f"but {len(self.segments)} body segment(s)"
        )


class MalformedTemplate(WikimorphError):
    """Raised by a template strategy when a template has the wrong shape."""

    def __init__(self, kind: str, args: Sequence[str], expected: str):
        self.kind = kind
        self.arguments = list(args)
        self.expected = expected
        super().__init__(
            f"{{{{{kind}}}}} template has {len(self.arguments)} argument(s) "
            f"({'|'.join(self.arguments)}), expected {expected}"
        )


class PatternError(WikimorphError):
    """Raised when the bundled pattern file is missing or invalid."""
    pass


class ConfigError(WikimorphError):
    """Raised for an invalid configuration file or environment override."""
    pass


class SnapshotError(WikimorphError):
    """Raised when a snapshot file cannot be read."""
    pass
