"""
Data structures for word decomposition.

A decomposition is an ordered sequence of labelled WordPieces. While a word
is being split, prefixes, suffixes and interfixes keep their boundary hyphen
("un-", "-ness", "-s-"); the hyphens are removed only for the user-facing
result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union


class Role(str, Enum):
    """Morphological role of a word piece."""

    BASE_WORD = "base_word"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    INTERFIX = "interfix"
    INFLECTION = "inflection"


@dataclass(frozen=True)
class WordPiece:
    """One labelled fragment of a decomposed word."""

    text: str
    role: Role = Role.BASE_WORD

    def bare(self) -> str:
        """Return the text with boundary hyphens removed."""
        return self.text.replace("-", "")

    def as_tuple(self) -> tuple[str, str]:
        return (self.text, self.role.value)


# One strategy's split of one word at one recursion level.
Breakdown = tuple[WordPiece, ...]


def base_words(*texts: str) -> Breakdown:
    """Build a breakdown made only of base words."""
    return tuple(WordPiece(t, Role.BASE_WORD) for t in texts)


class DiagnosticKind(str, Enum):
    """Non-fatal anomalies recorded while decomposing."""

    NOT_ENGLISH_WORD = "not_english_word"
    MALFORMED_TEMPLATE = "malformed_template"
    AMBIGUOUS_BREAKDOWN = "ambiguous_breakdown"
    DEPTH_EXCEEDED = "depth_exceeded"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    word: str
    depth: int
    message: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "word": self.word,
            "depth": self.depth,
            "message": self.message,
        }


@dataclass
class DecompositionNode:
    """
    One recursive call of the decomposer.

    Attributes:
        word: The word this call was asked to split
        depth: Recursion depth (the top-level word is at depth 1)
        stem: The word left after the inflection step (== word if none)
        inflection: Inflectional ending split off at this level, if any
        children: Recursed base words or stem (DecompositionNode) and affix
            pieces (WordPiece), in positional order. Empty for a leaf.
        diagnostics: Anomalies met while handling this word
    """

    word: str
    depth: int
    stem: str = ""
    inflection: Optional[WordPiece] = None
    children: list[Union["DecompositionNode", WordPiece]] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __post_init__(self):
        if not self.stem:
            self.stem = self.word

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def pieces(self) -> list[WordPiece]:
        """Flatten this subtree into the ordered piece sequence."""
        if self.is_leaf:
            result = [WordPiece(self.stem, Role.BASE_WORD)]
        else:
            result = []
            for child in self.children:
                if isinstance(child, DecompositionNode):
                    result.extend(child.pieces())
                else:
                    result.append(child)
        if self.inflection is not None:
            result.append(self.inflection)
        return result

    def max_depth(self) -> int:
        """Deepest level reached in this subtree."""
        depths = [c.max_depth() for c in self.children if isinstance(c, DecompositionNode)]
        return max(depths, default=self.depth)

    def collect_diagnostics(self) -> list[Diagnostic]:
        """All diagnostics in this subtree, parents before children."""
        result = list(self.diagnostics)
        for child in self.children:
            if isinstance(child, DecompositionNode):
                result.extend(child.collect_diagnostics())
        return result


@dataclass
class Decomposition:
    """Final result for one word: pieces, diagnostics and the call tree."""

    word: str
    pieces: list[WordPiece]
    diagnostics: list[Diagnostic] = field(default_factory=list)
    tree: Optional[DecompositionNode] = None

    def __iter__(self) -> Iterator[WordPiece]:
        return iter(self.pieces)

    def __len__(self) -> int:
        return len(self.pieces)

    def __getitem__(self, index: int) -> WordPiece:
        return self.pieces[index]

    def as_tuples(self) -> list[tuple[str, str]]:
        return [p.as_tuple() for p in self.pieces]

    def texts(self) -> list[str]:
        return [p.text for p in self.pieces]

    def has(self, kind: DiagnosticKind) -> bool:
        """Check whether a diagnostic of the given kind was recorded."""
        return any(d.kind == kind for d in self.diagnostics)

    def to_dict(self) -> dict:
        return {
            "word": self.word,
            "pieces": [{"text": p.text, "role": p.role.value} for p in self.pieces],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
