"""
Recursive decomposition of a word into labelled pieces.

For each word (at recursion depth d, starting at 1):

    1. d > max_depth            -> leaf, depth_exceeded diagnostic
    2. inflection step          -> maybe (stem, ending); no content -> leaf
    3. morpheme step on stem    -> maybe a breakdown, first candidate wins
    4. nothing changed          -> leaf [word]
    5. only the ending changed  -> recurse into the stem at d + 1, append
       the ending last
    6. otherwise recurse into every base_word piece at d + 1, keep affix
       pieces as they are, and append the ending last.

Depth is counted per path, not globally: a word whose pieces keep splitting
into several base words does more than max_depth lookups in total.

Only StructuralMismatch (raised while reading a page's sections) escapes;
everything else degrades to a leaf or to the first candidate, with a
Diagnostic attached to the result.
"""

import logging
from typing import Optional

from wikimorph.config import DEFAULT_MAX_DEPTH, load_settings
from wikimorph.models import (
    Decomposition,
    DecompositionNode,
    Diagnostic,
    DiagnosticKind,
    Role,
    WordPiece,
)
from wikimorph.sources import ContentSource, open_source
from wikimorph.templates import split_inflection, split_morphemes


logger = logging.getLogger(__name__)


class Decomposer:
    """
    Split words into stems, affixes and inflectional endings.

    Usage:
        decomposer = Decomposer(MemorySource({"cats": "{{plural of|en|cat}}"}))
        decomposer.decompose("cats").as_tuples()
        # [('cat', 'base_word'), ('s', 'inflection')]
    """

    def __init__(self, source: ContentSource, max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {max_depth}")
        self.source = source
        self.max_depth = max_depth

    def decompose(self, word: str) -> Decomposition:
        """Decompose a word; hyphens are stripped from the pieces."""
        return finalize(self.decompose_raw(word))

    def decompose_raw(self, word: str, max_depth: Optional[int] = None) -> Decomposition:
        """Decompose a word keeping boundary hyphens ("un-", "-ness")."""
        limit = self.max_depth if max_depth is None else max_depth
        if limit < 1:
            raise ValueError(f"max_depth must be >= 1, got {limit}")
        tree = self.analyze(word, 1, limit)
        return Decomposition(
            word=word,
            pieces=tree.pieces(),
            diagnostics=tree.collect_diagnostics(),
            tree=tree,
        )

    def analyze(
        self,
        word: str,
        depth: int,
        max_depth: int,
        content: Optional[str] = None,
    ) -> DecompositionNode:
        """
        Build the decomposition subtree for `word` at `depth`.

        `content` is the word's English markup when the caller already has
        it; otherwise it is looked up.
        """
        node = DecompositionNode(word=word, depth=depth)

        if depth > max_depth:
            logger.warning(f"Maximum recursion depth of {max_depth} reached at '{word}'")
            node.diagnostics.append(Diagnostic(
                DiagnosticKind.DEPTH_EXCEEDED, word, depth,
                f"maximum recursion depth of {max_depth} reached",
            ))
            return node

        if content is None:
            content = self.source.lookup(word)
        if content is None:
            self._not_english(node, word)
            return node

        inflection = split_inflection(word, content, depth)
        node.diagnostics.extend(inflection.diagnostics)
        if inflection.irregular:
            logger.debug(f"'{word}' is irregular, keeping its ending")
        elif inflection.changed:
            base, ending = inflection.breakdown
            node.stem = base.text
            node.inflection = ending
            logger.debug(
                f"'{word}' -> '{node.stem}' + inflection '{ending.text}' "
                f"({inflection.candidates} candidate(s))"
            )
            content = self.source.lookup(node.stem)
            if content is None:
                self._not_english(node, node.stem)
                return node

        morphemes = split_morphemes(node.stem, content, depth)
        if not morphemes.changed:
            if inflection.changed:
                # The stem may be an inflected form itself; its morpheme step
                # is repeated (with its diagnostics) one level down.
                node.children.append(self.analyze(node.stem, depth + 1, max_depth, content))
            else:
                node.diagnostics.extend(morphemes.diagnostics)
            return node

        node.diagnostics.extend(morphemes.diagnostics)
        logger.debug(
            f"'{node.stem}' -> {[p.text for p in morphemes.breakdown]} "
            f"({morphemes.candidates} candidate(s))"
        )
        for piece in morphemes.breakdown:
            if piece.role == Role.BASE_WORD:
                node.children.append(self.analyze(piece.text, depth + 1, max_depth))
            else:
                node.children.append(piece)
        return node

    def _not_english(self, node: DecompositionNode, word: str) -> None:
        logger.debug(f"No English entry for '{word}'")
        node.diagnostics.append(Diagnostic(
            DiagnosticKind.NOT_ENGLISH_WORD, word, node.depth, "no English entry",
        ))


def finalize(raw: Decomposition) -> Decomposition:
    """Strip boundary hyphens for output; a lone piece is always a base word."""
    pieces = [WordPiece(p.bare(), p.role) for p in raw.pieces if p.bare()]
    if not pieces:
        pieces = [WordPiece(raw.word, Role.BASE_WORD)]
    if len(pieces) == 1:
        pieces = [WordPiece(pieces[0].text, Role.BASE_WORD)]
    return Decomposition(
        word=raw.word,
        pieces=pieces,
        diagnostics=raw.diagnostics,
        tree=raw.tree,
    )


def _default_decomposer(source: Optional[ContentSource], max_depth: Optional[int]) -> Decomposer:
    if source is not None:
        return Decomposer(source, DEFAULT_MAX_DEPTH if max_depth is None else max_depth)
    settings = load_settings()
    return Decomposer(open_source(settings), settings.max_depth if max_depth is None else max_depth)


def decompose(word: str, source: Optional[ContentSource] = None, max_depth: Optional[int] = None) -> Decomposition:
    """
    Split a word into pieces, hyphens stripped.

    Without a source, the local snapshot (if present) or the live Wiktionary
    API is used.
    """
    return _default_decomposer(source, max_depth).decompose(word)


def decompose_raw(word: str, source: Optional[ContentSource] = None, max_depth: Optional[int] = None) -> Decomposition:
    """Like decompose() but keeps boundary hyphens on affixes."""
    return _default_decomposer(source, max_depth).decompose_raw(word)
