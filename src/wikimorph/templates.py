"""
Template strategies: turn etymology/inflection templates into breakdowns.

Each morpheme strategy looks for the first {{kind|en|...}} template of its
kind (or one of its aliases) and returns a Breakdown, or None when no such
template is present. A template with the wrong number of positional
arguments raises MalformedTemplate; split_morphemes turns that into a
diagnostic and moves on.

Supported templates:
- {{alternative spelling of|en|passer-by}} -> passer, by
- {{affix|en|un-|break|-able}}             -> un- (prefix), break, -able (suffix)
- {{prefix|en|un|happy}}                   -> un- (prefix), happy
- {{suffix|en|happy|ness}}                 -> happy, -ness (suffix)
- {{compound|en|rain|bow}}                 -> rain, bow
- {{confix|en|neuro|genic}}                -> neuro- (prefix), -genic (suffix)
- {{plural of|en|cat}}, {{en-past of|walk}}, ... -> cat, s (inflection)
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from wikimorph.english import is_irregular
from wikimorph.errors import MalformedTemplate
from wikimorph.models import Breakdown, Diagnostic, DiagnosticKind, Role, WordPiece, base_words
from wikimorph.patterns import INFLECTION_PATTERNS, TEMPLATE_ALIASES
from wikimorph.validate import is_acceptable, unique_breakdowns
from wikimorph.wikitext_parser import find_language_template


logger = logging.getLogger(__name__)

SPELLING_SEPARATOR = re.compile(r"[\s\-]+")


def template_args(text: str, kind: str) -> Optional[list[str]]:
    """Positional arguments (after "en") of the first template of this kind."""
    template = find_language_template(text, TEMPLATE_ALIASES[kind])
    if template is None:
        return None
    return template.language_args()


def as_prefix(text: str) -> str:
    return text if text.endswith("-") else text + "-"


def as_suffix(text: str) -> str:
    return text if text.startswith("-") else "-" + text


def affix_role(text: str) -> Role:
    """Role of an {{affix}} argument from its hyphen position."""
    leading = text.startswith("-")
    trailing = text.endswith("-")
    if leading and trailing:
        return Role.INTERFIX
    if leading:
        return Role.SUFFIX
    if trailing:
        return Role.PREFIX
    return Role.BASE_WORD


# =============================================================================
# Morpheme strategies
# =============================================================================


def split_alternative_spelling(text: str) -> Optional[Breakdown]:
    """Use an alternative spelling that is already split (space or hyphen)."""
    args = template_args(text, "alternative_spelling")
    if not args:
        return None
    spelling = args[0]
    if not SPELLING_SEPARATOR.search(spelling):
        return None
    pieces = [p for p in SPELLING_SEPARATOR.split(spelling) if p]
    return base_words(*pieces) if pieces else None


def split_affixes(text: str) -> Optional[Breakdown]:
    args = template_args(text, "affix")
    if args is None:
        return None
    if not args:
        raise MalformedTemplate("affix", args, "at least 1")
    return tuple(WordPiece(arg, affix_role(arg)) for arg in args)


def split_prefixes(text: str) -> Optional[Breakdown]:
    args = template_args(text, "prefix")
    if args is None:
        return None
    if len(args) != 2:
        raise MalformedTemplate("prefix", args, "2")
    return (
        WordPiece(as_prefix(args[0]), Role.PREFIX),
        WordPiece(args[1], Role.BASE_WORD),
    )


def split_suffixes(text: str) -> Optional[Breakdown]:
    args = template_args(text, "suffix")
    if args is None:
        return None
    if len(args) != 2:
        raise MalformedTemplate("suffix", args, "2")
    return (
        WordPiece(args[0], Role.BASE_WORD),
        WordPiece(as_suffix(args[1]), Role.SUFFIX),
    )


def split_compounds(text: str) -> Optional[Breakdown]:
    args = template_args(text, "compound")
    if args is None:
        return None
    if not args:
        raise MalformedTemplate("compound", args, "at least 1")
    return base_words(*args)


def split_confixes(text: str) -> Optional[Breakdown]:
    """
    Split a confix template.

    Wiktionary uses {{confix}} both for prefix + suffix with no base word
    and for prefix + base + suffix.
    """
    args = template_args(text, "confix")
    if args is None:
        return None
    if len(args) == 2:
        return (
            WordPiece(as_prefix(args[0]), Role.PREFIX),
            WordPiece(as_suffix(args[1]), Role.SUFFIX),
        )
    if len(args) == 3:
        return (
            WordPiece(as_prefix(args[0]), Role.PREFIX),
            WordPiece(args[1], Role.BASE_WORD),
            WordPiece(as_suffix(args[2]), Role.SUFFIX),
        )
    raise MalformedTemplate("confix", args, "2 or 3")


@dataclass(frozen=True)
class Strategy:
    name: str
    split: Callable[[str], Optional[Breakdown]]


# Order matters: the first surviving candidate wins ties.
MORPHEME_STRATEGIES = (
    Strategy("alternative_spelling", split_alternative_spelling),
    Strategy("affix", split_affixes),
    Strategy("prefix", split_prefixes),
    Strategy("suffix", split_suffixes),
    Strategy("compound", split_compounds),
    Strategy("confix", split_confixes),
)


# =============================================================================
# Steps
# =============================================================================


@dataclass
class StepResult:
    """Outcome of the inflection or morpheme step for one word."""

    breakdown: Optional[Breakdown] = None
    candidates: int = 0  # unique validated candidates
    irregular: bool = False
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.breakdown is not None


def _choose(word: str, depth: int, step: str, candidates: list[Breakdown], result: StepResult) -> StepResult:
    unique = unique_breakdowns(candidates)
    result.candidates = len(unique)
    if not unique:
        return result
    if len(unique) > 1:
        options = "; ".join(" + ".join(p.text for p in bd) for bd in unique)
        logger.warning(f"More than one unique {step} breakdown found for '{word}': {options}")
        result.diagnostics.append(Diagnostic(
            DiagnosticKind.AMBIGUOUS_BREAKDOWN,
            word,
            depth,
            f"{len(unique)} {step} breakdowns ({options}); using the first",
        ))
    result.breakdown = unique[0]
    return result


def split_inflection(word: str, text: str, depth: int = 1) -> StepResult:
    """
    Split a standard inflectional ending off a word.

    Irregular words are never split. Otherwise every table row whose
    signature appears in the text yields a (base_word, inflection)
    candidate; the first unique validated candidate wins.
    """
    result = StepResult()
    if is_irregular(text):
        result.irregular = True
        return result

    candidates = []
    for row in INFLECTION_PATTERNS:
        base = row.base_word(text)
        if base is None:
            continue
        breakdown = (
            WordPiece(base, Role.BASE_WORD),
            WordPiece(row.ending, Role.INFLECTION),
        )
        if is_acceptable(word, breakdown):
            candidates.append(breakdown)

    return _choose(word, depth, "inflection", candidates, result)


def split_morphemes(word: str, text: str, depth: int = 1) -> StepResult:
    """Run every morpheme strategy in order and pick the first valid breakdown."""
    result = StepResult()
    candidates = []
    for strategy in MORPHEME_STRATEGIES:
        try:
            breakdown = strategy.split(text)
        except MalformedTemplate as e:
            logger.info(f"Ignoring {strategy.name} template for '{word}': {e}")
            result.diagnostics.append(Diagnostic(
                DiagnosticKind.MALFORMED_TEMPLATE, word, depth, str(e),
            ))
            continue
        if breakdown and is_acceptable(word, breakdown):
            candidates.append(breakdown)

    return _choose(word, depth, "morpheme", candidates, result)
