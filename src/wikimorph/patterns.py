"""
English Wiktionary patterns for the morpheme splitter.

All language/source specific knowledge (template aliases, irrelevant
headings, the irregular category marker and the inflection table) is kept in
data/en-wikt.morphology.yaml and compiled into module constants at import
time.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from wikimorph.errors import PatternError


PATTERNS_FILE = Path(__file__).parent / "data" / "en-wikt.morphology.yaml"

MORPHEME_KINDS = (
    "alternative_spelling",
    "affix",
    "prefix",
    "suffix",
    "compound",
    "confix",
)


@dataclass(frozen=True)
class InflectionPattern:
    """One row of the inflection table: signature regex -> standard ending."""

    pattern: re.Pattern
    ending: str

    def base_word(self, text: str) -> Optional[str]:
        """Return the captured base word, or None if the signature is absent."""
        match = self.pattern.search(text)
        if not match:
            return None
        base = match.group(1).strip()
        return base or None


def _load_yaml(path: Path) -> dict:
    """Load YAML file with clear error message if missing."""
    if not path.exists():
        raise PatternError(
            f"Required pattern file not found: {path}\n"
            f"This file is needed for: template aliases and inflection patterns"
        )
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PatternError(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        raise PatternError(f"Expected a mapping at the top of {path}")
    return data


def build_template_aliases(config: dict) -> dict[str, tuple[str, ...]]:
    """Map each morpheme strategy kind to its lowercase template names."""
    templates = config.get("templates") or {}
    aliases = {}
    for kind in MORPHEME_KINDS:
        names = templates.get(kind)
        if not names:
            raise PatternError(f"No template names configured for '{kind}'")
        aliases[kind] = tuple(str(n).lower() for n in names)
    return aliases


def build_inflection_patterns(config: dict) -> tuple[InflectionPattern, ...]:
    """Compile the ordered inflection table."""
    rows = config.get("inflections") or []
    if not rows:
        raise PatternError("Inflection table is empty")

    patterns = []
    for i, row in enumerate(rows):
        try:
            compiled = re.compile(row["pattern"])
            ending = str(row["ending"])
        except KeyError as e:
            raise PatternError(f"Inflection row {i} is missing {e}")
        except re.error as e:
            raise PatternError(f"Inflection row {i} has an invalid pattern: {e}")
        if compiled.groups < 1:
            raise PatternError(f"Inflection row {i} must capture the base word")
        patterns.append(InflectionPattern(pattern=compiled, ending=ending))
    return tuple(patterns)


_CONFIG = _load_yaml(PATTERNS_FILE)

TEMPLATE_ALIASES = build_template_aliases(_CONFIG)
IRRELEVANT_HEADINGS = frozenset(_CONFIG.get("irrelevant_headings") or ())
IRREGULAR_MARKER = str(_CONFIG.get("irregular_marker") or "[[Category:English irregular")
INFLECTION_PATTERNS = build_inflection_patterns(_CONFIG)
