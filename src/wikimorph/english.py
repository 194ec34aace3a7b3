"""
Reduce a full Wiktionary page to the parts relevant for morphology.

Language sections are always depth 2 ("==English=="). Below that, sections
that describe other words (translations, related terms, ...) or other
etymologies of the same spelling are removed recursively.
"""

import logging
import re
from typing import Optional

from wikimorph.patterns import IRRELEVANT_HEADINGS, IRREGULAR_MARKER
from wikimorph.sections import Section, join_sections, split_sections


logger = logging.getLogger(__name__)

ENGLISH = "English"
LANGUAGE_DEPTH = 2

# "Etymology 2", "Noun 3", ... (anything numbered other than 1)
NUMBERED_HEADING = re.compile(r"^(.*\S)\s+(\d+)$")


def extract_english(text: str) -> Optional[str]:
    """Return the body of the ==English== section, or None if absent."""
    for section in split_sections(text, LANGUAGE_DEPTH, keep_first=False):
        if section.name == ENGLISH:
            return section.body
    return None


def is_irrelevant_heading(name: str) -> bool:
    """Check if a section with this heading should be dropped."""
    if name in IRRELEVANT_HEADINGS:
        return True
    match = NUMBERED_HEADING.match(name)
    return bool(match) and int(match.group(2)) != 1


def drop_irrelevant_sections(text: str, depth: int = 3) -> str:
    """
    Recursively remove irrelevant sections from wikitext.

    Sections are split at `depth`; every section body is cleaned at
    depth + 1 before the siblings at this depth are filtered. If there are
    no headings at `depth`, the text is returned unchanged.
    """
    sections = split_sections(text, depth)
    if not sections:
        return text

    cleaned = []
    for section in sections:
        body = drop_irrelevant_sections(section.body, depth + 1)
        if is_irrelevant_heading(section.name):
            logger.debug(f"Dropping section '{section.name}' at depth {depth}")
            continue
        cleaned.append(Section(section.name, section.depth, body))

    return join_sections(cleaned, depth)


def extract_relevant_english(text: str) -> Optional[str]:
    """Extract the English section of a page minus irrelevant subsections."""
    english = extract_english(text)
    if english is None:
        return None
    return drop_irrelevant_sections(english)


def is_irregular(text: str) -> bool:
    """Check if the entry belongs to an English irregular-word category."""
    return IRREGULAR_MARKER in text
