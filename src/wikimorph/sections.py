"""
Split wikitext into heading-delimited sections and put them back together.

Headings are found by a line-oriented tokenizer instead of a lookaround
regex. For a requested depth d:

    heading_line    ::= container? marker{d} name marker{d,} ws*
    container       ::= .* ">"          (e.g. <text xml:space="preserve">)
    name            ::= [^=]+

A line that opens with exactly d markers is a heading *candidate*. Only
well-formed candidates delimit bodies; a candidate with fewer closing markers
than opening ones leaves the name scan and the body segmentation out of
step, which is reported as StructuralMismatch.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from wikimorph.errors import StructuralMismatch


HEADING_MARKER = "="
FRONT_MATTER = "Front matter"

_NEWLINE_RUN = re.compile(r"\n+")


@dataclass(frozen=True)
class Section:
    """A named section at a given heading depth."""

    name: str
    depth: int
    body: str

    @property
    def is_front_matter(self) -> bool:
        return self.name == FRONT_MATTER


@dataclass(frozen=True)
class HeadingEvent:
    """A heading candidate found by the tokenizer."""

    depth: int
    name: str
    start: int  # offset where the heading markers begin
    body_start: int  # offset just past the heading line
    well_formed: bool


class HeadingTokenizer:
    """
    Scan text line by line for headings of one exact depth.

    Usage:
        for event in HeadingTokenizer(text, 3).events():
            print(event.name, event.well_formed)
    """

    def __init__(self, text: str, depth: int):
        if depth < 1:
            raise ValueError(f"Heading depth must be >= 1, got {depth}")
        self.text = text
        self.depth = depth

    def events(self) -> Iterator[HeadingEvent]:
        offset = 0
        for line in self.text.splitlines(keepends=True):
            event = self.scan_line(line, offset)
            if event is not None:
                yield event
            offset += len(line)

    def scan_line(self, line: str, offset: int) -> Optional[HeadingEvent]:
        """Return a HeadingEvent if this line is a heading candidate."""
        content = line.rstrip("\r\n")

        # Headings can follow a container tag on the same line.
        start = 0
        if not content.startswith(HEADING_MARKER):
            idx = content.find(">" + HEADING_MARKER)
            if idx == -1:
                return None
            start = idx + 1

        heading = content[start:].rstrip()
        inner = heading.lstrip(HEADING_MARKER)
        leading = len(heading) - len(inner)
        if leading != self.depth or not inner:
            return None

        name_part = inner.rstrip(HEADING_MARKER)
        trailing = len(inner) - len(name_part)
        if trailing == 0:
            # No closing markers at all: ordinary text.
            return None

        name = name_part.strip()
        well_formed = (
            trailing >= self.depth
            and bool(name)
            and HEADING_MARKER not in name
        )
        return HeadingEvent(
            depth=self.depth,
            name=name,
            start=offset + start,
            body_start=offset + len(line),
            well_formed=well_formed,
        )


def tidy(text: str) -> str:
    """Trim surrounding whitespace and collapse newline runs."""
    return _NEWLINE_RUN.sub("\n", text.strip())


def split_sections(text: str, depth: int, keep_first: bool = True) -> list[Section]:
    """
    Split text into sections at an exact heading depth.

    Args:
        text: Wikitext of an entry (or a section of one)
        depth: Number of '=' markers around the headings to split on
        keep_first: Keep non-blank text before the first heading as a
            "Front matter" section

    Returns:
        Sections in document order (empty if there are no headings at
        this depth)

    Raises:
        StructuralMismatch: if heading candidates and body segments disagree
    """
    events = list(HeadingTokenizer(text, depth).events())
    if not events:
        return []

    names = [e.name for e in events]
    headings = [e for e in events if e.well_formed]

    segments = []
    for i, heading in enumerate(headings):
        end = headings[i + 1].start if i + 1 < len(headings) else len(text)
        segments.append(tidy(text[heading.body_start:end]))

    if len(names) != len(segments):
        raise StructuralMismatch(depth, names, segments)

    sections = []
    front = tidy(text[:headings[0].start])
    if keep_first and front:
        sections.append(Section(FRONT_MATTER, depth, front))

    for heading, body in zip(headings, segments):
        sections.append(Section(heading.name, depth, body))

    return sections


def join_sections(sections: Iterable[Section], depth: int) -> str:
    """Recombine sections produced by split_sections into wikitext."""
    marker = HEADING_MARKER * depth
    parts = []
    for section in sections:
        if section.is_front_matter:
            parts.append(section.body)
        else:
            parts.append(f"{marker}{section.name}{marker}\n{section.body}")
    return tidy("\n".join(parts))


def section_map(sections: Iterable[Section]) -> dict[str, str]:
    """Ordered name -> body mapping (first occurrence of a name wins)."""
    result: dict[str, str] = {}
    for section in sections:
        result.setdefault(section.name, section.body)
    return result
