"""
wikimorph - split English words into morphemes using Wiktionary markup.

Words are decomposed recursively into stems, prefixes, suffixes, interfixes
and inflectional endings based on the etymology and form-of templates of
their English Wiktionary entries.

Modules:
    sections: split/join heading-delimited wikitext
    english: reduce a page to its relevant English sections
    templates: template strategies and the inflection table
    validate: plausibility checks for candidate breakdowns
    decompose: the recursive decomposer
    sources: content sources (in-memory, snapshot, live API)
    snapshot: the local snapshot layout and freshness checks
"""

from wikimorph.decompose import Decomposer, decompose, decompose_raw
from wikimorph.errors import StructuralMismatch, WikimorphError
from wikimorph.models import Decomposition, Diagnostic, DiagnosticKind, Role, WordPiece
from wikimorph.sources import MemorySource, PageSource, SnapshotSource, WiktionaryApiSource

__version__ = "0.1.0"

__all__ = [
    "Decomposer",
    "Decomposition",
    "Diagnostic",
    "DiagnosticKind",
    "MemorySource",
    "PageSource",
    "Role",
    "SnapshotSource",
    "StructuralMismatch",
    "WikimorphError",
    "WiktionaryApiSource",
    "WordPiece",
    "decompose",
    "decompose_raw",
]
