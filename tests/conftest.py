"""Pytest configuration and shared fixtures."""
import pytest
import tempfile
from pathlib import Path

from wikimorph.sources import MemorySource


# English markup keyed by word, as a content source would return it.
SAMPLE_MARKUP = {
    "cats": "===Noun===\n{{head|en|noun form}}\n# {{plural of|en|cat}}",
    "cat": "===Etymology===\nFrom Middle English.\n===Noun===\n# A small domesticated carnivore.",
    "rainbow": "===Etymology===\n{{compound|en|rain|bow}}\n===Noun===\n# An arc of colours.",
    "rain": "===Noun===\n# Condensed water falling from a cloud.",
    "bow": "===Noun===\n# A weapon used to shoot arrows.",
    "went": (
        "===Verb===\n{{head|en|verb form}}\n# {{past of|en|go}}\n"
        "[[Category:English irregular verbs]]"
    ),
    "unhappy": "===Etymology===\n{{prefix|en|un|happy}}\n===Adjective===\n# Not happy.",
    "happy": "===Adjective===\n# Contented, joyous.",
    "unhappiness": "===Etymology===\n{{suffix|en|unhappy|ness}}\n===Noun===\n# Lack of happiness.",
    "foo": "===Etymology===\n{{affix|en|onlyonepart}}\n===Noun===\n# A placeholder.",
    "rainbows": "===Noun===\n# {{plural of|en|rainbow}}",
}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_markup():
    """Copy of the sample markup so tests can add entries."""
    return dict(SAMPLE_MARKUP)


@pytest.fixture
def memory_source(sample_markup):
    """Content source serving the sample markup."""
    return MemorySource(sample_markup)
