"""
Command-line interface for wikimorph.

Entry points:
- wikimorph split: decompose words and print their pieces
- wikimorph batch: decompose a word list into JSONL
- wikimorph snapshot-status: check the local snapshot against the latest dump
"""
