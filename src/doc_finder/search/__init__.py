"""Word indexing and storage for doc-finder.

Modules:
- analyzers: whitespace tokenizer and normalizing filters
- noise: engine-owned noise word cache
- index: per-document word index and completion grouping
- excerpt: matching line extraction
- models: WordOccurrence and Result
- store: DocStore protocol and ``create_store`` URL factory
- sqlite_store / memory_store: store backends
"""
