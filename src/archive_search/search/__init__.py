"""
Archive listing search package.

This package provides an in-memory inverted index over zip archive entries:
- models: document-id table and the immutable index value
- builder: archive listing ingestion and postings construction
- stats: inverse document frequency
- snapshot: binary snapshot codec and on-disk store
- engine: ranked multi-term queries
"""
