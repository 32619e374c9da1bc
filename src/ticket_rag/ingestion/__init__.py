"""
Ingestion — ticket records to embedded, upserted vectors.

Canonical text and ids come from :mod:`ticket_rag.records`; this package
adds metadata sanitization, the embedding adapter, the batch pipeline
and file loaders for the CLI.
"""
