"""Ingestion package for offline pipelines.

Contains the crawler that populates the internal vector index (chunks table)
with chunked, embedded oceanography reference pages. See ingest_docs.py.
"""
