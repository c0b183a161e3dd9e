"""
cashbook_ingestion -- Reading branch movement exports into movement records.

Provides file adapters (JSON array / JSON Lines) and the mapping from the
legacy movement API payload to canonical ``MovementRecord`` values.

Architecture:
    cashbook_ingestion/ is a top-level package. Nothing in kernel/ or
    engines/ imports from ingestion.
"""
