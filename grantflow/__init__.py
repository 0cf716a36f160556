"""GrantFlow document ingestion backend.

Parses uploaded identity and funding documents, classifies them, extracts
structured fields and proposes confidence-gated patches to profile and
funding-source records.
"""

__version__ = "0.1.0"
