"""
Content-set graph engine.

Builds normalized content graphs (passages, vocabulary, paragraph and
comprehensive questions) from editable models, validates them, stores them,
duplicates them and gates their review status.
"""

__version__ = "0.1.0"
