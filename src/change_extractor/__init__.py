"""
Change Extractor - turn a handful of commits or tags into an extraction plan.

Resolves the commit range spanning the requested targets, aggregates the
paths changed across it and sorts them into structured datasets (grouped by
qualified name with their members) and hierarchical files.
"""

__version__ = "1.2.0"
