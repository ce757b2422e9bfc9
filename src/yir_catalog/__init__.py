"""yir-catalog core library.

This package fetches year-in-review posts, extracts their metadata, and
merges the results into a JSON catalog consumed by the site.

Repo rules:
- The catalog is only ever rewritten wholesale; never splice it by hand.
- Enrichment fills missing fields and never overwrites existing ones.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
