"""
Catalog package for the Disney character viewer.

This package holds the client-side catalogue: the client for the remote
character endpoint, the normaliser that turns loose remote records into
``Character`` objects, the local store for client-only additions and
removals, the view derivation (film filter and sorting), the form draft
used to create characters, and the reducer tying them together. The
router exposes the resulting view and its actions over HTTP so that any
front-end can render it.
"""

from .router import router as catalog_router  # noqa: F401
