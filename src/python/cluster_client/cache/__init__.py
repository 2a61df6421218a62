# Cache subpackage

from .document_cache import DocumentRevisionCache

__all__ = [
    "DocumentRevisionCache",
]
