"""
Clinical trial retrieval: an in-memory vector store and a retrieval augmented
query service on top of it.
"""

from .core.config import VERSION as __version__
