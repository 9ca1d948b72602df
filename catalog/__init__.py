"""
Catalog package: the persistent book collection.

This package contains:
- Book record models and the partial-update patch
- Pure mutation operations over a collection snapshot
- The JSON file store with atomic saves and a serializing gate
- The catalog service combining the two
"""

__version__ = "1.0.0"
__author__ = "Books API"
