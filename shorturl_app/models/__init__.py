"""
Models for the short URL service.

ShortUrl is the domain model shared by every store backend;
ShortUrlRecord is its row in the relational store.
"""

from .short_url import ShortUrl
from .url import ShortUrlRecord

__all__ = ["ShortUrl", "ShortUrlRecord"]
