"""
Base classes and interfaces for feed parsers.

This module defines the contract that all feed parsers must follow.
"""

from typing import List, Optional, Protocol

from breakroom.models import Article


class FeedParser(Protocol):
    """
    Protocol for feed parsers.

    Classes implementing this protocol turn a raw response body into a list
    of Article objects. Empty input yields an empty list, never an error.
    """

    def parse(self, text: Optional[str]) -> List[Article]:
        """Parses a feed document."""
