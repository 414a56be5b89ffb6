"""Per-site article extraction."""

from .content import ContentExtractor, ExtractedContent, extract_content, parse_document
from .profiles import ProfileResolver

__all__ = [
    'ContentExtractor',
    'ExtractedContent',
    'ProfileResolver',
    'extract_content',
    'parse_document',
]
