from .html_text import extract, ExtractedPage, UNTITLED, MAX_TEXT_LENGTH, MIN_CONTENT_LENGTH

__all__ = ["extract", "ExtractedPage", "UNTITLED", "MAX_TEXT_LENGTH", "MIN_CONTENT_LENGTH"]
