from .util import extract_keywords, format_exception_message, is_valid_email, sanitize_html

__all__ = ["extract_keywords", "format_exception_message", "is_valid_email", "sanitize_html"]
