"""Attachment parsing for files sent along with chat messages.

Responsibilities:
    - PDF text extraction with pypdf
    - UTF-8 decoding for text-like files
    - Size and format validation
"""

from playground.parsing.file_parser import MAX_FILE_SIZE, parse_upload

__all__ = ["MAX_FILE_SIZE", "parse_upload"]
