"""Attachment parsing using pypdf for PDFs and UTF-8 decoding for text.

Turns an uploaded file into FileData whose text can be sent to the model.
"""

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from playground.errors import FileParseError
from playground.models.chat import FileData

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"
TEXT_EXTENSIONS = (
    ".txt", ".md", ".csv", ".json", ".py", ".js", ".ts", ".html", ".css",
    ".xml", ".yaml", ".yml", ".log",
)


def _validate_size(file_content: bytes) -> None:
    """Validate upload content before parsing.

    Raises:
        FileParseError: If the file is empty or too large.
    """
    if not file_content:
        raise FileParseError("Empty file provided")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise FileParseError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")


def _is_pdf(filename: str, content_type: str | None) -> bool:
    return filename.lower().endswith(".pdf") or content_type == "application/pdf"


def _is_text(filename: str, content_type: str | None) -> bool:
    if content_type and (content_type.startswith("text/") or content_type == "application/json"):
        return True
    return filename.lower().endswith(TEXT_EXTENSIONS)


def extract_pdf_text(file_content: bytes) -> tuple[str, int]:
    """Extract text from a PDF.

    Returns:
        Tuple of (text, page count).

    Raises:
        FileParseError: If the bytes are not a readable PDF.
    """
    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise FileParseError("Invalid PDF: file does not start with PDF header")

    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise FileParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise FileParseError(f"Failed to read PDF: {e}") from e

    if pages == 0:
        raise FileParseError("PDF contains no pages")

    text_parts: list[str] = []
    for i, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            continue

    text = "\n\n".join(text_parts)
    if not text.strip():
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return text, pages


def parse_upload(filename: str, file_content: bytes, content_type: str | None = None) -> FileData:
    """Parse an uploaded file into an attachment.

    Args:
        filename: Original filename.
        file_content: Raw bytes of the upload.
        content_type: MIME type reported by the client, if any.

    Returns:
        FileData with extracted text.

    Raises:
        FileParseError: If the file is empty, too large, corrupt, or of an
            unsupported type.
    """
    _validate_size(file_content)

    if _is_pdf(filename, content_type):
        text, pages = extract_pdf_text(file_content)
        logger.info(f"Parsed PDF {filename} ({pages} pages)")
        mime = "application/pdf"
    elif _is_text(filename, content_type):
        try:
            text = file_content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FileParseError(f"Text file is not valid UTF-8: {filename}") from e
        mime = content_type or "text/plain"
    else:
        raise FileParseError(f"Unsupported file type: {filename}")

    return FileData(name=filename, type=mime, size=len(file_content), content=text)
