"""
CodePulse - Resume PDF Extraction.

Extracts plain text from an uploaded resume PDF using pypdf so it can be
used as resume context for prep kits, resume analysis and mock
interviews. Handles encrypted files and pages without a text layer.
"""

import io
import logging
import re
from pathlib import Path
from typing import BinaryIO

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from codepulse.core.exceptions import EmptyDocumentError, PDFParseError


logger = logging.getLogger(__name__)

PdfSource = str | Path | bytes | BinaryIO


def extract_resume_text(source: PdfSource, filename: str | None = None) -> str:
    """
    Extract text content from a resume PDF.

    Args:
        source: Path to a PDF, raw PDF bytes, or a binary file object
            (e.g. a Streamlit upload)
        filename: Display name used in errors and logs

    Returns:
        Normalized text, one paragraph per block

    Raises:
        PDFParseError: If the PDF cannot be read
        EmptyDocumentError: If the PDF has no extractable text
    """
    name = filename or _source_name(source)
    reader = _open_reader(source, name)

    if reader.is_encrypted:
        try:
            reader.decrypt("")  # Many resumes are "encrypted" with an empty owner password
        except Exception as e:
            raise PDFParseError(name, "PDF is encrypted") from e

    text_parts = []
    for page_num, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text()
        except Exception as e:
            logger.warning(f"Could not extract page {page_num + 1} of {name}: {e}")
            continue
        if page_text and page_text.strip():
            text_parts.append(page_text)

    text = normalize_text("\n\n".join(text_parts))
    if not text:
        raise EmptyDocumentError(name)

    logger.info(f"✅ Extracted {len(text)} chars from {name} ({len(reader.pages)} pages)")
    return text


def _source_name(source: PdfSource) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).name
    return getattr(source, "name", None) or "resume.pdf"


def _open_reader(source: PdfSource, name: str) -> PdfReader:
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise PDFParseError(name, "File not found")
        if path.suffix.lower() != ".pdf":
            raise PDFParseError(name, "File is not a PDF")
        stream: BinaryIO = io.BytesIO(path.read_bytes())
    elif isinstance(source, (bytes, bytearray)):
        stream = io.BytesIO(source)
    else:
        stream = source

    try:
        return PdfReader(stream)
    except (PyPdfError, ValueError, OSError) as e:
        logger.error(f"PDF parsing error for {name}: {e}")
        raise PDFParseError(name, str(e)) from e


def normalize_text(text: str) -> str:
    """
    Clean extracted text while keeping its line structure.

    Removes control characters, collapses runs of spaces and tabs,
    trims each line and allows at most one blank line in a row.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", text)
    text = re.sub(r"[ \t\xa0]+", " ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
