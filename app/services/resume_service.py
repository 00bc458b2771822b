import logging
from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from app.core.errors import ResumeExtractionError

logger = logging.getLogger(__name__)

MAX_PAGES = 20


def extract_resume_text(data: bytes) -> str:
    if not data:
        raise ResumeExtractionError("Resume file is empty.")

    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            raise ResumeExtractionError("Encrypted PDF files are not supported.")

        num_pages = len(reader.pages)
        if num_pages > MAX_PAGES:
            raise ResumeExtractionError(f"Resume exceeds maximum page limit ({MAX_PAGES}). Current: {num_pages}")

        pages = [(page.extract_text() or "").strip() for page in reader.pages]
    except PyPdfError as exc:
        raise ResumeExtractionError(f"Could not read resume PDF: {exc}") from exc

    text = "\n\n".join(page for page in pages if page)
    if not text:
        raise ResumeExtractionError("No extractable text found in resume.")

    logger.info("Extracted %d characters from %d-page resume", len(text), num_pages)
    return text
