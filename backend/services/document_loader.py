"""Document loading service: extracts text from uploaded files."""
import csv
import io
import logging
import mimetypes
import os
from typing import List, Optional, Tuple
import docx
import fitz  # PyMuPDF
import pandas as pd

logger = logging.getLogger(__name__)


class UnsupportedMediaTypeError(ValueError):
    """Raised when no text can be extracted from a media type."""


class DocumentParseError(ValueError):
    """Raised when a supported file cannot be read."""


PDF = "application/pdf"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS = "application/vnd.ms-excel"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
CSV = "text/csv"

TEXT_MEDIA_TYPES = {"text/plain", "text/markdown", "application/json", "text/tab-separated-values"}
SPREADSHEET_MEDIA_TYPES = {XLSX, XLS}
SUPPORTED_MEDIA_TYPES = TEXT_MEDIA_TYPES | SPREADSHEET_MEDIA_TYPES | {PDF, CSV, DOCX}

EXTENSION_MEDIA_TYPES = {
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".json": "application/json",
    ".tsv": "text/tab-separated-values",
    ".csv": CSV,
    ".pdf": PDF,
    ".xlsx": XLSX,
    ".xls": XLS,
    ".docx": DOCX,
}


class DocumentLoader:
    """Extracts plain text from text, JSON, delimited, PDF, Word and spreadsheet files."""

    def __init__(self, docs_directory: str = "reunion_docs"):
        """
        Initialize DocumentLoader.

        Args:
            docs_directory: Directory scanned by load_directory
        """
        self.docs_directory = docs_directory

    @staticmethod
    def resolve_media_type(file_name: str, media_type: Optional[str] = None) -> str:
        """Use the declared media type, inferring it from the file extension when missing."""
        if media_type and media_type != "application/octet-stream":
            return media_type.split(";")[0].strip().lower()

        extension = os.path.splitext(file_name)[1].lower()
        if extension in EXTENSION_MEDIA_TYPES:
            return EXTENSION_MEDIA_TYPES[extension]

        guessed, _ = mimetypes.guess_type(file_name)
        return guessed or "application/octet-stream"

    def extract_text(self, data: bytes, file_name: str, media_type: Optional[str] = None) -> str:
        """
        Extract text from file bytes.

        Args:
            data: Raw file content
            file_name: Original file name (used to infer the media type)
            media_type: Declared media type, if any

        Returns:
            Extracted text

        Raises:
            UnsupportedMediaTypeError: If the media type is not supported
            DocumentParseError: If the file cannot be read
        """
        media_type = self.resolve_media_type(file_name, media_type)

        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise UnsupportedMediaTypeError(f"Unsupported file type: {media_type}")

        if media_type in SPREADSHEET_MEDIA_TYPES or media_type == DOCX:
            # Any reader failure on an office file is a parse error
            try:
                if media_type == DOCX:
                    return self._extract_docx(data)
                return self._extract_spreadsheet(data)
            except Exception as e:
                logger.error(f"Failed to read {file_name}: {str(e)}")
                raise DocumentParseError(f"Could not read {file_name}: {str(e)}") from e

        try:
            if media_type in TEXT_MEDIA_TYPES:
                return self._decode(data)
            if media_type == CSV:
                return self._csv_to_rows(self._decode(data))
            return self._extract_pdf(data)
        except UnicodeDecodeError as e:
            raise DocumentParseError(f"Could not decode {file_name} as UTF-8: {str(e)}") from e
        except (RuntimeError, ValueError, OSError) as e:
            logger.error(f"Failed to read {file_name}: {str(e)}")
            raise DocumentParseError(f"Could not read {file_name}: {str(e)}") from e

    def load_directory(self, docs_directory: Optional[str] = None) -> List[Tuple[str, str, bytes]]:
        """
        Read every supported file in a directory.

        Returns:
            List of (file name, media type, bytes), sorted by file name
        """
        directory = docs_directory or self.docs_directory
        files: List[Tuple[str, str, bytes]] = []

        if not os.path.exists(directory):
            logger.error(f"Documents directory not found: {directory}")
            return files

        names = sorted(
            name for name in os.listdir(directory)
            if self.resolve_media_type(name) in SUPPORTED_MEDIA_TYPES
        )
        logger.info(f"Found {len(names)} supported files in {directory}")

        for name in names:
            path = os.path.join(directory, name)
            try:
                with open(path, "rb") as handle:
                    files.append((name, self.resolve_media_type(name), handle.read()))
            except OSError as e:
                logger.error(f"Error reading {name}: {str(e)}")
                continue

        return files

    @staticmethod
    def _decode(data: bytes) -> str:
        return data.decode("utf-8-sig")

    @staticmethod
    def _csv_to_rows(text: str) -> str:
        """Re-emit CSV as tab-delimited rows."""
        reader = csv.reader(io.StringIO(text))
        return "\n".join("\t".join(cell.replace("\t", " ") for cell in row) for row in reader)

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        pdf_document = fitz.open(stream=data, filetype="pdf")
        try:
            pages = [page.get_text() for page in pdf_document]
        finally:
            pdf_document.close()
        return "\n".join(pages)

    @staticmethod
    def _extract_spreadsheet(data: bytes) -> str:
        """One "Sheet: <name>" line per sheet followed by its rows, tab-delimited."""
        sheets = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None, dtype=str)

        parts = []
        for sheet_name, frame in sheets.items():
            rows = [
                "\t".join("" if pd.isna(value) else str(value).strip() for value in row)
                for row in frame.itertuples(index=False)
            ]
            parts.append(f"Sheet: {sheet_name}\n" + "\n".join(rows))

        return "\n\n".join(parts)

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        """Paragraph text, then table rows tab-delimited."""
        word_document = docx.Document(io.BytesIO(data))

        lines = [paragraph.text for paragraph in word_document.paragraphs]
        for table in word_document.tables:
            for row in table.rows:
                lines.append("\t".join(cell.text.replace("\t", " ").strip() for cell in row.cells))

        return "\n".join(lines)
