"""Abstract base class for ledger export parsers."""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from ledger_reconciler.models.entry import LedgerSource, TransactionEntry
from ledger_reconciler.utils.date_utils import safe_parse_date
from ledger_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)

# Maximum input file size to prevent memory exhaustion (50 MB)
MAX_FILE_SIZE = 50 * 1024 * 1024

QUOTE = '"'


class ParseError(Exception):
    """Exception raised when parsing fails."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize ParseError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to parse.
        """
        self.file_path = file_path
        super().__init__(message)


class FormatError(ParseError):
    """Raised when the required header columns cannot be found.

    This means the whole file is of the wrong kind, unlike a bad data row
    which is skipped.

    Attributes:
        source: Ledger the text was parsed as.
        expected_headers: Header names the parser requires.
        found_headers: Header names actually present (lowercased).
    """

    def __init__(
        self,
        source: LedgerSource,
        expected_headers: list[str],
        found_headers: list[str],
        file_path: Optional[Path] = None,
    ):
        self.source = source
        self.expected_headers = list(expected_headers)
        self.found_headers = list(found_headers)
        expected = ", ".join(f'"{h}"' for h in self.expected_headers)
        found = ", ".join(self.found_headers)
        super().__init__(
            f"{source.value.capitalize()} CSV headers not recognized. "
            f"Expected: {expected}. Found headers (lowercase): {found}",
            file_path,
        )


def split_line(line: str, delimiter: str) -> list[str]:
    """Split one delimited line, respecting double-quoted fields.

    A quote toggles the in-quote state and is not kept. Inside a quoted
    field a doubled quote is a literal quote. Every field is trimmed.

    Args:
        line: Text of a single line.
        delimiter: Field delimiter.

    Returns:
        List of trimmed field values.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == QUOTE:
            if in_quotes and i + 1 < length and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return [f.strip() for f in fields]


class BaseParser(ABC):
    """Abstract base class for ledger parsers.

    Subclasses describe their format through class attributes and
    implement the description and amount composition rules:
    - source: Ledger the parser produces entries for
    - delimiter: Field delimiter
    - required_headers: Column role -> header name as shown to users
    - date_notations: Date notations to try, highest priority first
    """

    source: LedgerSource
    delimiter: str = ","
    required_headers: dict[str, str] = {}
    date_notations: tuple[str, ...] = ()

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        """Initialize parser.

        Args:
            max_file_size: Largest file parse_file() accepts, in bytes.
        """
        self.max_file_size = max_file_size

    @property
    def name(self) -> str:
        """Return parser name for logging."""
        return self.__class__.__name__

    @property
    def expected_headers(self) -> list[str]:
        return list(self.required_headers.values())

    @abstractmethod
    def _extract_description(self, values: list[str], columns: dict[str, int]) -> str:
        """Compose the description from a row's fields."""

    @abstractmethod
    def _extract_amount(self, values: list[str], columns: dict[str, int]) -> Decimal:
        """Compose the signed amount from a row's fields.

        Raises:
            ValueError: If the amount fields are not numeric.
        """

    def parse(self, raw_text: str) -> list[TransactionEntry]:
        """Parse a ledger export into unmatched entries.

        Bad rows (blank, too short, bad date, empty description,
        non-numeric amount) are skipped.

        Args:
            raw_text: Full text of the export.

        Returns:
            Entries in file order.

        Raises:
            FormatError: If the required header columns are missing.
        """
        # Only "\n" ends a row; a trailing "\r" is removed when fields are trimmed
        lines = raw_text.lstrip("\ufeff").strip().split("\n")
        if not lines:
            logger.info(f"{self.name}: empty input")
            return []

        columns = self._locate_columns(lines[0])
        max_required_index = max(columns.values())

        entries: list[TransactionEntry] = []
        skipped_count = 0

        for line_no, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue

            values = split_line(line, self.delimiter)
            if len(values) <= max_required_index:
                logger.debug(
                    f"{self.name}: skipping line {line_no}, "
                    f"{len(values)} columns but need {max_required_index + 1}"
                )
                skipped_count += 1
                continue

            entry = self._parse_row(values, columns, line_no)
            if entry is None:
                skipped_count += 1
                continue
            entries.append(entry)

        logger.info(
            f"{self.name}: parsed {len(entries)} {self.source.value} entries "
            f"({skipped_count} rows skipped)"
        )
        return entries

    def parse_file(self, file_path: Path) -> list[TransactionEntry]:
        """Read a ledger export from disk and parse it.

        Args:
            file_path: Path to the export.

        Returns:
            Entries in file order.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ParseError: If the file is too large.
            FormatError: If the required header columns are missing.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_size = file_path.stat().st_size
        if file_size > self.max_file_size:
            raise ParseError(
                f"File too large ({file_size / 1024 / 1024:.1f} MB). "
                f"Maximum allowed is {self.max_file_size / 1024 / 1024:.0f} MB",
                file_path,
            )

        text = file_path.read_text(encoding="utf-8", errors="replace")
        try:
            return self.parse(text)
        except FormatError as e:
            e.file_path = file_path
            raise

    def _locate_columns(self, header_line: str) -> dict[str, int]:
        """Find the index of every required column.

        Args:
            header_line: First line of the export.

        Returns:
            Column role -> field index.

        Raises:
            FormatError: If any required header is missing.
        """
        headers = [h.lower() for h in split_line(header_line, self.delimiter)]

        columns: dict[str, int] = {}
        for role, header in self.required_headers.items():
            wanted = header.lower()
            if wanted in headers:
                columns[role] = headers.index(wanted)

        if len(columns) != len(self.required_headers):
            raise FormatError(self.source, self.expected_headers, headers)

        return columns

    def _parse_row(
        self, values: list[str], columns: dict[str, int], line_no: int
    ) -> Optional[TransactionEntry]:
        """Turn one split row into an entry, or None if it must be skipped."""
        entry_date = self._extract_date(values[columns["date"]])
        if entry_date is None:
            logger.debug(f"{self.name}: skipping line {line_no}, unparseable date '{values[columns['date']]}'")
            return None

        description = self._extract_description(values, columns)
        if not description:
            logger.debug(f"{self.name}: skipping line {line_no}, empty description")
            return None

        try:
            amount = self._extract_amount(values, columns)
        except ValueError as e:
            logger.debug(f"{self.name}: skipping line {line_no}, {e}")
            return None

        return TransactionEntry(
            date=entry_date,
            description=description,
            amount=amount,
            source=self.source,
            original_row_data=tuple(values),
            source_line=line_no,
        )

    def _extract_date(self, raw_date: str) -> Optional[date]:
        return safe_parse_date(raw_date, self.date_notations)
