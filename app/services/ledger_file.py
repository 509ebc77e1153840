"""Ledger export file reader."""

import csv
import io
import logging

from app.config import LEDGER_COLUMNS

from .errors import InvalidInput

logger = logging.getLogger(__name__)


def read_ledger_rows(content: str | bytes) -> list[dict[str, str]]:
    """Read a delimited ledger export into header-keyed rows.

    Blank lines are skipped. Columns outside the known ledger header are kept
    as-is so they survive as passthrough data.

    Raises:
        InvalidInput: If the file has no header or no data rows
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise InvalidInput(f"Failed to process GL file: {e}") from e
    else:
        content = content.lstrip("\ufeff")

    reader = csv.DictReader(io.StringIO(content))
    if not reader.fieldnames:
        raise InvalidInput("Failed to process GL file: No valid data in GL file")

    header = [name.strip() for name in reader.fieldnames]
    reader.fieldnames = header

    unknown = [name for name in header if name not in LEDGER_COLUMNS]
    if unknown:
        logger.info(f"Ledger file has {len(unknown)} unmapped columns: {unknown}")

    rows = []
    for row in reader:
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        # Short rows leave None values; overflow lands under the None key
        rows.append({key: value or "" for key, value in row.items() if key is not None})

    if not rows:
        raise InvalidInput("Failed to process GL file: No valid data in GL file")

    logger.info(f"Read {len(rows)} ledger rows")
    return rows
