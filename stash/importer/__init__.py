"""CSV import package."""

from stash.importer.csv_importer import (
    CSV_HEADER,
    CSVImportError,
    ImportResult,
    decode_csv_bytes,
    parse_csv,
    read_csv_file,
)

__all__ = [
    "CSV_HEADER",
    "CSVImportError",
    "ImportResult",
    "decode_csv_bytes",
    "parse_csv",
    "read_csv_file",
]
