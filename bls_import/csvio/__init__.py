from .parser import UnsupportedFileError, parse_csv, read_source_file
from .rows import generate_sample_template, parse_import_rows

__all__ = [
    "UnsupportedFileError",
    "parse_csv",
    "read_source_file",
    "parse_import_rows",
    "generate_sample_template",
]
