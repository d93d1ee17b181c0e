from .directory import DirectoryReadError, fetch_participants, load_participants_file
from .result_writer import InMemoryResultWriter, PostgresResultWriter, ResultWriteError, ResultWriter

__all__ = [
    "DirectoryReadError",
    "fetch_participants",
    "load_participants_file",
    "ResultWriteError",
    "ResultWriter",
    "PostgresResultWriter",
    "InMemoryResultWriter",
]
