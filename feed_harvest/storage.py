"""JSON Lines persistence for kept records."""

from pathlib import Path
from typing import Iterable

import orjson

from .errors import OutputError
from .logging import get_logger
from .processing.assembler import AiRecord
from .utils import ensure_directory

logger = get_logger(__name__)


class JsonlWriter:
    """Writes one JSON object per line, replacing the previous run's file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def write(self, records: Iterable[AiRecord]) -> Path:
        """Write ``records`` to the configured file.

        Raises:
            OutputError: If the directory or file cannot be written
        """
        records = list(records)
        try:
            ensure_directory(self.path.parent)
            with open(self.path, "wb") as f:
                for record in records:
                    f.write(orjson.dumps(record.to_json_dict()))
                    f.write(b"\n")
        except OSError as e:
            raise OutputError(f"Failed to write records to {self.path}: {e}") from e

        logger.info("Records saved", path=str(self.path), count=len(records))
        return self.path


def read_jsonl(path: str | Path) -> list[dict]:
    """Load a JSON Lines file written by :class:`JsonlWriter`."""
    with open(path, "rb") as f:
        return [orjson.loads(line) for line in f if line.strip()]
