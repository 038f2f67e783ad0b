import json
import os
import threading
from pathlib import Path
from typing import Any, Mapping, Union


class JsonLinesSink:
    """Append-only JSON-lines file.

    Each ``append`` writes exactly one compact JSON object followed by a
    newline and fsyncs before returning. Writers inside the process are
    serialised so lines never interleave; line order is arrival order.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: Mapping[str, Any]) -> None:
        line = json.dumps(record, ensure_ascii=False, separators=(',', ':')) + '\n'
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open('a', encoding='utf-8') as fh:
                fh.write(line)
                fh.flush()
                os.fsync(fh.fileno())

    def writable(self) -> bool:
        """True when the log directory exists (or can be created) and is writable."""
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        if self.path.exists():
            return os.access(self.path, os.W_OK)
        return os.access(directory, os.W_OK)
