import json
import os
import re
import tempfile
from pathlib import Path

from tokensync.core.ports.remote import MappingStoreError

SAFE_FILE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")


class JsonMappingStore:
    """
    Persisted identity mapping, one pretty-printed JSON object per file key.

    Documents live at `<directory>/<file_key>.json` so they can be committed
    and reviewed alongside the token source.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).resolve()

    def path_for(self, file_key: str) -> Path:
        # Prevent traversal
        if not SAFE_FILE_KEY.match(file_key):
            raise MappingStoreError(file_key, "file key contains unsupported characters")
        return self.directory / f"{file_key}.json"

    def load(self, file_key: str) -> dict[str, str]:
        """Load the mapping; empty when the file does not exist yet."""
        target = self.path_for(file_key)
        if not target.exists():
            return {}
        try:
            with open(target, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise MappingStoreError(file_key, f"not valid JSON: {e}") from e
        except OSError as e:
            raise MappingStoreError(file_key, f"could not be read: {e}") from e

        if not isinstance(data, dict):
            raise MappingStoreError(file_key, "expected a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def save(self, file_key: str, mapping: dict[str, str]) -> Path:
        """Atomically overwrite the mapping and return its path."""
        target = self.path_for(file_key)
        content = json.dumps(dict(sorted(mapping.items())), indent=2) + "\n"
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_name, target)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise
        except OSError as e:
            raise MappingStoreError(file_key, f"could not be written: {e}") from e
        return target
