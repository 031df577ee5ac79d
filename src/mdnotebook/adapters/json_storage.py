import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..core.codec import CodecError, collection_from_records, collection_to_records
from ..core.model import Notebook
from ..core.ports import CollectionStorage

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "NotebooksData.json"


class JsonFileStorage(CollectionStorage):
    """
    One JSON file holding the whole notebook collection.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so an interrupted save keeps the previous file.
    """

    def __init__(self, path: Path):
        self.path = path

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def load(self) -> list[Notebook] | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            notebooks = collection_from_records(data)
        except (OSError, ValueError) as e:  # CodecError and JSONDecodeError are ValueErrors
            logger.error("Could not load notebooks from %s: %s", self.path, e)
            self._set_aside()
            return None
        logger.debug("Loaded %d notebooks from %s", len(notebooks), self.path)
        return notebooks

    def _set_aside(self) -> None:
        # keep the unreadable file so the next save does not destroy it
        try:
            shutil.copy2(self.path, self.corrupt_path)
            logger.warning("Unreadable data copied to %s", self.corrupt_path)
        except OSError as e:
            logger.error("Could not copy unreadable data to %s: %s", self.corrupt_path, e)

    def save(self, notebooks: list[Notebook]) -> bool:
        try:
            payload = json.dumps(
                collection_to_records(notebooks), ensure_ascii=False, indent=2
            )
        except CodecError as e:
            logger.error("Could not encode notebooks: %s", e)
            return False

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error("Could not save notebooks to %s: %s", self.path, e)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

        logger.debug("Saved %d notebooks to %s", len(notebooks), self.path)
        return True
