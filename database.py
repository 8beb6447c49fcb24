"""
Local JSON storage for the Tutor Desk collections.

Every collection lives in its own file under the data directory
(students.json, attendance.json, tests.json, doubts.json). Reads fall back
to a default on any failure and writes replace the file atomically, so a
crash leaves either the old or the new collection on disk.
"""
import logging
import os
import tempfile
from functools import lru_cache
from typing import List, Optional, Sequence, Type, TypeVar

from bson.objectid import ObjectId
from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def generate_id() -> str:
    """Return a fresh record id (seconds timestamp + random + counter)."""
    return str(ObjectId())


@lru_cache(maxsize=None)
def list_adapter(model: Type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(List[model])


class JsonStore:
    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    def path_for(self, key: str) -> str:
        return os.path.join(self.data_dir, f"{key}.json")

    def load(self, key: str, model: Type[M], default: Optional[List[M]] = None) -> List[M]:
        """Load the collection saved under ``key``.

        A missing, unreadable or malformed file yields ``default`` (an empty
        list when not given). Nothing is raised to the caller.
        """
        if default is None:
            default = []
        path = self.path_for(key)
        if not os.path.exists(path):
            return default
        try:
            with open(path, "rb") as f:
                raw = f.read()
            return list_adapter(model).validate_json(raw)
        except (OSError, ValidationError) as e:
            logger.warning("Could not load %r from %s, using default: %s", key, path, str(e)[:200])
            return default

    def save(self, key: str, records: Sequence[BaseModel]) -> bool:
        """Replace the collection saved under ``key`` with ``records``.

        Returns False when the write failed; the failure is logged only.
        """
        path = self.path_for(key)
        model = type(records[0]) if records else BaseModel
        payload = list_adapter(model).dump_json(list(records), by_alias=True)
        tmp_path = None
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.data_dir)
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            logger.error("Could not save %r to %s: %s", key, path, e)
            return False
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
        return True
