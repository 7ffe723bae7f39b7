"""
Key/object storage used for the layout source documents and rendered artifacts
"""

import json
import os
import logging
import threading
import tempfile
from typing import Dict, Optional

from utils import safe_write_json

logger = logging.getLogger("main")

CONTENT_TYPES_INDEX = "_content_types.json"


class ObjectStore:
    """Minimal get/put interface; subclasses decide where bytes live"""

    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def put(self, key: str, content, content_type: str = "application/octet-stream") -> None:
        raise NotImplementedError

    def get_text(self, key: str) -> Optional[str]:
        data = self.get(key)
        return data.decode("utf-8") if data is not None else None

    def get_json(self, key: str):
        """Parsed JSON document, or None when the key is absent"""
        text = self.get_text(key)
        if text is None:
            return None
        return json.loads(text)


class LocalObjectStore(ObjectStore):
    """Objects stored as files under a root directory, content types kept in an index file"""

    def __init__(self, root_dir: str):
        self.root_dir = root_dir
        self._index_lock = threading.Lock()
        os.makedirs(root_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        path = os.path.normpath(os.path.join(self.root_dir, key))
        if os.path.commonpath([path, os.path.normpath(self.root_dir)]) != os.path.normpath(self.root_dir):
            raise ValueError(f"Object key escapes the store: {key}")
        return path

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not os.path.isfile(path):
            logger.debug(f"Object not found: {key}")
            return None
        with open(path, "rb") as f:
            return f.read()

    def put(self, key: str, content, content_type: str = "application/octet-stream") -> None:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content
        with tempfile.NamedTemporaryFile("wb", dir=os.path.dirname(path), delete=False) as tmp:
            tmp_path = tmp.name
            tmp.write(data)
        os.replace(tmp_path, path)
        self._record_content_type(key, content_type)
        logger.debug(f"Object written: {key} ({content_type}, {len(data)} bytes)")

    def content_type(self, key: str) -> Optional[str]:
        return self._read_index().get(key)

    def _read_index(self) -> Dict[str, str]:
        index_path = os.path.join(self.root_dir, CONTENT_TYPES_INDEX)
        if not os.path.isfile(index_path):
            return {}
        with open(index_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _record_content_type(self, key: str, content_type: str) -> None:
        with self._index_lock:
            index = self._read_index()
            index[key] = content_type
            safe_write_json(os.path.join(self.root_dir, CONTENT_TYPES_INDEX), index)
