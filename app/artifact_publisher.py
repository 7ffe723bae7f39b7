"""
Artifact Publisher
The combined script file is written synchronously; every per-layout file is
handed to a daemon thread and never awaited by the caller
"""

import threading
import logging
from typing import List, Tuple

from constants import CONTENT_TYPES, DEFAULT_CONTENT_TYPE
from exceptions import ArtifactWriteException
from metrics import artifact_writes_total

logger = logging.getLogger("main")


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def content_type_for(filename: str) -> str:
    """Media type from the output filename extension; unknown extensions are opaque binary"""
    return CONTENT_TYPES.get(file_extension(filename), DEFAULT_CONTENT_TYPE)


class ArtifactPublisher:
    def __init__(self, object_store):
        self.object_store = object_store
        self._pending: List[threading.Thread] = []
        self._lock = threading.Lock()

    def publish_sync(self, key: str, content: str, content_type: str = None) -> None:
        """Write and wait; failures raise ArtifactWriteException"""
        content_type = content_type or content_type_for(key)
        try:
            self.object_store.put(key, content, content_type)
        except Exception as e:
            artifact_writes_total.labels(mode="sync", status="error").inc()
            raise ArtifactWriteException(str(e), key=key) from e
        artifact_writes_total.labels(mode="sync", status="success").inc()
        logger.info(f"Critical {key} written synchronously")

    def publish_async(self, key: str, content: str, content_type: str = None) -> threading.Thread:
        """Fire-and-forget write; failures are only logged"""
        content_type = content_type or content_type_for(key)
        thread = threading.Thread(
            target=self._write_quietly, args=(key, content, content_type), daemon=True, name=f"ArtifactWrite-{key}"
        )
        with self._lock:
            self._pending = [t for t in self._pending if t.is_alive()]
            self._pending.append(thread)
        thread.start()
        return thread

    def publish_all_async(self, artifacts: List[Tuple[str, str, str]]) -> int:
        for key, content, content_type in artifacts:
            self.publish_async(key, content, content_type)
        return len(artifacts)

    def _write_quietly(self, key, content, content_type):
        try:
            self.object_store.put(key, content, content_type)
            artifact_writes_total.labels(mode="async", status="success").inc()
            logger.debug(f"Async write completed: {key}")
        except Exception as e:
            artifact_writes_total.labels(mode="async", status="error").inc()
            logger.error(f"Async write failed for {key}: {e}")

    def wait_for_pending(self, timeout: float = None) -> bool:
        """Join outstanding async writes (shutdown and tests); True if all finished"""
        with self._lock:
            pending = list(self._pending)
        for thread in pending:
            thread.join(timeout)
        with self._lock:
            self._pending = [t for t in self._pending if t.is_alive()]
            return not self._pending
