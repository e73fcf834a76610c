import threading
from typing import Dict, List, Optional, Tuple

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """进程内字典实现 (开发 / 测试用，重启即丢失)"""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def scan_prefix(self, prefix: str) -> List[Tuple[str, str]]:
        with self._lock:
            return sorted((k, v) for k, v in self._data.items() if k.startswith(prefix))
