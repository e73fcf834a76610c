import logging
from config import GlobalConfig
from .base import KeyValueStore
from .memory_store import MemoryKeyValueStore
from .sqlite_store import SqliteKeyValueStore

logger = logging.getLogger(__name__)


def get_store(global_config: GlobalConfig) -> KeyValueStore:
    """
    [V5.0] 键值存储工厂 (KV_BACKEND: sqlite / memory)
    """
    backend = global_config.KV_BACKEND

    if backend == "memory":
        logger.info("🔌 [Factory] 初始化评论存储: memory")
        return MemoryKeyValueStore()

    if backend != "sqlite":
        raise ValueError(f"未知的 KV_BACKEND: {backend}")

    logger.info(f"🔌 [Factory] 初始化评论存储: sqlite ({global_config.KV_SQLITE_PATH})")
    store = SqliteKeyValueStore(global_config.KV_SQLITE_PATH)
    store.init_db()
    return store
