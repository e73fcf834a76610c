from abc import ABC, abstractmethod
from typing import List, Optional, Tuple


class KeyValueStore(ABC):
    """
    [V5.0] 键值存储抽象基类
    值统一为字符串 (调用方负责 JSON 序列化)，支持按前缀枚举。
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """读取单个键，不存在返回 None"""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """写入 (覆盖) 单个键"""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """删除单个键，返回是否确实删除了"""
        pass

    @abstractmethod
    def scan_prefix(self, prefix: str) -> List[Tuple[str, str]]:
        """按键排序返回所有以 prefix 开头的 (key, value)"""
        pass

    def count_prefix(self, prefix: str) -> int:
        return len(self.scan_prefix(prefix))
