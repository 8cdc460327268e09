"""
@description 容量受限的 LFU 内存缓存
@responsibility 按访问频次淘汰（同频次淘汰最久未访问的条目），供各实体服务做旁路缓存
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, Hashable, Optional, TypeVar

from loguru import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_CAPACITY = 100


@dataclass
class _CacheEntry(Generic[V]):
    value: V
    frequency: int = 1


class LfuCache(Generic[K, V]):
    """
    LFU 缓存

    数据结构：
    - _entries: key -> (value, frequency)
    - _buckets: frequency -> 按访问先后排序的 key（OrderedDict，队首为最久未访问）
    - _min_frequency: 当前最小访问频次，淘汰时直接定位到对应桶

    get / put / remove 均为 O(1)，三者由同一把互斥锁串行化。
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, name: str = "cache"):
        if capacity < 1:
            raise ValueError(f"缓存容量必须大于等于 1: {capacity}")
        self._capacity = capacity
        self._name = name
        self._entries: dict[K, _CacheEntry[V]] = {}
        self._buckets: dict[int, OrderedDict[K, None]] = {}
        self._min_frequency = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def name(self) -> str:
        return self._name

    def get(self, key: K) -> Optional[V]:
        """命中时频次 +1 并刷新访问顺序；未命中返回 None 且无副作用"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"[{self._name}] 缓存未命中: key={key}")
                return None
            self._touch(key, entry)
            logger.debug(f"[{self._name}] 缓存命中: key={key}, frequency={entry.frequency}")
            return entry.value

    def put(self, key: K, value: V) -> None:
        """写入或覆盖；已存在的 key 视为一次访问，新 key 在满容量时先淘汰一项"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.value = value
                self._touch(key, entry)
                return

            if len(self._entries) >= self._capacity:
                self._evict()

            self._entries[key] = _CacheEntry(value=value)
            self._buckets.setdefault(1, OrderedDict())[key] = None
            self._min_frequency = 1

    def remove(self, key: K) -> None:
        """删除条目，不存在时忽略"""
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None:
                return
            bucket = self._buckets[entry.frequency]
            del bucket[key]
            if not bucket:
                del self._buckets[entry.frequency]
            # _min_frequency 可能指向已删除的桶，淘汰时再修正

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._buckets.clear()
            self._min_frequency = 0

    def frequency(self, key: K) -> Optional[int]:
        """查询 key 当前的访问频次（不计为一次访问）"""
        with self._lock:
            entry = self._entries.get(key)
            return entry.frequency if entry is not None else None

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _touch(self, key: K, entry: _CacheEntry[V]) -> None:
        """把 key 从当前频次桶移到下一频次桶的队尾"""
        frequency = entry.frequency
        bucket = self._buckets[frequency]
        del bucket[key]
        if not bucket:
            del self._buckets[frequency]
            if self._min_frequency == frequency:
                self._min_frequency = frequency + 1

        entry.frequency = frequency + 1
        self._buckets.setdefault(entry.frequency, OrderedDict())[key] = None

    def _evict(self) -> None:
        if self._min_frequency not in self._buckets:
            # remove() 清空了最小频次桶
            self._min_frequency = min(self._buckets)

        bucket = self._buckets[self._min_frequency]
        key, _ = bucket.popitem(last=False)
        if not bucket:
            del self._buckets[self._min_frequency]
        del self._entries[key]
        logger.debug(
            f"[{self._name}] 缓存已满，淘汰: key={key}, frequency={self._min_frequency}"
        )
