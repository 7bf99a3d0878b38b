"""产物登记表。

一次构建内共享的已处理源图集合、已生成产物集合以及源图原始尺寸。
"""

import threading
from pathlib import Path


class ArtifactRegistry:
    """线程安全的构建期登记表

    构建开始时创建，由 ArtifactStore 写入，MarkupRewriter 与 CleanupSweeper 读取。
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._processed: set[Path] = set()
        self._artifacts: set[str] = set()
        self._dimensions: dict[str, tuple[int, int]] = {}

    def mark_processed(self, source_path: Path) -> None:
        with self._lock:
            self._processed.add(Path(source_path))

    def is_processed(self, source_path: Path) -> bool:
        with self._lock:
            return Path(source_path) in self._processed

    def has_processed_any(self) -> bool:
        with self._lock:
            return bool(self._processed)

    def add_artifact(self, public_path: str) -> None:
        with self._lock:
            self._artifacts.add(public_path)

    def has_artifact(self, public_path: str) -> bool:
        with self._lock:
            return public_path in self._artifacts

    def record_dimensions(self, base_name: str, dimensions: tuple[int, int]) -> None:
        with self._lock:
            self._dimensions[base_name] = dimensions

    def get_dimensions(self, base_name: str) -> tuple[int, int] | None:
        with self._lock:
            return self._dimensions.get(base_name)

    @property
    def artifacts(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._artifacts)

    def clear(self) -> None:
        """清理阶段调用，重置全部登记"""
        with self._lock:
            self._processed.clear()
            self._artifacts.clear()
            self._dimensions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)
