"""文件命名工具模块。

优化产物的确定性命名与识别。
"""

from functools import lru_cache
from pathlib import Path

from ..models.constants import ArtifactNaming


class FileNamingStrategy:
    """产物命名策略类"""

    @staticmethod
    @lru_cache(maxsize=512)
    def parse_artifact_name(filename: str) -> tuple[str, int | None] | None:
        """解析产物文件名

        Returns:
            (base_name, width) 元组，回退产物的 width 为 None；非产物返回 None
        """
        match = ArtifactNaming.PATTERN.match(filename)
        if match is None:
            return None
        width = match.group("width")
        return match.group("base"), int(width) if width else None

    @staticmethod
    def is_artifact_name(filename: str) -> bool:
        return FileNamingStrategy.parse_artifact_name(filename) is not None


def is_artifact_path(path: Path) -> bool:
    """路径是否为本工具生成的产物文件"""
    return FileNamingStrategy.is_artifact_name(path.name)
