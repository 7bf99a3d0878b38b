"""清理模块。

删除此前生成的优化产物，并移除已经变空的产物目录。
"""

from pathlib import Path

from ..models.optimization_config import OptimizationConfig
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import is_artifact_path
from .registry import ArtifactRegistry


logger = get_logger()


class CleanupSweeper:
    """产物清理器"""

    def __init__(
        self, config: OptimizationConfig, registry: ArtifactRegistry | None = None
    ):
        self.config = config
        self.registry = registry

    def sweep(self) -> int:
        """删除全部产物目录中符合命名约定的文件

        单个文件删除失败只记录日志；目录中仍有其他文件时保留目录。

        Returns:
            int: 删除的文件数量
        """
        removed_count = 0
        for output_dir in self.config.output_dirs:
            removed_count += self._sweep_directory(output_dir)

        if self.registry is not None:
            self.registry.clear()

        if removed_count:
            logger.info(MessageFormatter.artifacts_deleted(removed_count))
        return removed_count

    def _sweep_directory(self, directory: Path) -> int:
        if not directory.is_dir():
            return 0

        removed_count = 0
        for file_path in sorted(directory.rglob("*")):
            if not file_path.is_file() or not is_artifact_path(file_path):
                continue
            try:
                file_path.unlink()
                removed_count += 1
                logger.debug(f"已删除产物: {file_path}")
            except OSError as e:
                logger.warning(MessageFormatter.format_error("删除产物", file_path, e))

        self._prune_empty_dirs(directory)
        return removed_count

    @staticmethod
    def _prune_empty_dirs(directory: Path) -> None:
        """自底向上移除空目录，非空目录保持不动"""
        subdirs = sorted(
            (p for p in directory.rglob("*") if p.is_dir()),
            key=lambda p: len(p.parts),
            reverse=True,
        )
        for path in [*subdirs, directory]:
            try:
                path.rmdir()
            except OSError:
                # 目录非空或已被删除
                continue
