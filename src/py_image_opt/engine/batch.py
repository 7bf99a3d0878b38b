"""批量生成模块。

发现全部源图并并发派生优化产物。
"""

from pathlib import Path

from ..core.artifact_store import ArtifactStore
from ..core.discovery import find_source_images
from ..exceptions import ErrorHandler
from ..models.artifact_result import GenerationResult
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .concurrent_executor import ConcurrentExecutor


logger = get_logger()


class BatchGenerator:
    """批量产物生成器"""

    def __init__(
        self,
        store: ArtifactStore,
        executor: ConcurrentExecutor | None = None,
    ):
        """初始化批量生成器

        Args:
            store: 产物存储，其配置决定源目录和并发数
            executor: 并发执行器
        """
        self.store = store
        self.config = store.config
        self.executor = executor or ConcurrentExecutor(self.config.max_workers)

    def generate_all(self) -> GenerationResult:
        """为全部源图派生产物

        单张图片失败只记录在对应结果中，不影响其他图片。

        Returns:
            GenerationResult: 按源图排序的处理结果
        """
        try:
            image_files = find_source_images(self.config)
            return self.generate_files(image_files)
        except Exception as e:
            ErrorHandler._log_error("批量生成", self.config.output_dir, e, "error")
            return ErrorHandler.create_error_generation_result(
                output_dir=self.config.output_dir, error_message=str(e)
            )

    def generate_files(self, image_files: list[Path]) -> GenerationResult:
        """为给定源图派生产物"""
        results = self.executor.execute_tasks(
            image_files,
            self.store.process_image,
            on_error=lambda e, path: ErrorHandler.handle_processing_error(e, path),
        )

        result = GenerationResult(
            output_dir=self.config.output_dir,
            results=results,
            success=True,
        )

        artifacts = result.get_artifacts()
        cached = sum(1 for a in artifacts if a.cached)
        logger.info(MessageFormatter.artifacts_generated(len(artifacts) - cached, cached))
        for failed in result.get_failed_items():
            logger.debug(failed.get_summary())
        return result
