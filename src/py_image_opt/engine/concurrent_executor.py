"""并发执行器模块。

提供通用的并发任务执行功能，结果按输入顺序返回。
"""

from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TypeVar

from ..exceptions import ErrorHandler
from ..utils.logging_helpers import get_logger


logger = get_logger()

R = TypeVar("R")


class ConcurrentExecutor:
    """通用并发执行器

    使用线程池：产物登记表在内存中共享，进程池无法共享它。
    """

    def __init__(self, max_workers: int = 4):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数
        """
        self.max_workers = max_workers

    def execute_tasks(
        self,
        paths: Sequence[Path],
        task_function: Callable[[Path], R],
        on_error: Callable[[Exception, Path], R] | None = None,
    ) -> list[R]:
        """并发执行任务

        Args:
            paths: 任务输入（文件路径）列表
            task_function: 要执行的任务函数
            on_error: 任务抛出异常时生成替代结果，默认返回失败的 ArtifactResult

        Returns:
            list: 与 paths 顺序一致的结果列表
        """
        if not paths:
            return []

        on_error = on_error or self._default_error_result
        results: list[R | None] = [None] * len(paths)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index: dict[Future[R], int] = {}
            for index, path in enumerate(paths):
                try:
                    future_to_index[executor.submit(task_function, path)] = index
                except RuntimeError as e:
                    results[index] = on_error(e, path)

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                path = paths[index]
                try:
                    results[index] = future.result()
                    logger.debug(f"处理完成: {path}")
                except Exception as e:
                    results[index] = on_error(e, path)

        return results  # type: ignore[return-value]

    @staticmethod
    def _default_error_result(error: Exception, path: Path):
        return ErrorHandler.handle_with_context(error, path, "并发任务处理")
