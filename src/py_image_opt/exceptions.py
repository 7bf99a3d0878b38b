"""图片优化异常处理模块。

定义统一的异常类和错误处理机制。构建过程中的任何错误都只影响单张图片或单个文档。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.artifact_result import ArtifactResult, GenerationResult
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


class ImageOptError(Exception):
    """图片优化相关错误基类"""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path


class ValidationError(ImageOptError):
    """参数/配置验证错误"""

    pass


class ProcessingError(ImageOptError):
    """编码或文件处理错误"""

    pass


class UnsupportedFormatError(ImageOptError):
    """无法识别或不支持的图片格式"""

    pass


class MarkupError(ImageOptError):
    """HTML 解析或改写错误"""

    pass


def handle_image_errors(operation_name: str = "图像处理"):
    """统一的图像处理异常处理装饰器

    把 Pillow 和文件系统异常转换为本模块的异常类型。

    Args:
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ImageOptError:
                raise
            except UnidentifiedImageError as e:
                logger.debug(f"{operation_name} - 无法识别图像格式: {e}")
                raise UnsupportedFormatError(f"不支持的图像格式: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise ProcessingError(f"图像文件过大，可能存在安全风险: {e}") from e
            except OSError as e:
                logger.debug(f"{operation_name} - 文件操作失败: {e}")
                raise ProcessingError(f"文件操作失败: {e}") from e
            except (ValueError, TypeError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise ValidationError(f"参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    提供标准化的错误处理和日志记录功能。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图像编码"、"文件删除"等）
            path: 相关文件路径
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def _create_error_result(source_path: Path, error_msg: str) -> ArtifactResult:
        """创建不含产物的失败结果"""
        try:
            original_size = source_path.stat().st_size if source_path.exists() else 0
        except OSError:
            original_size = 0

        return ArtifactResult(
            source_path=source_path,
            artifacts=[],
            original_size=original_size,
            success=False,
            error=error_msg,
        )

    @staticmethod
    def handle_with_context(
        error: Exception,
        source_path: Path,
        operation: str = "未知操作",
        log_level: str = "error",
    ) -> ArtifactResult:
        """记录错误并返回标准化的失败结果

        Args:
            error: 异常对象
            source_path: 源图路径
            operation: 操作名称
            log_level: 日志级别 ("error", "warning", "debug")

        Returns:
            ArtifactResult: 不含产物的失败结果
        """
        ErrorHandler._log_error(operation, source_path, error, log_level)
        return ErrorHandler._create_error_result(source_path, f"{operation}: {error}")

    @staticmethod
    def handle_processing_error(
        error: Exception, source_path: Path, operation: str = "图片优化"
    ) -> ArtifactResult:
        """按异常类型分发的单图错误处理"""
        match error:
            case UnsupportedFormatError() as ufe:
                return ErrorHandler.handle_with_context(
                    ufe, source_path, f"{operation} - 格式不支持", log_level="warning"
                )
            case FileNotFoundError() as fnfe:
                return ErrorHandler.handle_with_context(
                    fnfe, source_path, operation, log_level="warning"
                )
            case PermissionError() as pe:
                return ErrorHandler.handle_with_context(
                    pe, source_path, f"{operation} - 权限错误", log_level="error"
                )
            case ProcessingError() | OSError() as pe:
                return ErrorHandler.handle_with_context(
                    pe, source_path, f"{operation} - 处理错误", log_level="error"
                )
            case _:
                return ErrorHandler.handle_with_context(
                    error, source_path, operation, log_level="error"
                )

    @staticmethod
    def create_error_generation_result(
        output_dir: Path, error_message: str
    ) -> GenerationResult:
        """创建整体失败的生成结果"""
        return GenerationResult(
            output_dir=output_dir,
            results=[],
            success=False,
            error=error_message,
        )
