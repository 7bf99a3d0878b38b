"""消息格式化工具模块。

提供统一的错误消息、进度消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def directory_not_found(directory: str | Path) -> str:
        """目录不存在错误消息"""
        return f"目录不存在: {directory}"

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"路径不是目录: {path}"

    @staticmethod
    def permission_error(path: str | Path, operation: str = "访问") -> str:
        """权限错误消息"""
        return f"权限错误，无法{operation}: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def images_found(count: int) -> str:
        return f"找到 {count} 张待处理图片"

    @staticmethod
    def artifacts_generated(count: int, cached: int = 0) -> str:
        msg = f"生成 {count} 个优化图片"
        if cached:
            msg += f"（其中 {cached} 个沿用已有文件）"
        return msg

    @staticmethod
    def artifacts_deleted(count: int) -> str:
        return f"已删除 {count} 个优化图片"

    @staticmethod
    def markup_rewritten(target: str | Path, count: int) -> str:
        return f"已改写 {target} 中的 {count} 处图片引用"
