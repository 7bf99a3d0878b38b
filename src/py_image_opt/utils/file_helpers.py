"""文件工具模块。

提供源图扫描等文件系统相关的实用函数。
"""

from collections.abc import Iterable, Iterator
from pathlib import Path

from ..models.constants import ImageFormats
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def find_image_files(
    directory: str | Path,
    recursive: bool = True,
    exclude_dirs: list[str] | None = None,
    extensions: Iterable[str] | None = None,
) -> Iterator[Path]:
    """查找目录中的图像文件。

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录
        exclude_dirs: 要排除的目录名列表（相对搜索目录匹配）
        extensions: 允许的扩展名，默认为源图扩展名

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or []
    allowed = {ext.lower() for ext in (extensions or ImageFormats.SOURCE_EXTENSIONS)}

    if not directory.exists():
        logger.debug(MessageFormatter.directory_not_found(directory))
        return

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return

    pattern = "**/*" if recursive else "*"

    try:
        for file_path in directory.glob(pattern):
            if not file_path.is_file() or file_path.suffix.lower() not in allowed:
                continue
            relative_parts = file_path.relative_to(directory).parts[:-1]
            if any(part in exclude_dirs for part in relative_parts):
                continue
            yield file_path
    except PermissionError:
        logger.error(MessageFormatter.permission_error(directory, "访问目录"))
    except OSError as e:
        logger.error(MessageFormatter.operation_failed("搜索图像文件", directory, e))


def is_remote_url(url: str) -> bool:
    """是否为远程或内联资源（不对应本地文件）"""
    lowered = url.strip().lower()
    return lowered.startswith(("http://", "https://", "//", "data:", "blob:", "mailto:"))
