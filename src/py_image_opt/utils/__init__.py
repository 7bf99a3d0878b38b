"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .file_helpers import find_image_files, is_remote_url
from .logging_helpers import configure_logging, get_logger
from .message_formatter import MessageFormatter
from .naming_helpers import FileNamingStrategy, is_artifact_path


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "configure_logging",
    "find_image_files",
    "get_logger",
    "is_artifact_path",
    "is_remote_url",
]
