"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler

from ..config import get_config


PACKAGE_LOGGER_NAME = "py_image_opt"

# configure_logging 安装的处理器标记，重复调用时替换而不是叠加
_HANDLER_FLAG = "_py_image_opt_handler"


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        # 获取调用者的模块名
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """配置包级日志记录器。

    非 verbose 模式下只输出警告和错误，verbose 模式下输出处理进度。

    Args:
        verbose: 是否输出详细日志

    Returns:
        logging.Logger: 包级日志记录器
    """
    settings = get_config().logging
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            package_logger.removeHandler(handler)
            handler.close()

    level = getattr(logging, settings.LOG_LEVEL, logging.INFO) if verbose else logging.WARNING
    package_logger.setLevel(level)

    formatter = logging.Formatter(f"{settings.LOG_PREFIX} %(levelname)s %(message)s")
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    setattr(stream_handler, _HANDLER_FLAG, True)
    package_logger.addHandler(stream_handler)

    if settings.ENABLE_FILE_LOGGING:
        file_handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=settings.LOG_FILE_MAX_SIZE,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        setattr(file_handler, _HANDLER_FLAG, True)
        package_logger.addHandler(file_handler)

    return package_logger
