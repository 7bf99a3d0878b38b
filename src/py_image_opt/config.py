"""统一配置管理模块。

提供应用程序的全局默认配置，支持环境变量覆盖。
"""

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class OptimizationDefaults:
    """图片优化相关的默认配置"""

    ENABLE: bool = True
    QUALITY: int = 80
    FORMATS: tuple[str, ...] = ("webp", "jpeg")
    SIZES: tuple[int, ...] = (800, 1280, 1920)
    SOURCE_DIRS: tuple[str, ...] = ("source",)
    SKIP_EXISTING: bool = True
    VERBOSE: bool = False
    REPLACE_IMG_TAGS: bool = True

    # 目录约定
    OUTPUT_DIR_NAME: str = "opt-images"
    PUBLIC_DIR: str = "public"
    THEMES_DIR: str = "themes"

    # 并发设置
    MAX_WORKERS: int = 4


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_PREFIX: str = "[py-image-opt]"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_opt.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


@dataclass
class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    optimization: OptimizationDefaults = field(default_factory=OptimizationDefaults)
    logging: LoggingDefaults = field(default_factory=LoggingDefaults)

    def __post_init__(self) -> None:
        self._load_from_env()

    def _load_from_env(self) -> None:
        """从环境变量加载配置"""
        if quality := os.getenv("IMGOPT_QUALITY"):
            object.__setattr__(self.optimization, "QUALITY", int(quality))

        if max_workers := os.getenv("IMGOPT_MAX_WORKERS"):
            object.__setattr__(self.optimization, "MAX_WORKERS", int(max_workers))

        if log_level := os.getenv("IMGOPT_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("IMGOPT_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config() -> AppConfig:
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
    return config
