"""源图发现模块。

枚举配置的源目录中的图片，并定位主题源目录。
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..config import get_config
from ..models.constants import ProcessingDefaults
from ..models.optimization_config import OptimizationConfig
from ..utils.file_helpers import find_image_files
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


def resolve_theme_source_dir(
    root_dir: Path,
    theme: str | None = None,
    site_config: Mapping[str, Any] | None = None,
) -> Path | None:
    """定位主题的 source 目录

    主题名依次取自：宿主显式传入、站点配置中的 ``theme`` 字段、themes 目录下的第一个子目录。

    Args:
        root_dir: 站点根目录
        theme: 宿主配置中的主题名
        site_config: 宿主已解析的站点配置

    Returns:
        Path | None: 存在的主题 source 目录
    """
    themes_root = Path(root_dir) / get_config().optimization.THEMES_DIR
    theme_name = theme or (site_config or {}).get("theme")

    if not theme_name and themes_root.is_dir():
        try:
            candidates = sorted(p.name for p in themes_root.iterdir() if p.is_dir())
        except OSError as e:
            logger.debug(MessageFormatter.operation_failed("读取主题目录", themes_root, e))
            candidates = []
        theme_name = candidates[0] if candidates else None

    if not theme_name:
        return None

    theme_source = themes_root / str(theme_name).strip() / "source"
    return theme_source if theme_source.is_dir() else None


def find_source_images(config: OptimizationConfig) -> list[Path]:
    """列出全部待处理源图

    排除产物目录，避免把生成的变体再次当作源图处理。结果去重并排序。
    """
    exclude_dirs = [config.output_dir_name, *ProcessingDefaults.EXCLUDE_DIRS]
    found: dict[Path, Path] = {}

    for directory in config.all_source_dirs:
        if not directory.is_dir():
            logger.debug(MessageFormatter.directory_not_found(directory))
            continue
        for file_path in find_image_files(directory, exclude_dirs=exclude_dirs):
            found.setdefault(file_path.resolve(), file_path)

    images = sorted(found.values())
    logger.info(MessageFormatter.images_found(len(images)))
    return images
