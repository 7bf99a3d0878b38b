"""图像处理相关常量定义。

源图扩展名、优化产物命名约定以及格式/MIME 映射。
"""

import re
from typing import Final


class ImageFormats:
    """站点图片格式管理"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
    }

    # 扩展名到 Pillow 格式名
    EXTENSION_FORMATS: Final[dict[str, str]] = {
        ".jpg": "JPEG",
        ".jpeg": "JPEG",
        ".png": "PNG",
        ".gif": "GIF",
        ".webp": "WEBP",
        ".avif": "AVIF",
    }

    # 参与优化的源图扩展名
    SOURCE_EXTENSIONS: Final[frozenset[str]] = frozenset(
        {".jpg", ".jpeg", ".png", ".gif", ".webp"}
    )

    # 配置中允许出现的输出格式
    CONFIG_FORMATS: Final[frozenset[str]] = frozenset({"webp", "jpeg", "png", "avif"})

    # 响应式变体统一编码为 WebP
    RESPONSIVE_FORMAT: Final[str] = "WEBP"

    @classmethod
    def format_for_extension(cls, extension: str) -> str:
        """根据扩展名获取格式名，未知扩展名按 JPEG 处理"""
        return cls.EXTENSION_FORMATS.get(extension.lower(), "JPEG")

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        """获取格式的 MIME 类型"""
        return f"image/{get_format_alias(format_name).lower()}"


class ArtifactNaming:
    """优化产物命名约定"""

    RESPONSIVE_TEMPLATE: Final[str] = "{base}-{width}w.webp"
    FALLBACK_TEMPLATE: Final[str] = "{base}-optimized{ext}"

    # 识别由本工具生成的文件名
    PATTERN: Final[re.Pattern[str]] = re.compile(
        r"^(?P<base>.+?)-(?:(?P<width>\d+)w\.webp|optimized(?P<ext>\.(?:jpe?g|png|gif|webp)))$",
        re.IGNORECASE,
    )


class ProcessingDefaults:
    """处理相关默认值"""

    # 源图扫描时跳过的目录
    EXCLUDE_DIRS: Final[list[str]] = [
        "__pycache__",
        ".git",
        ".svn",
        "node_modules",
    ]


class QualityDefaults:
    """质量相关默认值"""

    MIN_QUALITY: Final[int] = 1
    MAX_QUALITY: Final[int] = 100


def get_format_alias(format_str: str) -> str:
    """获取格式的标准名称"""
    format_upper = format_str.upper()
    return ImageFormats.ALIASES.get(format_upper, format_upper)


def get_mime_type(format_str: str) -> str:
    """获取格式的MIME类型"""
    return ImageFormats.get_mime_type(format_str)


def mime_type_for_extension(extension: str) -> str:
    """根据扩展名获取 MIME 类型，如 .jpg -> image/jpeg"""
    return get_mime_type(ImageFormats.format_for_extension(extension))
