"""源图与变体规格模型。"""

from enum import Enum
from functools import cached_property
from pathlib import Path

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..utils.logging_helpers import get_logger
from .constants import ArtifactNaming, ImageFormats, get_mime_type


logger = get_logger()

# EXIF Orientation 5-8 表示宽高互换
_ORIENTATION_TAG = 0x0112
_TRANSPOSED_ORIENTATIONS = {5, 6, 7, 8}


class VariantKind(str, Enum):
    """变体类型枚举"""

    RESPONSIVE = "responsive"  # 按目标宽度缩放的 WebP
    FALLBACK = "fallback"  # 原格式、原尺寸的压缩副本


class SourceImage(BaseModel):
    """一次构建中不可变的源图"""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="源图路径")

    @property
    def base_name(self) -> str:
        """文件名主干，是源图与其全部产物的关联键"""
        return self.path.stem

    @property
    def extension(self) -> str:
        return self.path.suffix.lower()

    @property
    def format_name(self) -> str:
        return ImageFormats.format_for_extension(self.extension)

    @cached_property
    def dimensions(self) -> tuple[int, int] | None:
        """按显示方向读取的像素尺寸，读取失败时为 None"""
        try:
            with Image.open(self.path) as img:
                width, height = img.size
                orientation = img.getexif().get(_ORIENTATION_TAG)
        except Exception as e:
            logger.debug(f"读取图片尺寸失败 {self.path}: {e}")
            return None

        if orientation in _TRANSPOSED_ORIENTATIONS:
            return height, width
        return width, height


class VariantSpec(BaseModel):
    """单个优化产物的规格

    输出文件名只由 (base_name, kind, width, original_ext) 决定。
    """

    model_config = ConfigDict(frozen=True)

    base_name: str = Field(description="源图文件名主干")
    kind: VariantKind = Field(description="变体类型")
    width: int | None = Field(None, gt=0, description="目标宽度，仅响应式变体")
    original_ext: str = Field(description="源图扩展名（小写，含点）")

    @model_validator(mode="after")
    def validate_width(self) -> "VariantSpec":
        if self.kind == VariantKind.RESPONSIVE and self.width is None:
            raise ValueError("响应式变体必须指定宽度")
        if self.kind == VariantKind.FALLBACK and self.width is not None:
            raise ValueError("回退变体不能指定宽度")
        return self

    @property
    def is_responsive(self) -> bool:
        return self.kind == VariantKind.RESPONSIVE

    @property
    def filename(self) -> str:
        if self.is_responsive:
            return ArtifactNaming.RESPONSIVE_TEMPLATE.format(
                base=self.base_name, width=self.width
            )
        return ArtifactNaming.FALLBACK_TEMPLATE.format(
            base=self.base_name, ext=self.original_ext
        )

    @property
    def target_format(self) -> str:
        """编码目标格式（Pillow 格式名）"""
        if self.is_responsive:
            return ImageFormats.RESPONSIVE_FORMAT
        return ImageFormats.format_for_extension(self.original_ext)

    @property
    def mime_type(self) -> str:
        return get_mime_type(self.target_format)
