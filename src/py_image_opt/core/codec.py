"""图像编解码能力。

基于 Pillow 的解码、缩放与编码，是整个流水线中唯一接触像素的地方。
"""

from io import BytesIO
from typing import Protocol

from PIL import Image, ImageOps
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import handle_image_errors
from ..models.variant import SourceImage, VariantSpec
from ..utils.logging_helpers import get_logger
from .formats import FormatProcessor, get_save_parameters


logger = get_logger()


class EncodedImage(BaseModel):
    """编码后的图片数据"""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False, description="编码结果")
    width: int = Field(description="输出宽度")
    height: int = Field(description="输出高度")
    original_dimensions: tuple[int, int] = Field(description="源图显示尺寸")

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.width, self.height


class ImageCodec(Protocol):
    """编解码能力接口，ArtifactStore 只依赖该接口"""

    def encode(
        self, source: SourceImage, spec: VariantSpec, quality: int
    ) -> EncodedImage: ...


def constrain_width(
    original: tuple[int, int], target_width: int | None
) -> tuple[int, int]:
    """计算不放大、保持宽高比的输出尺寸"""
    width, height = original
    if target_width is None or target_width >= width:
        return width, height
    new_height = max(1, round(height * target_width / width))
    return target_width, new_height


class PillowCodec:
    """Pillow 编解码器"""

    def __init__(self, format_processor: FormatProcessor | None = None):
        self.format_processor = format_processor or FormatProcessor()

    @handle_image_errors("图像编码")
    def encode(self, source: SourceImage, spec: VariantSpec, quality: int) -> EncodedImage:
        """解码源图，按规格缩放并编码

        Args:
            source: 源图
            spec: 变体规格，响应式变体按 min(目标宽度, 原宽) 缩放
            quality: 编码质量

        Returns:
            EncodedImage: 编码结果
        """
        with Image.open(source.path) as img:
            img.load()
            # 按 EXIF 方向摆正
            oriented = ImageOps.exif_transpose(img)
            original_dimensions = oriented.size

            target_size = constrain_width(original_dimensions, spec.width)
            if target_size != original_dimensions:
                oriented = oriented.resize(target_size, Image.Resampling.LANCZOS)

            prepared = self.format_processor.prepare_for_format(
                oriented, spec.target_format
            )
            buffer = BytesIO()
            prepared.save(buffer, **get_save_parameters(spec.target_format, quality))

        logger.debug(
            f"编码 {source.path.name} -> {spec.filename} "
            f"{original_dimensions} -> {target_size}"
        )
        return EncodedImage(
            data=buffer.getvalue(),
            width=target_size[0],
            height=target_size[1],
            original_dimensions=original_dimensions,
        )
