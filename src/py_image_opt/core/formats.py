"""格式处理器模块。

为目标格式准备色彩模式，并生成 Pillow 保存参数。
"""

import logging
from typing import Any

from PIL import Image


logger = logging.getLogger(__name__)


class FormatProcessor:
    """格式处理器"""

    def prepare_for_format(self, img: Image.Image, target_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            target_format: 目标格式

        Returns:
            Image.Image: 处理后的图片对象
        """
        match target_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case "WEBP":
                return self._prepare_for_webp(img)
            case "GIF":
                return img
            case _:
                logger.warning(f"不支持的格式: {target_format}, 按 JPEG 处理")
                return self._prepare_for_jpeg(img)

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG 不支持透明度，透明区域合成到背景色上"""
        if img.mode == "P":
            if "transparency" not in img.info:
                return img.convert("RGB")
            img = img.convert("RGBA")

        if img.mode == "LA":
            img = img.convert("RGBA")

        if img.mode == "RGBA":
            background = Image.new("RGB", img.size, self._get_background_color(img))
            background.paste(img, mask=img.split()[-1])
            return background

        if img.mode != "RGB":
            # CMYK、灰度、二值等模式
            return img.convert("RGB")

        return img

    def _get_background_color(self, img: Image.Image) -> tuple[int, int, int]:
        """取不透明边缘像素的平均色作为背景，默认白色"""
        width, height = img.size
        step = max(1, min(width, height) // 10)
        edge_pixels: list[tuple[int, int, int]] = []

        points = [(x, y) for x in range(0, width, step) for y in (0, height - 1)]
        points += [(x, y) for y in range(0, height, step) for x in (0, width - 1)]
        for point in points:
            pixel = img.getpixel(point)
            if isinstance(pixel, tuple) and len(pixel) >= 4 and pixel[3] > 128:
                edge_pixels.append((int(pixel[0]), int(pixel[1]), int(pixel[2])))

        if len(edge_pixels) < 3:
            return (255, 255, 255)

        count = len(edge_pixels)
        return (
            sum(p[0] for p in edge_pixels) // count,
            sum(p[1] for p in edge_pixels) // count,
            sum(p[2] for p in edge_pixels) // count,
        )

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """PNG 支持绝大多数模式，只处理调色板和 CMYK"""
        if img.mode == "P":
            if "transparency" in img.info:
                return img.convert("RGBA")
            return img.convert("RGB")
        if img.mode == "CMYK":
            return img.convert("RGB")
        return img

    def _prepare_for_webp(self, img: Image.Image) -> Image.Image:
        """WebP 只接受 RGB 和 RGBA"""
        if img.mode == "P":
            if "transparency" in img.info:
                return img.convert("RGBA")
            return img.convert("RGB")
        if img.mode == "LA":
            return img.convert("RGBA")
        if img.mode not in ("RGB", "RGBA"):
            return img.convert("RGB")
        return img


def get_save_parameters(format_name: str, quality: int) -> dict[str, Any]:
    """获取保存参数

    Args:
        format_name: Pillow 格式名
        quality: 配置中的编码质量 1-100

    Returns:
        dict: 传给 Image.save 的参数（包含 format）
    """
    quality = max(1, min(100, quality))

    match format_name:
        case "JPEG":
            return {
                "format": "JPEG",
                # 质量100会禁用部分压缩算法
                "quality": min(quality, 98),
                "optimize": True,
                "progressive": True,
                "subsampling": 1 if quality >= 85 else 2,
            }
        case "WEBP":
            return {
                "format": "WEBP",
                "quality": quality,
                "method": 6,
                "alpha_quality": 100 if quality >= 85 else quality,
            }
        case "PNG":
            # PNG 无损，质量不影响输出
            return {"format": "PNG", "optimize": True, "compress_level": 9}
        case "GIF":
            return {"format": "GIF", "optimize": True}
        case _:
            return {"format": format_name, "quality": quality}
