"""CSS background-image 改写。"""

import re
from collections.abc import Callable
from pathlib import PurePosixPath

from ..models.constants import mime_type_for_extension
from .resolver import VariantSet


BACKGROUND_URL_PATTERN = re.compile(
    r"background-image\s*:\s*url\(\s*(['\"]?)([^'\")]+?)\1\s*\)", re.IGNORECASE
)


def build_image_set(webp_url: str, original_url: str, quote: str = "'") -> str:
    """生成 WebP 优先、原图兜底的 image-set() 表达式"""
    path = PurePosixPath(original_url.split("#", 1)[0].split("?", 1)[0])
    mime_type = mime_type_for_extension(path.suffix)
    q = quote
    return (
        f"image-set(url({q}{webp_url}{q}) type({q}image/webp{q}), "
        f"url({q}{original_url}{q}) type({q}{mime_type}{q}))"
    )


def rewrite_background_style(
    style: str,
    lookup: Callable[[str], VariantSet | None],
    quote: str = "'",
) -> str | None:
    """把 background-image: url(...) 改写为 image-set()

    Args:
        style: style 属性值
        lookup: URL -> VariantSet | None
        quote: image-set 中使用的引号

    Returns:
        str | None: 改写后的 style，没有可改写的声明时为 None
    """
    changed = False

    def replace(match: re.Match[str]) -> str:
        nonlocal changed
        url = match.group(2).strip()
        variants = lookup(url)
        if variants is None or not variants.responsive:
            return match.group(0)
        changed = True
        first_webp = variants.responsive[0][1]
        return f"background-image: {build_image_set(first_webp, url, quote)}"

    rewritten = BACKGROUND_URL_PATTERN.sub(replace, style)
    return rewritten if changed else None
