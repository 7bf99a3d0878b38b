"""HTML 改写包。

把图片引用改写为 <picture> / image-set() 自适应标记。
"""

from .css import build_image_set, rewrite_background_style
from .pattern import PatternRewriter, parse_attributes
from .picture import PictureBuilder, PicturePlan
from .resolver import ImageResolver, VariantSet
from .rewriter import MarkupRewriter
from .sizes import build_sizes_attribute, build_srcset


__all__ = [
    "ImageResolver",
    "MarkupRewriter",
    "PatternRewriter",
    "PictureBuilder",
    "PicturePlan",
    "VariantSet",
    "build_image_set",
    "build_sizes_attribute",
    "build_srcset",
    "parse_attributes",
    "rewrite_background_style",
]
