"""<picture> 标记构建模块。

由 <img> 的属性和可用产物计算替换标记，解析树和文本扫描两种改写方式共用。
"""

import html
import re
from pathlib import Path

from pydantic import BaseModel, Field

from ..core.registry import ArtifactRegistry
from ..models.optimization_config import OptimizationConfig
from .css import rewrite_background_style
from .resolver import ImageResolver, VariantSet
from .sizes import build_sizes_attribute, build_srcset


# 与固定宽高冲突的 object-fit 类名，如 object-cover、object-fit-contain
OBJECT_FIT_CLASS = re.compile(
    r"^object-(?:fit(?:-[\w-]+)?|cover|contain|fill|none|scale-down)$", re.IGNORECASE
)

# 重新推导、不原样透传的属性
_DERIVED_ATTRIBUTES = {"src", "alt", "width", "height", "class"}

Attributes = list[tuple[str, str]]


class PicturePlan(BaseModel):
    """替换 <img> 的 <picture> 结构，属性均保持顺序"""

    picture_attrs: Attributes = Field(default_factory=list)
    source_attrs: Attributes | None = Field(None, description="没有响应式变体时为 None")
    img_attrs: Attributes = Field(default_factory=list)

    def to_html(self) -> str:
        parts = [f"<picture{_render_attrs(self.picture_attrs)}>"]
        if self.source_attrs is not None:
            parts.append(f"<source{_render_attrs(self.source_attrs)}>")
        parts.append(f"<img{_render_attrs(self.img_attrs)}>")
        parts.append("</picture>")
        return "".join(parts)


def _render_attrs(attributes: Attributes) -> str:
    return "".join(
        f' {name}="{html.escape(value, quote=True)}"' for name, value in attributes
    )


def _get_attr(attributes: Attributes, name: str) -> str | None:
    for key, value in attributes:
        if key.lower() == name:
            return value
    return None


def has_object_fit_class(class_value: str | None) -> bool:
    if not class_value:
        return False
    return any(OBJECT_FIT_CLASS.match(name) for name in class_value.split())


class PictureBuilder:
    """图片引用改写决策

    解析源图、查询产物并生成 PicturePlan；无法改写时返回 None，调用方保持原标记。
    """

    def __init__(
        self,
        config: OptimizationConfig,
        registry: ArtifactRegistry | None = None,
        resolver: ImageResolver | None = None,
    ):
        self.config = config
        self.registry = registry
        self.resolver = resolver or ImageResolver(config, registry)
        self.sizes_attribute = build_sizes_attribute(config.sizes)

    def lookup(self, url: str, html_path: Path | None = None) -> VariantSet | None:
        """解析 URL 并返回可用产物，源图不存在或没有产物时返回 None"""
        source = self.resolver.resolve(url, html_path)
        if source is None:
            return None
        variants = self.resolver.find_variants(source, url, html_path)
        return None if variants.is_empty else variants

    def build(
        self, attributes: Attributes, html_path: Path | None = None
    ) -> PicturePlan | None:
        """为 <img> 属性生成 <picture> 结构

        Args:
            attributes: 原 <img> 的有序属性
            html_path: HTML 文件路径，用于解析相对 src

        Returns:
            PicturePlan | None: 无可用产物时为 None
        """
        src = _get_attr(attributes, "src")
        if not src:
            return None

        source = self.resolver.resolve(src, html_path)
        if source is None:
            return None
        variants = self.resolver.find_variants(source, src, html_path)
        if variants.is_empty:
            return None

        class_value = _get_attr(attributes, "class")
        picture_attrs: Attributes = [("class", class_value)] if class_value else []

        source_attrs: Attributes | None = None
        if variants.responsive:
            source_attrs = [
                ("type", "image/webp"),
                ("srcset", build_srcset(variants.responsive)),
            ]
            if self.sizes_attribute:
                source_attrs.append(("sizes", self.sizes_attribute))

        img_attrs: Attributes = [
            ("src", variants.fallback_url or src),
            ("alt", _get_attr(attributes, "alt") or ""),
        ]
        img_attrs.extend(self._dimension_attrs(attributes, source.base_name, class_value))
        img_attrs.extend(
            (name, self._passthrough_value(name, value, html_path))
            for name, value in attributes
            if name.lower() not in _DERIVED_ATTRIBUTES
        )
        if _get_attr(attributes, "loading") is None:
            img_attrs.append(("loading", "lazy"))

        return PicturePlan(
            picture_attrs=picture_attrs,
            source_attrs=source_attrs,
            img_attrs=img_attrs,
        )

    def rewrite_background(
        self, style: str, html_path: Path | None = None, quote: str = "'"
    ) -> str | None:
        """改写 style 中的 background-image，无变化时返回 None"""
        return rewrite_background_style(
            style, lambda url: self.lookup(url, html_path), quote=quote
        )

    def _passthrough_value(self, name: str, value: str, html_path: Path | None) -> str:
        # <img> 自身的内联背景随替换一起改写
        if name.lower() != "style":
            return value
        return self.rewrite_background(value, html_path) or value

    def _dimension_attrs(
        self, attributes: Attributes, base_name: str, class_value: str | None
    ) -> Attributes:
        """宽高属性：优先原值，其次外部记录的原始尺寸"""
        width = _get_attr(attributes, "width")
        height = _get_attr(attributes, "height")
        if width is not None or height is not None:
            return [
                (name, value)
                for name, value in (("width", width), ("height", height))
                if value is not None
            ]

        if has_object_fit_class(class_value):
            return []

        dimensions = self.config.dimensions.get(base_name)
        if dimensions is None and self.registry is not None:
            dimensions = self.registry.get_dimensions(base_name)
        if dimensions is None:
            return []
        return [("width", str(dimensions[0])), ("height", str(dimensions[1]))]
