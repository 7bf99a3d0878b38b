"""基于正则的宽松改写。

用于解析器拒绝的片段：直接扫描 <img ...> 与 style 属性，不重建整个文档。
"""

import html
import re
from pathlib import Path

from .picture import Attributes, PictureBuilder


# 引号内的 ">" 不结束标签
_TAG_BODY = r"""(?:[^>"']|"[^"]*"|'[^']*')*"""

IMG_TAG_PATTERN = re.compile(rf"<img\b(?P<attrs>{_TAG_BODY})>", re.IGNORECASE)
PICTURE_BLOCK_PATTERN = re.compile(r"<picture\b.*?</picture\s*>", re.IGNORECASE | re.DOTALL)
ATTRIBUTE_PATTERN = re.compile(
    r"""(?P<name>[^\s"'<>/=]+)(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'=<>`]+)))?"""
)
# data-style 之类的属性名不算 style
STYLE_ATTRIBUTE_PATTERN = re.compile(
    r"""(?P<prefix>(?<![\w-])style\s*=\s*)(?P<quote>["'])(?P<value>.*?)(?P=quote)""",
    re.IGNORECASE | re.DOTALL,
)


def start_tag_pattern(name: str) -> re.Pattern[str]:
    """匹配指定元素的完整开始标签"""
    return re.compile(rf"<{re.escape(name)}\b{_TAG_BODY}>", re.IGNORECASE)


def parse_attributes(attr_text: str) -> Attributes:
    """解析标签属性文本，保持原顺序，值做 HTML 反转义"""
    attributes: Attributes = []
    for match in ATTRIBUTE_PATTERN.finditer(attr_text):
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("bare")
        attributes.append((match.group("name"), html.unescape(value or "")))
    return attributes


class PatternRewriter:
    """正则扫描改写器"""

    def __init__(self, builder: PictureBuilder):
        self.builder = builder

    def rewrite(self, text: str, html_path: Path | None = None) -> tuple[str, int]:
        """改写文本中的图片引用

        已在 <picture> 内的 <img> 保持不动，保证重复执行结果不变。

        Returns:
            tuple: (改写后的文本, 改写次数)
        """
        picture_spans = [m.span() for m in PICTURE_BLOCK_PATTERN.finditer(text)]
        count = 0

        def inside_picture(position: int) -> bool:
            return any(start <= position < end for start, end in picture_spans)

        def replace_img(match: re.Match[str]) -> str:
            nonlocal count
            if inside_picture(match.start()):
                return match.group(0)
            plan = self.builder.build(parse_attributes(match.group("attrs")), html_path)
            if plan is None:
                return match.group(0)
            count += 1
            return plan.to_html()

        text = IMG_TAG_PATTERN.sub(replace_img, text)
        text, style_count = self.rewrite_styles(text, html_path)
        return text, count + style_count

    def rewrite_styles(self, text: str, html_path: Path | None = None) -> tuple[str, int]:
        """就地改写文本中 style 属性里的 background-image，其余字符不变

        Returns:
            tuple: (改写后的文本, 改写次数)
        """
        count = 0

        def replace_style(match: re.Match[str]) -> str:
            nonlocal count
            quote = match.group("quote")
            inner_quote = "'" if quote == '"' else '"'
            rewritten = self.builder.rewrite_background(
                match.group("value"), html_path, quote=inner_quote
            )
            if rewritten is None:
                return match.group(0)
            count += 1
            return f"{match.group('prefix')}{quote}{rewritten}{quote}"

        return STYLE_ATTRIBUTE_PATTERN.sub(replace_style, text), count
