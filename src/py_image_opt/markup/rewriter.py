"""HTML 改写模块。

把可替换的 <img> 改写为 <picture>，把内联 background-image 改写为 image-set()。
每个文档要么完整改写，要么原样返回。
"""

import re
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from ..core.registry import ArtifactRegistry
from ..engine.concurrent_executor import ConcurrentExecutor
from ..exceptions import MarkupError
from ..models.optimization_config import OptimizationConfig
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .pattern import PatternRewriter, start_tag_pattern
from .picture import PictureBuilder
from .resolver import ImageResolver


logger = get_logger()


class _SourceLocator:
    """把 html.parser 记录的行列号换算为源码偏移"""

    def __init__(self, html: str, html_path: Path | None = None):
        self.html = html
        self.html_path = html_path
        # html.parser 只按 "\n" 计行
        self.line_starts = [0, *(m.end() for m in re.finditer("\n", html))]

    def offset(self, tag: Tag) -> int:
        if tag.sourceline is None or tag.sourcepos is None:
            raise MarkupError(f"缺少 <{tag.name}> 的源码位置", self.html_path)
        return self.line_starts[tag.sourceline - 1] + tag.sourcepos

    def start_tag_span(self, tag: Tag) -> tuple[int, int]:
        """元素开始标签在源码中的区间"""
        start = self.offset(tag)
        match = start_tag_pattern(tag.name).match(self.html, start)
        if match is None:
            raise MarkupError(f"无法定位 <{tag.name}> 开始标签", self.html_path)

        next_tag = next((el for el in tag.next_elements if isinstance(el, Tag)), None)
        if next_tag is not None and match.end() > self.offset(next_tag):
            raise MarkupError(f"<{tag.name}> 开始标签越过了下一个元素", self.html_path)
        return match.start(), match.end()


def _splice(html: str, edits: list[tuple[int, int, str]]) -> str:
    """按区间替换源码，区间之外的字符原样保留"""
    parts: list[str] = []
    position = 0
    for start, end, replacement in sorted(edits):
        if start < position:
            raise MarkupError(f"改写区间重叠: {start}")
        parts.append(html[position:start])
        parts.append(replacement)
        position = end
    parts.append(html[position:])
    return "".join(parts)


class MarkupRewriter:
    """HTML 图片引用改写器"""

    def __init__(
        self,
        config: OptimizationConfig,
        registry: ArtifactRegistry | None = None,
        resolver: ImageResolver | None = None,
        pattern_fallback: bool = True,
    ):
        """初始化改写器

        Args:
            config: 优化配置
            registry: 构建期登记表，用于确认内存产物和记录的尺寸
            resolver: 图片引用解析器
            pattern_fallback: 解析器拒绝文档时是否改用正则扫描
        """
        self.config = config
        self.builder = PictureBuilder(config, registry, resolver)
        self.pattern_rewriter = PatternRewriter(self.builder)
        self.pattern_fallback = pattern_fallback

    def rewrite(self, html: str, html_path: Path | None = None) -> str:
        """改写一个 HTML 文档或片段

        没有任何改写时返回原文本（逐字节一致）；出错时同样返回原文本。

        Args:
            html: HTML 文本
            html_path: 文档路径，用于解析相对图片路径

        Returns:
            str: 改写后的 HTML
        """
        if not html:
            return html

        target = html_path or "<content>"
        try:
            rewritten, count = self._rewrite_tree(html, html_path)
        except Exception as e:
            if not self.pattern_fallback:
                logger.error(MessageFormatter.format_error("HTML 改写", target, e))
                return html
            logger.warning(
                MessageFormatter.format_error("HTML 解析", target, e) + "，改用文本扫描"
            )
            try:
                rewritten, count = self.pattern_rewriter.rewrite(html, html_path)
            except Exception as fallback_error:
                logger.error(
                    MessageFormatter.format_error("HTML 文本扫描", target, fallback_error)
                )
                return html

        if count == 0:
            return html

        logger.info(MessageFormatter.markup_rewritten(target, count))
        return rewritten

    def rewrite_file(self, html_path: Path) -> int:
        """就地改写 HTML 文件，只有内容变化时才写回

        Returns:
            int: 1 表示文件被改写，0 表示未变化或失败
        """
        html_path = Path(html_path)
        try:
            original = html_path.read_text(encoding="utf-8")
            rewritten = self.rewrite(original, html_path)
            if rewritten == original:
                return 0
            html_path.write_text(rewritten, encoding="utf-8")
            return 1
        except (OSError, UnicodeDecodeError) as e:
            logger.error(MessageFormatter.format_error("HTML 文件改写", html_path, e))
            return 0

    def rewrite_tree(self, public_dir: Path | None = None) -> int:
        """改写发布目录下的全部 HTML 文件

        文档之间相互独立，按文件并发处理。

        Args:
            public_dir: 发布目录，默认取配置中的 public_dir

        Returns:
            int: 被改写的文件数量
        """
        public_dir = Path(public_dir) if public_dir is not None else self.config.public_root
        if not public_dir.is_dir():
            logger.debug(MessageFormatter.directory_not_found(public_dir))
            return 0

        html_files = sorted(public_dir.rglob("*.html"))
        executor = ConcurrentExecutor(self.config.max_workers)
        changed = executor.execute_tasks(
            html_files,
            self.rewrite_file,
            on_error=self._log_file_error,
        )
        return sum(changed)

    @staticmethod
    def _log_file_error(error: Exception, html_path: Path) -> int:
        logger.error(MessageFormatter.format_error("HTML 文件改写", html_path, error))
        return 0

    def _rewrite_tree(self, html: str, html_path: Path | None) -> tuple[str, int]:
        """解析树定位元素，按源码位置拼接替换

        只替换被改写的 <img> 标签和 style 所在的开始标签，文档其余部分逐字节保留。
        """
        try:
            soup = BeautifulSoup(html, "html.parser", multi_valued_attributes=None)
        except Exception as e:
            raise MarkupError(f"无法解析 HTML: {e}", html_path) from e

        locator = _SourceLocator(html, html_path)
        edits: list[tuple[int, int, str]] = []
        replaced: set[int] = set()
        count = 0

        for img in soup.find_all("img"):
            parent = img.parent
            if parent is not None and parent.name == "picture":
                continue
            if not img.get("src"):
                continue
            plan = self.builder.build(list(img.attrs.items()), html_path)
            if plan is None:
                continue
            start, end = locator.start_tag_span(img)
            edits.append((start, end, plan.to_html()))
            replaced.add(id(img))
            count += 1

        for element in soup.find_all(style=True):
            if id(element) in replaced:
                continue
            start, end = locator.start_tag_span(element)
            tag_text, style_count = self.pattern_rewriter.rewrite_styles(
                html[start:end], html_path
            )
            if style_count:
                edits.append((start, end, tag_text))
                count += style_count

        if count == 0:
            return html, 0
        return _splice(html, edits), count
