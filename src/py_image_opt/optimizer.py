"""站点图片优化器接口。

把产物生成、HTML 改写和清理组合为宿主构建生命周期中的几个钩子。
一个 SiteImageOptimizer 实例对应一次构建，登记表随实例创建和丢弃。
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .core.artifact_store import ArtifactStore
from .core.codec import ImageCodec
from .core.registry import ArtifactRegistry
from .core.sweeper import CleanupSweeper
from .engine.batch import BatchGenerator
from .engine.config import ConfigBuilder
from .exceptions import ErrorHandler
from .markup.rewriter import MarkupRewriter
from .models.artifact_result import GenerationResult
from .models.optimization_config import OptimizationConfig
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()

_FULL_DOCUMENT_MARKERS = ("<html", "<!doctype html")


class SiteImageOptimizer:
    """站点图片优化器

    Examples:
        >>> optimizer = SiteImageOptimizer.from_site_config("blog", {"image_opt": {"sizes": [800]}})
        >>> outputs = optimizer.generate_outputs()
        >>> html = optimizer.after_render_html('<img src="img/cat.jpg" alt="Cat">')
    """

    def __init__(
        self,
        config: OptimizationConfig | None = None,
        registry: ArtifactRegistry | None = None,
        codec: ImageCodec | None = None,
    ):
        """初始化优化器

        Args:
            config: 优化配置，默认全部取默认值
            registry: 产物登记表，默认为本次构建新建
            codec: 编解码能力，默认使用 Pillow
        """
        self.config = config or OptimizationConfig()
        self.registry = registry if registry is not None else ArtifactRegistry()
        configure_logging(self.config.verbose)

        self.store = ArtifactStore(self.config, self.registry, codec=codec)
        self.generator = BatchGenerator(self.store)
        self.rewriter = MarkupRewriter(self.config, self.registry)
        self.sweeper = CleanupSweeper(self.config, self.registry)

        logger.debug("初始化站点图片优化器")

    @classmethod
    def from_site_config(
        cls,
        root_dir: str | Path,
        site_config: Mapping[str, Any] | None = None,
        user_config: Mapping[str, Any] | None = None,
        theme: str | None = None,
        codec: ImageCodec | None = None,
        **overrides: Any,
    ) -> "SiteImageOptimizer":
        """由宿主的站点配置创建优化器

        非法配置会被记录并退回默认值，不会中断构建。
        """
        config = ConfigBuilder().build_or_default(
            user_config,
            root_dir,
            theme=theme,
            site_config=site_config,
            **overrides,
        )
        return cls(config, codec=codec)

    @property
    def enabled(self) -> bool:
        return self.config.enable

    def generate(self) -> GenerationResult:
        """「全部输出生成之后」钩子：派生全部源图的优化产物"""
        if not self.enabled:
            logger.debug("图片优化未启用，跳过生成")
            return GenerationResult(output_dir=self.config.output_dir, results=[], success=True)

        try:
            result = self.generator.generate_all()
        except Exception as e:
            ErrorHandler._log_error("产物生成", self.config.output_dir, e, "error")
            return ErrorHandler.create_error_generation_result(self.config.output_dir, str(e))

        logger.info(result.get_summary())
        return result

    def generate_outputs(self) -> list[tuple[str, bytes]]:
        """生成产物并返回宿主可写入发布目录的 (路径, 字节) 列表"""
        return self.generate().get_outputs()

    def after_render_html(self, html: str, html_path: str | Path | None = None) -> str:
        """「内容渲染之后」钩子：改写一个 HTML 文档或片段"""
        if not self.enabled or not self.config.replace_img_tags or not html:
            return html
        return self.rewriter.rewrite(html, Path(html_path) if html_path else None)

    def after_post_render(self, data: dict[str, Any]) -> dict[str, Any]:
        """文章渲染之后：改写 data["content"]，其他字段保持不变

        文档位置取 data["html_path"]（磁盘路径），没有时取宿主的页面路径 data["path"]
        （相对发布目录，如 ``2024/hello/``）。
        """
        content = data.get("content")
        if isinstance(content, str) and content:
            logger.debug(f"处理文章内容: {data.get('path', 'unknown')}")
            data["content"] = self.after_render_html(content, _document_path(data))
        return data

    def after_render(self, data: dict[str, Any]) -> dict[str, Any]:
        """渲染之后：只改写完整的 HTML 文档"""
        content = data.get("content")
        if isinstance(content, str) and _is_full_document(content):
            data["content"] = self.after_render_html(content, _document_path(data))
        return data

    def rewrite_public_tree(self, public_dir: str | Path | None = None) -> int:
        """就地改写发布目录中的全部 HTML 文件

        Returns:
            int: 被改写的文件数量
        """
        if not self.enabled or not self.config.replace_img_tags:
            return 0
        return self.rewriter.rewrite_tree(Path(public_dir) if public_dir else None)

    def after_clean(self) -> int:
        """「清理」钩子：删除全部优化产物

        Returns:
            int: 删除的文件数量
        """
        try:
            return self.sweeper.sweep()
        except Exception as e:
            logger.error(MessageFormatter.operation_failed("清理产物", self.config.output_dir, e))
            return 0

    clean = after_clean

    def build(self, public_dir: str | Path | None = None) -> GenerationResult:
        """一次完整构建：生成产物后改写发布目录"""
        result = self.generate()
        rewritten = self.rewrite_public_tree(public_dir)
        logger.info(f"改写 {rewritten} 个 HTML 文件")
        return result


def _is_full_document(content: str) -> bool:
    head = content[:1024].lower()
    return any(marker in head for marker in _FULL_DOCUMENT_MARKERS)


def _document_path(data: dict[str, Any]) -> Path | None:
    """宿主数据中的文档位置，页面路径以 / 结尾时指向其 index.html"""
    html_path = data.get("html_path")
    if html_path:
        return Path(html_path)
    page_path = data.get("path")
    if not page_path:
        return None
    page_path = str(page_path)
    if page_path.endswith("/"):
        page_path += "index.html"
    return Path(page_path)
