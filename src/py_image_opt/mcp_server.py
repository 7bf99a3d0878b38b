"""站点图片优化 MCP 服务器。

把产物生成、HTML 改写和清理暴露为 MCP 工具。
"""

import logging
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .engine.config import ConfigBuilder
from .exceptions import ImageOptError
from .optimizer import SiteImageOptimizer
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> MCPResponse:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result: MCPResponse = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }
        if details:
            result["details"] = details
        return result

    @staticmethod
    def validation_error(message: str) -> MCPResponse:
        return MCPResponseBuilder.error(message, error_type="validation")

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> MCPResponse:
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(message, error_type="file", details=details)

    @staticmethod
    def processing_error(message: str, operation: str | None = None) -> MCPResponse:
        details = {"operation": operation} if operation else None
        return MCPResponseBuilder.error(message, error_type="processing", details=details)


# 配置日志
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("站点图片优化服务")


def _build_optimizer(root_dir: str, options: dict[str, Any] | None) -> SiteImageOptimizer:
    root = Path(root_dir)
    if not root.is_dir():
        raise FileNotFoundError(MessageFormatter.directory_not_found(root_dir))
    config = ConfigBuilder().build(options or {}, root)
    return SiteImageOptimizer(config)


@mcp.tool()
def optimize_site_images(
    root_dir: str,
    options: dict[str, Any] | None = None,
    rewrite_html: bool = True,
) -> MCPResponse:
    """为站点生成响应式优化图片，并可选地改写发布目录中的 HTML

    Args:
        root_dir: 站点根目录（包含 source/ 与 public/）
        options: 优化配置，如 {"quality": 80, "sizes": [800, 1280]}
        rewrite_html: 是否改写 public/ 下的 HTML 文件

    Returns:
        dict: 生成与改写结果
    """
    try:
        optimizer = _build_optimizer(root_dir, options)
        result = optimizer.generate()
        rewritten = optimizer.rewrite_public_tree() if rewrite_html else 0

        return {
            "success": result.success,
            "output_dir": str(result.output_dir),
            "total_images": result.get_total_count(),
            "successful_images": result.get_success_count(),
            "failed_images": result.get_failure_count(),
            "artifacts": [a.public_path for a in result.get_artifacts()],
            "rewritten_files": rewritten,
            "summary": result.get_summary(),
            "errors": [
                {"source_path": str(r.source_path), "error": r.error}
                for r in result.get_failed_items()
            ],
        }

    except FileNotFoundError as e:
        logger.error(MessageFormatter.operation_failed("路径处理", root_dir, e))
        return MCPResponseBuilder.file_error(str(e), root_dir)
    except ImageOptError as e:
        return MCPResponseBuilder.validation_error(e.message)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("站点图片优化", root_dir, e))
        return MCPResponseBuilder.processing_error(str(e), "站点图片优化")


@mcp.tool()
def rewrite_html(
    root_dir: str,
    html: str,
    html_path: str | None = None,
    options: dict[str, Any] | None = None,
) -> MCPResponse:
    """把 HTML 中的图片引用改写为 <picture> / image-set()

    只使用磁盘上已经存在的产物；没有产物的图片保持原样。

    Args:
        root_dir: 站点根目录
        html: HTML 文档或片段
        html_path: 文档所在路径，用于解析相对图片路径
        options: 优化配置

    Returns:
        dict: 改写后的 HTML
    """
    try:
        optimizer = _build_optimizer(root_dir, options)
        rewritten = optimizer.after_render_html(html, html_path)
        return {
            "success": True,
            "changed": rewritten != html,
            "html": rewritten,
        }
    except FileNotFoundError as e:
        return MCPResponseBuilder.file_error(str(e), root_dir)
    except ImageOptError as e:
        return MCPResponseBuilder.validation_error(e.message)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("HTML 改写", root_dir, e))
        return MCPResponseBuilder.processing_error(str(e), "HTML 改写")


@mcp.tool()
def clean_optimized_images(
    root_dir: str,
    options: dict[str, Any] | None = None,
) -> MCPResponse:
    """删除站点中全部优化产物

    Args:
        root_dir: 站点根目录
        options: 优化配置（决定源目录和产物目录名）

    Returns:
        dict: 删除的文件数量
    """
    try:
        optimizer = _build_optimizer(root_dir, options)
        return {"success": True, "deleted": optimizer.after_clean()}
    except FileNotFoundError as e:
        return MCPResponseBuilder.file_error(str(e), root_dir)
    except ImageOptError as e:
        return MCPResponseBuilder.validation_error(e.message)
    except Exception as e:
        logger.error(MessageFormatter.operation_failed("清理产物", root_dir, e))
        return MCPResponseBuilder.processing_error(str(e), "清理产物")


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    logger.info("启动站点图片优化 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
