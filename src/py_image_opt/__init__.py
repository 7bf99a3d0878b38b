"""静态站点响应式图片优化库。

为站点源图派生 WebP 响应式变体与优化兜底图，并把 HTML 中的图片引用改写为 <picture>。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "静态站点响应式图片优化，基于 Pillow 11"

# 核心功能导出
from .core.registry import ArtifactRegistry
from .markup.rewriter import MarkupRewriter
from .models.artifact_result import Artifact, ArtifactResult, GenerationResult
from .models.optimization_config import OptimizationConfig
from .optimizer import SiteImageOptimizer


__all__ = [
    "Artifact",
    "ArtifactRegistry",
    "ArtifactResult",
    "GenerationResult",
    "MarkupRewriter",
    "OptimizationConfig",
    "SiteImageOptimizer",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
