"""核心模块包。

变体规划、编解码、产物存储、源图发现与清理。
"""

from .artifact_store import ArtifactStore
from .codec import EncodedImage, ImageCodec, PillowCodec, constrain_width
from .discovery import find_source_images, resolve_theme_source_dir
from .formats import FormatProcessor, get_save_parameters
from .planner import VariantPlanner, plan_variants
from .registry import ArtifactRegistry
from .sweeper import CleanupSweeper


__all__ = [
    "ArtifactRegistry",
    "ArtifactStore",
    "CleanupSweeper",
    "EncodedImage",
    "FormatProcessor",
    "ImageCodec",
    "PillowCodec",
    "VariantPlanner",
    "constrain_width",
    "find_source_images",
    "get_save_parameters",
    "plan_variants",
    "resolve_theme_source_dir",
]
