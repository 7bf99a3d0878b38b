"""数据模型包。

定义配置、源图、变体规格和处理结果等数据结构。
"""

from .artifact_result import (
    Artifact,
    ArtifactResult,
    GenerationResult,
)
from .constants import (
    ArtifactNaming,
    ImageFormats,
    get_mime_type,
    mime_type_for_extension,
)
from .optimization_config import OptimizationConfig
from .variant import SourceImage, VariantKind, VariantSpec


__all__ = [
    "Artifact",
    "ArtifactNaming",
    "ArtifactResult",
    "GenerationResult",
    "ImageFormats",
    "OptimizationConfig",
    "SourceImage",
    "VariantKind",
    "VariantSpec",
    "get_mime_type",
    "mime_type_for_extension",
]
