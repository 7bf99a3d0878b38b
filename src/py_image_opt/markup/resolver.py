"""图片引用解析模块。

把 HTML 中的图片 URL 解析为磁盘上的源图，并查询其已存在的优化产物。
"""

from pathlib import Path
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field

from ..core.planner import plan_variants
from ..core.registry import ArtifactRegistry
from ..models.constants import ImageFormats
from ..models.optimization_config import OptimizationConfig
from ..models.variant import SourceImage
from ..utils.file_helpers import is_remote_url


class VariantSet(BaseModel):
    """某张源图当前可用的产物"""

    model_config = ConfigDict(frozen=True)

    responsive: list[tuple[int, str]] = Field(
        default_factory=list, description="(宽度, URL)，宽度升序"
    )
    fallback_url: str | None = Field(None, description="回退产物 URL")

    @property
    def is_empty(self) -> bool:
        return not self.responsive and self.fallback_url is None


class ImageResolver:
    """图片引用解析器"""

    def __init__(
        self, config: OptimizationConfig, registry: ArtifactRegistry | None = None
    ):
        self.config = config
        self.registry = registry

    def candidate_paths(self, src: str, html_path: Path | None = None) -> list[Path]:
        """按优先级列出 src 可能对应的源图路径

        顺序：HTML 文件所在目录、发布目录、主源目录（去掉开头的 /），最后是其他源目录。
        """
        cleaned = unquote(src.split("#", 1)[0].split("?", 1)[0]).strip()
        if not cleaned or is_remote_url(cleaned):
            return []

        relative = cleaned.lstrip("/")
        if not relative:
            return []

        if html_path is not None:
            html_dir = self.config.document_path(html_path).parent
        else:
            html_dir = self.config.primary_source_root

        bases = [
            html_dir,
            self.config.public_root,
            self.config.primary_source_root,
            *self.config.all_source_dirs[1:],
        ]
        candidates: list[Path] = []
        for base in bases:
            candidate = base / relative
            if candidate not in candidates:
                candidates.append(candidate)
        return candidates

    def resolve(self, src: str, html_path: Path | None = None) -> SourceImage | None:
        """解析 src，第一个存在的候选路径胜出"""
        for candidate in self.candidate_paths(src, html_path):
            if candidate.suffix.lower() not in ImageFormats.SOURCE_EXTENSIONS:
                return None
            # 产物本身不再当作源图
            if candidate.parent.name == self.config.output_dir_name:
                continue
            if candidate.is_file():
                return SourceImage(path=candidate)
        return None

    def find_variants(
        self, source: SourceImage, src: str = "", html_path: Path | None = None
    ) -> VariantSet:
        """按确定性路径检查产物是否存在

        src 与 html_path 决定产物 URL 的写法（站点绝对路径或相对文档目录）。
        """
        responsive: list[tuple[int, str]] = []
        fallback_url: str | None = None

        for spec in plan_variants(source.base_name, source.extension, self.config.sizes):
            if not self._artifact_exists(spec.filename):
                continue
            url = self.config.artifact_url(spec.filename, src, html_path)
            if spec.is_responsive:
                responsive.append((spec.width, url))
            else:
                fallback_url = url

        return VariantSet(responsive=responsive, fallback_url=fallback_url)

    def _artifact_exists(self, filename: str) -> bool:
        public_path = self.config.artifact_public_path(filename)
        if self.registry is not None and self.registry.has_artifact(public_path):
            return True
        return (self.config.output_dir / filename).is_file() or (
            self.config.public_root / public_path
        ).is_file()
