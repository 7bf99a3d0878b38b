"""优化产物与处理结果模型。

定义单个产物、单张源图以及整次构建的结果数据结构。
"""

from pathlib import Path
from typing import Any

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field

from .variant import VariantSpec


class Artifact(BaseModel):
    """一个已实现的变体（磁盘文件或内存数据）"""

    model_config = ConfigDict(frozen=True)

    spec: VariantSpec = Field(description="变体规格")
    source_path: Path = Field(description="产生该产物的源图")
    output_path: Path = Field(description="确定性的磁盘输出路径")
    public_path: str = Field(description="发布目录中的相对路径")
    data: bytes | None = Field(None, repr=False, description="产物字节（收集时）")
    cached: bool = Field(False, description="是否命中已有文件")
    dimensions: tuple[int, int] | None = Field(None, description="产物像素尺寸")
    size: int = Field(0, description="产物大小（字节）")


class BaseResult(BaseModel):
    """结果基类，包含通用字段和方法"""

    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class ArtifactResult(BaseResult):
    """单张源图的处理结果"""

    source_path: Path = Field(description="源图路径")
    artifacts: list[Artifact] = Field(default_factory=list, description="产物列表")
    original_size: int = Field(0, description="源图大小（字节）")

    def get_generated_count(self) -> int:
        return sum(1 for a in self.artifacts if not a.cached)

    def get_cached_count(self) -> int:
        return sum(1 for a in self.artifacts if a.cached)

    def get_total_size(self) -> int:
        return sum(a.size for a in self.artifacts)

    def get_summary(self) -> str:
        if not self.success:
            return f"失败: {self.error}"
        return (
            f"{self.source_path.name}: {len(self.artifacts)} 个产物 "
            f"(新生成 {self.get_generated_count()}, 沿用 {self.get_cached_count()}, "
            f"共 {self.format_size(self.get_total_size())})"
        )


class ResultCollection(BaseResult):
    """结果集合基类，提供通用的统计方法"""

    results: list[Any] = Field(description="结果列表")

    def get_successful_items(self) -> list[Any]:
        """获取成功的结果项"""
        return [r for r in self.results if getattr(r, "success", False)]

    def get_failed_items(self) -> list[Any]:
        """获取失败的结果项"""
        return [r for r in self.results if not getattr(r, "success", False)]

    def get_total_count(self) -> int:
        return len(self.results)

    def get_success_count(self) -> int:
        return len(self.get_successful_items())

    def get_failure_count(self) -> int:
        return len(self.get_failed_items())


class GenerationResult(ResultCollection):
    """一次构建的生成结果"""

    output_dir: Path = Field(description="产物目录")
    results: list[ArtifactResult] = Field(description="每张源图的处理结果")

    def get_artifacts(self) -> list[Artifact]:
        return [a for r in self.results if r.success for a in r.artifacts]

    def get_outputs(self) -> list[tuple[str, bytes]]:
        """宿主可直接写入发布目录的 (路径, 字节) 列表"""
        return [(a.public_path, a.data) for a in self.get_artifacts() if a.data is not None]

    def get_summary(self) -> str:
        if not self.success:
            return f"生成失败: {self.error}"
        artifacts = self.get_artifacts()
        total_size = self.format_size(sum(a.size for a in artifacts))
        return (
            f"处理 {self.get_success_count()}/{self.get_total_count()} 张图片，"
            f"产物 {len(artifacts)} 个，共 {total_size}"
        )
