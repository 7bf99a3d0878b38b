"""产物存储模块。

负责派生产物缓存：逐个变体决定沿用已有文件还是重新编码，并登记结果。
"""

from pathlib import Path

from ..exceptions import ErrorHandler, ProcessingError
from ..models.artifact_result import Artifact, ArtifactResult
from ..models.optimization_config import OptimizationConfig
from ..models.variant import SourceImage, VariantSpec
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .codec import ImageCodec, PillowCodec
from .planner import VariantPlanner
from .registry import ArtifactRegistry


logger = get_logger()


class ArtifactStore:
    """派生产物缓存

    缓存键只有输出路径：skip_existing 时路径存在即视为命中，不比较源图内容或修改时间。
    """

    def __init__(
        self,
        config: OptimizationConfig,
        registry: ArtifactRegistry | None = None,
        codec: ImageCodec | None = None,
        planner: VariantPlanner | None = None,
        collect_bytes: bool = True,
    ):
        """初始化产物存储

        Args:
            config: 优化配置
            registry: 构建期登记表，与 MarkupRewriter 共享
            codec: 编解码能力，默认使用 Pillow
            planner: 变体规划器
            collect_bytes: 是否在产物中携带字节（供宿主直接输出）
        """
        self.config = config
        self.registry = registry if registry is not None else ArtifactRegistry()
        self.codec = codec or PillowCodec()
        self.planner = planner or VariantPlanner()
        self.collect_bytes = collect_bytes

    def output_path_for(self, spec: VariantSpec) -> Path:
        """变体的确定性输出路径"""
        return self.config.output_dir / spec.filename

    def ensure(self, source: SourceImage, specs: list[VariantSpec]) -> list[Artifact]:
        """确保每个变体都已存在

        全部变体成功后才登记；任何一个编码失败时，删除本次新写入的文件并抛出异常，
        由调用方决定如何降级。

        Args:
            source: 源图
            specs: 变体规格列表

        Returns:
            list[Artifact]: 与 specs 顺序一致的产物
        """
        artifacts: list[Artifact] = []
        written: list[Path] = []
        natural_dimensions: tuple[int, int] | None = None

        try:
            for spec in specs:
                output_path = self.output_path_for(spec)
                public_path = self.config.artifact_public_path(spec.filename)

                if self.config.skip_existing and output_path.exists():
                    artifact = self._load_existing(source, spec, output_path, public_path)
                else:
                    encoded = self.codec.encode(source, spec, self.config.quality)
                    natural_dimensions = encoded.original_dimensions
                    if self.config.persist:
                        written.append(output_path)
                    self._write(output_path, encoded.data)
                    artifact = Artifact(
                        spec=spec,
                        source_path=source.path,
                        output_path=output_path,
                        public_path=public_path,
                        data=encoded.data if self.collect_bytes or not self.config.persist else None,
                        cached=False,
                        dimensions=encoded.dimensions,
                        size=len(encoded.data),
                    )
                artifacts.append(artifact)
        except Exception:
            self._discard(written)
            raise

        for artifact in artifacts:
            self.registry.add_artifact(artifact.public_path)
        self.registry.mark_processed(source.path)
        natural_dimensions = natural_dimensions or source.dimensions
        if natural_dimensions:
            self.registry.record_dimensions(source.base_name, natural_dimensions)

        return artifacts

    def process_image(self, image_path: Path) -> ArtifactResult:
        """处理单张源图，任何错误都只影响这张图

        Returns:
            ArtifactResult: 成功时包含全部产物，失败时不含产物
        """
        image_path = Path(image_path)
        try:
            if not image_path.is_file():
                raise FileNotFoundError(MessageFormatter.file_not_found(image_path))

            source = SourceImage(path=image_path)
            specs = self.planner.plan(source, self.config)
            artifacts = self.ensure(source, specs)

            return ArtifactResult(
                source_path=image_path,
                artifacts=artifacts,
                original_size=image_path.stat().st_size,
                success=True,
            )
        except Exception as e:
            return ErrorHandler.handle_processing_error(e, image_path, "图片优化")

    def _load_existing(
        self,
        source: SourceImage,
        spec: VariantSpec,
        output_path: Path,
        public_path: str,
    ) -> Artifact:
        """命中已有文件，不调用编解码器"""
        data = output_path.read_bytes() if self.collect_bytes else None
        logger.debug(f"沿用已有产物: {output_path}")
        return Artifact(
            spec=spec,
            source_path=source.path,
            output_path=output_path,
            public_path=public_path,
            data=data,
            cached=True,
            size=len(data) if data is not None else output_path.stat().st_size,
        )

    def _write(self, output_path: Path, data: bytes) -> None:
        if not self.config.persist:
            return
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
        except OSError as e:
            raise ProcessingError(
                MessageFormatter.operation_failed("写入产物", output_path, e), output_path
            ) from e

    def _discard(self, paths: list[Path]) -> None:
        """删除一张图未完成时已写入的产物"""
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(MessageFormatter.operation_failed("删除未完成产物", path, e))
