"""优化配置模型。

定义一次构建过程中只读的优化配置。
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config import get_config
from .constants import ImageFormats, QualityDefaults


def _defaults():
    return get_config().optimization


class OptimizationConfig(BaseModel):
    """图片优化配置

    字段同时接受 snake_case 与宿主配置中的 camelCase 写法（如 ``skipExisting``）。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    enable: bool = Field(default_factory=lambda: _defaults().ENABLE, description="是否启用")
    quality: int = Field(
        default_factory=lambda: _defaults().QUALITY,
        ge=QualityDefaults.MIN_QUALITY,
        le=QualityDefaults.MAX_QUALITY,
        description="编码质量",
    )
    formats: list[str] = Field(
        default_factory=lambda: list(_defaults().FORMATS), description="输出格式"
    )
    sizes: list[int] = Field(
        default_factory=lambda: list(_defaults().SIZES), description="响应式目标宽度"
    )
    source_dirs: list[Path] = Field(
        default_factory=lambda: [Path(d) for d in _defaults().SOURCE_DIRS],
        description="源图目录，第一个为主源目录",
    )
    skip_existing: bool = Field(
        default_factory=lambda: _defaults().SKIP_EXISTING, description="跳过已存在的产物"
    )
    verbose: bool = Field(default_factory=lambda: _defaults().VERBOSE, description="详细日志")
    replace_img_tags: bool = Field(
        default_factory=lambda: _defaults().REPLACE_IMG_TAGS, description="改写 img 标签"
    )

    # 站点布局
    root_dir: Path = Field(Path("."), description="站点根目录")
    public_dir: Path = Field(
        default_factory=lambda: Path(_defaults().PUBLIC_DIR), description="发布目录"
    )
    output_dir_name: str = Field(
        default_factory=lambda: _defaults().OUTPUT_DIR_NAME, description="产物子目录名"
    )
    extra_source_dirs: list[Path] = Field(
        default_factory=list, description="宿主注入的额外源目录（如主题目录）"
    )
    url_prefix: str = Field("", description="改写标记中产物 URL 的前缀")

    # 处理选项
    persist: bool = Field(True, description="是否把产物写入磁盘")
    max_workers: int = Field(
        default_factory=lambda: _defaults().MAX_WORKERS, gt=0, description="并发数"
    )
    dimensions: dict[str, tuple[int, int]] = Field(
        default_factory=dict, description="外部记录的原始尺寸，按 base name 索引"
    )

    @field_validator("formats", mode="before")
    @classmethod
    def normalize_formats(cls, v: object) -> list[str]:
        if isinstance(v, str):
            v = [v]
        normalized: list[str] = []
        for item in v or []:
            fmt = str(item).strip().lower()
            if fmt == "jpg":
                fmt = "jpeg"
            if fmt not in ImageFormats.CONFIG_FORMATS:
                raise ValueError(
                    f"不支持的格式: {item}，支持的格式: {sorted(ImageFormats.CONFIG_FORMATS)}"
                )
            if fmt not in normalized:
                normalized.append(fmt)
        return normalized

    @field_validator("sizes", mode="before")
    @classmethod
    def normalize_sizes(cls, v: object) -> list[int]:
        if isinstance(v, int | str):
            v = [v]
        sizes = {int(size) for size in v or []}
        if any(size <= 0 for size in sizes):
            raise ValueError(f"尺寸必须是正整数，得到: {sorted(sizes)}")
        return sorted(sizes)

    @field_validator("source_dirs")
    @classmethod
    def validate_source_dirs(cls, v: list[Path]) -> list[Path]:
        if not v:
            raise ValueError("至少需要一个源目录")
        return v

    @property
    def primary_source_root(self) -> Path:
        """主源目录"""
        return self.root_dir / self.source_dirs[0]

    @property
    def output_dir(self) -> Path:
        """产物写入目录"""
        return self.primary_source_root / self.output_dir_name

    @property
    def public_root(self) -> Path:
        return self.root_dir / self.public_dir

    @property
    def all_source_dirs(self) -> list[Path]:
        """所有源目录（配置 + 注入），保持顺序去重"""
        dirs: list[Path] = []
        for directory in [*self.source_dirs, *self.extra_source_dirs]:
            resolved = self.root_dir / directory
            if resolved not in dirs:
                dirs.append(resolved)
        return dirs

    @property
    def output_dirs(self) -> list[Path]:
        """每个源目录下可能存在的产物目录"""
        return [directory / self.output_dir_name for directory in self.all_source_dirs]

    def artifact_public_path(self, filename: str) -> str:
        """产物在发布目录中的相对路径"""
        return f"{self.output_dir_name}/{filename}"

    def document_path(self, html_path: Path) -> Path:
        """HTML 文档在站点中的位置

        绝对路径、已带发布目录前缀的路径原样使用；以 public_dir 开头的路径相对根目录；
        其余视为宿主给出的页面路径（如 ``2024/hello/index.html``），相对发布目录。
        """
        html_path = Path(html_path)
        if html_path.is_absolute() or html_path.is_relative_to(self.public_root):
            return html_path
        if html_path.is_relative_to(self.public_dir):
            return self.root_dir / html_path
        return self.public_root / html_path

    def artifact_url(
        self, filename: str, src: str = "", html_path: Path | None = None
    ) -> str:
        """改写标记中引用产物的 URL

        配置了 url_prefix 时直接加前缀；原 src 以 / 开头时给出站点绝对路径；
        已知文档位置时给出相对文档所在目录的路径。
        """
        public_path = self.artifact_public_path(filename)
        if self.url_prefix:
            return f"{self.url_prefix}{public_path}"
        if src.startswith("/"):
            return f"/{public_path}"
        if html_path is None:
            return public_path

        page_dir = self.document_path(html_path).parent
        try:
            depth = len(page_dir.relative_to(self.public_root).parts)
        except ValueError:
            return public_path
        return "../" * depth + public_path
