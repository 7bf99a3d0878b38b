"""变体规划模块。

根据源图和配置计算确定性的产物规格列表，不读写文件系统。
"""

from ..models.optimization_config import OptimizationConfig
from ..models.variant import SourceImage, VariantKind, VariantSpec


class VariantPlanner:
    """变体规划器"""

    def plan(self, source: SourceImage, config: OptimizationConfig) -> list[VariantSpec]:
        """规划源图的全部变体

        总是包含且只包含一个回退变体，随后是每个不同宽度一个响应式变体，宽度升序。

        Args:
            source: 源图
            config: 优化配置

        Returns:
            list[VariantSpec]: 有序的变体规格
        """
        return plan_variants(source.base_name, source.extension, config.sizes)


def plan_variants(
    base_name: str, original_ext: str, sizes: list[int] | tuple[int, ...]
) -> list[VariantSpec]:
    """(base_name, original_ext, sizes) 的纯函数"""
    extension = original_ext.lower()
    specs = [
        VariantSpec(
            base_name=base_name,
            kind=VariantKind.FALLBACK,
            original_ext=extension,
        )
    ]
    specs.extend(
        VariantSpec(
            base_name=base_name,
            kind=VariantKind.RESPONSIVE,
            width=width,
            original_ext=extension,
        )
        for width in sorted(set(sizes))
    )
    return specs
