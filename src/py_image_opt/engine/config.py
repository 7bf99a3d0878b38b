"""配置构建器模块。

把宿主提供的配置映射与主题发现结果合并为经过验证的 OptimizationConfig。
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..core.discovery import resolve_theme_source_dir
from ..exceptions import ValidationError as CustomValidationError
from ..models.optimization_config import OptimizationConfig
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

# 宿主站点配置中本插件配置所在的键
CONFIG_KEY = "image_opt"


class ConfigBuilder:
    """优化配置构建器

    缺失的字段一律取默认值；字段值非法时抛出 ValidationError。
    """

    def build(
        self,
        user_config: Mapping[str, Any] | None = None,
        root_dir: str | Path = ".",
        theme: str | None = None,
        site_config: Mapping[str, Any] | None = None,
        discover_theme: bool = True,
        **overrides: Any,
    ) -> OptimizationConfig:
        """构建优化配置

        Args:
            user_config: 插件配置（camelCase 或 snake_case 键均可）
            root_dir: 站点根目录
            theme: 宿主显式指定的主题名
            site_config: 宿主已解析的站点配置；未给出 user_config 时从其 image_opt 键读取
            discover_theme: 是否把主题 source 目录加入额外源目录
            **overrides: 直接覆盖的字段

        Returns:
            OptimizationConfig: 验证后的配置

        Raises:
            CustomValidationError: 参数验证失败
        """
        root_dir = Path(root_dir)
        try:
            values = self._collect_values(user_config, site_config)
            values.update(overrides)
            values["root_dir"] = root_dir

            if discover_theme:
                theme_source = resolve_theme_source_dir(root_dir, theme, site_config)
                if theme_source is not None:
                    configured = values.pop("extraSourceDirs", None) or values.get(
                        "extra_source_dirs", []
                    )
                    extra = [Path(p) for p in configured]
                    relative = theme_source.relative_to(root_dir)
                    if relative not in extra:
                        extra.append(relative)
                    values["extra_source_dirs"] = extra

            return OptimizationConfig.model_validate(values)

        except PydanticValidationError as e:
            raise CustomValidationError(self._format_validation_error(e), root_dir) from e
        except (TypeError, ValueError) as e:
            raise CustomValidationError(f"配置构建失败: {e!s}", root_dir) from e

    def build_or_default(
        self,
        user_config: Mapping[str, Any] | None = None,
        root_dir: str | Path = ".",
        **kwargs: Any,
    ) -> OptimizationConfig:
        """构建配置，非法配置时记录错误并退回默认值"""
        try:
            return self.build(user_config, root_dir, **kwargs)
        except CustomValidationError as e:
            logger.error(MessageFormatter.operation_failed("配置验证", root_dir, e))
            logger.warning("使用默认配置继续构建")
            return self.build(
                {},
                root_dir,
                theme=kwargs.get("theme"),
                site_config=kwargs.get("site_config"),
            )

    @staticmethod
    def _collect_values(
        user_config: Mapping[str, Any] | None,
        site_config: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        if user_config is None and site_config is not None:
            user_config = site_config.get(CONFIG_KEY)
        if user_config is None:
            return {}
        if not isinstance(user_config, Mapping):
            raise TypeError(f"{CONFIG_KEY} 配置必须是映射，得到: {type(user_config).__name__}")
        if isinstance(user_config.get(CONFIG_KEY), Mapping):
            user_config = user_config[CONFIG_KEY]
        # None 视为未设置
        return {key: value for key, value in user_config.items() if value is not None}

    @staticmethod
    def _format_validation_error(error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)
