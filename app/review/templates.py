"""
模板渲染器（外部协作者的本地实现）。

职责：
- `render(template_name, bindings) -> str`
- 使用 Jinja2 + `StrictUndefined`：缺少 binding 直接报错，而不是渲染成空字符串
- 所有失败统一转成 `TemplateRenderError`（整次 run 终止）
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from app.review.errors import TemplateRenderError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "prompt_templates"


class TemplateRenderer(Protocol):
    """模板渲染接口协议（PromptAssembler 只依赖它）。"""

    def render(self, template_name: str, bindings: Mapping[str, object]) -> str: ...


class JinjaTemplateRenderer:
    def __init__(self, template_dir: Path = DEFAULT_TEMPLATE_DIR) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )

    def render(self, template_name: str, bindings: Mapping[str, object]) -> str:
        try:
            template = self._env.get_template(template_name)
            return template.render(**bindings)
        except TemplateError as exc:
            logger.error(f"Template rendering failed: {template_name}: {exc}")
            raise TemplateRenderError(template_name=template_name, reason=str(exc)) from exc
