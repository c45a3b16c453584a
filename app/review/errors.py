from __future__ import annotations

"""
Review pipeline 的致命错误类型。

约定：
- 过滤阶段的异常文件（扩展名/状态不符）**不是**错误，直接跳过
- 下面这些错误会终止整次 run，调用方只需要 catch `ReviewPipelineError`
- `stage` 用于区分是哪一步失败（filter/prompt/parse），便于告警与返回给调用方
"""


class ReviewPipelineError(RuntimeError):
    """pipeline 致命错误的基类：一旦抛出，就不会发布任何评论。"""

    stage = "pipeline"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingPatchError(ReviewPipelineError):
    """通过过滤的文件却没有 patch（属于假设被破坏，不能静默跳过）。"""

    stage = "filter"

    def __init__(self, filename: str) -> None:
        super().__init__(f"Eligible file has no patch: {filename}")
        self.filename = filename


class TemplateRenderError(ReviewPipelineError):
    """模板渲染失败（模板不存在、缺少 binding、语法错误等）。"""

    stage = "prompt"

    def __init__(self, template_name: str, reason: str) -> None:
        super().__init__(f"Failed to render template {template_name}: {reason}")
        self.template_name = template_name


class ResponseDecodeError(ReviewPipelineError):
    """LLM 返回内容无法解码为 `AnalysisResult`（YAML 非法 / 结构不符）。"""

    stage = "parse"
