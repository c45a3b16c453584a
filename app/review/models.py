"""
Review 领域模型（Pydantic）。

用途：
- 明确 pipeline 各阶段输入/输出的数据结构
- `CodeFeedback` / `AnalysisResult` 同时作为 LLM 回复解码后的强类型结果
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DIFF_BLOCK_SEPARATOR = "...\n\n\n"


class PullRequest(BaseModel):
    """PR 元信息（只读）：branch 来自 GitHub payload 的 `head.ref`。"""

    model_config = ConfigDict(frozen=True)

    title: str
    branch: str


class ChangedFile(BaseModel):
    """
    PR 中单个变更文件。

    status 不做枚举校验：不在白名单里的状态由 DiffFilter 过滤，而不是在这里报错。
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    status: str
    patch: str | None = None


class DiffBlock(BaseModel):
    """单个文件处理后的 diff 片段。"""

    model_config = ConfigDict(frozen=True)

    header: str
    body: str


class ProcessedDiff(BaseModel):
    """按原始文件顺序拼接的 diff 片段集合。"""

    blocks: list[DiffBlock] = Field(default_factory=list)

    def append(self, block: DiffBlock) -> None:
        self.blocks.append(block)

    def render(self) -> str:
        return "".join(f"{b.header}{b.body}{DIFF_BLOCK_SEPARATOR}" for b in self.blocks)


class PromptPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    system_prompt: str
    user_prompt: str


class CodeFeedback(BaseModel):
    """单条代码建议：三个字段缺一不可。"""

    model_config = ConfigDict(frozen=True)

    relevant_file: str
    relevant_line: str
    suggestion: str


class AnalysisResult(BaseModel):
    """LLM 回复解码后的结构化分析结果。"""

    model_config = ConfigDict(frozen=True)

    main_theme: str
    summary: str
    pr_type: str
    effort_estimate: str
    general_suggestions: str
    code_feedback: list[CodeFeedback] = Field(default_factory=list)
