"""
PromptAssembler（非 AI）。

流程：
- DiffFilter 选出可 review 的文件
- 每个文件：PatchNormalizer -> LineProcessorChain，得到处理后的行
- 处理后 <= 1 行的文件直接省略（视为“没有可展示的变更”）
- 其余文件按原始顺序拼成一个 diff 段落
- 通过模板渲染器生成 system / user prompt
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from app.review.diff_filter import DiffFilterConfig
from app.review.diff_filter import filter_changed_files
from app.review.errors import MissingPatchError
from app.review.models import ChangedFile
from app.review.models import DiffBlock
from app.review.models import ProcessedDiff
from app.review.models import PromptPair
from app.review.models import PullRequest
from app.review.patch import normalize_patch
from app.review.patch import split_patch_lines
from app.review.processors import LineProcessorChain
from app.review.templates import TemplateRenderer

logger = logging.getLogger(__name__)


class ReviewPromptSettings(BaseModel):
    """固定的 review 配置（启动时构造，run 之间不变）。"""

    model_config = ConfigDict(frozen=True)

    num_code_suggestions: int = 3
    require_estimated_effort_to_review: bool = True
    language: str = "Java"
    system_template: str = "pr_review_system.j2"
    user_template: str = "pr_review_user.j2"

    def system_bindings(self) -> dict[str, object]:
        return {
            "num_code_suggestions": self.num_code_suggestions,
            "num_code_suggestions_greater_than_zero": self.num_code_suggestions > 0,
            "require_estimated_effort_to_review": self.require_estimated_effort_to_review,
        }


def build_file_block(file: ChangedFile, chain: LineProcessorChain) -> DiffBlock | None:
    """处理单个文件；处理后不超过 1 行时返回 None。"""
    if file.patch is None:
        raise MissingPatchError(filename=file.filename)

    lines = chain.process(split_patch_lines(normalize_patch(file.patch)))
    if len(lines) <= 1:
        logger.debug(f"Omitting file with {len(lines)} processed line(s): {file.filename}")
        return None
    body = "".join(f"{line}\n" for line in lines)
    return DiffBlock(header=f"## {file.filename} \n\n", body=body)


def assemble_diff(files: Iterable[ChangedFile], chain: LineProcessorChain) -> ProcessedDiff:
    diff = ProcessedDiff()
    for f in files:
        block = build_file_block(file=f, chain=chain)
        if block is not None:
            diff.append(block)
    return diff


def build_prompt(
    pr: PullRequest,
    files: Iterable[ChangedFile],
    chain: LineProcessorChain,
    renderer: TemplateRenderer,
    settings: ReviewPromptSettings,
    filter_config: DiffFilterConfig,
) -> PromptPair:
    """
    组装 prompt。

    - 输入：PR 元信息、全部变更文件、processor 链、模板渲染器、固定配置
    - 输出：`PromptPair`
    - 失败：缺 patch 抛 `MissingPatchError`；渲染失败抛 `TemplateRenderError`
    """
    eligible = filter_changed_files(files=files, config=filter_config)
    diff = assemble_diff(files=eligible, chain=chain)
    logger.info(f"Assembled diff: {len(diff.blocks)} file block(s) from {len(eligible)} eligible file(s)")

    system_prompt = renderer.render(settings.system_template, settings.system_bindings())
    user_prompt = renderer.render(
        settings.user_template,
        {
            "title": pr.title,
            "branch": pr.branch,
            "language": settings.language,
            "diff": diff.render(),
        },
    )
    return PromptPair(system_prompt=system_prompt, user_prompt=user_prompt)
