"""
ResponseParser：把 LLM 的原始文本解码成 `AnalysisResult`。

策略：
- 先去掉可能包裹在外面的 markdown 代码块（```yaml ... ```）
- `yaml.safe_load` 解码，再用 Pydantic schema 严格校验
- 任何失败（YAML 非法 / 不是 mapping / 缺 key / feedback 不是 mapping）都抛 `ResponseDecodeError`
- 不返回“部分结果”：宁可失败也不要发出残缺评论
"""

from __future__ import annotations

import logging
import re

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.review.errors import ResponseDecodeError
from app.review.models import AnalysisResult
from app.review.models import CodeFeedback
from app.review.prompt import ReviewPromptSettings

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\n(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)
_LEADING_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\n")
_TRAILING_FENCE_RE = re.compile(r"\n?\s*```\s*$")

ANALYSIS_KEY = "PR Analysis"
FEEDBACK_KEY = "PR Feedback"
EFFORT_KEY = "Estimated effort to review [1-5]"
CODE_FEEDBACK_KEY = "Code feedback"


class _ResponseSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class CodeFeedbackEntry(_ResponseSection):
    relevant_file: str = Field(alias="relevant file")
    relevant_line: str = Field(alias="relevant line")
    suggestion: str


class PRAnalysisSection(_ResponseSection):
    main_theme: str = Field(alias="Main theme")
    pr_summary: str = Field(alias="PR summary")
    type_of_pr: str = Field(alias="Type of PR")
    estimated_effort_to_review: str = Field(alias=EFFORT_KEY)


class PRFeedbackSection(_ResponseSection):
    general_suggestions: str = Field(alias="General suggestions")
    code_feedback: list[CodeFeedbackEntry] = Field(alias=CODE_FEEDBACK_KEY)


class ReviewResponse(_ResponseSection):
    """LLM 回复的顶层 schema（key 与 system prompt 里要求的 YAML schema 一致）。"""

    pr_analysis: PRAnalysisSection = Field(alias=ANALYSIS_KEY)
    pr_feedback: PRFeedbackSection = Field(alias=FEEDBACK_KEY)

    def to_analysis(self) -> AnalysisResult:
        return AnalysisResult(
            main_theme=self.pr_analysis.main_theme,
            summary=self.pr_analysis.pr_summary,
            pr_type=self.pr_analysis.type_of_pr,
            effort_estimate=self.pr_analysis.estimated_effort_to_review,
            general_suggestions=self.pr_feedback.general_suggestions,
            code_feedback=[
                CodeFeedback(
                    relevant_file=entry.relevant_file,
                    relevant_line=entry.relevant_line,
                    suggestion=entry.suggestion,
                )
                for entry in self.pr_feedback.code_feedback
            ],
        )


def strip_code_fence(raw: str) -> str:
    """去掉外层代码块；user prompt 以 ```yaml 结尾，所以模型常常只输出收尾的 ```。"""
    match = _FENCE_RE.match(raw)
    if match:
        return match.group("body")
    return _TRAILING_FENCE_RE.sub("", _LEADING_FENCE_RE.sub("", raw, count=1))


def _fill_omitted_sections(document: dict[str, object], settings: ReviewPromptSettings) -> dict[str, object]:
    """
    system prompt 按配置省略了某些 key 时，补上默认值再做 schema 校验。

    - 不要求 effort：缺省为空字符串
    - 不要求 code suggestions：缺省为空列表
    其余情况保持严格（缺 key 照样失败）。
    """
    filled = dict(document)
    analysis = filled.get(ANALYSIS_KEY)
    if not settings.require_estimated_effort_to_review and isinstance(analysis, dict):
        filled[ANALYSIS_KEY] = {EFFORT_KEY: "", **analysis}
    feedback = filled.get(FEEDBACK_KEY)
    if settings.num_code_suggestions <= 0 and isinstance(feedback, dict):
        filled[FEEDBACK_KEY] = {CODE_FEEDBACK_KEY: [], **feedback}
    return filled


def parse_review_response(raw: str, settings: ReviewPromptSettings | None = None) -> AnalysisResult:
    """
    解码 LLM 回复。

    - settings：生成 prompt 时用的配置；不传时按默认配置（所有 key 都必须存在）
    """
    if settings is None:
        settings = ReviewPromptSettings()
    try:
        document = yaml.safe_load(strip_code_fence(raw))
    except yaml.YAMLError as exc:
        logger.error(f"Invalid YAML from LLM. Raw content: {raw}")
        raise ResponseDecodeError(f"LLM did not return valid YAML: {exc}") from exc

    if not isinstance(document, dict):
        raise ResponseDecodeError(f"LLM YAML must be a mapping, got {type(document).__name__}")

    try:
        response = ReviewResponse.model_validate(_fill_omitted_sections(document, settings))
    except ValidationError as exc:
        logger.error(f"Review response schema validation failed: {exc}")
        raise ResponseDecodeError(f"LLM YAML does not match review schema: {exc}") from exc

    analysis = response.to_analysis()
    logger.info(f"Decoded review response with {len(analysis.code_feedback)} code feedback item(s)")
    return analysis
