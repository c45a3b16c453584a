"""
应用配置加载。

设计目标：
- **严格**：缺少必要环境变量就直接报错（避免“看起来跑了其实没配置好”）
- **类型安全**：使用 Pydantic 校验 URL/整数/布尔值，减少运行时踩坑
- **可测试**：核心加载函数接收 `environ` 显式输入，便于单元测试
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError

from app.review.diff_filter import DEFAULT_PERMITTED_EXTENSIONS
from app.review.diff_filter import DEFAULT_PERMITTED_STATUSES
from app.review.diff_filter import DiffFilterConfig
from app.review.prompt import ReviewPromptSettings

DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com"
DEFAULT_LLM_MODEL = "gpt-4"


class LLMConfig(BaseModel):
    base_url: HttpUrl
    api_key: str
    model: str


class GitHubConfig(BaseModel):
    api_base_url: HttpUrl
    token: str
    files_per_page: int = Field(default=30, gt=0)


class ReviewConfig(BaseModel):
    """review 行为配置（全部可选，启动后只读）。"""

    model_config = ConfigDict(frozen=True)

    num_code_suggestions: int = Field(default=3, ge=0)
    require_estimated_effort_to_review: bool = True
    language: str = "Java"
    permitted_extensions: frozenset[str] = DEFAULT_PERMITTED_EXTENSIONS
    permitted_statuses: frozenset[str] = DEFAULT_PERMITTED_STATUSES

    def prompt_settings(self) -> ReviewPromptSettings:
        return ReviewPromptSettings(
            num_code_suggestions=self.num_code_suggestions,
            require_estimated_effort_to_review=self.require_estimated_effort_to_review,
            language=self.language,
        )

    def filter_config(self) -> DiffFilterConfig:
        return DiffFilterConfig(
            permitted_extensions=self.permitted_extensions,
            permitted_statuses=self.permitted_statuses,
        )


class AppConfig(BaseModel):
    llm: LLMConfig
    github: GitHubConfig
    review: ReviewConfig = Field(default_factory=ReviewConfig)


def _split_csv(value: str) -> frozenset[str]:
    return frozenset(item.strip() for item in value.split(",") if item.strip())


def _load_review_config(environ: Mapping[str, str]) -> ReviewConfig:
    overrides: dict[str, object] = {}
    if environ.get("REVIEW_NUM_CODE_SUGGESTIONS"):
        overrides["num_code_suggestions"] = environ["REVIEW_NUM_CODE_SUGGESTIONS"]
    if environ.get("REVIEW_REQUIRE_EFFORT_ESTIMATE"):
        overrides["require_estimated_effort_to_review"] = environ["REVIEW_REQUIRE_EFFORT_ESTIMATE"]
    if environ.get("REVIEW_LANGUAGE"):
        overrides["language"] = environ["REVIEW_LANGUAGE"]
    if environ.get("REVIEW_PERMITTED_EXTENSIONS"):
        overrides["permitted_extensions"] = _split_csv(environ["REVIEW_PERMITTED_EXTENSIONS"])
    if environ.get("REVIEW_PERMITTED_STATUSES"):
        overrides["permitted_statuses"] = _split_csv(environ["REVIEW_PERMITTED_STATUSES"])
    return ReviewConfig.model_validate(overrides)


def load_config_from_env(environ: Mapping[str, str]) -> AppConfig:
    """
    从环境变量加载并校验配置。

    - **输入**：`environ`（例如 `os.environ`）
    - **输出**：`AppConfig`
    - **失败**：必填项缺失/为空、或取值非法则抛 `ValueError`
    """

    required_keys: tuple[str, ...] = (
        "LLM_BASE_URL",
        "LLM_API_KEY",
        "GITHUB_TOKEN",
    )

    missing: list[str] = [key for key in required_keys if key not in environ or not environ[key]]
    if missing:
        raise ValueError(f"Missing required env vars: {', '.join(missing)}")

    # 交给 Pydantic 做类型校验（例如 URL 合法性、整数范围）
    try:
        github = GitHubConfig(
            api_base_url=environ.get("GITHUB_API_BASE_URL") or DEFAULT_GITHUB_API_BASE_URL,
            token=environ["GITHUB_TOKEN"],
            files_per_page=environ.get("REVIEW_FILES_PER_PAGE") or 30,
        )
        return AppConfig(
            llm=LLMConfig(
                base_url=environ["LLM_BASE_URL"],
                api_key=environ["LLM_API_KEY"],
                model=environ.get("LLM_MODEL") or DEFAULT_LLM_MODEL,
            ),
            github=github,
            review=_load_review_config(environ),
        )
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
