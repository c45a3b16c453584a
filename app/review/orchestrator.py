"""
Review Orchestrator（核心流程编排）。

关键思想：
- **流程由工程代码控制**：纯内存的 core（filter -> normalize -> chain -> prompt / parse -> format）
- **I/O 全部在协作者里**：GitHub（拉 PR / 发评论）、LLM（completion）
- 任意一步出现致命错误都会抛 `ReviewPipelineError`，此时**不会**发布评论

最小闭环：
get PR + files -> build prompt -> LLM completion -> parse -> format -> post review
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from app.github.adapter import build_changed_files
from app.github.adapter import build_pull_request
from app.github.client import GitHubClient
from app.llm.client import CompletionClient
from app.review.diff_filter import DiffFilterConfig
from app.review.models import AnalysisResult
from app.review.models import ChangedFile
from app.review.models import PromptPair
from app.review.models import PullRequest
from app.review.processors import LineProcessorChain
from app.review.processors import build_default_chain
from app.review.prompt import ReviewPromptSettings
from app.review.prompt import build_prompt
from app.review.response_parser import parse_review_response
from app.review.synthesis import format_review_comment
from app.review.templates import JinjaTemplateRenderer
from app.review.templates import TemplateRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOrchestrator:
    """Orchestrator 运行时依赖集合（启动时组装一次，run 之间只读）。"""

    llm_client: CompletionClient
    renderer: TemplateRenderer
    settings: ReviewPromptSettings = field(default_factory=ReviewPromptSettings)
    filter_config: DiffFilterConfig = field(default_factory=DiffFilterConfig)
    chain: LineProcessorChain = field(default_factory=build_default_chain)

    def build_prompt(self, pr: PullRequest, files: Sequence[ChangedFile]) -> PromptPair:
        return build_prompt(
            pr=pr,
            files=files,
            chain=self.chain,
            renderer=self.renderer,
            settings=self.settings,
            filter_config=self.filter_config,
        )

    async def analyze(self, pr: PullRequest, files: Sequence[ChangedFile]) -> AnalysisResult:
        prompt = self.build_prompt(pr=pr, files=files)
        raw = await self.llm_client.complete_prompt(
            system_prompt=prompt.system_prompt,
            user_prompt=prompt.user_prompt,
        )
        return parse_review_response(raw, settings=self.settings)

    async def review(self, pr: PullRequest, files: Sequence[ChangedFile]) -> str:
        """跑一次完整 review（不含 I/O 以外的副作用），返回评论正文。"""
        analysis = await self.analyze(pr=pr, files=files)
        return format_review_comment(analysis)


def build_review_orchestrator(
    llm_client: CompletionClient,
    settings: ReviewPromptSettings,
    filter_config: DiffFilterConfig,
    renderer: TemplateRenderer | None = None,
    chain: LineProcessorChain | None = None,
) -> ReviewOrchestrator:
    """创建 orchestrator；renderer/chain 不传时使用默认实现。"""
    return ReviewOrchestrator(
        llm_client=llm_client,
        renderer=renderer if renderer is not None else JinjaTemplateRenderer(),
        settings=settings,
        filter_config=filter_config,
        chain=chain if chain is not None else build_default_chain(),
    )


async def fetch_pull_request_input(
    github_client: GitHubClient,
    owner: str,
    repo: str,
    pull_number: int,
) -> tuple[PullRequest, list[ChangedFile]]:
    pr = await github_client.get_pull_request(owner=owner, repo=repo, pull_number=pull_number)
    files = await github_client.list_pull_request_files(owner=owner, repo=repo, pull_number=pull_number)
    return build_pull_request(pr), build_changed_files(files)


async def run_review(
    orchestrator: ReviewOrchestrator,
    github_client: GitHubClient,
    owner: str,
    repo: str,
    pull_number: int,
) -> str:
    """
    跑一次完整 review 并把结果写回 GitHub，返回评论正文。

    - 失败：pipeline 错误（`ReviewPipelineError`）或协作者错误直接向上抛，评论不会被发布
    """
    pr, files = await fetch_pull_request_input(
        github_client=github_client,
        owner=owner,
        repo=repo,
        pull_number=pull_number,
    )
    logger.info(f"Reviewing {owner}/{repo}#{pull_number}: {len(files)} changed file(s)")
    body = await orchestrator.review(pr=pr, files=files)
    await github_client.create_pull_request_review(owner=owner, repo=repo, pull_number=pull_number, body=body)
    return body

