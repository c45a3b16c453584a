from __future__ import annotations

import asyncio

import pytest

from app.config import load_config_from_env
from app.github.schemas import GitHubPullRequest
from app.github.schemas import GitHubPullRequestFile
from app.review.diff_filter import DiffFilterConfig
from app.review.errors import ReviewPipelineError
from app.review.models import ChangedFile
from app.review.models import PullRequest
from app.review.orchestrator import build_review_orchestrator
from app.review.orchestrator import run_review
from app.review.prompt import ReviewPromptSettings

RETRY_PATCH = (
    "+import java.time.Duration;\n"
    "\n"
    "+public class Retry {\n"
    "+    private int attempts = 3;\n"
    "+}\n"
)

RESILIENCE_YAML = """\
PR Analysis:
  Main theme: |-
    Resilience
  PR summary: |-
    Introduces a Retry helper.
  Type of PR: |-
    Enhancement
  Estimated effort to review [1-5]: |-
    1, because the change is tiny
PR Feedback:
  General suggestions: |-
    Make the attempt count configurable.
  Code feedback:
    - relevant file: |-
        Retry.java
      suggestion: |-
        Inject the attempt count through the constructor. [medium]
      relevant line: |-
        +private int attempts = 3;
"""


class FakeLLMClient:
    def __init__(self, response: str) -> None:
        self.response = response
        self.prompts: list[tuple[str, str]] = []

    async def complete_prompt(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append((system_prompt, user_prompt))
        return self.response


class FakeGitHubClient:
    def __init__(self, files: list[GitHubPullRequestFile]) -> None:
        self.files = files
        self.reviews: list[str] = []

    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> GitHubPullRequest:
        return GitHubPullRequest.model_validate(
            {"number": pull_number, "title": "Add retry logic", "head": {"ref": "feature/retry", "sha": "abc"}}
        )

    async def list_pull_request_files(self, owner: str, repo: str, pull_number: int) -> list[GitHubPullRequestFile]:
        return self.files

    async def create_pull_request_review(self, owner: str, repo: str, pull_number: int, body: str) -> None:
        self.reviews.append(body)


def _files() -> list[ChangedFile]:
    return [
        ChangedFile(filename="Retry.java", status="modified", patch=RETRY_PATCH),
        ChangedFile(filename="README.md", status="modified", patch="+# Retry\n+docs"),
        ChangedFile(filename="Legacy.java", status="removed", patch="-class Legacy {\n-}"),
    ]


def _orchestrator(llm: FakeLLMClient):
    return build_review_orchestrator(
        llm_client=llm,
        settings=ReviewPromptSettings(),
        filter_config=DiffFilterConfig(),
    )


def test_retry_scenario_assembled_diff() -> None:
    pr = PullRequest(title="Add retry logic", branch="feature/retry")
    prompt = _orchestrator(FakeLLMClient(RESILIENCE_YAML)).build_prompt(pr=pr, files=_files())

    user_prompt = prompt.user_prompt
    assert user_prompt.count("## ") == 1
    assert "## Retry.java \n\n" in user_prompt
    assert "README.md" not in user_prompt
    assert "Legacy.java" not in user_prompt

    block = user_prompt.split("## Retry.java \n\n", 1)[1].split("...\n", 1)[0]
    lines = block.splitlines()
    # blank and import lines pass through the default chain unchanged
    assert lines == [
        "+import java.time.Duration;",
        "",
        "+public class Retry {",
        "+private int attempts = 3;",
        "+}",
    ]
    meaningful = [line for line in lines if line and not line.startswith("+import")]
    assert meaningful == ["+public class Retry {", "+private int attempts = 3;", "+}"]
    assert all(line == line.strip() for line in lines)


def test_retry_scenario_comment() -> None:
    llm = FakeLLMClient(RESILIENCE_YAML)
    pr = PullRequest(title="Add retry logic", branch="feature/retry")
    body = asyncio.run(_orchestrator(llm).review(pr=pr, files=_files()))

    assert "Resilience" in body
    assert body.count("**relevant file:**") == 1
    assert "`Retry.java`" in body
    assert len(llm.prompts) == 1
    system_prompt, user_prompt = llm.prompts[0]
    assert "PR Analysis:" in system_prompt
    assert "Title: 'Add retry logic'" in user_prompt


def test_run_review_posts_comment() -> None:
    github = FakeGitHubClient(
        files=[GitHubPullRequestFile(filename="Retry.java", status="modified", patch=RETRY_PATCH)]
    )
    body = asyncio.run(
        run_review(
            orchestrator=_orchestrator(FakeLLMClient(RESILIENCE_YAML)),
            github_client=github,
            owner="acme",
            repo="demo-service",
            pull_number=3,
        )
    )
    assert github.reviews == [body]


def test_run_review_decode_failure_posts_nothing() -> None:
    github = FakeGitHubClient(
        files=[GitHubPullRequestFile(filename="Retry.java", status="modified", patch=RETRY_PATCH)]
    )
    broken = RESILIENCE_YAML.replace("      suggestion: |-\n        Inject the attempt count through the constructor. [medium]\n", "")
    with pytest.raises(ReviewPipelineError) as exc_info:
        asyncio.run(
            run_review(
                orchestrator=_orchestrator(FakeLLMClient(broken)),
                github_client=github,
                owner="acme",
                repo="demo-service",
                pull_number=3,
            )
        )
    assert exc_info.value.stage == "parse"
    assert github.reviews == []


def test_run_review_missing_patch_skips_llm_and_posts_nothing() -> None:
    llm = FakeLLMClient(RESILIENCE_YAML)
    github = FakeGitHubClient(files=[GitHubPullRequestFile(filename="Huge.java", status="added", patch=None)])
    with pytest.raises(ReviewPipelineError) as exc_info:
        asyncio.run(
            run_review(
                orchestrator=_orchestrator(llm),
                github_client=github,
                owner="acme",
                repo="demo-service",
                pull_number=3,
            )
        )
    assert exc_info.value.stage == "filter"
    assert llm.prompts == []
    assert github.reviews == []


def test_reduced_schema_settings_round_trip() -> None:
    cfg = load_config_from_env(
        environ={
            "LLM_BASE_URL": "https://llm.example.com",
            "LLM_API_KEY": "k",
            "GITHUB_TOKEN": "t",
            "REVIEW_NUM_CODE_SUGGESTIONS": "0",
            "REVIEW_REQUIRE_EFFORT_ESTIMATE": "false",
        }
    )
    reply = """\
PR Analysis:
  Main theme: |-
    Resilience
  PR summary: |-
    Introduces a Retry helper.
  Type of PR: |-
    Enhancement
PR Feedback:
  General suggestions: |-
    Make the attempt count configurable.
"""
    llm = FakeLLMClient(reply)
    orchestrator = build_review_orchestrator(
        llm_client=llm,
        settings=cfg.review.prompt_settings(),
        filter_config=cfg.review.filter_config(),
    )
    pr = PullRequest(title="Add retry logic", branch="feature/retry")
    body = asyncio.run(orchestrator.review(pr=pr, files=_files()))

    system_prompt = llm.prompts[0][0]
    assert "Estimated effort to review" not in system_prompt
    assert "Code feedback:" not in system_prompt
    assert "Resilience" in body
    assert "**relevant file:**" not in body
