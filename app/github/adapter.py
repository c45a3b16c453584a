"""
GitHub -> Review domain adapter。

职责：
- 将 GitHub PR / PR files 转为平台无关的 `PullRequest` / `ChangedFile`
- 只做数据归一化，不做过滤（过滤由 DiffFilter 负责）
"""

from __future__ import annotations

from app.github.schemas import GitHubPullRequest
from app.github.schemas import GitHubPullRequestFile
from app.review.models import ChangedFile
from app.review.models import PullRequest


def build_pull_request(pr: GitHubPullRequest) -> PullRequest:
    return PullRequest(title=pr.title, branch=pr.head.ref)


def build_changed_files(files: list[GitHubPullRequestFile]) -> list[ChangedFile]:
    return [ChangedFile(filename=f.filename, status=f.status, patch=f.patch) for f in files]
