"""
GitHub API response schemas（Pydantic）。

说明：
- 字段只覆盖当前闭环需要的子集（get PR + list files）。
- 其余字段交给 Pydantic 默认忽略。
"""

from __future__ import annotations

from pydantic import BaseModel


class GitHubPullRequestHead(BaseModel):
    ref: str


class GitHubPullRequest(BaseModel):
    title: str
    head: GitHubPullRequestHead


class GitHubPullRequestFile(BaseModel):
    """
    PR 文件列表 item（GET /pulls/{pull_number}/files）。

    - status 用 str：removed/renamed/copied/unchanged 等由 DiffFilter 过滤，不在这里拒绝
    - patch 可能缺失（例如大文件/二进制/被截断）
    """

    filename: str
    status: str
    patch: str | None = None
