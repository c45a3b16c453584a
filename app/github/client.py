"""
GitHub API 客户端（外部系统连接器）。

约定：
- 这里只做 HTTP 调用 + 错误处理 + schema 校验
- 出错直接抛错（不要吞），便于定位与告警
"""

from __future__ import annotations

import logging

import httpx

from app.github.schemas import GitHubPullRequest
from app.github.schemas import GitHubPullRequestFile

logger = logging.getLogger(__name__)


class GitHubClient:
    """最小 GitHub API client（get PR + list PR files + create PR review）。"""

    def __init__(self, api_base_url: str, token: str, http_client: httpx.AsyncClient, per_page: int = 30) -> None:
        if per_page <= 0:
            raise ValueError("per_page must be > 0")
        self._api_base_url = api_base_url.rstrip("/")
        self._token = token
        self._http_client = http_client
        self._per_page = per_page

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code >= 400:
            logger.error(f"GitHub API error {response.status_code} for {response.request.url}")
            raise RuntimeError(f"GitHub API error {response.status_code}: {response.text}")

    async def get_pull_request_raw(self, owner: str, repo: str, pull_number: int) -> dict[str, object]:
        url = f"{self._api_base_url}/repos/{owner}/{repo}/pulls/{pull_number}"
        response = await self._http_client.get(url, headers=self._headers())
        self._raise_for_status(response)
        data = response.json()
        if not isinstance(data, dict):
            raise RuntimeError(f"Unexpected GitHub response shape for PR: {data}")
        return data

    async def get_pull_request(self, owner: str, repo: str, pull_number: int) -> GitHubPullRequest:
        data = await self.get_pull_request_raw(owner=owner, repo=repo, pull_number=pull_number)
        return GitHubPullRequest.model_validate(data)

    async def list_pull_request_files_raw(self, owner: str, repo: str, pull_number: int) -> list[dict[str, object]]:
        """
        拉取 PR 的变更文件列表（包含每个文件的 patch diff），保持 GitHub 返回顺序。

        注意：GitHub API 有分页；这里会拉取全部文件。
        """
        page = 1
        all_items: list[dict[str, object]] = []
        while True:
            url = f"{self._api_base_url}/repos/{owner}/{repo}/pulls/{pull_number}/files"
            response = await self._http_client.get(
                url,
                headers=self._headers(),
                params={"per_page": self._per_page, "page": page},
            )
            self._raise_for_status(response)
            data = response.json()
            if not isinstance(data, list):
                raise RuntimeError(f"Unexpected GitHub response shape for PR files: {data}")
            all_items.extend(data)
            if len(data) < self._per_page:
                break
            page += 1
        return all_items

    async def list_pull_request_files(self, owner: str, repo: str, pull_number: int) -> list[GitHubPullRequestFile]:
        items = await self.list_pull_request_files_raw(owner=owner, repo=repo, pull_number=pull_number)
        return [GitHubPullRequestFile.model_validate(x) for x in items]

    async def create_pull_request_review(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        body: str,
    ) -> None:
        """
        创建一条 PR review（会出现在 GitHub 的 “Reviews” 区域）。

        说明：event=COMMENT 表示“评论型 review”（不 approve / request changes）。
        """
        url = f"{self._api_base_url}/repos/{owner}/{repo}/pulls/{pull_number}/reviews"
        payload = {"body": body, "event": "COMMENT"}
        response = await self._http_client.post(url, headers=self._headers(), json=payload)
        self._raise_for_status(response)
        logger.info(f"Posted review comment to {owner}/{repo}#{pull_number} ({len(body)} chars)")
