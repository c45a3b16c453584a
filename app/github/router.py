"""
GitHub PR review 路由层。

职责：
- 调试接口：查看原始 PR / PR files、预览 prompt（不调用 LLM）
- 触发接口：跑完整 review 并把评论发到 PR
- pipeline 致命错误 -> 502（带 stage），不会发布任何评论
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import HTTPException

from app.github.client import GitHubClient
from app.review.errors import ReviewPipelineError
from app.review.orchestrator import ReviewOrchestrator
from app.review.orchestrator import fetch_pull_request_input
from app.review.orchestrator import run_review


def _pipeline_failure(exc: ReviewPipelineError) -> HTTPException:
    return HTTPException(status_code=502, detail={"stage": exc.stage, "message": exc.message})


def build_review_router(github_client: GitHubClient, orchestrator: ReviewOrchestrator) -> APIRouter:
    router = APIRouter(prefix="/repos/{owner}/{repo}/pulls/{number}")

    @router.get("")
    async def get_pull_request(owner: str, repo: str, number: int) -> dict[str, object]:
        return await github_client.get_pull_request_raw(owner=owner, repo=repo, pull_number=number)

    @router.get("/files")
    async def list_pull_request_files(owner: str, repo: str, number: int) -> list[dict[str, object]]:
        return await github_client.list_pull_request_files_raw(owner=owner, repo=repo, pull_number=number)

    @router.get("/prompt")
    async def preview_prompt(owner: str, repo: str, number: int) -> dict[str, str]:
        pr, files = await fetch_pull_request_input(
            github_client=github_client,
            owner=owner,
            repo=repo,
            pull_number=number,
        )
        try:
            prompt = orchestrator.build_prompt(pr=pr, files=files)
        except ReviewPipelineError as exc:
            raise _pipeline_failure(exc) from exc
        return {"system_prompt": prompt.system_prompt, "user_prompt": prompt.user_prompt}

    @router.post("/review")
    async def review_pull_request(owner: str, repo: str, number: int) -> dict[str, str]:
        try:
            body = await run_review(
                orchestrator=orchestrator,
                github_client=github_client,
                owner=owner,
                repo=repo,
                pull_number=number,
            )
        except ReviewPipelineError as exc:
            raise _pipeline_failure(exc) from exc
        return {"status": "ok", "body": body}

    return router
