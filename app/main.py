"""
FastAPI 服务入口。

这里做三件事：
- 加载配置（严格校验环境变量）
- 组装外部依赖（HTTP Client / LLM Client / GitHub Client）
- 装配路由（health + PR review）

注意：
- 业务流程不写在这里（由 `review/orchestrator.py` 负责）
- `httpx.AsyncClient` 会被复用（避免每个请求新建连接）

启动：
  uvicorn app.main:build_app --factory
"""

from __future__ import annotations

import logging
import os

import httpx
from fastapi import FastAPI

from app.config import AppConfig
from app.config import load_config_from_env
from app.github.client import GitHubClient
from app.github.router import build_review_router
from app.llm.client import OpenAICompatLLMClient
from app.review.orchestrator import build_review_orchestrator

logger = logging.getLogger(__name__)


def build_app(config: AppConfig | None = None, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    """创建并返回 FastAPI app（便于测试/复用）。"""

    # 1) 配置：缺失会直接抛错，启动失败（这是期望行为）
    if config is None:
        config = load_config_from_env(os.environ)

    # 2) 可复用的 HTTP client：供 GitHub API 与 LLM 调用使用
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))

    llm_client = OpenAICompatLLMClient(
        api_key=config.llm.api_key,
        base_url=str(config.llm.base_url).rstrip("/"),
        http_client=http_client,
        model=config.llm.model,
    )
    github_client = GitHubClient(
        api_base_url=str(config.github.api_base_url),
        token=config.github.token,
        http_client=http_client,
        per_page=config.github.files_per_page,
    )

    # 3) core 配置在启动时固定下来，之后只读
    orchestrator = build_review_orchestrator(
        llm_client=llm_client,
        settings=config.review.prompt_settings(),
        filter_config=config.review.filter_config(),
    )
    logger.info(
        f"Review service configured: model={config.llm.model}, "
        f"extensions={sorted(config.review.permitted_extensions)}, "
        f"statuses={sorted(config.review.permitted_statuses)}"
    )

    app = FastAPI(title="PR Review Agent", version="0.1.0")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """健康检查：用于 k8s / LB 探活。"""
        return {"status": "ok"}

    app.include_router(build_review_router(github_client=github_client, orchestrator=orchestrator))
    return app
