"""
LLM Client（基于 OpenAI SDK，OpenAI-compatible API）。

目标：
- **尽量薄**：只做协议适配与错误处理
- **统一接口**：system + user 两条消息进，纯文本出
- 返回内容的解码（YAML）不在这里做，由 `review/response_parser.py` 负责
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    """OpenAI chat message 的最小结构。"""

    role: str
    content: str


class CompletionClient(Protocol):
    """completion 服务接口协议（orchestrator 只依赖它，测试里可以换成 fake）。"""

    async def complete_prompt(self, system_prompt: str, user_prompt: str) -> str: ...


def _normalize_base_url(base_url: str) -> str:
    normalized = base_url.rstrip("/")
    if normalized.endswith("/v1"):
        return normalized
    return f"{normalized}/v1"


class OpenAICompatLLMClient:
    """通过 OpenAI-compatible chat completions 接口调用 LLM。"""

    def __init__(self, api_key: str, base_url: str, http_client: httpx.AsyncClient, model: str) -> None:
        """
        - api_key: LLM API key
        - base_url: OpenAI-compatible base URL（会自动补齐 `/v1`）
        - http_client: 复用 httpx.AsyncClient 连接池
        - model: 模型名（例如 `gpt-4`）
        """
        self._base_url = _normalize_base_url(base_url=base_url)
        self._model = model
        self._client = AsyncOpenAI(api_key=api_key, base_url=self._base_url, http_client=http_client)

    async def complete_text(self, messages: Sequence[ChatMessage]) -> str:
        """
        调用 completion 并返回纯文本 content。

        注意：
        - 不做 retry（由上游决定）
        - 出错直接抛异常，便于上游统一处理/告警
        """
        try:
            logger.info(f"LLM request: model={self._model}, messages={len(messages)} msg(s)")
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[m.model_dump() for m in messages],
            )
        except OpenAIError as exc:
            logger.error(f"LLM API error: {exc}")
            raise
        except httpx.HTTPError as exc:
            logger.error(f"LLM HTTP error: {exc}")
            raise

        if not response.choices:
            logger.error("LLM returned no choices")
            raise RuntimeError("LLM returned no choices")
        content = response.choices[0].message.content
        if content is None:
            logger.error("LLM returned None content")
            raise RuntimeError("LLM returned None content")

        logger.info(f"LLM response: {len(content)} chars")
        return str(content)

    async def complete_prompt(self, system_prompt: str, user_prompt: str) -> str:
        messages = [
            ChatMessage(role="system", content=system_prompt),
            ChatMessage(role="user", content=user_prompt),
        ]
        return await self.complete_text(messages=messages)
