"""
本地 Mock OpenAI-compatible LLM server。

用途：
- 在没有真实 LLM 网关的情况下，本地跑通闭环（返回符合 review schema 的 YAML）

启动：
  python -m app.dev.mock_openai_server
"""

from __future__ import annotations

from collections.abc import Sequence

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel, Field

from app.llm.client import ChatMessage

SAMPLE_REVIEW_YAML = """\
PR Analysis:
  Main theme: |-
    Update to the Repo Mapper
  PR summary: |-
    This PR changes the GithubMapper to map repos to their 'number' field instead of the 'name' field, and adds an extra argument to getAllRepos.
  Type of PR: |-
    Refactoring
  Estimated effort to review [1-5]: |-
    2, because the changes are relatively small, but understanding the context may require a moderate amount of effort
PR Feedback:
  General suggestions: |-
    Please clarify the purpose of the new parameter and the motivation behind mapping repos by 'number'.
  Code feedback:
"""

_FEEDBACK_ITEM = """\
    - relevant file: |-
        {path}
      suggestion: |-
        [MOCK] Consider validating inputs and adding unit tests for the changed logic. [medium]
      relevant line: |-
        {line}
"""


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage] = Field(default_factory=list)


def _extract_file_blocks_from_user_prompt(prompt: str) -> list[tuple[str, str]]:
    """
    从 user prompt 的 diff 段里提取 (path, 第一行 `+` 代码) 列表。

    形如：
      ## src/Foo.java
      <blank>
      +int x = 1;
    """
    blocks: list[tuple[str, str]] = []
    current_path: str | None = None
    for line in prompt.splitlines():
        stripped = line.strip()
        if stripped.startswith("## "):
            current_path = stripped.removeprefix("## ").strip()
            continue
        if current_path is not None and stripped.startswith("+") and not stripped.startswith("+++"):
            blocks.append((current_path, stripped))
            current_path = None
    return blocks


def _build_mock_review_yaml(blocks: list[tuple[str, str]]) -> str:
    if not blocks:
        return SAMPLE_REVIEW_YAML + "    []\n"
    items = "".join(_FEEDBACK_ITEM.format(path=path, line=line) for path, line in blocks)
    return SAMPLE_REVIEW_YAML + items


def _decide_mock_response(messages: Sequence[ChatMessage]) -> str:
    user_texts = [m.content for m in messages if m.role == "user"]
    if not user_texts:
        raise ValueError("Mock server expects at least one user message")
    prompt = "\n".join(user_texts)
    return _build_mock_review_yaml(blocks=_extract_file_blocks_from_user_prompt(prompt=prompt))


app = FastAPI(title="Mock OpenAI-compatible LLM", version="0.1.0")


@app.post("/v1/chat/completions")
async def chat_completions(req: ChatCompletionRequest) -> dict[str, object]:
    content = _decide_mock_response(messages=req.messages)
    return {
        "id": "chatcmpl-mock",
        "object": "chat.completion",
        "created": 0,
        "model": req.model,
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9001)


if __name__ == "__main__":
    main()
