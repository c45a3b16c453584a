"""
本地 Mock GitHub API server（只覆盖最小闭环用到的三个接口）。

用途：
- 在没有真实 GitHub 的情况下，本地跑通：
  get PR -> list PR files -> post PR review

启动：
  python -m app.dev.mock_github_server
"""

from __future__ import annotations

import time

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel


class ReviewCreateRequest(BaseModel):
    body: str
    event: str


def _default_pull_request(number: int) -> dict[str, object]:
    return {
        "number": number,
        "title": "Add retry logic",
        "head": {"ref": "feature/retry", "sha": "1111111111111111111111111111111111111111"},
        "base": {"ref": "main", "sha": "0000000000000000000000000000000000000000"},
    }


def _default_files() -> list[dict[str, object]]:
    return [
        {
            "filename": "src/main/java/com/example/Retry.java",
            "status": "modified",
            "patch": (
                "@@ -1,3 +1,8 @@\n"
                " package com.example;\n"
                "+import java.time.Duration;\n"
                "+\n"
                "+public class Retry {\n"
                "+    private final int maxAttempts = 3;\n"
                "+}\n"
            ),
        },
        {
            "filename": "README.md",
            "status": "modified",
            "patch": "@@ -1 +1 @@\n-# Demo\n+# Demo service\n",
        },
        {
            "filename": "src/main/java/com/example/Legacy.java",
            "status": "removed",
            "patch": "@@ -1,2 +0,0 @@\n-class Legacy {\n-}\n",
        },
    ]


app = FastAPI(title="Mock GitHub API", version="0.1.0")

_reviews: list[dict[str, object]] = []


@app.get("/repos/{owner}/{repo}/pulls/{number}")
async def get_pull_request(owner: str, repo: str, number: int) -> dict[str, object]:
    _ = owner
    _ = repo
    return _default_pull_request(number=number)


@app.get("/repos/{owner}/{repo}/pulls/{number}/files")
async def list_pull_request_files(owner: str, repo: str, number: int, per_page: int = 30, page: int = 1) -> list[dict[str, object]]:
    _ = owner
    _ = repo
    _ = number
    files = _default_files()
    start = (page - 1) * per_page
    return files[start : start + per_page]


@app.post("/repos/{owner}/{repo}/pulls/{number}/reviews")
async def create_pull_request_review(owner: str, repo: str, number: int, req: ReviewCreateRequest) -> dict[str, object]:
    review_id = len(_reviews) + 1
    review = {
        "id": review_id,
        "body": req.body,
        "event": req.event,
        "repo": f"{owner}/{repo}",
        "number": number,
        "submitted_at": int(time.time()),
    }
    _reviews.append(review)
    return {"id": review_id, "body": req.body, "state": "COMMENTED"}


@app.get("/__debug__/reviews")
async def debug_reviews() -> dict[str, object]:
    return {"count": len(_reviews), "reviews": _reviews}


def main() -> None:
    uvicorn.run(app, host="127.0.0.1", port=9002)


if __name__ == "__main__":
    main()
