"""
DiffFilter（非 AI）：决定哪些变更文件参与 review。

规则：
- 扩展名 = 文件名最后一个 `.` 之后的部分；没有 `.` 的文件直接排除
- 扩展名、状态都必须在白名单里
- 不符合规则的文件**静默跳过**（不是错误）
- 符合规则却没有 patch 的文件是致命错误（`MissingPatchError`）
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from app.review.errors import MissingPatchError
from app.review.models import ChangedFile

logger = logging.getLogger(__name__)

DEFAULT_PERMITTED_EXTENSIONS: frozenset[str] = frozenset({"java"})
DEFAULT_PERMITTED_STATUSES: frozenset[str] = frozenset({"added", "modified", "changed"})


class DiffFilterConfig(BaseModel):
    """过滤白名单：启动时构造一次，显式传入（测试里可以替换）。"""

    model_config = ConfigDict(frozen=True)

    permitted_extensions: frozenset[str] = DEFAULT_PERMITTED_EXTENSIONS
    permitted_statuses: frozenset[str] = DEFAULT_PERMITTED_STATUSES


def extract_extension(filename: str) -> str | None:
    if "." not in filename:
        return None
    return filename.rsplit(".", 1)[1]


def is_eligible(file: ChangedFile, config: DiffFilterConfig) -> bool:
    extension = extract_extension(filename=file.filename)
    if extension is None or extension not in config.permitted_extensions:
        return False
    return file.status in config.permitted_statuses


def filter_changed_files(files: Iterable[ChangedFile], config: DiffFilterConfig) -> list[ChangedFile]:
    """
    过滤变更文件，保持原始顺序。

    - 输入：PR 的全部变更文件 + 白名单配置
    - 输出：可以进入 PatchNormalizer 的文件（patch 一定存在）
    - 失败：通过过滤但 patch 为 None 时抛 `MissingPatchError`
    """
    eligible: list[ChangedFile] = []
    for f in files:
        if not is_eligible(file=f, config=config):
            logger.debug(f"Skipping file: {f.filename} (status={f.status})")
            continue
        if f.patch is None:
            raise MissingPatchError(filename=f.filename)
        eligible.append(f)
    return eligible
