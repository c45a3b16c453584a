from __future__ import annotations

"""
PatchNormalizer：清理 GitHub patch 中的缩进噪音。

只做两件事（不解析 hunk，`@@`、`+`/`-` 都当普通字符）：
- 删除连续 2 个及以上的空格
- 删除换行后紧跟的单个空格
"""

import re

_MULTI_SPACE_RE = re.compile(r" {2,}")


def normalize_patch(patch: str) -> str:
    """清理后的文本仍然是多行文本；对已清理的文本再执行一次结果不变。"""
    return _MULTI_SPACE_RE.sub("", patch).replace("\n ", "\n")


def split_patch_lines(patch: str) -> list[str]:
    """
    按换行切分，并丢掉末尾的空行。

    空字符串返回 `[""]`（一行空内容），与只包含换行的 patch（返回 `[]`）区分开。
    """
    if not patch:
        return [""]
    lines = patch.split("\n")
    while lines and lines[-1] == "":
        lines.pop()
    return lines
