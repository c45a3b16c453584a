"""
LineProcessorChain：可插拔的逐行文本处理链。

约定（注意这一点和直觉不同）：
- 每个 processor 是 `str -> str | None`
- 返回字符串：当前行被替换成该字符串
- 返回 None：表示“不替换”，当前行**原样保留**（不是删除）

所以 `omit_blank` / `omit_import` 虽然名字叫 omit，但单独并不能把行从输出里删掉。
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

LineProcessor = Callable[[str], str | None]

IMPORT_PREFIXES: tuple[str, ...] = ("import", "+import", "-import")


@dataclass(frozen=True)
class NamedLineProcessor:
    """带名字的 processor（便于日志/调试时看出链的组成）。"""

    name: str
    func: LineProcessor

    def __call__(self, line: str) -> str | None:
        return self.func(line)


def trim(line: str) -> str | None:
    return line.strip()


def omit_blank(line: str) -> str | None:
    if not line.strip():
        return None
    return line


def omit_import(line: str) -> str | None:
    if line.startswith(IMPORT_PREFIXES):
        return None
    return line


DEFAULT_LINE_PROCESSORS: tuple[NamedLineProcessor, ...] = (
    NamedLineProcessor(name="trim", func=trim),
    NamedLineProcessor(name="omit_blank", func=omit_blank),
    NamedLineProcessor(name="omit_import", func=omit_import),
)


class LineProcessorChain:
    """有序、不可变的 processor 链；按注入顺序逐个执行。"""

    def __init__(self, processors: Iterable[LineProcessor]) -> None:
        self._processors: tuple[LineProcessor, ...] = tuple(processors)

    @property
    def processors(self) -> Sequence[LineProcessor]:
        return self._processors

    @property
    def names(self) -> list[str]:
        return [getattr(p, "name", getattr(p, "__name__", repr(p))) for p in self._processors]

    def process_line(self, line: str) -> str:
        current = line
        for processor in self._processors:
            replacement = processor(current)
            if replacement is not None:
                current = replacement
        return current

    def process(self, lines: Iterable[str]) -> list[str]:
        """每个输入行恰好对应一个输出行（不会删除行）。"""
        return [self.process_line(line) for line in lines]


def build_default_chain() -> LineProcessorChain:
    return LineProcessorChain(processors=DEFAULT_LINE_PROCESSORS)
