from __future__ import annotations

import pytest

from app.review.diff_filter import DiffFilterConfig
from app.review.diff_filter import extract_extension
from app.review.diff_filter import filter_changed_files
from app.review.diff_filter import is_eligible
from app.review.errors import MissingPatchError
from app.review.errors import ReviewPipelineError
from app.review.models import ChangedFile

CONFIG = DiffFilterConfig()


def test_extract_extension_uses_last_dot() -> None:
    assert extract_extension(filename="src/Foo.java") == "java"
    assert extract_extension(filename="archive.tar.gz") == "gz"
    assert extract_extension(filename="Makefile") is None


@pytest.mark.parametrize("status", ["added", "modified", "changed", "removed", "renamed", "copied"])
@pytest.mark.parametrize("filename", ["README.md", "build.gradle.kts", "Dockerfile", "Foo.JAVA", "Foo.java.orig"])
def test_disallowed_extension_is_excluded_regardless_of_status(filename: str, status: str) -> None:
    f = ChangedFile(filename=filename, status=status, patch="+x\n+y")
    assert is_eligible(file=f, config=CONFIG) is False


@pytest.mark.parametrize("status", ["removed", "renamed", "copied", "unchanged", ""])
@pytest.mark.parametrize("filename", ["Foo.java", "src/main/java/Bar.java"])
def test_disallowed_status_is_excluded_regardless_of_extension(filename: str, status: str) -> None:
    f = ChangedFile(filename=filename, status=status, patch="+x\n+y")
    assert is_eligible(file=f, config=CONFIG) is False


@pytest.mark.parametrize("status", ["added", "modified", "changed"])
def test_permitted_file_is_eligible(status: str) -> None:
    f = ChangedFile(filename="src/Foo.java", status=status, patch="+x\n+y")
    assert is_eligible(file=f, config=CONFIG) is True


def test_filter_keeps_original_order() -> None:
    files = [
        ChangedFile(filename="b/Second.java", status="modified", patch="+b"),
        ChangedFile(filename="README.md", status="modified", patch="+r"),
        ChangedFile(filename="a/First.java", status="added", patch="+a"),
        ChangedFile(filename="Old.java", status="removed", patch="-o"),
    ]
    kept = filter_changed_files(files=files, config=CONFIG)
    assert [f.filename for f in kept] == ["b/Second.java", "a/First.java"]


def test_excluded_file_without_patch_is_not_an_error() -> None:
    files = [ChangedFile(filename="logo.png", status="added", patch=None)]
    assert filter_changed_files(files=files, config=CONFIG) == []


def test_eligible_file_without_patch_is_fatal() -> None:
    files = [ChangedFile(filename="Big.java", status="modified", patch=None)]
    with pytest.raises(MissingPatchError) as exc_info:
        filter_changed_files(files=files, config=CONFIG)
    assert isinstance(exc_info.value, ReviewPipelineError)
    assert exc_info.value.stage == "filter"
    assert exc_info.value.filename == "Big.java"


def test_custom_config_can_be_substituted() -> None:
    config = DiffFilterConfig(permitted_extensions=frozenset({"py"}), permitted_statuses=frozenset({"added"}))
    files = [
        ChangedFile(filename="app.py", status="added", patch="+x"),
        ChangedFile(filename="app.py", status="modified", patch="+x"),
        ChangedFile(filename="App.java", status="added", patch="+x"),
    ]
    kept = filter_changed_files(files=files, config=config)
    assert len(kept) == 1
    assert kept[0].status == "added"
