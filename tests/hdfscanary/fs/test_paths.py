"""Tests for absolute path helpers."""

import pytest

from hdfscanary.fs import paths


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", "/"),
        ("/", "/"),
        ("//", "/"),
        ("/a//b/", "/a/b"),
        ("/a/./b/../c", "/a/c"),
        ("//a/b", "/a/b"),
    ],
)
def test_normalize(raw, expected):
    assert paths.normalize(raw) == expected


def test_parent():
    assert paths.parent("/a/b") == "/a"
    assert paths.parent("/a") == "/"
    assert paths.parent("/") is None


def test_ancestors_walk_up_to_root():
    assert list(paths.ancestors("/a/b/c")) == ["/a/b/c", "/a/b", "/a", "/"]
    assert list(paths.ancestors("/")) == ["/"]


def test_join():
    assert paths.join("/a/", "marker") == "/a/marker"
    assert paths.join("/", "marker") == "/marker"
