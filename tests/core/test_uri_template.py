"""Tests for URI template matching."""

from __future__ import annotations

import pytest

from mcpkit.core.uri_template import UriTemplate


class TestUriTemplate:
    def test_literal_is_not_template(self) -> None:
        t = UriTemplate("docs://readme")
        assert not t.is_template
        assert t.match("docs://readme") == {}
        assert t.match("docs://other") is None

    def test_single_param(self) -> None:
        t = UriTemplate("user://{userId}")
        assert t.params == ("userId",)
        assert t.match("user://123") == {"userId": "123"}

    def test_multiple_params(self) -> None:
        t = UriTemplate("repo://{owner}/{name}/issues")
        assert t.match("repo://acme/widgets/issues") == {"owner": "acme", "name": "widgets"}

    def test_segment_count_must_agree(self) -> None:
        t = UriTemplate("user://{userId}")
        assert t.match("user://123/extra") is None
        assert t.match("user:") is None

    def test_empty_segment_does_not_bind(self) -> None:
        assert UriTemplate("user://{userId}").match("user://") is None

    def test_partial_placeholder_rejected(self) -> None:
        with pytest.raises(ValueError, match="whole path segment"):
            UriTemplate("file://prefix-{name}")

    def test_duplicate_param_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            UriTemplate("x://{id}/{id}")
