"""Tests for deep_merge and RequestOptions.merge."""

from shopbridge.infrastructure.http.fetcher import RequestOptions
from shopbridge.shared.utils.merge import deep_merge


class TestDeepMerge:
    """Nested mappings merge key by key; everything else is replaced."""

    def test_nested_mappings_merge_recursively(self) -> None:
        base = {"a": {"x": 1, "y": {"deep": 1}}, "b": 1}
        out = deep_merge(base, {"a": {"y": {"other": 2}}})
        assert out == {"a": {"x": 1, "y": {"deep": 1, "other": 2}}, "b": 1}

    def test_lists_and_scalars_replace(self) -> None:
        base = {"tags": [1, 2, 3], "n": 1}
        out = deep_merge(base, {"tags": [9], "n": 2})
        assert out == {"tags": [9], "n": 2}

    def test_mapping_replaces_scalar(self) -> None:
        assert deep_merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_inputs_not_modified(self) -> None:
        base = {"a": {"x": 1}}
        override = {"a": {"y": 2}}
        deep_merge(base, override)
        assert base == {"a": {"x": 1}}
        assert override == {"a": {"y": 2}}

    def test_none_inputs(self) -> None:
        assert deep_merge(None, {"a": 1}) == {"a": 1}
        assert deep_merge({"a": 1}, None) == {"a": 1}


class TestRequestOptionsMerge:
    """Per-call options overlay the base configuration."""

    def test_headers_merge_and_override(self) -> None:
        base = RequestOptions(headers={"Accept": "application/json", "X-Token": "a"})
        merged = base.merge(RequestOptions(headers={"X-Token": "b", "X-Extra": "c"}))
        assert merged.headers == {
            "Accept": "application/json",
            "X-Token": "b",
            "X-Extra": "c",
        }

    def test_unset_fields_keep_base(self) -> None:
        base = RequestOptions(method="POST", timeout=5.0)
        merged = base.merge(RequestOptions(params={"q": "1"}))
        assert merged.method == "POST"
        assert merged.timeout == 5.0
        assert merged.params == {"q": "1"}

    def test_scalar_fields_replaced(self) -> None:
        base = RequestOptions(method="GET", timeout=5.0)
        merged = base.merge(RequestOptions(method="PUT", timeout=1.0))
        assert merged.method == "PUT"
        assert merged.timeout == 1.0

    def test_merge_none_returns_base(self) -> None:
        base = RequestOptions(method="GET")
        assert base.merge(None) is base
