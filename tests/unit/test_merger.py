"""Tests for layered property merging."""

from optracer.core.merger import merge_properties


class TestMergeProperties:
    """Precedence and purity of merge_properties."""

    def test_later_layer_wins(self):
        global_props = {"env": "dev", "region": "eu"}
        operation_props = {"env": "prod", "run": "1"}
        call_props = {"run": "2"}

        merged = merge_properties([global_props, operation_props, call_props])

        assert merged == {"env": "prod", "region": "eu", "run": "2"}

    def test_each_key_takes_value_of_latest_defining_layer(self):
        layers = [
            {"a": "1", "b": "1", "c": "1"},
            {"b": "2"},
            {},
            {"c": "4", "d": "4"},
        ]

        merged = merge_properties(layers)

        for key, value in merged.items():
            latest = [layer[key] for layer in layers if key in layer][-1]
            assert value == latest
        assert set(merged) == {"a", "b", "c", "d"}

    def test_none_and_empty_layers_are_ignored(self):
        assert merge_properties([None, {}, {"k": "v"}, None]) == {"k": "v"}
        assert merge_properties([]) == {}
        assert merge_properties([None]) == {}

    def test_inputs_are_not_modified(self):
        first = {"k": "first"}
        second = {"k": "second"}

        merged = merge_properties([first, second])
        merged["extra"] = "x"

        assert first == {"k": "first"}
        assert second == {"k": "second"}

    def test_returns_new_mapping_for_single_layer(self):
        layer = {"k": "v"}
        merged = merge_properties([layer])
        assert merged == layer
        assert merged is not layer

    def test_accepts_generators_and_numeric_values(self):
        merged = merge_properties(m for m in ({"latency": 1.0}, {"latency": 2.5}))
        assert merged == {"latency": 2.5}
