"""
Tests for the filter pipeline.
"""

import pytest

from breeze.context import Context
from breeze.errors import ExpressionError
from breeze.template.filters import FilterPipeline
from breeze.template.nodes import FilterSpec


class TestFilterPipeline:

    def setup_method(self):
        self.pipeline = FilterPipeline()
        self.ctx = Context({"limit": 2, "fallback": "none"})

    def apply(self, value, *specs):
        return self.pipeline.apply(value, specs, self.ctx)

    def test_builtin_names(self):
        assert self.pipeline.names() == [
            "default", "escape", "format", "lower", "trim", "truncate", "upper",
        ]

    def test_escape(self):
        assert self.apply("<a href='x'>&\"", FilterSpec("escape")) == (
            "&lt;a href=&#39;x&#39;&gt;&amp;&quot;"
        )

    def test_case_filters_are_ascii_only(self):
        assert self.apply("straße", FilterSpec("upper")) == "STRAßE"
        assert self.apply("ÄBC", FilterSpec("lower")) == "Äbc"

    def test_trim(self):
        assert self.apply("  x \n", FilterSpec("trim")) == "x"

    def test_truncate(self):
        assert self.apply("abcdef", FilterSpec("truncate", "3")) == "abc"
        assert self.apply("abcdef", FilterSpec("truncate", "limit")) == "ab"
        assert self.apply("ab", FilterSpec("truncate", "10")) == "ab"
        assert self.apply("abc", FilterSpec("truncate", "-1")) == ""

    def test_truncate_rejects_non_number(self):
        with pytest.raises(ExpressionError, match="expects a number"):
            self.apply("abc", FilterSpec("truncate", "'many'"))

    def test_default_only_for_empty_string(self):
        assert self.apply("", FilterSpec("default", "'n/a'")) == "n/a"
        assert self.apply("", FilterSpec("default", "fallback")) == "none"
        assert self.apply("0", FilterSpec("default", "'n/a'")) == "0"

    def test_format(self):
        assert self.apply("x", FilterSpec("format", "'[{}]'")) == "[x]"
        assert self.apply("x", FilterSpec("format", "'<{0}> {}'")) == "<x> {}"

    def test_missing_argument(self):
        with pytest.raises(ExpressionError, match="Filter 'default' requires an argument"):
            self.apply("", FilterSpec("default"))

    def test_chain_is_left_to_right(self):
        assert self.apply("  hello ", FilterSpec("trim"), FilterSpec("upper"),
                          FilterSpec("truncate", "3")) == "HEL"
        assert self.apply("ab", FilterSpec("format", "'<{}>'"), FilterSpec("escape")) == "&lt;ab&gt;"

    def test_unknown_filter_ignored(self):
        assert self.apply("x", FilterSpec("shout"), FilterSpec("upper")) == "X"

    def test_register_custom_filter(self):
        self.pipeline.register("reverse", lambda value, arg, ctx: value[::-1])
        assert self.apply("abc", FilterSpec("reverse")) == "cba"
        # other pipelines keep the built-ins only
        assert "reverse" not in FilterPipeline().names()

    def test_constructor_overrides(self):
        pipeline = FilterPipeline({"upper": lambda value, arg, ctx: "UP"})
        assert pipeline.apply("x", [FilterSpec("upper")], self.ctx) == "UP"

    def test_failing_filter_becomes_expression_error(self):
        def broken(value, arg, ctx):
            raise KeyError("x")

        self.pipeline.register("broken", broken)
        with pytest.raises(ExpressionError, match="Filter 'broken' failed: 'x'") as exc:
            self.apply("v", FilterSpec("broken"))
        assert isinstance(exc.value.__cause__, KeyError)

    def test_non_string_result_is_displayed(self):
        self.pipeline.register("size", lambda value, arg, ctx: len(value))
        assert self.apply("abcd", FilterSpec("size"), FilterSpec("format", "'<{}>'")) == "<4>"

    def test_truncate_with_infinite_limit(self):
        self.ctx = Context({"big": 10 ** 400})
        assert self.apply("abc", FilterSpec("truncate", "big")) == "abc"
        assert self.apply("abc", FilterSpec("truncate", "-big")) == ""
