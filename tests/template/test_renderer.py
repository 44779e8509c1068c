"""
Rendering tests: parse + render against a data context.
"""

import threading

from breeze.context import Context
from breeze.template import FilterPipeline, TemplateRenderer, parse_template, render
from breeze.template.parser import MAX_NESTING


def run(text, data=None, **kwargs):
    return TemplateRenderer(**kwargs).render(parse_template(text), data)


class UpperNative:
    def execute(self, source, ctx):
        return source.strip().upper() + str(ctx.get("n"))


class FailingNative:
    def execute(self, source, ctx):
        raise RuntimeError("boom")


class TestInterpolation:

    def test_variables(self):
        assert run("Hello {{ name }}!", {"name": "Ada"}) == "Hello Ada!"

    def test_missing_variable_renders_empty(self):
        assert run("[{{ nobody.knows }}]", {}) == "[]"

    def test_number_display(self):
        assert run("{{ 1 + 2 }} {{ 7 / 2 }} {{ count }}", {"count": 4}) == "3 3.5 4"

    def test_bool_and_container_display(self):
        out = run("{{ flag }} {{ items }}", {"flag": False, "items": [1, "a"]})
        assert out == 'false [1,"a"]'

    def test_filters(self):
        out = run("{{ name | trim | upper }}|{{ bio | default('-') }}", {"name": " ada ", "bio": ""})
        assert out == "ADA|-"

    def test_logical_or_inside_interpolation(self):
        assert run("{{ nick || name }}", {"name": "Ada"}) == "true"

    def test_text_is_verbatim(self):
        text = "line 1\n  <b>line 2</b> user@example.com\n"
        assert run(text, {}) == text


class TestDiagnostics:

    def test_division_by_zero_is_inline(self):
        out = run("{{ 1 / 0 }}", {})
        assert out.startswith("[template error: Division by zero")
        assert "1 / 0" in out

    def test_failure_is_scoped_to_node(self):
        out = run("a{{ 1 / 0 }}b{{ name }}", {"name": "Ada"})
        assert out.startswith("a[template error:")
        assert out.endswith("]bAda")

    def test_syntax_error_reports_offset(self):
        out = run("{{ (a + 1 }}", {})
        assert out == '[template error: Unbalanced \'(\': expected \')\' at offset 0 in "(a + 1"]'

    def test_filter_error_names_node_expression(self):
        out = run("{{ name | truncate }}", {"name": "Ada"})
        assert "Filter 'truncate' requires an argument" in out
        assert 'in "name"]' in out

    def test_condition_error(self):
        out = run("x@if(1 % 0)y@endif", {})
        assert out == 'x[template error: Division by zero at offset 2 in "1 % 0"]'

    def test_loop_error(self):
        out = run("@foreach(items * 2 as i){{ i }}@endforeach", {"items": "abc"})
        assert out.startswith("[template error: Non-numeric operand")


class TestInputLimits:

    def test_int_literal_beyond_float_range(self):
        assert run("{{ " + "9" * 400 + " * 2 }}", {}) == "Infinity"

    def test_literal_beyond_digit_limit_is_inline(self):
        out = run("a{{ " + "9" * 5000 + " }}b", {})
        assert out.startswith("a[template error: Invalid numeric literal")
        assert out.endswith("]b")

    def test_huge_data_values(self):
        assert run("{{ a * 2 }}", {"a": 10 ** 400}) == "Infinity"
        assert run("{{ a }}", {"a": 10 ** 5000}) == "Infinity"
        assert run("{{ a % 2 }}", {"a": float("inf")}) == "NaN"

    def test_undisplayable_container_is_inline(self):
        loop = []
        loop.append(loop)
        out = run("[{{ a }}]", {"a": loop})
        assert out.startswith("[[template error: Value cannot be displayed")

    def test_deep_parentheses_are_inline(self):
        out = run("{{ " + "(" * 2000 + "1" + ")" * 2000 + " }}", {})
        assert out.startswith("[template error: Expression nested too deeply")

    def test_deep_blocks_render(self):
        depth = 3000
        rest = depth - MAX_NESTING
        out = run("@if(a)" * depth + "x" + "@endif" * depth, {"a": True})
        assert out == "@if(a)" * rest + "x" + "@endif" * rest
        assert run("@if(a)" * depth + "x" + "@endif" * depth, {"a": False}) == ""

    def test_failing_custom_filter_is_inline(self):
        def broken(value, arg, ctx):
            raise KeyError("x")

        filters = FilterPipeline()
        filters.register("broken", broken)
        out = run("a {{ v | broken }} b", {"v": 1}, filters=filters)
        assert out.startswith("a [template error: Filter 'broken' failed")
        assert out.endswith(' in "v"] b')


class TestBlocks:

    def test_if(self):
        text = "@if(user.admin)admin@endif;"
        assert run(text, {"user": {"admin": True}}) == "admin;"
        assert run(text, {"user": {"admin": False}}) == ";"
        assert run(text, {}) == ";"

    def test_unless(self):
        text = "@unless(items)empty@endunless"
        assert run(text, {"items": []}) == "empty"
        assert run(text, {"items": [1]}) == ""

    def test_comparison_condition(self):
        text = "@if(age >= 18 && country == 'NL')ok@endif"
        assert run(text, {"age": 20, "country": "NL"}) == "ok"
        assert run(text, {"age": 17, "country": "NL"}) == ""

    def test_foreach(self):
        assert run("@foreach(items as i)[{{ i }}]@endforeach", {"items": [1, 2.5, "x"]}) == "[1][2.5][x]"

    def test_foreach_over_empty_or_non_list(self):
        text = "@foreach(items as i)x@endforeach"
        assert run(text, {"items": []}) == ""
        assert run(text, {"items": "abc"}) == ""
        assert run(text, {"items": {"a": 1}}) == ""
        assert run(text, {}) == ""

    def test_loop_variable_shadows_and_is_scoped(self):
        text = "@foreach(items as i){{ i }}@endforeach-{{ i }}"
        assert run(text, {"i": "outer", "items": [1, 2]}) == "12-outer"

    def test_nested_loops_see_outer_bindings(self):
        data = {"groups": [
            {"name": "a", "items": [1, 2]},
            {"name": "b", "items": [3]},
        ]}
        text = "@foreach(groups as g)@foreach(g.items as x){{ g.name }}{{ x }};@endforeach@endforeach"
        assert run(text, data) == "a1;a2;b3;"

    def test_nested_conditionals(self):
        text = "@if(a)A@if(b)B@endif@unless(b)!B@endunless@endif"
        assert run(text, {"a": True, "b": True}) == "AB"
        assert run(text, {"a": True, "b": False}) == "A!B"
        assert run(text, {"a": False, "b": True}) == ""

    def test_degraded_markup_renders_literally(self):
        assert run("@if(a) open", {"a": True}) == "@if(a) open"
        assert run("{{ }} and @endforeach", {}) == "{{ }} and @endforeach"


class TestNativeBlocks:

    def test_disabled_renders_nothing(self):
        assert run("a@native secret() @endnative b", {}) == "a b"

    def test_extension_executes_source(self):
        out = run("<@native hi @endnative>", {"n": 7}, native=UpperNative())
        assert out == "<HI7>"

    def test_extension_failure_is_inline(self):
        out = run("a@native x @endnative b", {}, native=FailingNative())
        assert out.startswith("a[template error: native block failed: boom")
        assert out.endswith("] b")


class TestRendererApi:

    def test_module_render(self):
        assert render(parse_template("{{ x }}"), {"x": 1}) == "1"

    def test_accepts_context_and_non_mapping_data(self):
        tree = parse_template("[{{ x }}]")
        assert render(tree, Context({"x": "c"})) == "[c]"
        assert render(tree, ["not", "a", "mapping"]) == "[]"
        assert render(tree, None) == "[]"

    def test_custom_filter_pipeline(self):
        filters = FilterPipeline()
        filters.register("stars", lambda value, arg, ctx: f"*{value}*")
        assert run("{{ x | stars }}", {"x": "a"}, filters=filters) == "*a*"

    def test_shared_tree_concurrent_renders(self):
        tree = parse_template("@foreach(items as i){{ i * factor }},@endforeach")
        renderer = TemplateRenderer()
        results = {}

        def worker(n):
            results[n] = renderer.render(tree, {"items": [1, 2], "factor": n})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for n in range(1, 9):
            assert results[n] == f"{n},{2 * n},"


class TestDocumentedProperties:

    def test_plain_text_passthrough(self):
        for text in ("", "plain", "a { b } c", "@ifnot a directive", "user@example.com"):
            assert run(text, {"a": 1}) == text

    def test_interpolation(self):
        assert run("{{ a }}", {"a": 5}) == "5"
        assert run("{{ a }}", {}) == ""

    def test_if(self):
        assert run("@if(a > 2) yes @endif", {"a": 3}) == " yes "
        assert run("@if(a > 2) yes @endif", {"a": 1}) == ""

    def test_foreach(self):
        text = "@foreach(items as x){{x}},@endforeach"
        assert run(text, {"items": [1, 2, 3]}) == "1,2,3,"
        assert run(text, {}) == ""
        assert run(text, {"items": 7}) == ""

    def test_filter_composition(self):
        assert run("{{ a | upper | trim }}", {"a": "  hi  "}) == "HI"
