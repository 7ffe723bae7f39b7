"""
Tests for the layout template interpreter
"""
import pytest

from exceptions import TemplateException
from layout_registry import LayoutDefinition
from template_engine import (
    compare_values,
    evaluate_condition,
    parse_sort_spec,
    render_template,
    sort_items,
    substitute_fields,
)


def layout(body, **fields):
    return LayoutDefinition('Highlight1', layout_body=body, **fields)


class TestSorting:
    """Tests for sort spec parsing and multi-key sorting"""

    def test_parse_sort_spec(self):
        assert parse_sort_spec('issue_date DESC, heading ASC') == [('issue_date', 'DESC'), ('heading', 'ASC')]

    def test_direction_defaults_to_desc(self):
        assert parse_sort_spec('issue_date') == [('issue_date', 'DESC')]
        assert parse_sort_spec('issue_date sideways') == [('issue_date', 'DESC')]

    def test_empty_entries_are_ignored(self):
        assert parse_sort_spec('') == []
        assert parse_sort_spec(' , heading asc') == [('heading', 'ASC')]

    def test_invalid_field_raises(self):
        with pytest.raises(TemplateException):
            parse_sort_spec('heading; DROP TABLE x')

    def test_numbers_compare_numerically(self):
        assert compare_values('10', 9) == 1
        assert compare_values('abc', 'abd') == -1
        assert compare_values(None, '') == 0

    def test_first_differing_key_decides(self):
        items = [
            {'id': 1, 'menu': 'b', 'issue_date': 1},
            {'id': 2, 'menu': 'a', 'issue_date': 1},
            {'id': 3, 'menu': 'a', 'issue_date': 5},
        ]

        ordered = sort_items(items, [('menu', 'ASC'), ('issue_date', 'DESC')])

        assert [item['id'] for item in ordered] == [3, 2, 1]

    def test_sort_is_stable(self):
        items = [{'id': n, 'rank': 1} for n in range(5)]

        assert [item['id'] for item in sort_items(items, [('rank', 'ASC')])] == [0, 1, 2, 3, 4]


class TestConditions:
    """Tests for If/ElseIf condition evaluation"""

    def test_numeric_comparison(self):
        assert evaluate_condition({'priority': '7'}, 'priority', '>', '5')
        assert not evaluate_condition({'priority': 3}, 'priority', '>', '5')
        assert evaluate_condition({'priority': 10}, 'priority', '>=', '10')

    def test_string_comparison(self):
        assert evaluate_condition({'menu': 'News'}, 'menu', '=', 'News')
        assert evaluate_condition({'menu': 'News'}, 'menu', '!=', 'Sports')
        assert not evaluate_condition({'menu': 'News'}, 'menu', '=', 'news')

    @pytest.mark.parametrize('operator', ['>', '<', '>=', '<='])
    def test_ordering_with_non_numeric_side_is_false(self, operator):
        assert not evaluate_condition({'heading': 'Zebra'}, 'heading', operator, '5')
        assert not evaluate_condition({'priority': 7}, 'priority', operator, 'high')
        assert not evaluate_condition({}, 'priority', operator, '5')

    def test_non_numeric_value_takes_else_branch(self):
        body = '{{RepeatBegin}}{{If heading > 5}}big{{Else}}small{{EndIf}}{{RepeatEnd}}'

        assert render_template(layout(body), [{'heading': 'Zebra'}]).html == 'small'

    @pytest.mark.parametrize('value,expected', [('x', True), ('  ', False), ('', False), (None, False), (0, False), (2, True)])
    def test_truthy_without_operator(self, value, expected):
        assert evaluate_condition({'f': value}, 'f', None, None) is expected


class TestRenderTemplate:
    """Tests for repeat blocks, conditionals and field substitution"""

    def test_three_items_in_sort_order(self):
        items = [
            {'heading': 'B', 'issue_date': 2},
            {'heading': 'A', 'issue_date': 3},
            {'heading': 'C', 'issue_date': 1},
        ]
        ordered = sort_items(items, parse_sort_spec('issue_date DESC'))

        rendered = render_template(layout('<ul>{{RepeatBegin}}<li>{{heading}}</li>{{RepeatEnd}}</ul>'), ordered)

        assert rendered.html == '<ul><li>A</li><li>B</li><li>C</li></ul>'
        assert rendered.rendered_count == 3

    def test_display_name_and_counter(self):
        rendered = render_template(
            layout('<h1>{{LayoutDisplayName}}</h1>{{RepeatBegin}}{{Counter}}.{{heading}} {{RepeatEnd}}',
                   layout_display_name='Top stories'),
            [{'heading': 'A'}, {'heading': 'B'}],
        )

        assert rendered.html == '<h1>Top stories</h1>1.A 2.B '

    def test_counter_does_not_mutate_items(self):
        items = [{'heading': 'A'}]

        render_template(layout('{{RepeatBegin}}{{Counter}}{{RepeatEnd}}'), items)

        assert items == [{'heading': 'A'}]

    def test_if_else_branches(self):
        body = '{{RepeatBegin}}{{If priority > 5}}hot:{{heading}}{{Else}}cold:{{heading}}{{EndIf}};{{RepeatEnd}}'

        rendered = render_template(layout(body), [{'heading': 'A', 'priority': 7}, {'heading': 'B', 'priority': 3}])

        assert rendered.html == 'hot:A;cold:B;'

    def test_elseif_branch(self):
        body = '{{RepeatBegin}}{{If menu = News}}N{{ElseIf menu = Sports}}S{{Else}}O{{EndIf}}{{RepeatEnd}}'

        rendered = render_template(layout(body), [{'menu': 'Sports'}, {'menu': 'News'}, {'menu': 'Life'}])

        assert rendered.html == 'SNO'

    def test_no_branch_matches_without_else(self):
        rendered = render_template(layout('{{RepeatBegin}}[{{If f}}x{{EndIf}}]{{RepeatEnd}}'), [{'f': ''}])

        assert rendered.html == '[]'

    def test_limit_caps_iterations(self):
        rendered = render_template(
            layout('{{RepeatBegin}}{{heading}}{{RepeatEnd}}', layout_limit=2),
            [{'heading': h} for h in 'ABCD'],
        )

        assert rendered.html == 'AB'
        assert rendered.rendered_count == 2

    def test_numeric_branch_overrides_limit(self):
        """A matched branch with a numeric value becomes the iteration limit"""
        body = '{{RepeatBegin}}{{If Counter >= 1}}{{EndIf}}{{heading}}{{RepeatEnd}}'

        rendered = render_template(layout(body, layout_limit=3), [{'heading': h} for h in 'ABCDE'])

        assert rendered.html == 'A'
        assert rendered.rendered_count == 1

    def test_last_matched_override_wins(self):
        body = '{{RepeatBegin}}{{If priority > 0}}{{EndIf}}{{If priority > 3}}{{EndIf}}{{heading}}{{RepeatEnd}}'

        rendered = render_template(layout(body), [{'heading': h, 'priority': 9} for h in 'ABCDE'])

        assert rendered.html == 'ABC'

    def test_without_repeat_block(self):
        rendered = render_template(layout('<p>{{LayoutDisplayName}} {{heading}}</p>', layout_display_name='X'),
                                   [{'heading': 'A'}])

        assert rendered.html == '<p>X {{heading}}</p>'
        assert rendered.rendered_count == 0

    def test_css_and_js_wrappers(self):
        rendered = render_template(layout('body', layout_css='p{}', layout_js='go()'), [])

        assert rendered.html == 'body<style>p{}</style><script>go()</script>'

    def test_repeat_end_before_begin_raises(self):
        with pytest.raises(TemplateException):
            render_template(layout('{{RepeatEnd}}x{{RepeatBegin}}'), [{}])

    def test_substitute_fields(self):
        text = substitute_fields('{{a}}|{{b}}|{{c}}|{{missing}}', {'a': None, 'b': 0, 'c': 'x'})

        assert text == '|0|x|{{missing}}'
