"""
Layout template interpreter

A layout body is plain text with a handful of tags:

    {{LayoutDisplayName}}                   replaced once with the layout's display name
    {{RepeatBegin}} ... {{RepeatEnd}}       block rendered once per article
    {{If field op value}} ... {{ElseIf field op value}} ... {{Else}} ... {{EndIf}}
                                            conditional inside the repeat block
                                            (op is one of = == != > < >= <=; without
                                            op the field is tested for a non-blank value)
    {{field}}                               article value, {{Counter}} is the 1-based position

Conditionals do not nest. A matched If/ElseIf whose value is numeric replaces
the number of articles the repeat block renders.
"""

import re
import logging
from functools import cmp_to_key
from typing import Dict, List, NamedTuple, Optional, Tuple

from exceptions import TemplateException
from utils import to_number

logger = logging.getLogger("main")

DISPLAY_NAME_TAG = "{{LayoutDisplayName}}"
REPEAT_BEGIN_TAG = "{{RepeatBegin}}"
REPEAT_END_TAG = "{{RepeatEnd}}"
COUNTER_FIELD = "Counter"

_CONDITION = r"(\w+)(?:\s*([=!<>]{1,2})\s*([\w.-]+))?"
_IF_BLOCK = re.compile(r"\{\{If\s+" + _CONDITION + r"\}\}(.*?)\{\{EndIf\}\}", re.IGNORECASE | re.DOTALL)
_BRANCH_TAG = re.compile(r"\{\{(?:ElseIf\s+" + _CONDITION + r"|(Else))\}\}", re.IGNORECASE)
_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")
_SORT_FIELD = re.compile(r"^[a-zA-Z0-9_]+$")


class RenderedTemplate(NamedTuple):
    html: str
    rendered_count: int


# Sorting

def parse_sort_spec(layout_order: str) -> List[Tuple[str, str]]:
    """'issue_date DESC, heading ASC' -> [('issue_date', 'DESC'), ('heading', 'ASC')]; missing direction is DESC"""
    spec = []
    for entry in (layout_order or "").split(","):
        parts = entry.split()
        if not parts:
            continue
        field = parts[0]
        if not _SORT_FIELD.match(field):
            raise TemplateException(f"Invalid field in layout_order: {field}")
        direction = "ASC" if len(parts) > 1 and parts[1].upper() == "ASC" else "DESC"
        spec.append((field, direction))
    return spec


def compare_values(a, b) -> int:
    """Numeric comparison when both sides are numbers, string comparison otherwise"""
    num_a, num_b = to_number(a), to_number(b)
    if num_a is not None and num_b is not None:
        left, right = num_a, num_b
    else:
        left = "" if a is None else str(a)
        right = "" if b is None else str(b)
    if left == right:
        return 0
    return 1 if left > right else -1


def sort_items(items: List[Dict], sort_spec: List[Tuple[str, str]]) -> List[Dict]:
    """Stable multi-key sort; the first differing key decides"""
    if not sort_spec:
        return list(items)

    def compare(a, b):
        for field, direction in sort_spec:
            result = compare_values(a.get(field), b.get(field))
            if result:
                return result if direction == "ASC" else -result
        return 0

    return sorted(items, key=cmp_to_key(compare))


# Conditionals

def evaluate_condition(item: Dict, field: str, operator: Optional[str], expected: Optional[str]) -> bool:
    actual = item.get(field)
    actual_number = to_number(actual)

    if not operator:
        if actual_number is not None:
            return actual_number != 0
        return bool(actual) and str(actual).strip() != ""

    expected_number = to_number(expected)
    if operator in ("=", "==", "!="):
        if actual_number is not None and expected_number is not None:
            equal = actual_number == expected_number
        else:
            equal = ("" if actual is None else str(actual)) == ("" if expected is None else str(expected))
        return equal if operator != "!=" else not equal

    if operator in (">", "<", ">=", "<="):
        # Ordering needs numbers on both sides
        if actual_number is None or expected_number is None:
            return False
        if operator == ">":
            return actual_number > expected_number
        if operator == "<":
            return actual_number < expected_number
        if operator == ">=":
            return actual_number >= expected_number
        return actual_number <= expected_number

    # Unrecognised operator pairs fall back to the truthiness test
    return evaluate_condition(item, field, None, None)


def _split_branches(if_field, if_op, if_value, body):
    """[(field, op, value, content), ..., (None, None, None, else_content)]"""
    branches = []
    current = (if_field, if_op, if_value)
    position = 0
    for tag in _BRANCH_TAG.finditer(body):
        branches.append((*current, body[position:tag.start()]))
        position = tag.end()
        if tag.group(4):
            # {{Else}}: everything up to EndIf is the else content
            branches.append((None, None, None, body[position:]))
            return branches
        current = (tag.group(1), tag.group(2), tag.group(3))
    branches.append((*current, body[position:]))
    return branches


class RepeatPass:
    """State of one pass over the repeat block: the effective item limit"""

    def __init__(self, limit):
        self.limit = limit

    def render_conditionals(self, block: str, item: Dict) -> str:
        def choose(match):
            for field, operator, value, content in _split_branches(*match.groups()):
                if field is None:
                    return content
                if evaluate_condition(item, field, operator, value):
                    override = to_number(value)
                    if override is not None:
                        # Last matched numeric branch wins
                        self.limit = override
                    return content
            return ""

        return _IF_BLOCK.sub(choose, block)


def substitute_fields(text: str, item: Dict) -> str:
    def replace(match):
        key = match.group(1)
        if key not in item:
            return match.group(0)
        value = item[key]
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(replace, text)


def render_template(layout, items: List[Dict]) -> RenderedTemplate:
    """
    Interpret a layout body against an ordered item list

    Args:
        layout: LayoutDefinition (body, display name, limit, css, js)
        items: Articles already filtered and sorted for this layout

    Returns:
        RenderedTemplate with the output text and how many items were rendered
    """
    template = (layout.layout_body or "").replace(DISPLAY_NAME_TAG, layout.layout_display_name or "")

    repeat_start = template.find(REPEAT_BEGIN_TAG)
    repeat_end = template.find(REPEAT_END_TAG)

    if repeat_start != -1 and repeat_end != -1:
        if repeat_end < repeat_start:
            raise TemplateException("{{RepeatEnd}} appears before {{RepeatBegin}}", layout.layout_name)

        before = template[:repeat_start]
        block = template[repeat_start + len(REPEAT_BEGIN_TAG):repeat_end]
        after = template[repeat_end + len(REPEAT_END_TAG):]

        repeat = RepeatPass(layout.layout_limit if layout.layout_limit else len(items))
        parts = [before]
        rendered_count = 0
        for index, item in enumerate(items, start=1):
            view = dict(item)
            view[COUNTER_FIELD] = index
            parts.append(substitute_fields(repeat.render_conditionals(block, view), view))
            rendered_count = index
            if index >= repeat.limit:
                break
        parts.append(after)
        html = "".join(parts)
    else:
        html = template
        rendered_count = 0

    if layout.layout_css:
        html += f"<style>{layout.layout_css}</style>"
    if layout.layout_js:
        html += f"<script>{layout.layout_js}</script>"

    return RenderedTemplate(html=html, rendered_count=rendered_count)
