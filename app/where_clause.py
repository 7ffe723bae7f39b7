"""
Evaluator for ArticleGroup where_clause rules

Supported forms (an optional leading WHERE is ignored):
    1=1                     always matches
    0=1                     never matches
    field = 'text'          string equality (single or double quotes)
    field = 42              numeric equality
Anything else evaluates to False and is logged.
"""

import re
import logging

from utils import to_number

logger = logging.getLogger("main")

_WHERE_PREFIX = re.compile(r"^\s*where\s+", re.IGNORECASE)
_TAUTOLOGY = re.compile(r"^1\s*=\s*1$")
_CONTRADICTION = re.compile(r"^0\s*=\s*1$")
_FIELD_EQUALS = re.compile(
    r"""^(?P<field>\w+)\s*=\s*(?:'(?P<single>[^']*)'|"(?P<double>[^"]*)"|(?P<number>[+-]?\d+(?:\.\d+)?))$"""
)


def matches_where_clause(item, where_clause):
    """True when the article satisfies the clause; never raises"""
    if not where_clause or not isinstance(where_clause, str):
        logger.warning(f"Invalid where_clause provided: {where_clause!r}")
        return False

    clause = _WHERE_PREFIX.sub("", where_clause).strip()

    if _TAUTOLOGY.match(clause):
        return True
    if _CONTRADICTION.match(clause):
        return False

    match = _FIELD_EQUALS.match(clause)
    if not match:
        logger.warning(f"Unable to parse where_clause: {where_clause}")
        return False

    actual = item.get(match.group("field"))
    if match.group("number") is not None:
        actual_number = to_number(actual)
        return actual_number is not None and actual_number == to_number(match.group("number"))

    expected = match.group("single") if match.group("single") is not None else match.group("double")
    return ("" if actual is None else str(actual)) == expected
