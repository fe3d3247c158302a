"""Hypervisor version parsing and constraint matching.

Constraints are comma separated clauses such as ``'>= 10'`` or
``'>= 8, < 11'``. Supported operators are ``>=``, ``>``, ``<=``, ``<``,
``=``/``==``, ``!=`` and the pessimistic ``~>`` (``'~> 10.2'`` means
``>= 10.2, < 11``). A clause without an operator is an exact match.
"""

from __future__ import annotations

import re

from .errors import VMNFSError

_CLAUSE_RE = re.compile(r'^\s*(~>|>=|<=|==|!=|=|>|<)?\s*([0-9][0-9A-Za-z.\-]*)\s*$')


def parse_version(text: str) -> tuple[int, ...]:
    """Parse the leading dotted numeric part of a version string.

    Build suffixes are ignored, e.g. ``'18.1.3-54567'`` -> ``(18, 1, 3)``.
    """
    m = re.match(r'\s*(\d+(?:\.\d+)*)', str(text or ''))
    if m is None:
        raise VMNFSError(f'Unable to parse version: {text!r}')
    return tuple(int(part) for part in m.group(1).split('.'))


def _cmp(a: tuple[int, ...], b: tuple[int, ...]) -> int:
    width = max(len(a), len(b))
    pa = a + (0,) * (width - len(a))
    pb = b + (0,) * (width - len(b))
    return (pa > pb) - (pa < pb)


def _pessimistic_upper(ver: tuple[int, ...]) -> tuple[int, ...]:
    if len(ver) == 1:
        return (ver[0] + 1,)
    head = ver[:-1]
    return head[:-1] + (head[-1] + 1,)


def _clause_ok(version: tuple[int, ...], op: str, target: tuple[int, ...]) -> bool:
    c = _cmp(version, target)
    if op in ('=', '=='):
        return c == 0
    if op == '!=':
        return c != 0
    if op == '>=':
        return c >= 0
    if op == '>':
        return c > 0
    if op == '<=':
        return c <= 0
    if op == '<':
        return c < 0
    if op == '~>':
        return c >= 0 and _cmp(version, _pessimistic_upper(target)) < 0
    raise VMNFSError(f'Unsupported version operator: {op!r}')


def version_satisfies(version: str, constraint: str) -> bool:
    """Return True if ``version`` satisfies every clause of ``constraint``."""
    ver = parse_version(version)
    clauses = [c for c in str(constraint or '').split(',') if c.strip()]
    if not clauses:
        raise VMNFSError(f'Empty version constraint: {constraint!r}')
    for clause in clauses:
        m = _CLAUSE_RE.match(clause)
        if m is None:
            raise VMNFSError(f'Invalid version constraint: {clause.strip()!r}')
        op = m.group(1) or '='
        if not _clause_ok(ver, op, parse_version(m.group(2))):
            return False
    return True
