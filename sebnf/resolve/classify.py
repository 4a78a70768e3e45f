# sebnf/resolve/classify.py
"""Classifier: production 하나하나의 대안 모양만 보고 분류한다.

1) 리스트: 대안 2개, 첫 대안은 item 하나, 둘째 대안은
     (item, self) / (self, item)               → UNSEPARATED
     (item, ',', self) / (self, ',', item)     → COMMA_SEPARATED
   Part 21 문법은 `thingList = thing | thingList , c , thing ;` 처럼 왼쪽 재귀를 쓴다.
2) 슈퍼타입: 모든 대안이 '리스트가 아닌 production' 참조 하나 → PURE.
   즉시 각 서브타입의 immediate_supertypes 에 등록한다.
   단 instance 루트는 등록하지 않는다(대안들은 instance 표시에만 쓰임).
3) 선택(optional): `x | '$'` → 잠정 래퍼. 역할 확정은 optionals.py.

리스트 판정을 먼저 전부 끝낸 뒤 슈퍼타입/선택을 본다(서브타입이 리스트인지 알아야 하므로).
"""

from __future__ import annotations
from typing import List, Optional

from ..grammar.ast import (
    Alternative, Grammar, LiteralChar, ListKind, NamedReference, OptionalRole,
    Production, ProductionId, SupertypeKind, Symbol,
)
from .errors import MalformedList, MalformedOptional, MalformedSupertype
from .options import ResolveOptions


def _same_symbol(a: Symbol, b: Symbol) -> bool:
    if type(a) is not type(b):
        return False
    if isinstance(a, NamedReference):
        return a.name == b.name
    return a == b

def _is_self(sym: Symbol, prod: Production) -> bool:
    return isinstance(sym, NamedReference) and sym.name == prod.lhs

def _is_char(sym: Symbol, ch: str) -> bool:
    return isinstance(sym, LiteralChar) and sym.char == ch


def list_kind_of(prod: Production, comma: str = ",") -> ListKind:
    """리스트 모양이면 그 종류, 아니면 ListKind.NONE"""
    if len(prod.alternatives) != 2:
        return ListKind.NONE
    first, second = prod.alternatives
    item = first.only()
    if item is None or _is_self(item, prod):
        return ListKind.NONE
    seq = second.symbols
    if len(seq) == 2:
        if _is_self(seq[1], prod) and _same_symbol(seq[0], item):
            return ListKind.UNSEPARATED
        if _is_self(seq[0], prod) and _same_symbol(seq[1], item):
            return ListKind.UNSEPARATED
    elif len(seq) == 3 and _is_char(seq[1], comma):
        if _is_self(seq[2], prod) and _same_symbol(seq[0], item):
            return ListKind.COMMA_SEPARATED
        if _is_self(seq[0], prod) and _same_symbol(seq[2], item):
            return ListKind.COMMA_SEPARATED
    return ListKind.NONE


def list_item(prod: Production) -> Symbol:
    """리스트 production 의 item 심볼 (첫 대안의 유일한 심볼)"""
    return prod.alternatives[0].symbols[0]


def _subtype_ids(g: Grammar, prod: Production) -> Optional[List[ProductionId]]:
    """모든 대안이 리스트가 아닌 production 을 가리키는 resolved NamedReference 하나씩이면
    그 id 목록, 아니면 None"""
    ids: List[ProductionId] = []
    for alt in prod.alternatives:
        sym = alt.only()
        if not isinstance(sym, NamedReference) or sym.resolved is None:
            return None
        if g[sym.resolved].is_list:
            return None
        ids.append(sym.resolved)
    return ids


def is_paren_list(g: Grammar, prod: Production) -> bool:
    """`'(' , xList , ')' | '(' , ')'`: 비어 있을 수 있는 괄호 리스트"""
    if len(prod.alternatives) != 2:
        return False
    full, empty = (a.symbols for a in prod.alternatives)
    if len(full) != 3 or len(empty) != 2:
        return False
    if not (_is_char(full[0], "(") and _is_char(full[2], ")")):
        return False
    if not (_is_char(empty[0], "(") and _is_char(empty[1], ")")):
        return False
    inner = full[1]
    return (isinstance(inner, NamedReference) and inner.resolved is not None
            and g[inner.resolved].is_list)


def _optional_child(prod: Production, absent: str) -> Optional[Alternative]:
    """둘째 대안이 '$' 하나뿐이면 첫 대안, 아니면 None"""
    if len(prod.alternatives) != 2:
        return None
    first, second = prod.alternatives
    marker = second.only()
    if marker is None or not _is_char(marker, absent):
        return None
    return first


def classify_productions(g: Grammar, options: Optional[ResolveOptions] = None) -> None:
    opts = options or ResolveOptions()

    # 1) 리스트
    for prod in g.productions:
        if g.is_lexical(prod.lhs):
            continue
        prod.list_kind = list_kind_of(prod, opts.comma)

    # 2) 슈퍼타입 / 선택 / 모양 검사
    for pid, prod in enumerate(g.productions):
        if g.is_lexical(prod.lhs) or prod.is_list:
            continue
        is_root = prod.lhs == opts.instance_root

        subs = _subtype_ids(g, prod)
        if subs is not None:
            prod.supertype_kind = SupertypeKind.PURE
            if not is_root:
                for sid in subs:
                    sub = g[sid]
                    if pid not in sub.immediate_supertypes:
                        sub.immediate_supertypes.append(pid)
            continue

        if is_root:
            raise MalformedSupertype(
                prod.lhs, "instance root must list one production reference per alternative"
            )

        child_alt = _optional_child(prod, opts.absent_marker)
        if child_alt is not None:
            _mark_wrapper(g, pid, prod, child_alt)
            continue

        n = len(prod.alternatives)
        if n > 2:
            raise MalformedSupertype(
                prod.lhs, f"{n} alternatives, but not every alternative is a single production reference"
            )
        if n == 2 and not is_paren_list(g, prod):
            raise MalformedList(
                prod.lhs, "two alternatives that form neither a list, an optional, a supertype nor a parenthesised list"
            )


def _mark_wrapper(g: Grammar, pid: ProductionId, prod: Production, alt: Alternative) -> None:
    sym = alt.only()
    if not isinstance(sym, NamedReference) or sym.resolved is None:
        raise MalformedOptional(prod.lhs, "the present alternative must be a single production reference")
    if sym.resolved == pid:
        raise MalformedOptional(prod.lhs, "an optional production cannot wrap itself")
    if prod.optionality is OptionalRole.IS_WRAPPED:
        raise MalformedOptional(
            prod.lhs, f"already wrapped by '{g.name_of(prod.paired)}', so it cannot wrap another production"
        )
    child = g[sym.resolved]
    if child.paired is not None and child.paired != pid:
        raise MalformedOptional(
            prod.lhs, f"'{child.lhs}' is already wrapped by '{g.name_of(child.paired)}'"
        )
    if child.is_wrapper:
        raise MalformedOptional(prod.lhs, f"'{child.lhs}' is itself an optional wrapper")
    # 잠정 역할: 래퍼 종류는 instance 정보가 생긴 뒤 optionals.py 에서 확정
    prod.optionality = OptionalRole.WRAPS_OTHER
    prod.paired = sym.resolved
    child.optionality = OptionalRole.IS_WRAPPED
    child.paired = pid
