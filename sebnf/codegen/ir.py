"""
sebnf 코드 생성용 IR
=======

해석이 끝난 ResolvedGrammar 를 받아, 세 방출기(C++ 클래스 / YACC / Lex)가
공통으로 쓰는 선택 목록과 타입 이름 규칙을 한곳에 모은다.

설계 포인트
-----------
- 방출기는 모델을 **읽기만** 한다. 모든 판단은 resolve 단계 필드로부터 나온다.
- C++ 클래스 순서는 resolve 의 fixpoint_order 를 그대로 재사용한다
  (슈퍼타입 클래스가 항상 먼저 정의되어야 컴파일됨).
- Part 21 전용으로 고정된 이름(instancePlus 등)은 여기 상수로만 둔다.

주의
----
- 첫 production 은 시작 기호로 간주한다.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..grammar.ast import (
    Keyword, ListKind, NamedReference, OptionalRole, Production, Symbol, TerminalClass,
)
from ..resolve.classify import list_item
from ..resolve.pipeline import ResolvedGrammar
from ..resolve.schedule import fixpoint_order, supertype_ready

INSTANCE_ITEM = "instancePlus"

# 리스트 item / 터미널 이름 → C++ 타입
_LIST_ITEM_TYPES = {"CHARSTRING": "char", "REALSTRING": "double", INSTANCE_ITEM: "instance"}
_TERMINAL_TYPES = {"INTSTRING": "int", "REALSTRING": "double"}


@dataclass
class ModelIR:
    """
    ModelIR
    =======
    base_name    : 출력 파일/식별자 접두어 (예: iso14649 → iso14649classes.hh)
    model        : 해석 결과 (읽기 전용)
    first        : 시작 production
    classes      : C++ 클래스를 만들 production (슈퍼타입 우선 순서)
    rules        : YACC 규칙을 만들 production (first 제외, 문법 순서)
    union_types  : YACC %union/%type 대상 production (first 포함)
    """
    base_name: str
    model: ResolvedGrammar
    first: Production
    classes: List[Production] = field(default_factory=list)
    rules: List[Production] = field(default_factory=list)
    union_types: List[Production] = field(default_factory=list)

    @property
    def root(self) -> str:
        return self.model.options.instance_root

    @property
    def tokens(self) -> Dict[str, str]:
        return self.model.tokens

    @property
    def terminals(self) -> List[str]:
        return self.model.terminals

    @property
    def enum_name(self) -> str:
        return f"{self.base_name}ClassEName"

    @property
    def base_class(self) -> str:
        return f"{self.base_name}CppBase"

    # ---- 조회 헬퍼 ----

    def target(self, sym: Symbol) -> Optional[Production]:
        if isinstance(sym, NamedReference) and sym.resolved is not None:
            return self.model.grammar[sym.resolved]
        return None

    def instance_like(self, sym: Symbol) -> bool:
        """파일 안에서 #N 참조로 나타나는 심볼인지 (instance 또는 witness 보유)"""
        prod = self.target(sym)
        return prod is not None and (prod.is_instance or prod.instance_witness is not None)

    def type_name(self, sym: Symbol) -> str:
        """데이터 심볼의 C++ 클래스 이름 (포인터/리스트 장식 없음)"""
        prod = self.target(sym)
        if prod is None:
            return _symbol_name(sym)
        if prod.is_list:
            item = _symbol_name(list_item(prod))
            return _LIST_ITEM_TYPES.get(item, item)
        if prod.is_wrapper and prod.paired is not None:
            return self.model.name_of(prod.paired)
        return prod.lhs

    def cpp_type(self, sym: Symbol) -> str:
        """데이터 심볼의 완전한 C++ 타입 (멤버/인자 선언용)"""
        if isinstance(sym, TerminalClass):
            return _TERMINAL_TYPES.get(sym.name, "char *")
        prod = self.target(sym)
        if prod is None:
            raise ValueError(f"ir: {sym!r} is not a data symbol")
        if prod.is_list:
            return f"std::list<{self.type_name(sym)} *> *"
        return f"{self.type_name(sym)} *"


def _symbol_name(sym: Symbol) -> str:
    if isinstance(sym, (Keyword, NamedReference, TerminalClass)):
        return sym.name
    raise ValueError(f"ir: symbol {sym!r} has no type name")


def list_item_class(prod: Production) -> str:
    """리스트 production 의 item 클래스 이름 (CHARSTRING → char 등)"""
    item = _symbol_name(list_item(prod))
    return _LIST_ITEM_TYPES.get(item, item)


def is_left_recursive(prod: Production) -> bool:
    """리스트 둘째 대안이 자기 자신으로 시작하는지 (thingList , c , thing)"""
    if prod.list_kind is ListKind.NONE:
        return False
    head = prod.alternatives[1].symbols[0]
    return isinstance(head, NamedReference) and head.name == prod.lhs


def build_model_ir(model: ResolvedGrammar, base_name: str, instance_item: str = INSTANCE_ITEM) -> ModelIR:
    g = model.grammar
    if not g.productions:
        raise ValueError("ir: grammar has no productions")
    first = g.productions[0]

    def lexical(p: Production) -> bool:
        return g.is_lexical(p.lhs)

    class_ids = [
        pid for pid, p in enumerate(g.productions)
        if not lexical(p) and not p.is_list and p.lhs != instance_item and not p.is_wrapper
    ]
    ordered, stuck = fixpoint_order(class_ids, supertype_ready(g, g.id_of(model.options.instance_root)))
    if stuck:
        names = ", ".join(g.name_of(p) for p in stuck)
        raise ValueError(f"ir: loop found in productions ({names})")

    rules = [
        p for p in g.productions[1:]
        if not lexical(p) and p.instance_witness is None
    ]
    union_types = [first] + [
        p for p in g.productions[1:]
        if not lexical(p) and p.lhs != instance_item
        and p.instance_witness is None and not p.is_wrapper
    ]
    return ModelIR(
        base_name=base_name,
        model=model,
        first=first,
        classes=[g[p] for p in ordered],
        rules=rules,
        union_types=union_types,
    )


def wrapped_name(ir: ModelIR, prod: Production) -> Optional[str]:
    """IS_WRAPPED production 이면 그 래퍼 이름"""
    if prod.optionality is OptionalRole.IS_WRAPPED and prod.paired is not None:
        return ir.model.name_of(prod.paired)
    return None
