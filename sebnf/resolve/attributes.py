# sebnf/resolve/attributes.py
"""Attribute Resolver

(0) 주석 블록 → own_attribute_names (명시적 전체 순서가 있으면 attribute_names 선기입)
(a) 이름 전파: 슈퍼타입이 먼저 끝나는 순서로 (속성을 가진 부모의 attribute_names ++ 자기 own).
    속성을 가진 부모가 둘 이상이면 명시적 순서를 요구한다.
(b) 위치 매칭: own_attribute_names 를 실제 값을 만드는 심볼(own_symbols)에 1:1 대응.
"""

from __future__ import annotations
from typing import List, Mapping, Optional, Set

from ..grammar.ast import AttributeDecl, Grammar, ProductionId, Symbol, is_data_symbol
from .errors import (
    AmbiguousAttributeOrder, AttributeArityMismatch, AttributeNameMismatch, UndefinedReference,
)
from .options import ResolveOptions
from .schedule import fixpoint_order


def apply_annotations(g: Grammar, decls: Mapping[str, AttributeDecl]) -> None:
    for name, decl in decls.items():
        prod = g.find(name)
        if prod is None:
            raise UndefinedReference(
                None, name,
                f"attribute block line {decl.line} names undefined production '{name}'",
            )
        prod.own_attribute_names = list(decl.own)
        if decl.explicit is not None:
            prod.attribute_names = list(decl.explicit)
            prod.explicit_order = True


# ------------------------------
# (a) 이름 전파
# ------------------------------

def _supertypes_done(g: Grammar):
    def ready(pid: ProductionId, done: Set[ProductionId]) -> bool:
        return all(s in done for s in g[pid].immediate_supertypes)
    return ready


def propagate_attribute_names(g: Grammar, options: Optional[ResolveOptions] = None) -> None:
    """
    슈퍼타입이 모두 끝난 production 부터 attribute_names 를 정한다.

    - 명시적 전체 순서가 있으면 그대로 둔다.
    - 속성을 가진 직계 슈퍼타입의 attribute_names ++ 자기 own.
      속성 없는 체인은 아무것도 물려주지 않으므로 다른 체인의 이름을 가리지 않는다.
    - 속성을 가진 직계 슈퍼타입이 둘 이상이면 순서를 추측하지 않는다 → AmbiguousAttributeOrder.

    순환에 걸린 production 은 자기 own 만 갖는다. 순환 자체는 스케줄러가 보고한다.
    """
    opts = options or ResolveOptions()
    root_id = g.id_of(opts.instance_root)
    ids = [pid for pid in range(len(g)) if pid != root_id]
    order, stuck = fixpoint_order(ids, _supertypes_done(g))

    for pid in order:
        prod = g[pid]
        if prod.explicit_order:
            continue
        bearing = [s for s in prod.immediate_supertypes if g[s].attribute_names]
        if len(bearing) >= 2:
            raise AmbiguousAttributeOrder(
                prod.lhs,
                f"supertypes {', '.join(g.name_of(s) for s in bearing)} all carry attributes; "
                f"give the full order as '(* {prod.lhs} : own : all *)'",
            )
        inherited = list(g[bearing[0]].attribute_names) if bearing else []
        prod.attribute_names = inherited + list(prod.own_attribute_names)

    for pid in stuck:
        prod = g[pid]
        if not prod.explicit_order:
            prod.attribute_names = list(prod.own_attribute_names)


# ------------------------------
# (b) 위치 매칭
# ------------------------------

def match_attribute_symbols(g: Grammar) -> None:
    """
    match_attribute_symbols
    =======================
    P 의 own_attribute_names 를 source production 의 첫 대안 심볼에 위치로 대응시킨다.

    - source = P (instance 이면) / P.instance_witness (있으면) / P
    - source 첫 대안에서 데이터 심볼(NamedReference, TerminalClass)만 남긴 시퀀스와
      source.attribute_names 를 나란히 걷는다.
    - attribute_names 커서가 P 의 첫 own 이름에 닿으면 그 지점부터 own 이름 하나당
      심볼 하나씩 own_symbols 에 담고, 이름이 계속 일치하는지 확인한다.

    어느 한쪽이 먼저 바닥나면 AttributeArityMismatch, 이름이 어긋나면 AttributeNameMismatch.
    """
    for prod in g.productions:
        own = prod.own_attribute_names
        if not own:
            continue
        if prod.is_instance or prod.instance_witness is None:
            source = prod
        else:
            source = g[prod.instance_witness]

        data: List[Symbol] = []
        if source.alternatives:
            data = [s for s in source.alternatives[0].symbols if is_data_symbol(s)]
        names = source.attribute_names

        k = 0
        while k < len(names) and names[k] != own[0]:
            k += 1

        matched: List[Symbol] = []
        for j, own_name in enumerate(own):
            at = k + j
            if at >= len(data):
                raise AttributeArityMismatch(
                    prod.lhs,
                    f"not enough data symbols in '{source.lhs}' to match attribute '{own_name}'",
                )
            if at >= len(names):
                raise AttributeArityMismatch(
                    prod.lhs,
                    f"not enough attribute names in '{source.lhs}' to match attribute '{own_name}'",
                )
            if names[at] != own_name:
                raise AttributeNameMismatch(
                    prod.lhs,
                    f"attribute '{own_name}' lines up with '{names[at]}' of '{source.lhs}'",
                )
            matched.append(data[at])
        prod.own_symbols = matched
