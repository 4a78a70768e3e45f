# sebnf/resolve/optionals.py
"""Optional Resolver

`P = C | '$' ;` 에서 P 는 래퍼(optional parent), C 는 래핑된 쪽(optional child).
Classifier 가 잠정으로 짝지어 둔 것을 instance 정보로 확정한다.

- C 가 instance            → WRAPS_INSTANCE_LIKE, carrier = C
- C 에 instance_witness 있음 → WRAPS_INSTANCE_LIKE, carrier = C 를 ancestors 에 가진
                              첫 instance production (참조 id 만 옮기고 버려지는 용도)
- 그 밖                     → WRAPS_OTHER, carrier = C (값을 그대로 넘기면 됨)
"""

from __future__ import annotations

from ..grammar.ast import Grammar, OptionalRole, ProductionId
from .errors import UnresolvedCarrier


def find_carrier(g: Grammar, wrapper: str, child: ProductionId) -> str:
    for prod in g.productions:
        if prod.is_instance and child in prod.ancestors:
            return prod.lhs
    raise UnresolvedCarrier(
        wrapper, f"no instance production has '{g.name_of(child)}' among its ancestors"
    )


def resolve_optionals(g: Grammar) -> None:
    for pid, prod in enumerate(g.productions):
        if not prod.is_wrapper or prod.paired is None:
            continue
        child = g[prod.paired]
        if child.is_instance:
            prod.optionality = OptionalRole.WRAPS_INSTANCE_LIKE
            prod.carrier_name = child.lhs
        elif child.instance_witness is not None:
            prod.optionality = OptionalRole.WRAPS_INSTANCE_LIKE
            prod.carrier_name = find_carrier(g, prod.lhs, prod.paired)
        else:
            prod.optionality = OptionalRole.WRAPS_OTHER
            prod.carrier_name = child.lhs
        child.optionality = OptionalRole.IS_WRAPPED
        child.paired = pid
