# sebnf/resolve/instances.py
"""Instance Propagator

1) instance 루트의 각 대안이 가리키는 production → is_instance
2) instance production 의 모든 ancestor 에 instance_witness 지정
   (production 순서대로, 먼저 쓴 쪽이 이김)
3) witness 가 있는 PURE 슈퍼타입 중, 직계 서브타입 하나라도 instance 도 아니고
   witness 도 없으면 MIXED 로 재분류
"""

from __future__ import annotations
from typing import Optional

from ..grammar.ast import Grammar, NamedReference, SupertypeKind
from .options import ResolveOptions


def propagate_instances(g: Grammar, options: Optional[ResolveOptions] = None) -> None:
    opts = options or ResolveOptions()

    root = g.find(opts.instance_root)
    if root is not None:
        for alt in root.alternatives:
            sym = alt.only()
            if isinstance(sym, NamedReference) and sym.resolved is not None:
                g[sym.resolved].is_instance = True

    for pid, prod in enumerate(g.productions):
        if not prod.is_instance:
            continue
        for anc in prod.ancestors:
            if g[anc].instance_witness is None:
                g[anc].instance_witness = pid

    for prod in g.productions:
        if prod.supertype_kind is not SupertypeKind.PURE or prod.instance_witness is None:
            continue
        if prod.lhs == opts.instance_root:
            continue
        for alt in prod.alternatives:
            sub = g[alt.symbols[0].resolved]
            if not sub.is_instance and sub.instance_witness is None:
                prod.supertype_kind = SupertypeKind.MIXED
                break
