from __future__ import annotations
from typing import List, Optional

from ..grammar.ast import Grammar, ProductionId
from .options import ResolveOptions


def _collect_ancestors(g: Grammar, pid: ProductionId, acc: List[ProductionId], root: str) -> None:
    """immediate_supertypes 를 깊이 우선으로 따라가며 acc 에 추가 (이미 있으면 중단)"""
    for sup in g[pid].immediate_supertypes:
        parent = g[sup]
        if parent.is_wrapper or parent.lhs == root:
            continue
        if sup in acc:
            continue
        acc.append(sup)
        _collect_ancestors(g, sup, acc, root)


def build_ancestors(g: Grammar, options: Optional[ResolveOptions] = None) -> None:
    """
    build_ancestors
    ===============
    각 production 의 ancestors(추이적 슈퍼타입) 를 채운다.
    래퍼와 instance 루트는 상속 격자에 속하지 않으므로 제외한다.

    순환이 있어도 멤버십 검사 덕분에 끝난다. 순환 자체의 판정은 스케줄러 몫
    (순환에 걸린 production 은 자기 ancestors 에 자기 자신을 갖게 된다).
    """
    opts = options or ResolveOptions()
    for pid, prod in enumerate(g.productions):
        acc: List[ProductionId] = []
        _collect_ancestors(g, pid, acc, opts.instance_root)
        prod.ancestors = acc
