# sebnf/codegen/emit_cpp.py
"""C++ Class Emit (BASEclasses.hh 헤더 한 개를 문자열로 생성).

개요
----
- ModelIR 의 classes 순서(슈퍼타입이 항상 먼저)대로 클래스를 찍는다.
- production 모양에 따라 네 가지 틀 중 하나를 쓴다.
  * instance 루트          : id(instanceId *) 를 가진 추상 클래스
  * 슈퍼타입(PURE/MIXED)   : 추상 부모 클래스 (printSelf() = 0)
  * 괄호 리스트            : `( xList )` 하나를 담는 클래스
  * 그 외(대안 1개)        : 구체 클래스
- 각 클래스는 자기 own 속성마다 get_/set_ 접근자와 private 멤버를 가진다.
- 생성자 인자는 attribute_names 전체(슈퍼타입 것 포함) 순서를 따르고,
  슈퍼타입 몫은 부모 생성자 호출로 넘긴다.

주의
----
- 다이아몬드 상속은 다루지 않는다.
- printSelf 본문과 소멸자 정의는 emit_cc 가 BASEclasses.cc 로 따로 만든다.
"""

from __future__ import annotations
from typing import List, Sequence

from ..grammar.ast import Production, Symbol, is_data_symbol
from ..resolve.classify import is_paren_list
from .ir import ModelIR

_STAR_LINE = "/" + "*" * 68 + "/"


def _preflight_check(ir: ModelIR) -> None:
    if not ir.classes:
        raise ValueError("emit_cpp: no productions select a class")
    g = ir.model.grammar
    seen = set()
    for prod in ir.classes:
        for sid in prod.immediate_supertypes:
            if g.name_of(sid) not in seen:
                raise ValueError(f"emit_cpp: {prod.lhs} comes before its supertype {g.name_of(sid)}")
        seen.add(prod.lhs)


def _class_names(ir: ModelIR) -> List[str]:
    return sorted(p.lhs for p in ir.classes)


def _fmt_names(ir: ModelIR) -> str:
    names = _class_names(ir)
    out = [f"class {n};" for n in names]
    out.append(f"class {ir.base_class};")
    out.append("")
    out.append(f"enum {ir.enum_name} {{")
    out.extend(f"  {n}_E," for n in names)
    out.append(f"  {ir.base_class}_E}};")
    return "\n".join(out) + "\n"


def _fmt_base_class(ir: ModelIR) -> str:
    b = ir.base_class
    return (
        f"class {b}\n"
        "{\n"
        "public:\n"
        f"  {b}(){{}}\n"
        f"  virtual ~{b}(){{}}\n"
        "  virtual void printSelf() = 0;\n"
        "  virtual int isA(int aType) = 0;\n"
        "};\n"
    )


def _fmt_instance_class(ir: ModelIR) -> str:
    return (
        f"class {ir.root} :\n"
        f"  public {ir.base_class}\n"
        "{\n"
        "public:\n"
        f"  {ir.root}(){{}}\n"
        f"  {ir.root}(instanceId * idIn)\n"
        "  {\n"
        "    id = idIn;\n"
        "  }\n"
        f"  ~{ir.root}(){{}}\n"
        "  int isA(int aType) = 0;\n"
        "  void printSelf() = 0;\n"
        "  instanceId * get_id(){return id;}\n"
        "  void set_id(instanceId * idIn){id = idIn;}\n"
        "private:\n"
        "  instanceId * id;\n"
        "};\n"
    )


def _fmt_bases(ir: ModelIR, prod: Production) -> List[str]:
    g = ir.model.grammar
    bases = [g.name_of(s) for s in prod.immediate_supertypes]
    if prod.is_instance:
        bases.insert(0, ir.root)
    if not bases:
        bases = [ir.base_class]
    out = [f"class {prod.lhs} :"]
    for i, b in enumerate(bases):
        out.append(f"  public {b}{',' if i < len(bases) - 1 else ''}")
    return out


def _fmt_is_a(ir: ModelIR, prod: Production) -> List[str]:
    g = ir.model.grammar
    supers = [g.name_of(a) for a in prod.ancestors if g.name_of(a) != ir.root]
    if not prod.ancestors:
        return ["  int isA(int aType)", f"    {{ return (aType == {prod.lhs}_E); }}"]
    out = ["  int isA(int aType)", f"    {{ return ((aType == {prod.lhs}_E)"]
    for s in supers:
        out[-1] += " ||"
        out.append(f"\t      (aType == {s}_E)")
    out[-1] += ");"
    out.append("    }")
    return out


def _fmt_constructor(ir: ModelIR, prod: Production, symbols: Sequence[Symbol]) -> List[str]:
    """
    attribute_names 하나당 `T nameIn` 인자 하나. 심볼이 이름보다 많으면 남는 심볼은 버린다.
    own 이 비었으면 부모 생성자만, own 이 뒤에 붙었으면 부모 생성자 + 대입,
    own 이 처음부터면 대입만 한다.
    """
    names = prod.attribute_names
    if not names:
        return []
    data = [s for s in symbols if is_data_symbol(s)]
    if len(data) < len(names):
        raise ValueError(f"emit_cpp: {prod.lhs} has {len(names)} attributes but {len(data)} data symbols")

    out = [f"  {prod.lhs}("]
    for i, (name, sym) in enumerate(zip(names, data)):
        out.append(f"    {ir.cpp_type(sym)} {name}In{',' if i < len(names) - 1 else ')'}")

    own = prod.own_attribute_names
    if own and own[0] == names[0]:
        out.append("    {")
        out.extend(f"      {n} = {n}In;" for n in own)
        out.append("    }")
        return out

    g = ir.model.grammar
    out[-1] += " :"
    calls = []
    for sid in prod.immediate_supertypes:
        sup = g[sid]
        if sup.attribute_names:
            args = ",\n".join(f"        {n}In" for n in sup.attribute_names)
            calls.append(f"      {sup.lhs}(\n{args})")
    out.append(",\n".join(calls))
    if own:
        out.append("    {")
        out.extend(f"      {n} = {n}In;" for n in own)
        out.append("    }")
    else:
        out.append("    {}")
    return out


def _fmt_members(ir: ModelIR, prod: Production) -> List[str]:
    if not prod.own_symbols:
        return []
    pairs = list(zip(prod.own_attribute_names, prod.own_symbols))
    out: List[str] = []
    for name, sym in pairs:
        t = ir.cpp_type(sym)
        out.append(f"  {t} get_{name}()")
        out.append(f"    {{return {name};}}")
        out.append(f"  void set_{name}({t} {name}In)")
        out.append(f"    {{{name} = {name}In;}}")
    out.append("private:")
    out.extend(f"  {ir.cpp_type(sym)} {name};" for name, sym in pairs)
    return out


def _fmt_parent_class(ir: ModelIR, prod: Production) -> str:
    g = ir.model.grammar
    out = _fmt_bases(ir, prod)
    out.append("{")
    if prod.instance_witness is not None:
        out.append("  friend int yyparse();")
    out.append("public:")
    out.append(f"  {prod.lhs}(){{}}")
    if prod.attribute_names:
        if prod.instance_witness is None:
            raise ValueError(f"emit_cpp: Cannot handle {prod.lhs} since not a subtype of {ir.root}")
        witness = g[prod.instance_witness]
        out.extend(_fmt_constructor(ir, prod, witness.alternatives[0].symbols))
    out.append(f"  ~{prod.lhs}(){{}}")
    out.extend(_fmt_is_a(ir, prod))
    out.append("  void printSelf() = 0;")
    out.extend(_fmt_members(ir, prod))
    out.append("};")
    return "\n".join(out) + "\n"


def _fmt_top_class(ir: ModelIR, prod: Production) -> str:
    out = _fmt_bases(ir, prod)
    out.append("{")
    if prod.is_instance:
        out.append("  friend int yyparse();")
    out.append("public:")
    out.append(f"  {prod.lhs}(){{}}")
    out.extend(_fmt_constructor(ir, prod, prod.alternatives[0].symbols))
    out.append(f"  ~{prod.lhs}();")
    out.extend(_fmt_is_a(ir, prod))
    out.append("  void printSelf();")
    out.extend(_fmt_members(ir, prod))
    out.append("};")
    return "\n".join(out) + "\n"


def _fmt_list_class(ir: ModelIR, prod: Production) -> str:
    if prod.is_instance or prod.immediate_supertypes:
        raise ValueError(f"emit_cpp: list {prod.lhs} must not be an instance or have a supertype")
    out = [f"class {prod.lhs} :", f"  public {ir.base_class}", "{", "public:", f"  {prod.lhs}(){{}}"]
    out.extend(_fmt_constructor(ir, prod, prod.alternatives[0].symbols))
    out.append(f"  ~{prod.lhs}();")
    out.extend(_fmt_is_a(ir, prod))
    out.append("  void printSelf();")
    out.extend(_fmt_members(ir, prod))
    out.append("};")
    return "\n".join(out) + "\n"


def _fmt_class(ir: ModelIR, prod: Production) -> str:
    if prod.is_supertype:
        if prod.lhs == ir.root:
            return _fmt_instance_class(ir)
        return _fmt_parent_class(ir, prod)
    n = len(prod.alternatives)
    if n == 1:
        return _fmt_top_class(ir, prod)
    if n == 2 and is_paren_list(ir.model.grammar, prod):
        return _fmt_list_class(ir, prod)
    raise ValueError(f"emit_cpp: cannot print class for {prod.lhs} with {n} alternatives")


def emit_cpp_to_string(ir: ModelIR) -> str:
    _preflight_check(ir)
    guard = f"{ir.base_name.upper()}CLASSES_HH"
    parts = [
        f"/* {ir.base_name}classes.hh : generated by sebnfc. Do not edit. */",
        "",
        f"#ifndef {guard}",
        f"#define {guard}",
        "",
        "#include <list>",
        "",
        _fmt_names(ir),
        _STAR_LINE,
        "",
        _fmt_base_class(ir),
    ]
    for prod in ir.classes:
        parts.append(_STAR_LINE)
        parts.append("")
        parts.append(_fmt_class(ir, prod))
    parts.append(_STAR_LINE)
    parts.append("")
    parts.append(f"#endif // {guard}")
    return "\n".join(parts) + "\n"
