# sebnf/codegen/emit_cc.py
"""C++ Code Emit (BASEclasses.cc 한 개를 문자열로 생성).

개요
----
- 헤더(BASEclasses.hh)가 선언만 하는 두 멤버의 본문을 만든다.
  * printSelf : 객체를 Part 21 문법 그대로 다시 찍는다 (키워드, 구두점, 값, #N 참조)
  * ~X()      : 소유한 하위 객체를 지운다
- 대상은 헤더에서 구체 클래스(대안 1개)와 괄호 리스트 클래스. 슈퍼타입과 instance 루트는
  printSelf 가 순수 가상이고 소멸자가 인라인이라 여기서 찍을 것이 없다.
- 심볼을 처음부터 걸으며 데이터 심볼마다 attribute_names 커서를 한 칸 옮긴다.
  자기 own 속성은 멤버를 바로 쓰고, 물려받은 속성은 get_X() 로 읽는다.

소멸 규칙
---------
#N 으로 나타나는 객체(instance, witness 보유 슈퍼타입)는 여러 곳에서 참조되므로 지우지 않는다.
instance 목록(instancePlus 리스트)을 가진 쪽, 보통 파일 루트만 그것들을 지운다.
"""

from __future__ import annotations
from typing import List

from ..grammar.ast import (
    CharPair, Keyword, ListKind, LiteralChar, LiteralText, OptionalRole, Production, Symbol,
    TerminalClass, is_data_symbol,
)
from ..resolve.classify import is_paren_list, list_item
from .ir import INSTANCE_ITEM, ModelIR, list_item_class

_STAR_LINE = "/" + "*" * 68 + "/"

_PRINT_FUNCTIONS = r"""
void printDouble(
 double num)
{
  int n;
  int k;
  char buffer[50];

  k = sprintf(buffer, "%f", num);
  for (n = (k-1); ((buffer[n] == '0') && (buffer[n-1] != '.')); n--)
    buffer[n] = 0;
  printf("%s", buffer);
}

void printString(
 char * aString)
{
  int n;
  putchar('\'');
  for (n=0; aString[n]; n++)
    {
      putchar(aString[n]);
      if (aString[n] == '\'')
        putchar('\''); // apostrophe is doubled
    }
  putchar('\'');
}
"""


def _printed_classes(ir: ModelIR) -> List[Production]:
    g = ir.model.grammar
    return [
        p for p in ir.classes
        if not p.is_supertype
        and (len(p.alternatives) == 1 or (len(p.alternatives) == 2 and is_paren_list(g, p)))
    ]


def _preflight_check(ir: ModelIR) -> None:
    for prod in _printed_classes(ir):
        symbols = prod.alternatives[0].symbols
        n_data = sum(1 for s in symbols if is_data_symbol(s))
        if n_data > len(prod.attribute_names):
            raise ValueError(
                f"emit_cc: not enough attribute names in {prod.lhs} "
                f"({len(prod.attribute_names)} names for {n_data} data symbols)"
            )


def _c_text(text: str) -> str:
    """printf 서식 문자열 안에 넣을 수 있게"""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("%", "%%")


def _access(prod: Production, att: str) -> str:
    return att if att in prod.own_attribute_names else f"get_{att}()"


# ---------- printSelf ----------

def _print_id(ir: ModelIR, target: Production, expr: str) -> str:
    """#N 으로 찍기. witness 만 가진 슈퍼타입은 instance 로 바꿔 id 를 얻는다."""
    if target.is_instance:
        return f"{expr}->get_id()->printSelf();"
    return f"(dynamic_cast<{ir.root} *>({expr}))->get_id()->printSelf();"


def _print_item(ir: ModelIR, item_class: str) -> str:
    if item_class == "char":
        return "printString(*iter);"
    if item_class == "double":
        return "printDouble(*iter);"
    prod = ir.model.grammar.find(item_class)
    if prod is None:
        raise ValueError(f"emit_cc: Cannot handle list of {item_class}")
    if prod.is_instance or prod.instance_witness is not None:
        return _print_id(ir, prod, "(*iter)")
    return "(*iter)->printSelf();"


def _print_list_with_commas(ir: ModelIR, item_class: str, expr: str) -> List[str]:
    return [
        f"  if ({expr}->begin() != {expr}->end())",
        "    {",
        f"      std::list<{item_class} *>::iterator iter;",
        f"      for (iter = {expr}->begin(); ; )",
        "        {",
        f"          {_print_item(ir, item_class)}",
        f"          if (++iter == {expr}->end())",
        "            break;",
        '          printf(",");',
        "        }",
        "    }",
    ]


def _print_list_without_commas(ir: ModelIR, item_class: str, expr: str) -> List[str]:
    if item_class == ir.root:
        body = [
            "          (*iter)->get_id()->printSelf();",
            '          printf("=");',
            "          (*iter)->printSelf();",
            '          printf(";\\n");',
        ]
    else:
        body = [f"          {_print_item(ir, item_class)}"]
    return [
        f"  if ({expr}->begin() != {expr}->end())",
        "    {",
        f"      std::list<{item_class} *>::iterator iter;",
        f"      for (iter = {expr}->begin();",
        f"           iter != {expr}->end();",
        "           iter++)",
        "        {",
        *body,
        "        }",
        "    }",
    ]


def _print_data(ir: ModelIR, sym: Symbol, expr: str) -> List[str]:
    if isinstance(sym, TerminalClass):
        if sym.name == "INTSTRING":
            return [f'  printf("%d", {expr});']
        if sym.name == "REALSTRING":
            return [f"  printDouble({expr});"]
        return [f"  printString({expr});"]

    target = ir.target(sym)
    if target.is_list:
        item_class = list_item_class(target)
        if target.list_kind is ListKind.COMMA_SEPARATED:
            return _print_list_with_commas(ir, item_class, expr)
        return _print_list_without_commas(ir, item_class, expr)
    if target.is_wrapper:
        marker = _c_text(ir.model.options.absent_marker)
        if target.optionality is OptionalRole.WRAPS_OTHER:
            present = f"{expr}->printSelf();"
        else:
            present = _print_id(ir, ir.model.grammar[target.paired], expr)
        return [f"  if ({expr})", f"    {present}", "  else", f'    printf("{marker}");']
    if target.is_instance or target.instance_witness is not None:
        return [f"  {_print_id(ir, target, expr)}"]
    return [f"  {expr}->printSelf();"]


def _fmt_printer(ir: ModelIR, prod: Production) -> str:
    names = prod.attribute_names
    out = [f"void {prod.lhs}::printSelf()", "{"]
    k = 0
    for sym in prod.alternatives[0].symbols:
        if isinstance(sym, Keyword):
            lexeme = ir.tokens.get(sym.name, sym.name)
            out.append(f'  printf("{_c_text(lexeme)}");')
        elif isinstance(sym, LiteralChar) and sym.char == ";":
            out.append('  printf(";\\n");')
        elif isinstance(sym, LiteralChar):
            out.append(f'  printf("{_c_text(sym.char)}");')
        elif isinstance(sym, LiteralText):
            out.append(f'  printf("{_c_text(sym.text)}");')
        elif isinstance(sym, CharPair):
            raise ValueError(f"emit_cc: letter pair {sym.chars!r} outside a token spelling in {prod.lhs}")
        else:
            out.extend(_print_data(ir, sym, _access(prod, names[k])))
            k += 1
    out.append("}")
    return "\n".join(out) + "\n"


# ---------- 소멸자 ----------

def _delete_list(ir: ModelIR, target: Production, expr: str) -> List[str]:
    item = list_item(target)
    if target.list_kind is ListKind.UNSEPARATED:
        if getattr(item, "name", None) != INSTANCE_ITEM:
            raise ValueError(f"emit_cc: list without commas {target.lhs} must be an instance list")
        item_class = ir.root
    else:
        item_class = list_item_class(target)
        prod = ir.model.grammar.find(item_class)
        if prod is not None and (prod.is_instance or prod.instance_witness is not None):
            return [f"  delete {expr};"]
    return [
        "  {",
        f"    std::list<{item_class} *>::iterator iter;",
        f"    for (iter = {expr}->begin(); iter != {expr}->end(); ++iter)",
        "      {",
        "        delete *iter;",
        "      }",
        "  }",
        f"  delete {expr};",
    ]


def _delete_data(ir: ModelIR, sym: Symbol, expr: str) -> List[str]:
    if isinstance(sym, TerminalClass):
        if sym.name in ("INTSTRING", "REALSTRING"):
            return []
        return [f"  delete {expr};"]

    target = ir.target(sym)
    if target.is_list:
        return _delete_list(ir, target, expr)
    if target.is_wrapper:
        if target.optionality is OptionalRole.WRAPS_OTHER:
            return [f"  delete {expr};"]
        return []
    if target.is_instance or target.instance_witness is not None:
        return []
    return [f"  delete {expr};"]


def _fmt_destructor(ir: ModelIR, prod: Production) -> str:
    names = prod.attribute_names
    out = [f"{prod.lhs}::~{prod.lhs}()", "{"]
    k = 0
    for sym in prod.alternatives[0].symbols:
        if not is_data_symbol(sym):
            continue
        out.extend(_delete_data(ir, sym, _access(prod, names[k])))
        k += 1
    out.append("}")
    return "\n".join(out) + "\n"


def emit_cc_to_string(ir: ModelIR) -> str:
    _preflight_check(ir)
    parts = [
        f"/* {ir.base_name}classes.cc : generated by sebnfc. Do not edit. */",
        "",
        f'#include "{ir.base_name}classes.hh"',
        "#include <stdio.h>   // for printf, etc.",
        _PRINT_FUNCTIONS,
    ]
    for prod in _printed_classes(ir):
        parts.append(_STAR_LINE)
        parts.append("")
        parts.append(_fmt_printer(ir, prod))
        parts.append(_STAR_LINE)
        parts.append("")
        parts.append(_fmt_destructor(ir, prod))
    parts.append(_STAR_LINE)
    return "\n".join(parts) + "\n"
