# sebnf/codegen/emit_yacc.py
"""YACC Emit (BASE.y 한 개를 문자열로 생성).

개요
----
- 선언부: C++ 헤더 include, 전역(tree/numErrors/instances), 참조 기록용 `X_refs / X_nums`
- %union / %type : ModelIR.union_types 순서대로 val1, val2, ...
- %token        : 키워드 토큰, 터미널(INTSTRING → <ival>, REALSTRING → <rval>, 나머지 <sval>),
                  고정 구두점 토큰
- 규칙          : 첫 production(tree = $$) 다음 ModelIR.rules 를 모양별로 찍는다.
  * 리스트        : std::list 에 push_back (item 이 instance 류면 instanceId + 참조 기록)
  * 선택 래퍼     : instance 류 자식이면 carrier 를 만들어 id 를 옮기고, 아니면 그대로 전달
  * 슈퍼타입      : 대안마다 { $$ = $1; }
  * 괄호 리스트   : LPAREN xList RPAREN / LPAREN RPAREN
  * 그 외         : new X(args) + instance 류 인자의 참조 기록

참조 기록
---------
파일 안의 `#N` 은 파싱 중에는 아직 객체가 없을 수 있으므로, 속성 자리는 0 으로 두고
(자리 주소, N) 쌍을 `<type>_refs` / `<type>_nums` 에 쌓아 둔다. 두 표와 `link_<type>()` 은
WRITE_LINKER 매크로가 만들고, 에필로그의 linkAll() 이 파싱 후 한꺼번에 연결한다.
에필로그에는 yyerror, parseOneFile, parseManyFiles 도 들어간다.
"""

from __future__ import annotations
from typing import Dict, List

from ..grammar.ast import (
    Keyword, ListKind, LiteralChar, NamedReference, OptionalRole, Production, Symbol, TerminalClass,
)
from ..resolve.classify import is_paren_list, list_item
from .ir import INSTANCE_ITEM, ModelIR, is_left_recursive, list_item_class, wrapped_name

_PUNCT_TOKENS: Dict[str, str] = {
    ",": "C",
    ";": "SEMICOLON",
    "/": "SLASH",
    "=": "EQUALS",
    ":": "COLON",
    "$": "DOLLAR",
    "[": "LBOX",
    "]": "RBOX",
    "(": "LPAREN",
    ")": "RPAREN",
    "#": "SHARP",
}

_FIXED_TOKENS = ["BAD", "COLON", "DOLLAR", "EQUALS", "LBOX", "LPAREN", "RBOX", "RPAREN", "SEMICOLON", "SHARP", "SLASH"]

# 오류 복구 규칙(`error SEMICOLON`)을 덧붙이는 Part 21 production
_RECOVERY_RULES = frozenset({
    "dataStart", "fileDescription", "fileEnd", "fileName",
    "fileSchema", "fileStart", "headerStart", INSTANCE_ITEM,
})

_INSTANCE_PLUS_ACTION = """\
\t    { int n;
\t      $$ = $3;
\t      $3->set_id($1);
\t      n = $1->get_val();
\t      if (n < INSTANCEMAX)
\t\t{
\t\t  if (instances[n])
\t\t    {
\t\t      fprintf(report, "instance id %d reused\\n", n);
\t\t      numErrors++;
\t\t    }
\t\t  else
\t\t    instances[n] = $$;
\t\t}
\t      else
\t\t{
\t\t  fprintf(report, "instance id %d is too large\\n", n);
\t\t  numErrors++;
\t\t}
\t    }
"""


def _preflight_check(ir: ModelIR) -> None:
    first = ir.first
    if first.is_list or first.is_supertype:
        raise ValueError(f"emit_yacc: first production {first.lhs} must not be a list or a supertype")
    if len(first.alternatives) != 1:
        raise ValueError(f"emit_yacc: first production {first.lhs} must have exactly one alternative")


# ---------- 심볼 ----------

def _yacc_symbol(ir: ModelIR, sym: Symbol) -> str:
    if isinstance(sym, NamedReference):
        return "instanceId" if ir.instance_like(sym) else sym.name
    if isinstance(sym, (Keyword, TerminalClass)):
        return sym.name
    if isinstance(sym, LiteralChar):
        tok = _PUNCT_TOKENS.get(sym.char)
        if tok is None:
            raise ValueError(f"emit_yacc: unknown one-char symbol {sym.char!r}")
        return tok
    raise ValueError(f"emit_yacc: cannot print {sym!r} in a rule")


def _fmt_rule(ir: ModelIR, symbols: List[Symbol]) -> str:
    return "\t  " + " ".join(_yacc_symbol(ir, s) for s in symbols) + "\n"


def _action_args(ir: ModelIR, symbols: List[Symbol]) -> str:
    args = []
    for n, sym in enumerate(symbols, start=1):
        if isinstance(sym, TerminalClass):
            args.append(f"${n}")
        elif isinstance(sym, NamedReference):
            args.append("0" if ir.instance_like(sym) else f"${n}")
    return ", ".join(args)


def _fmt_record_refs(ir: ModelIR, prod: Production, symbols: List[Symbol]) -> str:
    names = prod.attribute_names
    lines: List[str] = []
    k = 0
    for n, sym in enumerate(symbols, start=1):
        if not isinstance(sym, (NamedReference, TerminalClass)):
            continue
        if k >= len(names):
            raise ValueError(f"emit_yacc: not enough attribute names in {prod.lhs}")
        att = names[k]
        k += 1
        target = ir.target(sym)
        if target is None:
            continue
        if target.optionality is OptionalRole.WRAPS_INSTANCE_LIKE:
            child = ir.model.name_of(target.paired)
            lines += [
                f"\t      if (${n})",
                "\t\t{",
                f"\t\t  $$->set_{att}(0);",
                f"\t\t  {child}_refs.push_back(&($$->{att}));",
                f"\t\t  {child}_nums.push_back(${n}->get_id()->get_val());",
                f"\t\t  delete ${n}->get_id();",
                f"\t\t  delete ${n};",
                "\t\t}",
            ]
        elif ir.instance_like(sym):
            lines += [
                f"\t      {target.lhs}_refs.push_back(&($$->{att}));",
                f"\t      {target.lhs}_nums.push_back(${n}->get_val());",
                f"\t      delete ${n};",
            ]
    if not lines:
        return " }\n"
    return "\n" + "\n".join(lines) + "\n\t    }\n"


def _fmt_action(ir: ModelIR, prod: Production) -> str:
    if prod.lhs == INSTANCE_ITEM:
        return _INSTANCE_PLUS_ACTION
    symbols = prod.alternatives[0].symbols
    head = f"\t    {{ $$ = new {prod.lhs}({_action_args(ir, symbols)});"
    return head + _fmt_record_refs(ir, prod, symbols)


# ---------- production 모양별 ----------

def _fmt_list(ir: ModelIR, prod: Production) -> str:
    item = list_item(prod)
    comma = prod.list_kind is ListKind.COMMA_SEPARATED
    sep = " C" if comma else ""
    last = "$3" if comma else "$2"
    left = is_left_recursive(prod)
    instance_items = (
        isinstance(item, NamedReference) and item.name != INSTANCE_ITEM and ir.instance_like(item)
    )
    if instance_items:
        name, cls = "instanceId", item.name
    else:
        name, cls = item.name, list_item_class(prod)
    more = f"{prod.lhs}{sep} {name}" if left else f"{name}{sep} {prod.lhs}"
    grow_from, new_item, add = ("$1", last, "push_back") if left else (last, "$1", "push_front")

    if not instance_items:
        return (
            f"\t  {name}\n"
            f"\t    {{ $$ = new std::list<{cls} *>;\n"
            f"\t      $$->push_back($1); }}\n"
            f"\t| {more}\n"
            f"\t    {{ $$ = {grow_from};\n"
            f"\t      $$->{add}({new_item}); }}\n"
        )
    slot = "back" if left else "front"
    return (
        f"\t  instanceId\n"
        f"\t    {{ $$ = new std::list<{cls} *>;\n"
        f"\t      $$->push_back(0);\n"
        f"\t      {cls}_refs.push_back(&($$->back()));\n"
        f"\t      {cls}_nums.push_back($1->get_val());\n"
        f"\t    }}\n"
        f"\t| {more}\n"
        f"\t    {{ $$ = {grow_from};\n"
        f"\t      $$->{add}(0);\n"
        f"\t      {cls}_refs.push_back(&($$->{slot}()));\n"
        f"\t      {cls}_nums.push_back({new_item}->get_val());\n"
        f"\t    }}\n"
    )


def _fmt_wrapper(ir: ModelIR, prod: Production) -> str:
    if prod.optionality is OptionalRole.WRAPS_INSTANCE_LIKE:
        carrier = ir.model.production(prod.carrier_name)
        zeros = ",".join("0" for _ in carrier.attribute_names)
        return (
            "\t  instanceId\n"
            f"\t    {{ $$ = new {carrier.lhs}({zeros});\n"
            "\t      $$->set_id($1);\n"
            "\t    }\n"
            "\t| DOLLAR\n"
            "\t    { $$ = 0; }\n"
        )
    return (
        f"\t  {prod.carrier_name}\n"
        "\t    { $$ = $1; }\n"
        "\t| DOLLAR\n"
        "\t    { $$ = 0; }\n"
    )


def _fmt_supertype(ir: ModelIR, prod: Production) -> str:
    out = []
    for i, alt in enumerate(prod.alternatives):
        out.append(f"\t{'|' if i else ' '} {alt.symbols[0].name}\n")
        out.append("\t    { $$ = $1; }\n")
    return "".join(out)


def _fmt_paren_list(ir: ModelIR, prod: Production) -> str:
    inner = ir.target(prod.alternatives[0].symbols[1])
    return (
        f"\t  LPAREN {inner.lhs} RPAREN\n"
        f"\t    {{ $$ = new {prod.lhs}($2); }}\n"
        "\t| LPAREN RPAREN\n"
        f"\t    {{ $$ = new {prod.lhs}(new std::list<{list_item_class(inner)} *>); }}\n"
    )


def _fmt_plain(ir: ModelIR, prod: Production) -> str:
    if len(prod.alternatives) != 1:
        raise ValueError(f"emit_yacc: plain production {prod.lhs} must have exactly one alternative")
    return _fmt_rule(ir, prod.alternatives[0].symbols) + _fmt_action(ir, prod)


def _fmt_production(ir: ModelIR, prod: Production) -> str:
    if prod.is_list:
        body = _fmt_list(ir, prod)
    elif prod.is_wrapper:
        body = _fmt_wrapper(ir, prod)
    elif prod.is_supertype:
        body = _fmt_supertype(ir, prod)
    elif len(prod.alternatives) == 2:
        if not is_paren_list(ir.model.grammar, prod):
            raise ValueError(f"emit_yacc: {prod.lhs} with two alternatives is not a paren list")
        body = _fmt_paren_list(ir, prod)
    else:
        body = _fmt_plain(ir, prod)
    if prod.lhs in _RECOVERY_RULES:
        body += "\t| error SEMICOLON\n\t  {\n\t    numErrors++;\n\t    yyerrok;\n\t  }\n"
    return f"{prod.lhs} :\n{body}\t;\n"


def _fmt_first(ir: ModelIR) -> str:
    prod = ir.first
    symbols = prod.alternatives[0].symbols
    return (
        f"{prod.lhs} :\n"
        + _fmt_rule(ir, symbols)
        + f"\t    {{ $$ = new {prod.lhs}({_action_args(ir, symbols)});\n"
        + "\t      tree = $$; }\n"
        + "\t;\n"
    )


# ---------- 선언부 ----------

def _fmt_union_and_types(ir: ModelIR) -> str:
    out = ["%union {"]
    for n, prod in enumerate(ir.union_types, start=1):
        t = f"std::list<{list_item_class(prod)} *>" if prod.is_list else prod.lhs
        out.append(f"  {t} ".ljust(35) + f"* val{n};")
    out.append("  char                             * sval;")
    if "INTSTRING" in ir.terminals:
        out.append("  int                                ival;")
    if "REALSTRING" in ir.terminals:
        out.append("  double                             rval;")
    out.append("}")
    out.append("")

    g = ir.model.grammar
    for n, prod in enumerate(ir.union_types, start=1):
        out.append(f"%type <val{n}> {prod.lhs}")
        wrapper = wrapped_name(ir, prod)
        if wrapper is not None:
            out.append(f"%type <val{n}> {wrapper}")
        if prod.lhs == ir.root:
            if g.find(INSTANCE_ITEM) is not None:
                out.append(f"%type <val{n}> {INSTANCE_ITEM}")
            continue
        for aid in prod.ancestors:
            anc = g[aid]
            name = wrapped_name(ir, anc)
            if name is not None and g.find(name).carrier_name == prod.lhs:
                out.append(f"%type <val{n}> {name}")
    return "\n".join(out) + "\n"


def _fmt_tokens(ir: ModelIR) -> str:
    out = [f"%token {name}" for name in ir.tokens]
    for term in ir.terminals:
        if term == "INTSTRING":
            out.append("%token <ival> INTSTRING")
        elif term == "REALSTRING":
            out.append("%token <rval> REALSTRING")
        else:
            out.append(f"%token <sval> {term}")
    out.append("")
    out.extend(f"%token {t}" for t in _FIXED_TOKENS)
    out.append("")
    out.append(f"%start {ir.first.lhs}")
    return "\n".join(out) + "\n"


def _ref_types(ir: ModelIR) -> List[str]:
    g = ir.model.grammar
    return [
        p.lhs for p in g.productions
        if not g.is_lexical(p.lhs) and (p.is_instance or p.instance_witness is not None)
    ]


_WRITE_LINKER = r"""#define WRITE_LINKER(TYP)                                              \
std::vector<TYP **> TYP ## _refs;                                      \
std::vector<int> TYP ## _nums;                                         \
void link_ ## TYP()                                                    \
{                                                                      \
  std::vector<TYP **>::iterator refIter;                               \
  std::vector<int>::iterator numIter;                                  \
  for (refIter = TYP ## _refs.begin(), numIter = TYP ## _nums.begin(); \
       refIter != TYP ## _refs.end();                                  \
       refIter++, numIter++)                                           \
    {                                                                  \
      if ((*numIter >= INSTANCEMAX) || (instances[*numIter] == 0))     \
        {                                                              \
          fprintf(report, "Error: referenced instance #%d does not exist\n", \
                  *numIter);                                           \
          numErrors++;                                                 \
        }                                                              \
      else if (instances[*numIter]->isA(TYP ## _E))                    \
        **refIter = dynamic_cast<TYP *>(instances[*numIter]);          \
      else                                                             \
        {                                                              \
          fprintf(report, "Error: #%d used incorrectly\n", *numIter);  \
          numErrors++;                                                 \
        }                                                              \
    }                                                                  \
  TYP ## _refs.clear();                                                \
  TYP ## _nums.clear();                                                \
}"""


def _fmt_prologue(ir: ModelIR) -> str:
    has_root = ir.model.grammar.find(ir.root) is not None
    out = [
        "%{",
        f"/* {ir.base_name}.y : generated by sebnfc. Do not edit. */",
        "",
        "#include <stdio.h>",
        "#include <stdlib.h>",
        "#include <string.h>",
        "#include <list>",
        "#include <vector>",
        f'#include "{ir.base_name}classes.hh"',
        "",
        "#define YYERROR_VERBOSE",
        "#define INSTANCEMAX 1000000",
        "",
        "extern FILE * yyin;",
        "extern int yylex();",
        "int yyerror(const char * s);",
        "",
        "int numErrors = 0;",
        "char lineText[4096];",
        "char lexMessage[80];",
        "FILE * report;",
        f"{ir.first.lhs} * tree;",
    ]
    if has_root:
        out.append(f"{ir.root} * instances[INSTANCEMAX] = {{0}};")
        out.append("")
        out.append(_WRITE_LINKER)
        out.append("")
        out.extend(f"WRITE_LINKER({name})" for name in _ref_types(ir))
    out.append("%}")
    return "\n".join(out) + "\n"


def _fmt_link_all(ir: ModelIR) -> str:
    """파싱이 끝난 뒤 쌓인 #N 참조를 모두 연결하고 instances 표를 비운다"""
    out = ["void linkAll()", "{"]
    out.extend(f"  link_{name}();" for name in _ref_types(ir))
    out += [
        "  for (int n = 0; n < INSTANCEMAX; n++)",
        "    instances[n] = 0;",
        "}",
    ]
    return "\n".join(out) + "\n"


_YYERROR = """\
int yyerror(const char * s)
{
  numErrors++;
  if (lexMessage[0])
    {
      fprintf(report, "%s\\n", lexMessage);
      lexMessage[0] = 0;
    }
  else
    fprintf(report, "%s\\n", s);
  fprintf(report, "%s\\n", lineText);
  return 0;
}
"""

_PARSE_FUNCTIONS = """\
int yyparse();

/* parseOneFile

Parses one Part 21 file. Report text goes to reportName, or to stdout
when reportName is 0. If the parse has no errors the #N references are
linked and the tree is kept; otherwise the tree is deleted.
Returns the number of errors.
*/

int parseOneFile(
 const char * part21Name,
 char * reportName,
 bool quiet)
{
  numErrors = 0;
  lineText[0] = 0;
  lexMessage[0] = 0;
  tree = 0;
  yyin = fopen(part21Name, "r");
  if (yyin == 0)
    {
      fprintf(stderr, "unable to open file %s for reading\\n", part21Name);
      return 1;
    }
  report = (reportName ? fopen(reportName, "w") : stdout);
  if (report == 0)
    {
      fprintf(stderr, "unable to open file %s for writing\\n", reportName);
      fclose(yyin);
      return 1;
    }
  yyparse();
  fclose(yyin);
  if (numErrors == 0)
    linkAll();
  if (numErrors)
    {
      delete tree;
      tree = 0;
    }
  if (!quiet || numErrors)
    fprintf(report, "%d error%s\\n", numErrors, ((numErrors == 1) ? "" : "s"));
  if (reportName)
    fclose(report);
  return numErrors;
}

/* parseManyFiles

Parses each named file in turn, printing the file name before its
report. Returns the total number of errors.
*/

int parseManyFiles(
 int numberFiles,
 char ** fileNames,
 char * reportName,
 bool quiet)
{
  int n;
  int total = 0;
  for (n = 0; n < numberFiles; n++)
    {
      if (!quiet)
        printf("%s\\n", fileNames[n]);
      total += parseOneFile(fileNames[n], reportName, quiet);
      delete tree;
      tree = 0;
    }
  return total;
}
"""


def emit_yacc_to_string(ir: ModelIR) -> str:
    _preflight_check(ir)
    parts = [
        _fmt_prologue(ir),
        _fmt_union_and_types(ir),
        _fmt_tokens(ir),
        "%%",
        "",
        _fmt_first(ir),
    ]
    for prod in ir.rules:
        parts.append(_fmt_production(ir, prod))
    parts.append("%%")
    parts.append("")
    if ir.model.grammar.find(ir.root) is not None:
        parts.append(_fmt_link_all(ir))
    parts.append(_YYERROR)
    parts.append(_PARSE_FUNCTIONS)
    return "\n".join(parts)
