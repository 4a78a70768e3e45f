# sebnf/sebnfc.py
"""sebnfc – sebnf CLI

사용 예)
    $ python -m sebnf.sebnfc check grammars/iso14649.ebnf -D
    $ python -m sebnf.sebnfc model grammars/iso14649.ebnf --json
    $ python -m sebnf.sebnfc build grammars/iso14649.ebnf -o out/ -D

기능
----
- check : 문법 + 속성 주석을 읽어 해석 파이프라인 전체를 돌리고 요약 출력
- model : 해석된 모델(스케줄 순서)을 한 줄씩, 또는 JSON 스냅샷으로 출력
- build : C++ 클래스 헤더와 본문(.cc) / YACC / Lex 파일 방출

디버그 모드(-D/--debug)를 켜면 단계별 요약을 stderr 로 출력합니다.
"""

from __future__ import annotations
import argparse
import json
import pathlib
import sys
from typing import List, Optional

# ------------------------------
# 헬퍼
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)

# ------------------------------
# 파이프라인 로딩
# ------------------------------

def _scan_options(args):
    from .grammar.parser import DEFAULT_TERMINAL_CLASSES, ScanOptions
    extra = frozenset(args.terminal_class or ())
    return ScanOptions(terminal_classes=DEFAULT_TERMINAL_CLASSES | extra)


def _resolve_options(args):
    from .resolve import ResolveOptions
    return ResolveOptions(instance_root=args.instance_root, absent_marker=args.absent_marker)


def _load_pipeline(args):
    """
    .ebnf 파일을 읽어 Grammar → 속성 주석 → 해석(ResolvedGrammar) 까지 진행.
    """
    from .grammar.annotations import scan_attribute_block
    from .grammar.loader import load_grammar_text
    from .grammar.parser import parse_grammar
    from .resolve import resolve_grammar

    debug = args.debug
    scan_opts = _scan_options(args)
    src = load_grammar_text(args.file)
    g = parse_grammar(src, scan_opts)
    if debug: _eprint("[DEBUG] Grammar ready | productions=%d tokens=%d terminals=%d" %
                      (len(g), len(g.tokens), len(g.terminals)))

    decls = scan_attribute_block(src, scan_opts, required=not args.no_attributes)
    if debug: _eprint(f"[DEBUG] Attribute block read | lines={len(decls)}")

    model = resolve_grammar(g, decls, _resolve_options(args), trace=_eprint if debug else None)
    return model

# ------------------------------
# 디버그 출력 헬퍼
# ------------------------------

def _format_production(model, prod) -> str:
    g = model.grammar
    parts = [prod.lhs]
    if prod.is_list:
        parts.append(f"list={prod.list_kind.value}")
    if prod.is_supertype:
        parts.append(f"supertype={prod.supertype_kind.value}")
    if prod.is_instance:
        parts.append("instance")
    if prod.instance_witness is not None:
        parts.append(f"witness={g.name_of(prod.instance_witness)}")
    if prod.is_wrapper:
        parts.append(f"optional={prod.optionality.value}->{prod.carrier_name}")
    if prod.ancestors:
        parts.append("ancestors=[" + ", ".join(g.name_of(a) for a in prod.ancestors) + "]")
    if prod.attribute_names:
        parts.append("attributes=[" + ", ".join(prod.attribute_names) + "]")
    return "  ".join(parts)


def _print_model_summary(model) -> None:
    _eprint("\n[MODEL]")
    for prod in model.ordered():
        _eprint("  " + _format_production(model, prod))

# ------------------------------
# 커맨드 구현
# ------------------------------

def _run(args):
    """파이프라인 실행 + 공통 오류 보고. 실패하면 None."""
    try:
        return _load_pipeline(args)
    except SyntaxError as e:
        _eprint("[SYNTAX ERROR]")
        _eprint(str(e))
    except Exception as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
    return None


def cmd_check(args) -> int:
    model = _run(args)
    if model is None:
        return 2
    if args.debug:
        _print_model_summary(model)

    prods = model.productions
    print(
        f"[CHECK OK] productions={len(prods)} "
        f"instances={sum(p.is_instance for p in prods)} "
        f"supertypes={sum(p.is_supertype for p in prods)} "
        f"optionals={sum(p.is_wrapper for p in prods)}"
    )
    return 0


def cmd_model(args) -> int:
    model = _run(args)
    if model is None:
        return 2
    if args.json:
        print(json.dumps(model.snapshot(), indent=2))
    else:
        for prod in model.ordered():
            print(_format_production(model, prod))
    return 0


def cmd_build(args) -> int:
    model = _run(args)
    if model is None:
        return 2
    if args.debug:
        _print_model_summary(model)

    from .codegen.emit_cc import emit_cc_to_string
    from .codegen.emit_cpp import emit_cpp_to_string
    from .codegen.emit_lex import emit_lex_to_string
    from .codegen.emit_yacc import emit_yacc_to_string
    from .codegen.ir import build_model_ir
    from .grammar.loader import base_name

    base = args.base or base_name(args.file)
    try:
        ir = build_model_ir(model, base)
        outputs = [
            (f"{base}classes.hh", emit_cpp_to_string(ir)),
            (f"{base}.y", emit_yacc_to_string(ir)),
            (f"{base}classes.cc", emit_cc_to_string(ir)),
            (f"{base}.lex", emit_lex_to_string(ir)),
        ]
    except ValueError as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    out_dir = pathlib.Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)
    for name, src in outputs:
        path = out_dir / name
        path.write_text(src, encoding="utf-8")
        print(f"[EMIT] {path}")
        if args.debug:
            _eprint(f"[DEBUG] {name} bytes={len(src)}")
    return 0


# ------------------------------
# 엔트리포인트
# ------------------------------

def _add_common(p) -> None:
    p.add_argument("file", help=".ebnf 문법 파일 (확장자 생략 가능)")
    p.add_argument("--instance-root", default="instance", help="instance 루트 production 이름")
    p.add_argument("--absent-marker", default="$", help="선택 값이 없음을 뜻하는 문자")
    p.add_argument("--terminal-class", action="append", metavar="NAME",
                   help="Keyword 대신 TerminalClass 로 볼 대문자 이름 (반복 가능)")
    p.add_argument("--no-attributes", action="store_true", help="속성 주석 블록이 없는 문법")
    p.add_argument("-D", "--debug", action="store_true", help="디버그 정보를 상세 출력")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="sebnfc", description="annotated EXPRESS/Part 21 EBNF compiler CLI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", help="문법을 해석하고 모델 불변식을 확인합니다")
    _add_common(p_check)
    p_check.set_defaults(func=cmd_check)

    p_model = sub.add_parser("model", help="해석된 모델을 출력합니다")
    _add_common(p_model)
    p_model.add_argument("--json", action="store_true", help="JSON 스냅샷으로 출력")
    p_model.set_defaults(func=cmd_model)

    p_build = sub.add_parser("build", help="C++ 클래스(.hh, .cc) / YACC / Lex 파일을 생성합니다")
    _add_common(p_build)
    p_build.add_argument("-o", "--output", required=True, help="출력 디렉터리")
    p_build.add_argument("-b", "--base", help="출력 파일 base 이름 (미지정시 문법 파일명)")
    p_build.set_defaults(func=cmd_build)

    args = ap.parse_args(argv)
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
