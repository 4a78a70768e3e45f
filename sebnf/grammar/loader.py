"""문법 파일 로더

`<base>.ebnf` 를 읽어 개행을 정규화한다. 확장자 없이 base 이름만 줘도 된다.
"""

from __future__ import annotations
from pathlib    import Path


def grammar_path(path: str) -> Path:
    """base 이름 또는 .ebnf 경로 → 실제 파일 경로"""
    p = Path(path)
    if p.suffix == "" and not p.exists():
        p = p.with_suffix(".ebnf")
    return p


def base_name(path: str) -> str:
    """출력 파일 이름에 쓰는 base (확장자 제거한 파일명)"""
    return grammar_path(path).stem


def load_grammar_text(path: str) -> str:
    """
    Load Grammar Text
    """
    text = grammar_path(path).read_text(encoding="utf-8")
    return text.replace("\r\n", "\n").replace("\r", "\n")
