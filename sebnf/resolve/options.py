from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ResolveOptions:
    """
    해석 단계가 참조하는 지정 이름/표식.
    - instance_root : 대안 하나하나가 구체(instance) 타입을 가리키는 루트 production
    - comma         : 리스트 구분자로 인정하는 문자
    - absent_marker : 선택(optional) production 의 '값 없음' 리터럴
    """
    instance_root: str = "instance"
    comma: str = ","
    absent_marker: str = "$"

    def __post_init__(self) -> None:
        # 두 표식 모두 문법에서 LiteralChar 로만 나타난다
        for field_name in ("comma", "absent_marker"):
            value = getattr(self, field_name)
            if len(value) != 1:
                raise ValueError(f"ResolveOptions.{field_name} must be one character, got {value!r}")
