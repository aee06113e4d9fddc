"""
계정 코드

점(.) 구분 계층형 계정 코드를 구조화된 키로 다룬다.
예: "1.01.05.01" → 대분류 "1", 세그먼트 ("1", "01", "05", "01")

정렬은 세그먼트 단위로 비교한다. 숫자 세그먼트는 값으로 비교하고
값이 같으면 원문 문자열로, 마지막으로 전체 코드 문자열로 동점을 가른다.
세그먼트 폭이 고정된 코드에서는 문자열 정렬과 결과가 같다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

SEPARATOR = "."


def _segment_key(segment: str) -> tuple[int, int, str]:
    # 숫자 세그먼트가 비숫자 세그먼트보다 앞에 온다
    if segment.isdigit():
        return (0, int(segment), segment)
    return (1, 0, segment)


@dataclass(frozen=True)
class AccountCode:
    """계층형 계정 코드 (불변)"""

    segments: tuple[str, ...]

    @classmethod
    def parse(cls, code: str) -> AccountCode:
        """문자열 코드 파싱

        Raises:
            ValueError: 빈 코드 또는 빈 세그먼트 ("1..2")
        """
        raw = (code or "").strip()
        if not raw:
            raise ValueError("계정 코드가 비어 있습니다")

        segments = tuple(part.strip() for part in raw.split(SEPARATOR))
        if any(not part for part in segments):
            raise ValueError(f"잘못된 계정 코드 형식: '{code}'")

        return cls(segments=segments)

    @property
    def major(self) -> str:
        """대분류 세그먼트 (첫 세그먼트)"""
        return self.segments[0]

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def parent(self) -> AccountCode | None:
        """상위 코드 (최상위면 None)"""
        if self.depth == 1:
            return None
        return AccountCode(self.segments[:-1])

    @property
    def sort_key(self) -> tuple:
        return (tuple(_segment_key(s) for s in self.segments), str(self))

    def is_descendant_of(self, other: AccountCode) -> bool:
        """other의 하위 코드인지 (자기 자신 제외)"""
        return (
            self.depth > other.depth
            and self.segments[: other.depth] == other.segments
        )

    def __str__(self) -> str:
        return SEPARATOR.join(self.segments)


def major_segment(code: str) -> str:
    """코드 문자열의 첫 세그먼트

    파싱 불가능한 코드도 예외 없이 처리 (빈 문자열 반환).
    원장 조회는 잘못된 과거 코드 때문에 실패하면 안 된다.
    """
    raw = (code or "").strip()
    if not raw:
        return ""
    return raw.split(SEPARATOR, 1)[0].strip()


def code_sort_key(code: str) -> tuple:
    """정렬 키 (파싱 불가 코드는 맨 뒤, 원문 순)"""
    try:
        return (0, AccountCode.parse(code).sort_key)
    except ValueError:
        return (1, (code or ""))


def sort_codes(codes: Iterable[str]) -> list[str]:
    """구조화된 키 기준 코드 정렬"""
    return sorted(codes, key=code_sort_key)


def ordering_conflicts(codes: Iterable[str]) -> list[tuple[str, str]]:
    """구조화된 정렬과 단순 문자열 정렬이 어긋나는 인접 코드 쌍

    세그먼트 폭이 섞인 계층 ("1.9" vs "1.10")에서만 발생한다.
    호출자가 경고 로그로 노출하는 용도.
    """
    ordered = sort_codes(codes)
    return [
        (first, second)
        for first, second in zip(ordered, ordered[1:])
        if first > second
    ]
