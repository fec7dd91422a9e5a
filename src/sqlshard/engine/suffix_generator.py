"""분표 접미사 생성기."""

import logging

from sqlshard.core.models import SuffixType, ValidationResult

logger = logging.getLogger(__name__)

# CUSTOM 타입에서 인식하는 인덱스 placeholder
INDEX_PLACEHOLDERS = ("{index}", "{INDEX}", "{i}", "{I}")

SUFFIX_EXAMPLES = {
    SuffixType.SEQUENCE: "예시: _0, _1, _2, _3...",
    SuffixType.YEAR: "예시: _2020, _2021, _2022, _2023...",
    SuffixType.YEAR_MONTH: "예시: _202001, _202002, _202003, _202004...",
    SuffixType.CUSTOM: "예시: {index} placeholder 사용, table_{index} → table_0, table_1...",
}


class SuffixGenerator:
    """분표 접미사 생성기.

    모든 메서드는 순수 함수이며 호출 간 상태를 공유하지 않는다.
    """

    def generate_suffix(
        self,
        index: int,
        suffix_type: SuffixType,
        suffix_format: str = "_",
        start_year: int = 2020,
        start_month: int = 1,
    ) -> str:
        """index번째 접미사를 생성한다.

        Args:
            index: 0부터 시작하는 인덱스
            suffix_type: 접미사 타입
            suffix_format: 포맷 문자열 (구분자 또는 CUSTOM 템플릿)
            start_year: 시작 연도 (YEAR, YEAR_MONTH)
            start_month: 시작 월 (YEAR_MONTH)

        Returns:
            생성된 접미사
        """
        if suffix_type is SuffixType.SEQUENCE:
            return f"{suffix_format}{index}"
        if suffix_type is SuffixType.YEAR:
            return f"{suffix_format}{start_year + index}"
        if suffix_type is SuffixType.YEAR_MONTH:
            # 월 단위로 진행하며 12월 다음은 연도가 증가한다
            months = start_year * 12 + (start_month - 1) + index
            year, month = divmod(months, 12)
            return f"{suffix_format}{year}{month + 1:02d}"
        return self._custom_suffix(index, suffix_format)

    def generate_suffix_list(
        self,
        count: int,
        suffix_type: SuffixType,
        suffix_format: str = "_",
        start_year: int = 2020,
        start_month: int = 1,
    ) -> list[str]:
        """count개의 접미사를 인덱스 순서대로 생성한다.

        Args:
            count: 생성할 개수
            suffix_type: 접미사 타입
            suffix_format: 포맷 문자열
            start_year: 시작 연도
            start_month: 시작 월

        Returns:
            길이가 count인 접미사 리스트
        """
        suffixes = [
            self.generate_suffix(index, suffix_type, suffix_format, start_year, start_month)
            for index in range(count)
        ]
        logger.debug("%s 접미사 %d개 생성", suffix_type.name, len(suffixes))
        return suffixes

    def validate_format(self, suffix_format: str, suffix_type: SuffixType) -> ValidationResult:
        """포맷 문자열을 검증한다."""
        if not suffix_format or not suffix_format.strip():
            return ValidationResult.config_error("포맷 문자열은 비어 있을 수 없습니다")

        if suffix_type is SuffixType.CUSTOM and not any(
            placeholder in suffix_format for placeholder in INDEX_PLACEHOLDERS
        ):
            return ValidationResult.config_error(
                "사용자 정의 포맷에는 {index} 또는 {i} 같은 placeholder가 필요합니다"
            )

        return ValidationResult.ok("포맷 문자열이 유효합니다")

    def get_suffix_example(self, suffix_type: SuffixType) -> str:
        return SUFFIX_EXAMPLES[suffix_type]

    @staticmethod
    def _custom_suffix(index: int, suffix_format: str) -> str:
        result = suffix_format
        for placeholder in INDEX_PLACEHOLDERS:
            result = result.replace(placeholder, str(index))
        return result
