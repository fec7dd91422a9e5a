"""SQL 역변환 파서 - 빌더 코드에서 SQL 문장을 복원."""

import logging
import re
from typing import Optional

import sqlglot
from sqlglot.errors import SqlglotError

from sqlshard.core.errors import ParseError, classify, sanitize_message
from sqlshard.core.models import CodeLanguage, SqlReverseResult

logger = logging.getLogger(__name__)

BUILDER_CLASSES = ("StringBuffer", "StringBuilder")

# 큰따옴표/작은따옴표 리터럴 (백슬래시 이스케이프 허용)
LITERAL = r"""(?:"((?:[^"\\]|\\.)*)"|'((?:[^'\\]|\\.)*)')"""

# escape_literal 의 역: \\ → \, \" → "
ESCAPE_PATTERN = re.compile(r'\\([\\"])')


def _append_pattern(method: str) -> re.Pattern:
    return re.compile(rf"\.{method}\s*\(\s*{LITERAL}\s*\)", re.IGNORECASE)


def _unescape(fragment: str) -> str:
    return ESCAPE_PATTERN.sub(r"\1", fragment)


class SqlReverseParser:
    """빌더 코드 → SQL 역변환 파서."""

    def detect_language(self, code: str) -> CodeLanguage:
        """코드의 언어를 추정한다.

        앞선 규칙이 우선하며, 판단할 수 없으면 Java로 본다.
        """
        if "StringBuilder" in code and "Append(" in code:
            return CodeLanguage.CSHARP
        if "StringBuilder" in code and "append(" in code:
            return CodeLanguage.KOTLIN
        if "StringBuffer" in code:
            return CodeLanguage.JAVA
        if "val " in code and "StringBuilder" in code:
            return CodeLanguage.SCALA
        if "def " in code and "StringBuilder" in code:
            return CodeLanguage.GROOVY
        return CodeLanguage.JAVA

    def contains_string_buffer(self, code: str) -> bool:
        return any(builder in code for builder in BUILDER_CLASSES)

    def extract_sql_statements(self, code: str, language: CodeLanguage = CodeLanguage.JAVA) -> list[str]:
        """append 호출에 전달된 문자열 리터럴을 등장 순서대로 수집한다.

        Args:
            code: 빌더 코드
            language: 코드 언어 (append 메서드명 결정)

        Returns:
            SQL 조각 리스트 (공백뿐인 조각 제외)
        """
        pattern = _append_pattern(language.append_method)
        fragments = []
        for line in code.split("\n"):
            for match in pattern.finditer(line):
                fragment = match.group(1) if match.group(1) is not None else match.group(2)
                fragment = _unescape(fragment)
                if fragment.strip():
                    fragments.append(fragment)
        return fragments

    def combine_sql_statements(self, fragments: list[str]) -> str:
        return " ".join(fragments).strip()

    def parse_sql_from_code(
        self, code: str, language: CodeLanguage = CodeLanguage.JAVA
    ) -> SqlReverseResult:
        """빌더 코드에서 SQL을 복원한다.

        Args:
            code: StringBuffer/StringBuilder 코드
            language: 코드 언어

        Returns:
            역변환 결과
        """
        try:
            if not code or not code.strip():
                raise ParseError("코드는 비어 있을 수 없습니다")

            fragments = self.extract_sql_statements(code, language)
            if not fragments:
                raise ParseError("유효한 SQL 문장을 찾지 못했습니다")

            extracted_sql = self.combine_sql_statements(fragments)
            variable_names = self.extract_variable_names(code, language)
        except ParseError as e:
            logger.warning("SQL 역변환 실패: %s", e)
            return SqlReverseResult(
                language=language,
                success=False,
                error_message=sanitize_message(str(e)),
                error_kind=e.kind,
            )
        except Exception as e:
            logger.exception("SQL 역변환 중 에러")
            return SqlReverseResult(
                language=language,
                success=False,
                error_message=sanitize_message(f"SQL 역변환 중 에러가 발생했습니다: {e}"),
                error_kind=classify(e),
            )

        logger.debug("SQL 조각 %d개 추출 (%s)", len(fragments), language.display_name)
        return SqlReverseResult(
            extracted_sql=extracted_sql,
            sql_statements=fragments,
            language=language,
            variable_names=variable_names,
            success=True,
        )

    def reverse_parse(self, code: str, language: Optional[CodeLanguage] = None) -> SqlReverseResult:
        """언어가 없으면 자동 감지한 뒤 SQL을 복원한다."""
        return self.parse_sql_from_code(code, language or self.detect_language(code))

    def extract_variable_names(self, code: str, language: CodeLanguage) -> list[str]:
        """언어별 선언 패턴으로 빌더 변수명을 찾는다."""
        pattern = re.compile(language.dialect.declaration_pattern)
        names: list[str] = []
        for line in code.split("\n"):
            match = pattern.search(line)
            if match and match.group(1) not in names:
                names.append(match.group(1))
        return names

    def format_sql(self, sql: str) -> str:
        """공백, 쉼표, 괄호 주변 간격을 정리한다."""
        result = re.sub(r"\s+", " ", sql)
        result = re.sub(r"\s*,\s*", ", ", result)
        result = re.sub(r"\s*\(\s*", " (", result)
        result = re.sub(r"\s*\)\s*", ") ", result)
        return result.strip()

    def pretty_sql(self, sql: str, dialect: str = "mysql") -> str:
        """sqlglot으로 SQL을 보기 좋게 정렬한다.

        sqlglot이 해석하지 못하는 SQL은 format_sql 결과를 반환한다.
        """
        try:
            statements = sqlglot.transpile(sql, read=dialect, write=dialect, pretty=True)
        except SqlglotError as e:
            logger.debug("sqlglot 포맷 실패, 기본 포맷 사용: %s", e)
            return self.format_sql(sql)
        return ";\n".join(statements) if statements else self.format_sql(sql)

    def parse_statistics(self, result: SqlReverseResult) -> str:
        """역변환 통계를 주석 형태로 반환한다."""
        lines = [
            "// SQL 역변환 통계:",
            f"// 언어: {result.language.display_name}",
            f"// SQL 조각 수: {len(result.sql_statements)}",
            f"// 전체 문자 수: {len(result.extracted_sql)}",
            f"// 상태: {'성공' if result.success else '실패'}",
        ]
        if not result.success and result.error_message:
            lines.append(f"// 에러: {result.error_message}")
        return "\n".join(lines)
