"""SQL 파서 - 테이블명 추출/치환 및 형태 검사."""

import logging
import re
from typing import Optional

from sqlshard.core.models import ValidationResult

logger = logging.getLogger(__name__)

# 테이블명 앞에 올 수 있는 절 키워드
CLAUSE_KEYWORDS = r"(?:FROM|JOIN|UPDATE|INSERT\s+INTO|DELETE\s+FROM)"

IDENTIFIER = r"[a-zA-Z_][a-zA-Z0-9_]*"

# 테이블명으로 오인하면 안 되는 SQL 키워드
SQL_KEYWORDS = frozenset(
    {
        "select", "from", "where", "join", "left", "right", "inner", "outer",
        "group", "by", "order", "having", "limit", "offset", "union", "all",
        "insert", "update", "delete", "into", "set", "values", "create", "drop",
        "table", "index", "view", "database", "schema", "user", "grant", "revoke",
        "alter", "truncate", "explain", "describe", "show", "use", "commit", "rollback",
    }
)

# 형태 검사에서 인정하는 DML/DDL 키워드
STATEMENT_KEYWORDS = ("SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "DROP", "ALTER")


class SqlParser:
    """정규식 기반 SQL 파서.

    문법 검사가 아닌 휴리스틱이며, 단일 문장/단일 FROM 절을 대상으로 한다.
    """

    # 절 키워드 뒤의 테이블명 (스키마.테이블 허용)
    TABLE_PATTERN = re.compile(
        rf"\b{CLAUSE_KEYWORDS}\s+({IDENTIFIER}(?:\.{IDENTIFIER})?)\b",
        re.IGNORECASE,
    )

    def extract_table_names(self, sql: str) -> list[str]:
        """SQL에서 테이블명을 추출한다.

        스키마가 붙은 경우(``schema.table``) 테이블 부분만 남긴다.

        Args:
            sql: SQL 문자열

        Returns:
            등장 순서를 유지한 중복 없는 테이블명 리스트
        """
        table_names: list[str] = []
        for match in self.TABLE_PATTERN.finditer(sql):
            table_name = match.group(1).strip()
            if table_name.lower() in SQL_KEYWORDS:
                continue
            table_name = table_name.rsplit(".", 1)[-1]
            if table_name not in table_names:
                table_names.append(table_name)
        return table_names

    def replace_table_name(self, sql: str, old_table_name: str, new_table_name: str) -> str:
        """절 키워드 바로 뒤에 있는 테이블명만 치환한다.

        WHERE 조건이나 문자열 리터럴 안의 같은 이름은 그대로 둔다.

        Args:
            sql: 원본 SQL
            old_table_name: 기존 테이블명
            new_table_name: 새 테이블명

        Returns:
            치환된 SQL
        """
        pattern = re.compile(
            rf"(\b{CLAUSE_KEYWORDS}\s+(?:{IDENTIFIER}\.)?){re.escape(old_table_name)}\b(?!\.)",
            re.IGNORECASE,
        )
        return pattern.sub(lambda match: f"{match.group(1)}{new_table_name}", sql)

    def validate_sql(self, sql: str) -> ValidationResult:
        """SQL 형태를 검사한다 (키워드 존재, 괄호 개수)."""
        if not sql or not sql.strip():
            return ValidationResult.config_error("SQL 문장은 비어 있을 수 없습니다")

        upper_sql = sql.strip().upper()
        if not any(keyword in upper_sql for keyword in STATEMENT_KEYWORDS):
            return ValidationResult.parse_error(
                "SQL 형식이 올바르지 않습니다. 유효한 SQL 키워드가 포함되어 있는지 확인하세요"
            )

        if upper_sql.count("(") != upper_sql.count(")"):
            return ValidationResult.parse_error("SQL 문장의 괄호가 맞지 않습니다")

        return ValidationResult.ok("SQL 형식이 올바릅니다")


class TableNameExtractor:
    """검증을 포함한 테이블명 추출 서비스."""

    def __init__(self, parser: Optional[SqlParser] = None) -> None:
        self._parser = parser or SqlParser()

    def extract(self, sql: str) -> list[str]:
        return self._parser.extract_table_names(sql)

    def validate_and_extract(self, sql: str) -> tuple[ValidationResult, list[str]]:
        """SQL 형태를 검사한 뒤 테이블명을 추출한다.

        Returns:
            (검증 결과, 테이블명 리스트). 실패 시 리스트는 비어 있다.
        """
        validation = self._parser.validate_sql(sql)
        if not validation.is_valid:
            return validation, []

        table_names = self.extract(sql)
        if not table_names:
            logger.warning("테이블명을 찾지 못함")
            return (
                ValidationResult.parse_error(
                    "유효한 테이블명을 찾지 못했습니다. SQL 문장을 확인하세요"
                ),
                [],
            )
        return ValidationResult.ok(f"테이블 {len(table_names)}개 추출"), table_names

    def statistics(self, sql: str) -> str:
        """테이블명 추출 통계 리포트."""
        all_names = [
            match.group(1).rsplit(".", 1)[-1]
            for match in SqlParser.TABLE_PATTERN.finditer(sql)
            if match.group(1).lower() not in SQL_KEYWORDS
        ]
        unique_names = list(dict.fromkeys(all_names))

        lines = [
            "테이블명 추출 통계:",
            f"• 전체 테이블명 수: {len(all_names)}",
            f"• 고유 테이블명 수: {len(unique_names)}",
            f"• 테이블명 목록: {', '.join(unique_names)}",
        ]
        if len(all_names) != len(unique_names):
            lines.append("• 참고: 중복된 테이블명이 있습니다")
        return "\n".join(lines)
