"""SELECT 절 필드 파서 - 필드 분리, 별칭 도출 및 유일성 보장."""

import logging
import re
import time
from typing import Optional

from sqlshard.core.errors import ConfigurationError, ParseError
from sqlshard.core.models import SelectField

logger = logging.getLogger(__name__)

SELECT_PATTERN = re.compile(r"\bSELECT\b", re.IGNORECASE)
FROM_PATTERN = re.compile(r"\bFROM\b", re.IGNORECASE)
AS_PATTERN = re.compile(r"\s+AS\s+", re.IGNORECASE)

# 집계 함수 → 고정 별칭
AGGREGATE_PATTERN = re.compile(r"^(COUNT|SUM|AVG|MAX|MIN)\s*\(", re.IGNORECASE)


def top_level_mask(text: str) -> list[bool]:
    """각 문자가 괄호 밖, 따옴표 밖에 있는지 표시한다."""
    mask = []
    depth = 0
    quote: Optional[str] = None
    for char in text:
        if quote:
            mask.append(False)
            if char == quote:
                quote = None
            continue
        if char in ("'", '"', "`"):
            quote = char
            mask.append(False)
            continue
        if char == "(":
            mask.append(depth == 0)
            depth += 1
            continue
        if char == ")":
            depth = max(depth - 1, 0)
            mask.append(depth == 0)
            continue
        mask.append(depth == 0)
    return mask


class SelectFieldParser:
    """SELECT ... FROM 사이의 필드 목록 파서.

    쉼표 분리는 괄호 깊이와 따옴표를 고려하므로 ``CONCAT(a, b)`` 같은
    함수 인자의 쉼표에서는 분리하지 않는다.
    """

    def locate_select_clause(self, sql: str) -> Optional[tuple[int, int]]:
        """SELECT 키워드 끝 위치와 최상위 FROM 시작 위치를 찾는다.

        Returns:
            (SELECT 직후 인덱스, FROM 인덱스). 찾지 못하면 None.
        """
        select_match = SELECT_PATTERN.search(sql)
        if not select_match:
            return None

        mask = top_level_mask(sql)
        for from_match in FROM_PATTERN.finditer(sql, select_match.end()):
            if mask[from_match.start()]:
                return select_match.end(), from_match.start()
        return None

    def split_fields(self, clause: str) -> list[str]:
        """최상위 쉼표로 필드를 분리한다."""
        mask = top_level_mask(clause)
        fields = []
        start = 0
        for index, char in enumerate(clause):
            if char == "," and mask[index]:
                fields.append(clause[start:index])
                start = index + 1
        fields.append(clause[start:])
        return [field.strip() for field in fields if field.strip()]

    def parse(self, sql: str) -> list[SelectField]:
        """SQL에서 SELECT 필드 목록을 파싱한다.

        Args:
            sql: 단일 SELECT ... FROM 문장

        Returns:
            별칭이 유일한 SelectField 리스트

        Raises:
            ParseError: SELECT/FROM 절을 찾을 수 없거나 필드가 없을 때
            ConfigurationError: 와일드카드(*) 필드가 있을 때
        """
        trimmed_sql = sql.strip()
        location = self.locate_select_clause(trimmed_sql)
        if location is None:
            raise ParseError("SQL에서 SELECT 필드를 추출할 수 없습니다")

        clause = trimmed_sql[location[0]:location[1]].strip()
        field_clauses = self.split_fields(clause)
        if not field_clauses:
            raise ParseError("SQL에서 SELECT 필드를 추출할 수 없습니다")

        for field_clause in field_clauses:
            if field_clause == "*" or field_clause.endswith(".*"):
                raise ConfigurationError("SELECT * 는 지원하지 않습니다. 필드명을 명시하세요")

        # 별칭 유일성은 호출 단위로만 보장한다
        used_aliases: set[str] = set()
        fields = [self.parse_field(field_clause, used_aliases) for field_clause in field_clauses]
        logger.debug("SELECT 필드 %d개 파싱: %s", len(fields), [f.alias for f in fields])
        return fields

    def parse_field(self, field_clause: str, used_aliases: set[str]) -> SelectField:
        """필드 하나를 표현식과 별칭으로 분리한다.

        Args:
            field_clause: ``COUNT(1) AS qty`` 또는 ``SUM(part_cost_amount)`` 같은 필드
            used_aliases: 이미 사용된 별칭 집합 (갱신됨)

        Returns:
            SelectField
        """
        mask = top_level_mask(field_clause)
        as_matches = [m for m in AS_PATTERN.finditer(field_clause) if mask[m.start()]]
        if as_matches:
            last = as_matches[-1]
            expression = field_clause[:last.start()].strip()
            alias = self.unique_alias(field_clause[last.end():].strip(), used_aliases)
            used_aliases.add(alias)
            return SelectField(expression, alias, explicit_alias=True)

        expression = field_clause.strip()
        alias = self.unique_alias(self.derive_alias(expression), used_aliases)
        used_aliases.add(alias)
        return SelectField(expression, alias)

    def derive_alias(self, expression: str) -> str:
        """별칭이 없는 필드의 별칭을 도출한다."""
        match = AGGREGATE_PATTERN.match(expression)
        if match:
            return f"{match.group(1).lower()}_result"
        if "(" in expression:
            # 인식하지 못한 함수 호출
            return f"field_{int(time.time() * 1000) % 10000}"
        # table.column 형태는 컬럼명만 사용
        return expression.rsplit(".", 1)[-1]

    @staticmethod
    def unique_alias(base_alias: str, used_aliases: set[str]) -> str:
        """충돌 시 ``_1``, ``_2`` ... 를 붙여 유일한 별칭을 만든다."""
        if base_alias not in used_aliases:
            return base_alias

        counter = 1
        while f"{base_alias}_{counter}" in used_aliases:
            counter += 1
        return f"{base_alias}_{counter}"

    def rewrite_with_aliases(self, sql: str, fields: list[SelectField]) -> str:
        """SELECT 절의 모든 필드에 명시적 ``AS alias`` 를 붙인다.

        Args:
            sql: 원본(또는 테이블명이 치환된) SQL
            fields: parse()로 얻은 필드 목록

        Returns:
            SELECT 절이 재작성된 SQL. SELECT 절을 찾지 못하면 원본 그대로.
        """
        trimmed_sql = sql.strip()
        location = self.locate_select_clause(trimmed_sql)
        if location is None:
            return sql

        before_clause = trimmed_sql[:location[0]]
        after_clause = trimmed_sql[location[1]:]
        select_clause = ", ".join(f"{field.expression} AS {field.alias}" for field in fields)
        return f"{before_clause} {select_clause} {after_clause}"
