"""Core 데이터 모델 정의."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlshard.core.errors import ErrorKind

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class SuffixType(Enum):
    """분표 접미사 타입."""

    SEQUENCE = "sequence"
    YEAR = "year"
    YEAR_MONTH = "year_month"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return _SUFFIX_TYPE_INFO[self][0]

    @property
    def description(self) -> str:
        return _SUFFIX_TYPE_INFO[self][1]


_SUFFIX_TYPE_INFO = {
    SuffixType.SEQUENCE: ("숫자 시퀀스", "_0, _1, _2... 형식의 접미사 생성"),
    SuffixType.YEAR: ("연도", "_2020, _2021... 형식의 접미사 생성"),
    SuffixType.YEAR_MONTH: ("연월", "_202001, _202002... 형식의 접미사 생성"),
    SuffixType.CUSTOM: ("사용자 정의", "사용자 정의 포맷으로 접미사 생성"),
}


class StatisticFunction(Enum):
    """분표 통계 쿼리에서 필드별로 적용하는 집계 함수."""

    SUM = "SUM"
    COUNT = "COUNT"
    AVG = "AVG"
    MAX = "MAX"
    MIN = "MIN"

    def wrap(self, alias: str, table_alias: str = "unionTable") -> str:
        """``SUM(unionTable.alias)`` 형태의 집계 표현식을 만든다."""
        return f"{self.value}({table_alias}.{alias})"


@dataclass(frozen=True)
class Dialect:
    """빌더 코드 방언 정보."""

    display_name: str
    builder_class: str
    to_string_method: str
    file_extension: str
    comment_symbol: str
    append_method: str
    declaration: str
    finalize: str
    statement_end: str
    declaration_pattern: str


class CodeLanguage(Enum):
    """지원하는 프로그래밍 언어."""

    JAVA = "java"
    CSHARP = "csharp"
    KOTLIN = "kotlin"
    SCALA = "scala"
    GROOVY = "groovy"

    @property
    def dialect(self) -> Dialect:
        return DIALECTS[self]

    @property
    def display_name(self) -> str:
        return DIALECTS[self].display_name

    @property
    def builder_class(self) -> str:
        return DIALECTS[self].builder_class

    @property
    def to_string_method(self) -> str:
        return DIALECTS[self].to_string_method

    @property
    def file_extension(self) -> str:
        return DIALECTS[self].file_extension

    @property
    def comment_symbol(self) -> str:
        return DIALECTS[self].comment_symbol

    @property
    def append_method(self) -> str:
        return DIALECTS[self].append_method

    @classmethod
    def from_name(cls, name: str) -> "CodeLanguage":
        """값, 멤버명 또는 표시명(대소문자 무시)으로 언어를 찾는다.

        Raises:
            ValueError: 일치하는 언어가 없을 때
        """
        key = name.strip().lower()
        for language in cls:
            if key in (language.value, language.name.lower(), language.display_name.lower()):
                return language
        raise ValueError(f"지원하지 않는 언어입니다: {name}")


# 방언 테이블 - 정방향 생성과 역방향 파싱이 모두 이 테이블을 참조한다.
# declaration/finalize 템플릿 변수: {builder}, {var}, {final_var}, {method}
DIALECTS: dict[CodeLanguage, Dialect] = {
    CodeLanguage.JAVA: Dialect(
        display_name="Java",
        builder_class="StringBuffer",
        to_string_method="toString()",
        file_extension="java",
        comment_symbol="//",
        append_method="append",
        declaration="{builder} {var} = new {builder}();",
        finalize="String {final_var} = {var}.{method};",
        statement_end=";",
        declaration_pattern=r"StringBuffer\s+(\w+)\s*=",
    ),
    CodeLanguage.CSHARP: Dialect(
        display_name="C#",
        builder_class="StringBuilder",
        to_string_method="ToString()",
        file_extension="cs",
        comment_symbol="//",
        append_method="Append",
        declaration="{builder} {var} = new {builder}();",
        finalize="string {final_var} = {var}.{method};",
        statement_end=";",
        declaration_pattern=r"StringBuilder\s+(\w+)\s*=",
    ),
    CodeLanguage.KOTLIN: Dialect(
        display_name="Kotlin",
        builder_class="StringBuilder",
        to_string_method="toString()",
        file_extension="kt",
        comment_symbol="//",
        append_method="append",
        declaration="val {var} = {builder}()",
        finalize="val {final_var} = {var}.{method}",
        statement_end="",
        declaration_pattern=r"val\s+(\w+)\s*=\s*StringBuilder",
    ),
    CodeLanguage.SCALA: Dialect(
        display_name="Scala",
        builder_class="StringBuilder",
        to_string_method="toString()",
        file_extension="scala",
        comment_symbol="//",
        append_method="append",
        declaration="val {var} = new {builder}()",
        finalize="val {final_var} = {var}.{method}",
        statement_end="",
        declaration_pattern=r"val\s+(\w+)\s*=\s*new\s+StringBuilder",
    ),
    CodeLanguage.GROOVY: Dialect(
        display_name="Groovy",
        builder_class="StringBuilder",
        to_string_method="toString()",
        file_extension="groovy",
        comment_symbol="//",
        append_method="append",
        declaration="def {var} = new {builder}()",
        finalize="def {final_var} = {var}.{method}",
        statement_end="",
        declaration_pattern=r"def\s+(\w+)\s*=\s*new\s+StringBuilder",
    ),
}


@dataclass(frozen=True)
class ValidationResult:
    """검증 결과."""

    is_valid: bool
    message: str
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, message: str = "검증 통과") -> "ValidationResult":
        return cls(True, message)

    @classmethod
    def config_error(cls, message: str) -> "ValidationResult":
        return cls(False, message, ErrorKind.CONFIGURATION)

    @classmethod
    def parse_error(cls, message: str) -> "ValidationResult":
        return cls(False, message, ErrorKind.PARSE)


@dataclass(frozen=True)
class ShardingConfig:
    """분표 설정."""

    table_names: list[str] = field(default_factory=list)
    suffix_type: SuffixType = SuffixType.SEQUENCE
    suffix_format: str = "_"
    shard_count: int = 4
    start_year: int = 2020
    start_month: int = 1
    original_sql: str = ""


@dataclass(frozen=True)
class SelectField:
    """SELECT 절의 필드 하나.

    expression은 원본 표현식(예: ``COUNT(1)``), alias는 문장 내에서 유일한 별칭.
    """

    expression: str
    alias: str
    explicit_alias: bool = False


@dataclass(frozen=True)
class BuilderCodeConfig:
    """SQL → 빌더 코드 변환 설정."""

    variable_name: str = "sql"
    language: CodeLanguage = CodeLanguage.JAVA
    original_sql: str = ""
    add_comments: bool = True
    format_code: bool = True


@dataclass(frozen=True)
class BatchDeleteConfig:
    """배치 삭제 프로시저 설정."""

    procedure_name: str = ""
    main_table_name: str = ""
    primary_key_field: str = "id"
    time_field: str = "create_time"
    limit_size: int = 1000
    min_id: int = 0
    create_time_end: str = ""
    add_log_table: bool = True
    add_temp_table: bool = True
    custom_where_condition: str = ""
    procedure_comment: str = "배치 삭제 이력 데이터 프로시저"


def _status(success: bool) -> str:
    return "성공" if success else "실패"


@dataclass(frozen=True)
class ShardingResult:
    """분표 SQL 생성 결과."""

    sharding_sqls: list[str] = field(default_factory=list)
    shard_count: int = 0
    table_names: list[str] = field(default_factory=list)
    success: bool = False
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    generated_at: datetime = field(default_factory=datetime.now)

    def combined_sqls(self) -> str:
        """모든 분표 SQL을 빈 줄로 구분해 합친다."""
        return "\n\n".join(self.sharding_sqls)

    def to_report(self) -> str:
        """결과를 리포트 문자열로 변환.

        Returns:
            리포트 문자열
        """
        lines = [
            "=== 분표 SQL 생성 결과 ===",
            f"분표 수: {self.shard_count}",
            f"대상 테이블: {', '.join(self.table_names)}",
            f"생성 시각: {self.generated_at.strftime(TIMESTAMP_FORMAT)}",
            f"상태: {_status(self.success)}",
        ]
        if not self.success and self.error_message:
            lines.append(f"에러: {self.error_message}")
        if self.success:
            lines.append("")
            lines.append("=" * 50)
            lines.append(self.combined_sqls())
        return "\n".join(lines)


@dataclass(frozen=True)
class ShardingStatisticsResult:
    """분표 통계 SQL 생성 결과."""

    statistics_sql: str = ""
    shard_count: int = 0
    table_names: list[str] = field(default_factory=list)
    fields: list[SelectField] = field(default_factory=list)
    success: bool = False
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    generated_at: datetime = field(default_factory=datetime.now)

    def to_report(self) -> str:
        if not self.success:
            return f"분표 통계 SQL 생성 실패: {self.error_message}"

        lines = [
            "=== 분표 통계 SQL 생성 결과 ===",
            f"분표 수: {self.shard_count}",
            f"대상 테이블: {', '.join(self.table_names)}",
            f"생성 시각: {self.generated_at.strftime(TIMESTAMP_FORMAT)}",
            "",
            "=== 필드 ===",
        ]
        for select_field in self.fields:
            marker = "" if select_field.explicit_alias else " (자동 별칭)"
            lines.append(f"{select_field.expression} → {select_field.alias}{marker}")
        lines.extend(["", "=== 통계 SQL ===", self.statistics_sql])
        return "\n".join(lines)


@dataclass(frozen=True)
class StringBufferResult:
    """빌더 코드 생성 결과."""

    generated_code: str = ""
    line_count: int = 0
    char_count: int = 0
    language: CodeLanguage = CodeLanguage.JAVA
    variable_name: str = ""
    success: bool = False
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    generated_at: datetime = field(default_factory=datetime.now)

    def statistics(self) -> str:
        """코드 생성 통계를 주석 형태로 반환한다."""
        comment = self.language.comment_symbol
        lines = [
            f"{comment} 코드 생성 통계:",
            f"{comment} 언어: {self.language.display_name}",
            f"{comment} 변수명: {self.variable_name}",
            f"{comment} 코드 줄 수: {self.line_count}",
            f"{comment} 문자 수: {self.char_count}",
            f"{comment} 생성 시각: {self.generated_at.strftime(TIMESTAMP_FORMAT)}",
            f"{comment} 상태: {_status(self.success)}",
        ]
        if not self.success and self.error_message:
            lines.append(f"{comment} 에러: {self.error_message}")
        return "\n".join(lines)

    def preview(self, max_lines: int = 10) -> str:
        """코드 앞부분 미리보기."""
        comment = self.language.comment_symbol
        lines = [f"{comment} {self.language.file_extension}"]
        lines.extend(self.generated_code.split("\n")[:max_lines])
        lines.append(f"{comment} end")
        return "\n".join(lines)

    def to_report(self) -> str:
        return f"{self.statistics()}\n\n{self.generated_code}"


@dataclass(frozen=True)
class SqlReverseResult:
    """빌더 코드 → SQL 역변환 결과."""

    extracted_sql: str = ""
    sql_statements: list[str] = field(default_factory=list)
    language: CodeLanguage = CodeLanguage.JAVA
    variable_names: list[str] = field(default_factory=list)
    success: bool = False
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    parsed_at: datetime = field(default_factory=datetime.now)

    def sql_type(self) -> str:
        """SQL 문장 종류 (SELECT, INSERT, ...). 알 수 없으면 UNKNOWN."""
        upper_sql = self.extracted_sql.strip().upper()
        for keyword in ("SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "DROP", "ALTER"):
            if upper_sql.startswith(keyword):
                return keyword
        return "UNKNOWN"

    def contains_keyword(self, keyword: str) -> bool:
        return keyword.lower() in self.extracted_sql.lower()

    def preview(self, max_lines: int = 5) -> str:
        lines = self.extracted_sql.split("\n")
        result = ["-- 추출된 SQL 미리보기:"]
        result.extend(lines[:max_lines])
        if len(lines) > max_lines:
            result.append(f"-- ... ({len(lines) - max_lines}줄 더 있음)")
        return "\n".join(result)

    def fragments_detail(self) -> str:
        result = ["-- SQL 조각 상세:"]
        for index, fragment in enumerate(self.sql_statements, start=1):
            result.append(f'-- 조각 {index}: "{fragment}"')
        return "\n".join(result)

    def to_report(self) -> str:
        lines = [
            f"-- 언어: {self.language.display_name}",
            f"-- SQL 조각 수: {len(self.sql_statements)}",
            f"-- 상태: {_status(self.success)}",
        ]
        if not self.success:
            lines.append(f"-- 에러: {self.error_message}")
            return "\n".join(lines)

        lines.append(self.extracted_sql)
        if len(self.sql_statements) > 1:
            lines.append("")
            lines.append(self.fragments_detail())
        return "\n".join(lines)


@dataclass(frozen=True)
class BatchDeleteResult:
    """배치 삭제 프로시저 생성 결과."""

    generated_procedure: str = ""
    procedure_name: str = ""
    main_table_name: str = ""
    config_summary: str = ""
    call_example: str = ""
    config: Optional[BatchDeleteConfig] = None
    success: bool = False
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    generated_at: datetime = field(default_factory=datetime.now)

    def to_report(self) -> str:
        if not self.success:
            return f"배치 삭제 프로시저 생성 실패: {self.error_message}"

        lines = [
            f"-- {self.config_summary}",
            f"-- 생성 시각: {self.generated_at.strftime(TIMESTAMP_FORMAT)}",
            "",
            self.generated_procedure,
            "",
            f"-- 호출 예시: {self.call_example}",
        ]
        return "\n".join(lines)
