"""코드 생성기 - SQL을 StringBuffer/StringBuilder 빌더 코드로 변환."""

import logging
from typing import Optional

from sqlshard.core.config import Settings
from sqlshard.core.errors import classify, sanitize_message
from sqlshard.core.models import (
    BuilderCodeConfig,
    CodeLanguage,
    StringBufferResult,
    ValidationResult,
)

logger = logging.getLogger(__name__)

SQL_SAMPLE_LINES = ("SELECT * FROM users", " WHERE id = ?")


def is_valid_variable_name(variable_name: str) -> bool:
    """첫 글자는 문자 또는 밑줄, 나머지는 문자/숫자/밑줄이어야 한다."""
    if not variable_name:
        return False
    first_char = variable_name[0]
    if not (first_char.isalpha() or first_char == "_"):
        return False
    return all(char.isalnum() or char == "_" for char in variable_name[1:])


def escape_literal(text: str) -> str:
    """문자열 리터럴 안의 백슬래시와 큰따옴표를 이스케이프한다."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def capitalize(text: str) -> str:
    if not text:
        return text
    return text[0].upper() + text[1:]


class CodeGenerator:
    """SQL → 빌더 패턴 코드 생성기."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or Settings()

    def validate_config(self, config: BuilderCodeConfig) -> ValidationResult:
        if not config.variable_name or not config.variable_name.strip():
            return ValidationResult.config_error("변수명은 비어 있을 수 없습니다")

        if not is_valid_variable_name(config.variable_name):
            return ValidationResult.config_error(
                "변수명 형식이 올바르지 않습니다. 문자, 숫자, 밑줄만 사용할 수 있으며 숫자로 시작할 수 없습니다"
            )

        if not config.original_sql or not config.original_sql.strip():
            return ValidationResult.config_error("SQL 문장은 비어 있을 수 없습니다")

        if len(config.original_sql) > self._settings.max_sql_length:
            return ValidationResult.config_error(
                f"SQL 문장이 너무 깁니다. {self._settings.max_sql_length}자 이내로 입력하세요"
            )

        return ValidationResult.ok("설정 검증 통과")

    def generate(self, config: BuilderCodeConfig) -> StringBufferResult:
        """빌더 코드를 생성한다.

        Args:
            config: 코드 생성 설정

        Returns:
            생성 결과 (코드, 줄 수, 문자 수)
        """
        validation = self.validate_config(config)
        if not validation.is_valid:
            logger.warning("코드 생성 거부: %s", validation.message)
            return StringBufferResult(
                language=config.language,
                success=False,
                error_message=validation.message,
                error_kind=validation.error_kind,
            )

        try:
            generated_code = self.render(config)
        except Exception as e:
            logger.exception("코드 생성 중 에러")
            return StringBufferResult(
                language=config.language,
                success=False,
                error_message=sanitize_message(f"코드 생성 중 에러가 발생했습니다: {e}"),
                error_kind=classify(e),
            )

        return StringBufferResult(
            generated_code=generated_code,
            line_count=len(generated_code.splitlines()),
            char_count=len(generated_code),
            language=config.language,
            variable_name=config.variable_name,
            success=True,
        )

    def render(self, config: BuilderCodeConfig) -> str:
        """설정으로부터 코드 텍스트를 만든다."""
        dialect = config.language.dialect
        var = config.variable_name
        lines = []

        if config.add_comments:
            lines.append(
                f"{dialect.comment_symbol} {dialect.display_name} {dialect.builder_class} SQL"
            )

        lines.append(dialect.declaration.format(builder=dialect.builder_class, var=var))
        if config.format_code:
            lines.append("")

        for line in config.original_sql.split("\n"):
            trimmed_line = line.strip()
            if not trimmed_line:
                continue
            # 줄을 이어 붙일 때 토큰이 붙지 않도록 끝에 공백을 둔다
            lines.append(
                f'{var}.{dialect.append_method}("{escape_literal(trimmed_line)} "){dialect.statement_end}'
            )

        if config.format_code:
            lines.append("")

        lines.append(
            dialect.finalize.format(
                var=var,
                final_var=f"final{capitalize(var)}",
                method=dialect.to_string_method,
            )
        )
        return "\n".join(lines) + "\n"

    def get_code_template(self, language: CodeLanguage) -> str:
        """언어별 예시 코드."""
        dialect = language.dialect
        lines = [
            f"{dialect.comment_symbol} {dialect.display_name} {dialect.builder_class} 예시",
            dialect.declaration.format(builder=dialect.builder_class, var="sql"),
        ]
        for sample in SQL_SAMPLE_LINES:
            lines.append(f'sql.{dialect.append_method}("{sample}"){dialect.statement_end}')
        lines.append(
            dialect.finalize.format(var="sql", final_var="finalSql", method=dialect.to_string_method)
        )
        return "\n".join(lines)

    def config_statistics(self, config: BuilderCodeConfig) -> str:
        sql_lines = config.original_sql.split("\n")
        non_empty_lines = sum(1 for line in sql_lines if line.strip())
        return "\n".join(
            [
                "설정 통계:",
                f"• 언어: {config.language.display_name}",
                f"• 변수명: {config.variable_name}",
                f"• SQL 줄 수: {len(sql_lines)}",
                f"• 비어 있지 않은 줄 수: {non_empty_lines}",
                f"• 문자 수: {len(config.original_sql)}",
                f"• 주석 추가: {'예' if config.add_comments else '아니오'}",
                f"• 코드 정렬: {'예' if config.format_code else '아니오'}",
            ]
        )

    def suggestions(self, config: BuilderCodeConfig) -> list[str]:
        """코드 생성 관련 제안 목록."""
        result = []
        if len(config.variable_name) < 3:
            result.append("'sqlBuilder', 'queryBuilder' 처럼 더 구체적인 변수명을 권장합니다")
        if len(config.original_sql.split("\n")) > 20:
            result.append("SQL이 길어 여러 메서드나 설정 파일로 분리하는 것을 권장합니다")
        if config.language is CodeLanguage.KOTLIN:
            result.append("Kotlin에서는 불변 변수 선언에 'val' 사용을 권장합니다")
        elif config.language is CodeLanguage.CSHARP:
            result.append("C#에서는 타입 추론을 위해 'var' 사용을 권장합니다")
        return result

    def validate_generated_code(self, code: str, language: CodeLanguage) -> ValidationResult:
        """생성된 코드의 방언별 기본 문법을 점검한다."""
        errors = []
        if language is CodeLanguage.JAVA:
            if "StringBuffer" not in code and "StringBuilder" not in code:
                errors.append("StringBuffer 또는 StringBuilder 선언이 없습니다")
            if "new " not in code:
                errors.append("new 키워드가 없습니다")
            for line in code.split("\n"):
                trimmed = line.strip()
                if trimmed.startswith("//") or not trimmed:
                    continue
                if any(token in trimmed for token in ("StringBuffer", "append", "String final")):
                    if not trimmed.endswith(";"):
                        errors.append(f"세미콜론이 없습니다: {trimmed}")
        elif language is CodeLanguage.CSHARP:
            if "StringBuilder" not in code:
                errors.append("StringBuilder 선언이 없습니다")
            if ".append(" in code:
                errors.append("C#에서는 append 대신 Append를 사용해야 합니다")
            if "String final" in code:
                errors.append("C#에서는 String 대신 string을 사용해야 합니다")
        elif language is CodeLanguage.KOTLIN:
            if "val " not in code:
                errors.append("val 키워드가 없습니다")
            if "new " in code:
                errors.append("Kotlin에서는 new 키워드를 사용하지 않습니다")
            if ";" in code:
                errors.append("Kotlin에서는 보통 세미콜론을 사용하지 않습니다")
        elif language is CodeLanguage.SCALA:
            if "val " not in code:
                errors.append("val 키워드가 없습니다")
            if "new " not in code:
                errors.append("Scala에서는 new 키워드가 필요합니다")
        elif language is CodeLanguage.GROOVY:
            if "def " not in code:
                errors.append("def 키워드가 없습니다")

        if errors:
            return ValidationResult.parse_error(
                f"{language.display_name} 문법 오류: {', '.join(errors)}"
            )
        return ValidationResult.ok(f"{language.display_name} 문법 검사 통과")
