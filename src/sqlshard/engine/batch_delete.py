"""배치 삭제 저장 프로시저 생성기.

파싱 없이 문자열 템플릿만으로 MySQL 프로시저를 만든다. 설정 값은 리터럴/식별자로
그대로 삽입되며, 실행 전 개발자가 검토하는 것을 전제로 한다.
"""

import logging
import re
from dataclasses import replace
from enum import Enum
from typing import Optional

from sqlshard.core.errors import classify, sanitize_message
from sqlshard.core.models import BatchDeleteConfig, BatchDeleteResult, ValidationResult

logger = logging.getLogger(__name__)

# 허용하는 삭제 기준 시각 형식
TIME_PATTERNS = (
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$"),
    re.compile(r"^\d{4}/\d{2}/\d{2}$"),
    re.compile(r"^\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}$"),
)

LOG_TABLE = "drop_data_log"
ACTION_TABLE = "drop_data_action"


class BatchDeleteTemplate(Enum):
    """자주 쓰는 정리 시나리오별 사전 설정."""

    SYSTEM_LOG_CLEANUP = (
        "시스템 로그 정리",
        "시스템 로그 테이블의 이력 데이터 정리, 로그 타입 필터 지원",
        BatchDeleteConfig(
            procedure_name="DropHistoryDataByLimit",
            main_table_name="system_logs",
            time_field="log_time",
            limit_size=1000,
            create_time_end="2023-01-01 00:00:00",
            custom_where_condition="log_type IN ('DEBUG', 'INFO')",
            procedure_comment="system_logs 이력 데이터 반복 삭제 - 주키를 임시 테이블에 저장 후 조인 삭제",
        ),
        (
            "시스템 부하가 낮은 시간대에 실행",
            "로그 양에 따라 회당 삭제 건수 조정",
            "ERROR, WARN 레벨 로그는 보존",
            "실행 전 중요 로그 백업",
        ),
    )
    USER_OPERATION_LOG_CLEANUP = (
        "사용자 작업 로그 정리",
        "사용자 작업 로그 테이블의 이력 데이터 정리",
        BatchDeleteConfig(
            procedure_name="DropUserOperationLogHistory",
            main_table_name="user_operation_logs",
            limit_size=2000,
            create_time_end="2023-01-01 00:00:00",
            custom_where_condition="operation_type IN ('LOGIN', 'LOGOUT', 'VIEW')",
            procedure_comment="user_operation_logs 이력 데이터 반복 삭제",
        ),
        (
            "로그인/로그아웃 등 중요 작업 기록은 보존",
            "사용자 수에 따라 삭제 빈도 조정",
            "사용자 ID 기준 분할 삭제 고려",
            "실행 전 업무 요구사항 확인",
        ),
    )
    BUSINESS_DATA_CLEANUP = (
        "업무 데이터 정리",
        "주문, 거래 기록 등 업무 테이블의 이력 데이터 정리",
        BatchDeleteConfig(
            procedure_name="DropBusinessDataHistory",
            main_table_name="business_records",
            time_field="created_at",
            limit_size=5000,
            create_time_end="2022-01-01 00:00:00",
            custom_where_condition="status = 'COMPLETED'",
            procedure_comment="업무 데이터 테이블 이력 데이터 반복 삭제",
        ),
        (
            "완료 상태의 데이터만 삭제",
            "업무 영향이 없도록 분할 실행",
            "실행 전 반드시 데이터 백업",
            "직접 삭제 대신 아카이빙 고려",
        ),
    )
    TEMP_DATA_CLEANUP = (
        "임시 데이터 정리",
        "임시 테이블, 캐시 테이블 등 장기 보관이 필요 없는 데이터 정리",
        BatchDeleteConfig(
            procedure_name="DropTempDataHistory",
            main_table_name="temp_data",
            time_field="expire_time",
            limit_size=10000,
            create_time_end="2023-01-01 00:00:00",
            add_log_table=False,
            add_temp_table=False,
            custom_where_condition="is_expired = 1",
            procedure_comment="임시 데이터 테이블 만료 데이터 정리",
        ),
        (
            "스케줄 작업으로 자동 실행 가능",
            "삭제 빈도를 높게 설정 가능",
            "보존이 필요 없는 데이터인지 확인",
            "삭제가 성능에 미치는 영향 모니터링",
        ),
    )
    AUDIT_LOG_CLEANUP = (
        "감사 로그 정리",
        "감사 로그 테이블의 이력 데이터 정리, 중요 감사 기록 보존",
        BatchDeleteConfig(
            procedure_name="DropAuditLogHistory",
            main_table_name="audit_logs",
            time_field="audit_time",
            limit_size=1000,
            create_time_end="2022-01-01 00:00:00",
            custom_where_condition="audit_level IN ('INFO', 'DEBUG')",
            procedure_comment="감사 로그 테이블 이력 데이터 반복 삭제",
        ),
        (
            "중요 감사 기록은 보존",
            "컴플라이언스 요구사항 준수",
            "삭제 전 아카이빙 권장",
            "삭제 작업 자체를 기록",
        ),
    )
    CUSTOM = (
        "사용자 정의",
        "모든 파라미터를 직접 설정, 특수한 시나리오용",
        BatchDeleteConfig(
            procedure_name="DropHistoryDataByLimit",
            main_table_name="your_table_name",
            limit_size=1000,
            create_time_end="2023-01-01 00:00:00",
        ),
        (
            "업무 시나리오에 맞게 파라미터 조정",
            "테스트 환경에서 먼저 검증",
            "소량으로 테스트한 뒤 대량 실행",
            "실행 과정과 결과 모니터링",
        ),
    )

    def __init__(self, display_name, description, config, suggestions):
        self.display_name = display_name
        self.description = description
        self.config = config
        self.suggestions = suggestions

    def detailed_description(self) -> str:
        config = self.config
        lines = [
            f"템플릿: {self.display_name}",
            f"적용 시나리오: {self.description}",
            "",
            "사전 설정:",
            f"- 프로시저명: {config.procedure_name}",
            f"- 주 테이블: {config.main_table_name}",
            f"- 주키 필드: {config.primary_key_field}",
            f"- 시간 필드: {config.time_field}",
            f"- 회당 삭제 건수: {config.limit_size}",
            f"- 시작 주키: {config.min_id}",
            f"- 삭제 기준 시각: {config.create_time_end}",
            f"- 로그 테이블 추가: {'예' if config.add_log_table else '아니오'}",
            f"- 임시 테이블 추가: {'예' if config.add_temp_table else '아니오'}",
        ]
        if config.custom_where_condition.strip():
            lines.append(f"- 사용자 정의 조건: {config.custom_where_condition}")
        lines.append(f"- 프로시저 주석: {config.procedure_comment}")
        return "\n".join(lines)

    def usage_suggestion(self) -> str:
        lines = ["사용 제안:"]
        lines.extend(f"{index}. {text}" for index, text in enumerate(self.suggestions, start=1))
        return "\n".join(lines)


def validate_identifier(value: str, label: str) -> ValidationResult:
    """프로시저/테이블/필드명 형식 검사."""
    if not value or not value.strip():
        return ValidationResult.config_error(f"{label}은(는) 비어 있을 수 없습니다")

    invalid_chars = "".join(char for char in value if not (char.isalnum() or char == "_"))
    if invalid_chars:
        return ValidationResult.config_error(f"{label}에 허용되지 않는 문자가 있습니다: {invalid_chars}")

    if value[0].isdigit():
        return ValidationResult.config_error(f"{label}은(는) 숫자로 시작할 수 없습니다")

    return ValidationResult.ok(f"{label} 형식이 올바릅니다")


def validate_time_format(time_string: str) -> ValidationResult:
    if not time_string or not time_string.strip():
        return ValidationResult.config_error("시각은 비어 있을 수 없습니다")

    if not any(pattern.match(time_string) for pattern in TIME_PATTERNS):
        return ValidationResult.config_error(
            "시각 형식이 올바르지 않습니다. 지원 형식: YYYY-MM-DD 또는 YYYY-MM-DD HH:MM:SS"
        )
    return ValidationResult.ok("시각 형식이 올바릅니다")


def default_procedure_name(table_name: str) -> str:
    return f"DropHistoryDataByLimit_{table_name}"


class BatchDeleteGenerator:
    """배치 삭제 저장 프로시저 생성기."""

    def __init__(self, strict: bool = False) -> None:
        """생성기 초기화.

        Args:
            strict: True면 식별자 형식과 시각 형식까지 검사한다
        """
        self._strict = strict

    def validate_config(self, config: BatchDeleteConfig) -> ValidationResult:
        required = (
            (config.procedure_name, "프로시저명"),
            (config.main_table_name, "주 테이블명"),
            (config.primary_key_field, "주키 필드명"),
            (config.time_field, "시간 필드명"),
        )
        for value, label in required:
            if not value or not value.strip():
                return ValidationResult.config_error(f"{label}은(는) 비어 있을 수 없습니다")

        if config.limit_size <= 0:
            return ValidationResult.config_error("회당 삭제 건수는 0보다 커야 합니다")

        if not config.create_time_end or not config.create_time_end.strip():
            return ValidationResult.config_error("삭제 기준 시각은 비어 있을 수 없습니다")

        if self._strict:
            for value, label in required:
                validation = validate_identifier(value, label)
                if not validation.is_valid:
                    return validation
            validation = validate_time_format(config.create_time_end)
            if not validation.is_valid:
                return validation

        return ValidationResult.ok("설정 검증 통과")

    def generate(self, config: BatchDeleteConfig) -> BatchDeleteResult:
        """배치 삭제 프로시저를 생성한다.

        Args:
            config: 배치 삭제 설정

        Returns:
            생성 결과
        """
        validation = self.validate_config(config)
        if not validation.is_valid:
            logger.warning("배치 삭제 프로시저 생성 거부: %s", validation.message)
            return BatchDeleteResult(
                success=False,
                error_message=validation.message,
                error_kind=validation.error_kind,
            )

        try:
            procedure = self.render(config)
        except Exception as e:
            logger.exception("배치 삭제 프로시저 생성 중 에러")
            return BatchDeleteResult(
                success=False,
                error_message=sanitize_message(
                    f"배치 삭제 프로시저 생성 중 에러가 발생했습니다: {e}"
                ),
                error_kind=classify(e),
            )

        return BatchDeleteResult(
            generated_procedure=procedure,
            procedure_name=config.procedure_name,
            main_table_name=config.main_table_name,
            config_summary=self.config_summary(config),
            call_example=self.call_example(config),
            config=config,
            success=True,
        )

    def render(self, config: BatchDeleteConfig) -> str:
        """프로시저 SQL 텍스트를 만든다."""
        table = config.main_table_name
        pk = config.primary_key_field
        time_field = config.time_field
        custom_where = config.custom_where_condition.strip()

        lines = [
            f"CREATE DEFINER=`root`@`%` PROCEDURE `{config.procedure_name}`(",
            "  IN limit_size INT, -- 회당 삭제 건수",
            "  IN create_time_end VARCHAR(50), -- 이 시각 이전에 생성된 데이터 삭제",
            "  IN min_id BIGINT -- last_id 초기값",
            ")",
            f"  COMMENT '{config.procedure_comment}'",
            "BEGIN",
            "",
            "  DECLARE done INT DEFAULT 0;  -- 종료 여부",
            "  DECLARE last_id BIGINT DEFAULT 0; -- 시작 주키",
            "",
            "  SET last_id = min_id; -- last_id 초기화",
            "",
        ]

        if config.add_log_table:
            lines += [
                "  -- 임시 로그 테이블 생성",
                f"  CREATE TEMPORARY TABLE IF NOT EXISTS {LOG_TABLE} (",
                "    LogID INT AUTO_INCREMENT PRIMARY KEY,",
                "    Message VARCHAR(2000),",
                "    LogTime TIMESTAMP DEFAULT CURRENT_TIMESTAMP",
                "  );",
                "",
            ]

        if config.add_temp_table:
            lines += [
                "  -- 회차별 삭제 대상 주키를 담을 임시 작업 테이블",
                f"  CREATE TEMPORARY TABLE IF NOT EXISTS {ACTION_TABLE} (",
                "    temp_id BIGINT,",
                "    create_time TIMESTAMP",
                "  );",
                "",
            ]

        lines += [
            "  -- 삭제할 레코드가 없을 때까지 반복",
            "  WHILE done = 0 DO",
        ]
        if config.add_temp_table:
            lines += self._staged_delete_loop(config, table, pk, time_field, custom_where)
        else:
            lines += self._direct_delete_loop(config, table, pk, time_field, custom_where)
        lines += ["  END WHILE;", ""]

        if config.add_log_table:
            lines += [
                f"  SELECT * FROM {LOG_TABLE};",
                f"  DROP TABLE IF EXISTS {LOG_TABLE};",
            ]
        if config.add_temp_table:
            lines.append(f"  DROP TABLE IF EXISTS {ACTION_TABLE};")

        lines.append("END")
        return "\n".join(lines) + "\n"

    def _staged_delete_loop(
        self, config: BatchDeleteConfig, table: str, pk: str, time_field: str, custom_where: str
    ) -> list[str]:
        # 주키를 임시 테이블에 담고 조인 삭제 후 비운다 (잠금 시간 단축)
        lines = [
            "    -- 조회 결과를 임시 테이블에 저장",
            '    SET @sql_save_action = CONCAT("',
            f"      INSERT INTO {ACTION_TABLE} (temp_id, create_time)",
            f"      SELECT main.{pk}, main.{time_field}",
            f"      FROM {table} main",
            f'      WHERE main.{pk} > ", last_id, " ',
            f"        AND main.{time_field} < '\", create_time_end, \"'",
        ]
        if custom_where:
            lines.append(f"        AND {custom_where}")
        lines += [
            '      LIMIT ", limit_size);',
            "",
            "    PREPARE stmt FROM @sql_save_action;",
            "    EXECUTE stmt;",
            "    DEALLOCATE PREPARE stmt;",
            "",
            "    -- 저장된 건수가 0이면 반복 종료",
            f"    SELECT COUNT(*) INTO @countData FROM {ACTION_TABLE};",
            "    IF @countData = 0 THEN",
            "      SET done = 1;",
            "    ELSE",
            "      -- 물리 삭제",
            f"      DELETE main FROM {table} main",
            f"      INNER JOIN {ACTION_TABLE} a ON main.{pk} = a.temp_id",
            f"      WHERE main.{time_field} <= create_time_end",
            f"        AND main.{pk} > last_id;",
            "",
            "      -- 작업 테이블의 최대 주키를 다음 시작 주키로 사용",
            f"      SET last_id = (SELECT MAX(temp_id) FROM {ACTION_TABLE});",
        ]
        lines += self._log_insert(config)
        lines += [
            "    END IF;",
            "",
            "    -- 다음 회차를 위해 작업 테이블 비우기",
            f"    TRUNCATE TABLE {ACTION_TABLE};",
        ]
        return lines

    def _direct_delete_loop(
        self, config: BatchDeleteConfig, table: str, pk: str, time_field: str, custom_where: str
    ) -> list[str]:
        lines = [
            "    -- 직접 삭제",
            f"    DELETE FROM {table}",
            f"    WHERE {pk} > last_id",
            f"      AND {time_field} < create_time_end",
        ]
        if custom_where:
            lines.append(f"      AND {custom_where}")
        lines += [
            "    LIMIT limit_size;",
            "",
            "    SET @countData = ROW_COUNT();",
            "",
            "    -- 삭제된 행이 없으면 반복 종료",
            "    IF @countData = 0 THEN",
            "      SET done = 1;",
            "    ELSE",
            f"      SET last_id = (SELECT MAX({pk}) FROM {table} WHERE {pk} <= last_id + limit_size);",
        ]
        lines += self._log_insert(config)
        lines.append("    END IF;")
        return lines

    @staticmethod
    def _log_insert(config: BatchDeleteConfig) -> list[str]:
        if not config.add_log_table:
            return []
        return [
            "",
            f"      INSERT INTO {LOG_TABLE}(Message) VALUES (",
            f'        CONCAT("물리 삭제 {config.main_table_name} last_id:", last_id, " 삭제 건수:", @countData)',
            "      );",
        ]

    def config_summary(self, config: BatchDeleteConfig) -> str:
        parts = [
            f"프로시저명: {config.procedure_name}",
            f"주 테이블: {config.main_table_name}",
            f"주키: {config.primary_key_field}",
            f"시간 필드: {config.time_field}",
            f"회당 삭제: {config.limit_size}건",
            f"시작 주키: {config.min_id}",
            f"기준 시각: {config.create_time_end}",
        ]
        if config.custom_where_condition.strip():
            parts.append(f"사용자 정의 조건: {config.custom_where_condition}")
        return ", ".join(parts)

    def call_example(self, config: BatchDeleteConfig) -> str:
        return (
            f"CALL {config.procedure_name}"
            f"({config.limit_size}, '{config.create_time_end}', {config.min_id});"
        )


def template_config(template: BatchDeleteTemplate, **overrides: Optional[object]) -> BatchDeleteConfig:
    """템플릿 설정에 일부 값을 덮어쓴 새 설정을 만든다."""
    values = {key: value for key, value in overrides.items() if value is not None}
    return replace(template.config, **values)
