"""분표 SQL 생성기."""

import logging
from typing import Optional

from sqlshard.core.config import Settings
from sqlshard.core.errors import classify, sanitize_message
from sqlshard.core.models import ShardingConfig, ShardingResult, SuffixType, ValidationResult
from sqlshard.engine.sql_parser import SqlParser
from sqlshard.engine.suffix_generator import SuffixGenerator

logger = logging.getLogger(__name__)

MIN_START_YEAR = 1900
MAX_START_YEAR = 2100


def validate_sharding_config(
    config: ShardingConfig,
    suffix_generator: SuffixGenerator,
    max_shard_count: int = 1000,
) -> ValidationResult:
    """분표 설정의 구조적 불변식을 검사한다.

    Args:
        config: 분표 설정
        suffix_generator: 포맷 검증에 사용할 접미사 생성기
        max_shard_count: 허용하는 최대 분표 수

    Returns:
        검증 결과
    """
    if not config.table_names:
        return ValidationResult.config_error("테이블명 목록은 비어 있을 수 없습니다")

    if config.shard_count <= 0:
        return ValidationResult.config_error("분표 수는 0보다 커야 합니다")

    if config.shard_count > max_shard_count:
        return ValidationResult.config_error(f"분표 수는 {max_shard_count}을(를) 넘을 수 없습니다")

    if not config.original_sql or not config.original_sql.strip():
        return ValidationResult.config_error("원본 SQL 문장은 비어 있을 수 없습니다")

    format_validation = suffix_generator.validate_format(config.suffix_format, config.suffix_type)
    if not format_validation.is_valid:
        return format_validation

    if config.suffix_type in (SuffixType.YEAR, SuffixType.YEAR_MONTH):
        if not MIN_START_YEAR <= config.start_year <= MAX_START_YEAR:
            return ValidationResult.config_error(
                f"시작 연도는 {MIN_START_YEAR}-{MAX_START_YEAR} 사이여야 합니다"
            )

    if config.suffix_type is SuffixType.YEAR_MONTH:
        if not 1 <= config.start_month <= 12:
            return ValidationResult.config_error("시작 월은 1-12 사이여야 합니다")

    return ValidationResult.ok("설정 검증 통과")


def rename_tables(sql: str, table_names: list[str], suffix: str, parser: SqlParser) -> str:
    """설정된 모든 테이블명에 접미사를 붙인다."""
    sharding_sql = sql
    for table_name in table_names:
        sharding_sql = parser.replace_table_name(sharding_sql, table_name, f"{table_name}{suffix}")
    return sharding_sql


class ShardingSqlGenerator:
    """하나의 SQL을 N개의 분표 SQL로 변환한다."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sql_parser: Optional[SqlParser] = None,
        suffix_generator: Optional[SuffixGenerator] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._sql_parser = sql_parser or SqlParser()
        self._suffix_generator = suffix_generator or SuffixGenerator()

    def validate_config(self, config: ShardingConfig) -> ValidationResult:
        return validate_sharding_config(
            config, self._suffix_generator, self._settings.max_shard_count
        )

    def generate(self, config: ShardingConfig) -> ShardingResult:
        """분표 SQL을 생성한다.

        Args:
            config: 분표 설정

        Returns:
            분표 결과. 실패 시 success=False와 에러 메시지를 담는다.
        """
        validation = self.validate_config(config)
        if validation.is_valid:
            validation = self._sql_parser.validate_sql(config.original_sql)
        if not validation.is_valid:
            logger.warning("분표 SQL 생성 거부: %s", validation.message)
            return ShardingResult(
                success=False,
                error_message=validation.message,
                error_kind=validation.error_kind,
            )

        try:
            sharding_sqls = self.generate_sqls(config)
        except Exception as e:
            logger.exception("분표 SQL 생성 중 에러")
            return ShardingResult(
                success=False,
                error_message=sanitize_message(f"분표 SQL 생성 중 에러가 발생했습니다: {e}"),
                error_kind=classify(e),
            )

        logger.debug("분표 SQL %d개 생성", len(sharding_sqls))
        return ShardingResult(
            sharding_sqls=sharding_sqls,
            shard_count=config.shard_count,
            table_names=list(config.table_names),
            success=True,
        )

    def generate_sqls(self, config: ShardingConfig) -> list[str]:
        """접미사 순서대로 테이블명이 치환된 SQL 리스트를 만든다."""
        suffixes = self._suffix_generator.generate_suffix_list(
            config.shard_count,
            config.suffix_type,
            config.suffix_format,
            config.start_year,
            config.start_month,
        )
        return [
            rename_tables(config.original_sql, config.table_names, suffix, self._sql_parser)
            for suffix in suffixes
        ]

    def preview(self, config: ShardingConfig) -> str:
        """분표 설정 미리보기 (앞쪽 일부 물리 테이블명 포함)."""
        limit = self._settings.preview_limit
        lines = [
            "분표 설정 미리보기:",
            f"• 테이블명: {', '.join(config.table_names)}",
            f"• 분표 수: {config.shard_count}",
            f"• 접미사 타입: {config.suffix_type.display_name}",
            f"• 접미사 포맷: {config.suffix_format}",
        ]
        if config.suffix_type in (SuffixType.YEAR, SuffixType.YEAR_MONTH):
            lines.append(f"• 시작 연도: {config.start_year}")
        if config.suffix_type is SuffixType.YEAR_MONTH:
            lines.append(f"• 시작 월: {config.start_month}")

        lines.append("")
        lines.append("생성될 분표 테이블명 예시:")
        suffixes = self._suffix_generator.generate_suffix_list(
            min(max(config.shard_count, 0), limit),
            config.suffix_type,
            config.suffix_format,
            config.start_year,
            config.start_month,
        )
        for table_name in config.table_names:
            for suffix in suffixes:
                lines.append(f"  • {table_name}{suffix}")
        if config.shard_count > limit:
            lines.append(f"  • ... ({config.shard_count - limit}개 더 있음)")
        return "\n".join(lines)
