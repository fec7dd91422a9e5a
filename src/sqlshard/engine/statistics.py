"""분표 통계 SQL 생성기.

N개의 분표 SQL을 UNION ALL 파생 테이블(``unionTable``)로 묶고, 바깥 SELECT에서
필드별 집계 함수를 적용한다.

집계 함수 매핑의 키는 별칭이 아니라 필드의 원본 표현식(예: ``"COUNT(1)"``)이다.
매핑에 없는 필드는 SUM으로 집계한다.
"""

import logging
from typing import Mapping, Optional

from sqlshard.core.config import Settings
from sqlshard.core.errors import SqlShardError, classify, sanitize_message
from sqlshard.core.models import (
    SelectField,
    ShardingConfig,
    ShardingStatisticsResult,
    StatisticFunction,
    ValidationResult,
)
from sqlshard.engine.select_fields import SELECT_PATTERN, SelectFieldParser
from sqlshard.engine.sharding import rename_tables, validate_sharding_config
from sqlshard.engine.sql_parser import SqlParser
from sqlshard.engine.suffix_generator import SuffixGenerator

logger = logging.getLogger(__name__)

UNION_TABLE_ALIAS = "unionTable"
DEFAULT_FUNCTION = StatisticFunction.SUM


def strip_terminator(sql: str) -> str:
    """끝의 세미콜론과 공백을 제거한다. UNION ALL 안에서는 문장 종결자를 쓸 수 없다."""
    return sql.strip().rstrip(";").rstrip()


class ShardingStatisticsGenerator:
    """분표 통계(집계) SQL 생성기."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        sql_parser: Optional[SqlParser] = None,
        suffix_generator: Optional[SuffixGenerator] = None,
        field_parser: Optional[SelectFieldParser] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._sql_parser = sql_parser or SqlParser()
        self._suffix_generator = suffix_generator or SuffixGenerator()
        self._field_parser = field_parser or SelectFieldParser()

    def validate_config(self, config: ShardingConfig) -> ValidationResult:
        validation = validate_sharding_config(
            config, self._suffix_generator, self._settings.max_shard_count
        )
        if not validation.is_valid:
            return validation

        if not SELECT_PATTERN.search(config.original_sql):
            return ValidationResult.config_error("SQL 문장에 SELECT 절이 있어야 합니다")

        return self._sql_parser.validate_sql(config.original_sql)

    def missing_keys(
        self, config: ShardingConfig, field_functions: Mapping[str, StatisticFunction]
    ) -> list[str]:
        """집계 함수 매핑에 없는 필드 표현식을 반환한다.

        호출 전에 매핑 키가 표현식 기준으로 채워졌는지 확인하는 용도.

        Raises:
            ParseError: SELECT 필드를 추출할 수 없을 때
            ConfigurationError: 와일드카드(*) 필드가 있을 때
        """
        fields = self._field_parser.parse(config.original_sql)
        return [field.expression for field in fields if field.expression not in field_functions]

    def generate(
        self,
        config: ShardingConfig,
        field_functions: Optional[Mapping[str, StatisticFunction]] = None,
    ) -> ShardingStatisticsResult:
        """분표 통계 SQL을 생성한다.

        Args:
            config: 분표 설정
            field_functions: 필드 원본 표현식 → 집계 함수 매핑

        Returns:
            분표 통계 결과
        """
        validation = self.validate_config(config)
        if not validation.is_valid:
            logger.warning("분표 통계 SQL 생성 거부: %s", validation.message)
            return ShardingStatisticsResult(
                success=False,
                error_message=validation.message,
                error_kind=validation.error_kind,
            )

        try:
            fields = self._field_parser.parse(config.original_sql)
            statistics_sql = self.build_statistics_sql(config, fields, field_functions or {})
        except SqlShardError as e:
            logger.warning("분표 통계 SQL 생성 실패: %s", e)
            return ShardingStatisticsResult(
                success=False,
                error_message=sanitize_message(str(e)),
                error_kind=e.kind,
            )
        except Exception as e:
            logger.exception("분표 통계 SQL 생성 중 에러")
            return ShardingStatisticsResult(
                success=False,
                error_message=sanitize_message(f"분표 통계 SQL 생성 중 에러가 발생했습니다: {e}"),
                error_kind=classify(e),
            )

        return ShardingStatisticsResult(
            statistics_sql=statistics_sql,
            shard_count=config.shard_count,
            table_names=list(config.table_names),
            fields=fields,
            success=True,
        )

    def build_statistics_sql(
        self,
        config: ShardingConfig,
        fields: list[SelectField],
        field_functions: Mapping[str, StatisticFunction],
    ) -> str:
        """UNION ALL 서브쿼리를 감싼 집계 SQL을 만든다."""
        suffixes = self._suffix_generator.generate_suffix_list(
            config.shard_count,
            config.suffix_type,
            config.suffix_format,
            config.start_year,
            config.start_month,
        )

        original_sql = strip_terminator(config.original_sql)

        # 별칭은 한 번만 계산해 모든 분표 쿼리가 같은 별칭을 공유한다
        union_queries = []
        for suffix in suffixes:
            sharding_sql = rename_tables(
                original_sql, config.table_names, suffix, self._sql_parser
            )
            union_queries.append(self._field_parser.rewrite_with_aliases(sharding_sql, fields))

        statistics_fields = ", ".join(
            field_functions.get(field.expression, DEFAULT_FUNCTION).wrap(
                field.alias, UNION_TABLE_ALIAS
            )
            for field in fields
        )

        return (
            f"SELECT {statistics_fields} FROM (\n"
            + " UNION ALL\n".join(union_queries)
            + f"\n) {UNION_TABLE_ALIAS}"
        )
