"""분표 통계 SQL 생성기 테스트."""

import pytest


class TestGenerateStatistics:
    """통계 SQL 생성 테스트."""

    def test_union_of_every_shard(self):
        """모든 분표 쿼리가 UNION ALL로 묶여야 한다."""
        from sqlshard.core.models import ShardingConfig, StatisticFunction
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(
            table_names=["t_main"],
            shard_count=3,
            original_sql=(
                "SELECT qty, amount FROM t_main WHERE order_time >= '2024-01-01 00:00:00' "
                "AND order_time <= '2024-12-31 23:59:59' AND order_type = 4 AND delete_status = 0"
            ),
        )
        field_functions = {"qty": StatisticFunction.SUM, "amount": StatisticFunction.SUM}

        result = ShardingStatisticsGenerator().generate(config, field_functions)

        assert result.success is True
        sql = result.statistics_sql
        assert sql.startswith("SELECT SUM(unionTable.qty), SUM(unionTable.amount) FROM (\n")
        assert sql.endswith("\n) unionTable")
        assert sql.count("UNION ALL") == 2
        for suffix in ("_0", "_1", "_2"):
            assert f"t_main{suffix}" in sql

    def test_different_functions_per_field(self):
        from sqlshard.core.models import ShardingConfig, StatisticFunction
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(
            table_names=["t_main"],
            shard_count=2,
            original_sql="SELECT qty, amount FROM t_main WHERE order_type = 4",
        )
        field_functions = {"qty": StatisticFunction.COUNT, "amount": StatisticFunction.MAX}

        result = ShardingStatisticsGenerator().generate(config, field_functions)

        assert "COUNT(unionTable.qty)" in result.statistics_sql
        assert "MAX(unionTable.amount)" in result.statistics_sql

    def test_outer_query_uses_aliases(self):
        """바깥 쿼리는 원본 표현식이 아니라 별칭을 참조해야 한다."""
        from sqlshard.core.models import ShardingConfig, StatisticFunction
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(
            table_names=["kc_repair_out_main"],
            shard_count=5,
            start_year=2024,
            original_sql=(
                "SELECT COUNT(1) AS qty,SUM(part_cost_amount) FROM kc_repair_out_main "
                "WHERE outin_time >= '2024-01-01 00:00:00' AND outin_time <= '2024-12-31 23:59:59' "
                "AND order_type = 4 AND delete_status = 0"
            ),
        )
        field_functions = {
            "COUNT(1)": StatisticFunction.SUM,
            "SUM(part_cost_amount)": StatisticFunction.SUM,
        }

        sql = ShardingStatisticsGenerator().generate(config, field_functions).statistics_sql

        assert "SUM(unionTable.qty)" in sql
        assert "SUM(unionTable.sum_result)" in sql
        assert "SUM(unionTable.COUNT(1) AS qty)" not in sql
        assert "SUM(unionTable.SUM(part_cost_amount))" not in sql
        assert "COUNT(1) AS qty" in sql
        assert "SUM(part_cost_amount) AS sum_result" in sql

    def test_duplicate_fields_get_distinct_aliases(self):
        from sqlshard.core.models import ShardingConfig, StatisticFunction
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(
            table_names=["kc_repair_out_main"],
            shard_count=3,
            original_sql=(
                "SELECT COUNT(1) AS qty,SUM(part_cost_amount),SUM(part_cost_amount) "
                "FROM kc_repair_out_main WHERE order_type = 4"
            ),
        )
        field_functions = {
            "COUNT(1)": StatisticFunction.SUM,
            "SUM(part_cost_amount)": StatisticFunction.SUM,
        }

        result = ShardingStatisticsGenerator().generate(config, field_functions)

        sql = result.statistics_sql
        assert "SUM(unionTable.sum_result)" in sql
        assert "SUM(unionTable.sum_result_1)" in sql
        assert "SUM(unionTable.sum_result), SUM(unionTable.sum_result)" not in sql
        assert "SUM(part_cost_amount) AS sum_result_1" in sql
        assert [field.alias for field in result.fields] == ["qty", "sum_result", "sum_result_1"]

    def test_missing_function_defaults_to_sum(self):
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(table_names=["t"], shard_count=1, original_sql="SELECT qty FROM t")

        result = ShardingStatisticsGenerator().generate(config)

        assert result.statistics_sql == "SELECT SUM(unionTable.qty) FROM (\nSELECT qty AS qty FROM t_0\n) unionTable"

    @pytest.mark.parametrize("original_sql", ["SELECT a FROM t;", "SELECT a FROM t ;\n", "SELECT a FROM t;;"])
    def test_trailing_semicolon_is_dropped(self, original_sql):
        """문장 끝의 세미콜론은 UNION ALL 안에 남지 않아야 한다."""
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(table_names=["t"], shard_count=2, original_sql=original_sql)

        result = ShardingStatisticsGenerator().generate(config)

        assert result.success is True
        assert ";" not in result.statistics_sql
        assert result.statistics_sql == (
            "SELECT SUM(unionTable.a) FROM (\n"
            "SELECT a AS a FROM t_0 UNION ALL\n"
            "SELECT a AS a FROM t_1\n"
            ") unionTable"
        )

    def test_report_marks_derived_aliases(self):
        """리포트는 직접 지정한 별칭과 자동 생성한 별칭을 구분해야 한다."""
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(
            table_names=["t"], shard_count=2, original_sql="SELECT COUNT(1) AS qty, SUM(a) FROM t"
        )

        report = ShardingStatisticsGenerator().generate(config).to_report()

        assert "=== 필드 ===" in report
        assert "COUNT(1) → qty\n" in report
        assert "SUM(a) → sum_result (자동 별칭)" in report
        assert report.index("=== 필드 ===") < report.index("=== 통계 SQL ===")

    def test_missing_keys(self):
        """집계 함수 매핑에 없는 표현식을 알려줘야 한다."""
        from sqlshard.core.models import ShardingConfig, StatisticFunction
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(
            table_names=["t"], original_sql="SELECT COUNT(1) AS qty, SUM(a) FROM t"
        )

        missing = ShardingStatisticsGenerator().missing_keys(config, {"qty": StatisticFunction.SUM})

        assert missing == ["COUNT(1)", "SUM(a)"]


class TestStatisticsFailures:
    """통계 SQL 생성 실패 테스트."""

    @pytest.mark.parametrize("sql", ["SELECT * FROM t", "SELECT t.* FROM t"])
    def test_wildcard_is_configuration_error(self, sql):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(table_names=["t"], original_sql=sql)

        result = ShardingStatisticsGenerator().generate(config)

        assert result.success is False
        assert result.error_kind is ErrorKind.CONFIGURATION
        assert result.statistics_sql == ""

    def test_non_select_sql(self):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(table_names=["t"], original_sql="UPDATE t SET a = 1")

        result = ShardingStatisticsGenerator().generate(config)

        assert result.success is False
        assert result.error_kind is ErrorKind.CONFIGURATION

    def test_select_without_from_is_parse_error(self):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(table_names=["t"], original_sql="SELECT 1")

        result = ShardingStatisticsGenerator().generate(config)

        assert result.error_kind is ErrorKind.PARSE

    def test_shard_count_limit_applies(self):
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        config = ShardingConfig(table_names=["t"], shard_count=1001, original_sql="SELECT a FROM t")

        assert ShardingStatisticsGenerator().generate(config).success is False

    def test_report_on_failure(self):
        from sqlshard.core.models import ShardingConfig
        from sqlshard.engine.statistics import ShardingStatisticsGenerator

        result = ShardingStatisticsGenerator().generate(ShardingConfig(original_sql="SELECT a FROM t"))

        assert result.to_report().startswith("분표 통계 SQL 생성 실패")
