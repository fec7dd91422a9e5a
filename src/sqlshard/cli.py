"""sqlshard 명령행 도구.

사용법:
    sqlshard shard --sql "SELECT id FROM orders" --table orders --count 4
    sqlshard stats --file query.sql --table t --count 3 --func "COUNT(1)=SUM"
    sqlshard tables --sql "SELECT * FROM a JOIN b ON a.id = b.id"
    sqlshard codegen --file query.sql --language kotlin --variable query
    sqlshard reverse --file Builder.java
    sqlshard batch-delete --template system_log_cleanup
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sqlshard.core.config import Settings
from sqlshard.core.logging import setup_logging
from sqlshard.core.models import (
    BuilderCodeConfig,
    CodeLanguage,
    ShardingConfig,
    StatisticFunction,
    SuffixType,
)
from sqlshard.engine.batch_delete import (
    BatchDeleteGenerator,
    BatchDeleteTemplate,
    default_procedure_name,
    template_config,
)
from sqlshard.engine.code_generator import CodeGenerator
from sqlshard.engine.reverse_parser import SqlReverseParser
from sqlshard.engine.sharding import ShardingSqlGenerator
from sqlshard.engine.sql_parser import TableNameExtractor
from sqlshard.engine.statistics import ShardingStatisticsGenerator

console = Console()


def read_input(text: Optional[str], file: Optional[str]) -> str:
    """인자 문자열 또는 파일에서 입력을 읽는다."""
    if file:
        return Path(file).read_text(encoding="utf-8")
    return text or ""


def parse_field_functions(items: list[str]) -> dict[str, StatisticFunction]:
    """``표현식=함수`` 목록을 집계 함수 매핑으로 변환한다.

    Raises:
        ValueError: 형식이 잘못되었거나 지원하지 않는 함수일 때
    """
    mapping = {}
    for item in items:
        expression, separator, function = item.rpartition("=")
        if not separator or not expression.strip():
            raise ValueError(f"집계 함수 지정 형식이 올바르지 않습니다: {item}")
        mapping[expression.strip()] = StatisticFunction(function.strip().upper())
    return mapping


def sharding_config(args: argparse.Namespace, sql: str) -> ShardingConfig:
    return ShardingConfig(
        table_names=args.table,
        suffix_type=SuffixType(args.suffix_type),
        suffix_format=args.suffix_format,
        shard_count=args.count,
        start_year=args.start_year,
        start_month=args.start_month,
        original_sql=sql,
    )


def print_failure(message: Optional[str]) -> int:
    console.print(f"❌ {message}", style="red", markup=False)
    return 1


def cmd_shard(args: argparse.Namespace, settings: Settings) -> int:
    generator = ShardingSqlGenerator(settings)
    config = sharding_config(args, read_input(args.sql, args.file))
    result = generator.generate(config)
    if not result.success:
        return print_failure(result.error_message)

    if args.preview:
        console.print(Panel(generator.preview(config), border_style="blue"))
    console.print(result.combined_sqls(), markup=False, highlight=False, soft_wrap=True)
    return 0


def cmd_stats(args: argparse.Namespace, settings: Settings) -> int:
    try:
        field_functions = parse_field_functions(args.func)
    except ValueError as e:
        return print_failure(str(e))

    generator = ShardingStatisticsGenerator(settings)
    result = generator.generate(sharding_config(args, read_input(args.sql, args.file)), field_functions)
    if not result.success:
        return print_failure(result.error_message)

    console.print(result.statistics_sql, markup=False, highlight=False, soft_wrap=True)
    return 0


def cmd_tables(args: argparse.Namespace, settings: Settings) -> int:
    sql = read_input(args.sql, args.file)
    extractor = TableNameExtractor()
    validation, table_names = extractor.validate_and_extract(sql)
    if not validation.is_valid:
        return print_failure(validation.message)

    table = Table(title="추출된 테이블", show_header=True)
    table.add_column("#", style="dim")
    table.add_column("테이블명", style="cyan")
    for index, name in enumerate(table_names, start=1):
        table.add_row(str(index), name)
    console.print(table)
    return 0


def cmd_codegen(args: argparse.Namespace, settings: Settings) -> int:
    try:
        language = CodeLanguage.from_name(args.language or settings.default_language)
    except ValueError as e:
        return print_failure(str(e))

    config = BuilderCodeConfig(
        variable_name=args.variable or settings.default_variable_name,
        language=language,
        original_sql=read_input(args.sql, args.file),
        add_comments=not args.no_comments,
        format_code=not args.compact,
    )
    result = CodeGenerator(settings).generate(config)
    if not result.success:
        return print_failure(result.error_message)

    console.print(result.generated_code, markup=False, highlight=False, soft_wrap=True, end="")
    return 0


def cmd_reverse(args: argparse.Namespace, settings: Settings) -> int:
    language = None
    if args.language:
        try:
            language = CodeLanguage.from_name(args.language)
        except ValueError as e:
            return print_failure(str(e))

    parser = SqlReverseParser()
    result = parser.reverse_parse(read_input(args.code, args.file), language)
    if not result.success:
        return print_failure(result.error_message)

    sql = parser.pretty_sql(result.extracted_sql, settings.sql_dialect) if args.pretty else result.extracted_sql
    console.print(sql, markup=False, highlight=False, soft_wrap=True)
    return 0


def cmd_batch_delete(args: argparse.Namespace, settings: Settings) -> int:
    template = BatchDeleteTemplate[args.template.upper()]
    procedure_name = args.procedure
    if procedure_name is None and args.table and template is BatchDeleteTemplate.CUSTOM:
        procedure_name = default_procedure_name(args.table)

    config = template_config(
        template,
        procedure_name=procedure_name,
        main_table_name=args.table,
        primary_key_field=args.primary_key,
        time_field=args.time_field,
        limit_size=args.limit,
        min_id=args.min_id,
        create_time_end=args.end_time,
        custom_where_condition=args.where,
    )
    result = BatchDeleteGenerator(strict=args.strict).generate(config)
    if not result.success:
        return print_failure(result.error_message)

    console.print(result.to_report(), markup=False, highlight=False, soft_wrap=True)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlshard",
        description="분표 SQL 생성, 통계 SQL 생성, 빌더 코드 변환 도구",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_sharding_arguments(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--sql", type=str, help="원본 SQL")
        sub.add_argument("--file", type=str, help="원본 SQL 파일")
        sub.add_argument("--table", action="append", default=[], help="분표 대상 테이블 (여러 번 지정 가능)")
        sub.add_argument("--count", type=int, default=4, help="분표 수 (기본값: 4)")
        sub.add_argument(
            "--suffix-type",
            choices=[suffix_type.value for suffix_type in SuffixType],
            default=SuffixType.SEQUENCE.value,
            help="접미사 타입 (기본값: sequence)",
        )
        sub.add_argument("--suffix-format", type=str, default="_", help="접미사 포맷 (기본값: _)")
        sub.add_argument("--start-year", type=int, default=2020, help="시작 연도 (기본값: 2020)")
        sub.add_argument("--start-month", type=int, default=1, help="시작 월 (기본값: 1)")

    shard = subparsers.add_parser("shard", help="분표 SQL 생성")
    add_sharding_arguments(shard)
    shard.add_argument("--preview", action="store_true", help="분표 설정 미리보기 출력")

    stats = subparsers.add_parser("stats", help="분표 통계 SQL 생성")
    add_sharding_arguments(stats)
    stats.add_argument(
        "--func",
        action="append",
        default=[],
        help="필드별 집계 함수, 예: 'COUNT(1)=SUM' (여러 번 지정 가능)",
    )

    tables = subparsers.add_parser("tables", help="테이블명 추출")
    tables.add_argument("--sql", type=str, help="SQL")
    tables.add_argument("--file", type=str, help="SQL 파일")

    codegen = subparsers.add_parser("codegen", help="SQL → 빌더 코드 변환")
    codegen.add_argument("--sql", type=str, help="SQL")
    codegen.add_argument("--file", type=str, help="SQL 파일")
    codegen.add_argument("--language", type=str, help="언어 (java, csharp, kotlin, scala, groovy)")
    codegen.add_argument("--variable", type=str, help="빌더 변수명")
    codegen.add_argument("--no-comments", action="store_true", help="헤더 주석 생략")
    codegen.add_argument("--compact", action="store_true", help="빈 줄 없이 출력")

    reverse = subparsers.add_parser("reverse", help="빌더 코드 → SQL 역변환")
    reverse.add_argument("--code", type=str, help="빌더 코드")
    reverse.add_argument("--file", type=str, help="빌더 코드 파일")
    reverse.add_argument("--language", type=str, help="언어 (생략 시 자동 감지)")
    reverse.add_argument("--pretty", action="store_true", help="sqlglot으로 SQL 정렬")

    batch = subparsers.add_parser("batch-delete", help="배치 삭제 프로시저 생성")
    batch.add_argument(
        "--template",
        choices=[template.name.lower() for template in BatchDeleteTemplate],
        default=BatchDeleteTemplate.CUSTOM.name.lower(),
        help="사전 설정 템플릿 (기본값: custom)",
    )
    batch.add_argument("--procedure", type=str, help="프로시저명")
    batch.add_argument("--table", type=str, help="주 테이블명")
    batch.add_argument("--primary-key", type=str, help="주키 필드명")
    batch.add_argument("--time-field", type=str, help="시간 필드명")
    batch.add_argument("--limit", type=int, help="회당 삭제 건수")
    batch.add_argument("--min-id", type=int, help="시작 주키")
    batch.add_argument("--end-time", type=str, help="삭제 기준 시각")
    batch.add_argument("--where", type=str, help="추가 WHERE 조건")
    batch.add_argument("--strict", action="store_true", help="식별자/시각 형식까지 검사")

    return parser


COMMANDS = {
    "shard": cmd_shard,
    "stats": cmd_stats,
    "tables": cmd_tables,
    "codegen": cmd_codegen,
    "reverse": cmd_reverse,
    "batch-delete": cmd_batch_delete,
}


def main(argv: Optional[list[str]] = None) -> int:
    """메인 함수."""
    args = build_parser().parse_args(argv)
    settings = Settings()
    setup_logging(settings.log_level)
    try:
        return COMMANDS[args.command](args, settings)
    except OSError as e:
        return print_failure(f"입력 파일을 읽을 수 없습니다: {e}")


if __name__ == "__main__":
    sys.exit(main())
