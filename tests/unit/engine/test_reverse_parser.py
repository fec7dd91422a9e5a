"""빌더 코드 → SQL 역변환 파서 테스트."""

import pytest

JAVA_CODE = """StringBuffer sql = new StringBuffer();
sql.append("SELECT id, name ");
sql.append("FROM users ");
sql.append("WHERE status = 'A'");
String finalSql = sql.toString();
"""


class TestDetectLanguage:
    """언어 자동 감지 테스트."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            ('StringBuilder sb = new StringBuilder();\nsb.Append("x");', "CSHARP"),
            ('val sb = StringBuilder()\nsb.append("x")', "KOTLIN"),
            ('StringBuffer sb = new StringBuffer();\nsb.append("x");', "JAVA"),
            ("val sb = new StringBuilder", "SCALA"),
            ("def sb = new StringBuilder", "GROOVY"),
            ("print('hello')", "JAVA"),
        ],
    )
    def test_detect_language(self, code, expected):
        from sqlshard.core.models import CodeLanguage
        from sqlshard.engine.reverse_parser import SqlReverseParser

        assert SqlReverseParser().detect_language(code) is CodeLanguage[expected]

    def test_contains_string_buffer(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        parser = SqlReverseParser()

        assert parser.contains_string_buffer(JAVA_CODE)
        assert not parser.contains_string_buffer("x = 1")


class TestExtractSqlStatements:
    """append 리터럴 추출 테스트."""

    def test_fragments_in_order(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        fragments = SqlReverseParser().extract_sql_statements(JAVA_CODE)

        assert fragments == ["SELECT id, name ", "FROM users ", "WHERE status = 'A'"]

    def test_single_quoted_literal(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        assert SqlReverseParser().extract_sql_statements("sql.append('SELECT 1');") == ["SELECT 1"]

    def test_chained_appends_on_one_line(self):
        """한 줄에 여러 append가 있어도 모두 추출해야 한다."""
        from sqlshard.engine.reverse_parser import SqlReverseParser

        code = 'sb.append("SELECT a ").append("FROM t");'

        assert SqlReverseParser().extract_sql_statements(code) == ["SELECT a ", "FROM t"]

    def test_escaped_quotes_are_unescaped(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        code = 'sql.append("WHERE name = \\"x\\"");'

        assert SqlReverseParser().extract_sql_statements(code) == ['WHERE name = "x"']

    def test_escaped_backslash_is_unescaped_once(self):
        """\\\\ 는 백슬래시 하나로, 그 뒤의 작은따옴표는 그대로 남아야 한다."""
        from sqlshard.engine.reverse_parser import SqlReverseParser

        code = "sql.append(\"WHERE name = 'O\\\\'Brien'\");"

        assert SqlReverseParser().extract_sql_statements(code) == ["WHERE name = 'O\\'Brien'"]

    def test_blank_fragments_are_skipped(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        code = 'sql.append("  ");\nsql.append("SELECT 1");'

        assert SqlReverseParser().extract_sql_statements(code) == ["SELECT 1"]

    def test_csharp_append(self):
        from sqlshard.core.models import CodeLanguage
        from sqlshard.engine.reverse_parser import SqlReverseParser

        code = 'sb.Append("SELECT 1 ");\nsb.Append("FROM t");'

        fragments = SqlReverseParser().extract_sql_statements(code, CodeLanguage.CSHARP)

        assert fragments == ["SELECT 1 ", "FROM t"]


class TestParseSqlFromCode:
    """SQL 복원 테스트."""

    def test_combined_sql(self):
        """조각을 공백 하나로 이어 붙이고 양끝을 정리해야 한다."""
        from sqlshard.engine.reverse_parser import SqlReverseParser

        result = SqlReverseParser().parse_sql_from_code(JAVA_CODE)

        assert result.success is True
        assert result.extracted_sql == "SELECT id, name  FROM users  WHERE status = 'A'"
        assert len(result.sql_statements) == 3
        assert result.variable_names == ["sql"]
        assert result.sql_type() == "SELECT"

    def test_empty_code(self):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.engine.reverse_parser import SqlReverseParser

        result = SqlReverseParser().parse_sql_from_code("   ")

        assert result.success is False
        assert result.error_kind is ErrorKind.PARSE

    def test_code_without_append(self):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.engine.reverse_parser import SqlReverseParser

        result = SqlReverseParser().parse_sql_from_code("StringBuffer sql = new StringBuffer();")

        assert result.success is False
        assert result.error_kind is ErrorKind.PARSE
        assert result.extracted_sql == ""

    def test_reverse_parse_detects_language(self):
        from sqlshard.core.models import CodeLanguage
        from sqlshard.engine.reverse_parser import SqlReverseParser

        code = 'val query = StringBuilder()\nquery.append("SELECT 1")\n'

        result = SqlReverseParser().reverse_parse(code)

        assert result.language is CodeLanguage.KOTLIN
        assert result.variable_names == ["query"]
        assert result.extracted_sql == "SELECT 1"

    def test_report(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        parser = SqlReverseParser()
        result = parser.parse_sql_from_code(JAVA_CODE)

        assert "SQL 조각 수: 3" in result.to_report()
        assert '-- 조각 2: "FROM users "' in result.fragments_detail()
        assert "// 상태: 성공" in parser.parse_statistics(result)


class TestFormatSql:
    """SQL 포맷 테스트."""

    def test_format_sql(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        result = SqlReverseParser().format_sql("SELECT  a ,b\nFROM t WHERE x IN(1,2)")

        assert result == "SELECT a, b FROM t WHERE x IN (1, 2)"

    def test_pretty_sql(self):
        from sqlshard.engine.reverse_parser import SqlReverseParser

        result = SqlReverseParser().pretty_sql("select a, b from t where x = 1")

        assert result.startswith("SELECT")
        assert "\n" in result

    def test_pretty_sql_falls_back_on_error(self, monkeypatch):
        """sqlglot 파싱 실패 시 기본 포맷을 사용해야 한다."""
        import sqlglot
        from sqlglot.errors import ParseError

        from sqlshard.engine.reverse_parser import SqlReverseParser

        def broken_transpile(*args, **kwargs):
            raise ParseError("invalid")

        monkeypatch.setattr(sqlglot, "transpile", broken_transpile)

        result = SqlReverseParser().pretty_sql("SELECT  a ,b FROM t")

        assert result == "SELECT a, b FROM t"
