"""SQL 파서 테스트."""


class TestExtractTableNames:
    """테이블명 추출 테스트."""

    def test_extract_from_and_join(self):
        """FROM/JOIN 뒤의 테이블명을 등장 순서대로 추출해야 한다."""
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()
        sql = "SELECT o.id FROM orders o LEFT JOIN users u ON o.user_id = u.id"

        assert parser.extract_table_names(sql) == ["orders", "users"]

    def test_strip_schema_prefix(self):
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()

        assert parser.extract_table_names("SELECT a FROM shop.orders") == ["orders"]

    def test_distinct_table_names(self):
        """같은 테이블이 여러 번 나와도 한 번만 반환해야 한다."""
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()
        sql = "SELECT a FROM t1 JOIN t2 ON t1.id = t2.id JOIN t1 x ON x.id = t2.pid"

        assert parser.extract_table_names(sql) == ["t1", "t2"]

    def test_dml_statements(self):
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()

        assert parser.extract_table_names("UPDATE accounts SET a = 1") == ["accounts"]
        assert parser.extract_table_names("insert into logs (a) values (1)") == ["logs"]
        assert parser.extract_table_names("DELETE FROM sessions WHERE id = 1") == ["sessions"]


class TestReplaceTableName:
    """테이블명 치환 테스트."""

    def test_replace_only_after_clause_keyword(self):
        """WHERE 조건의 문자열 리터럴은 치환하지 않아야 한다."""
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()
        sql = "SELECT * FROM orders WHERE name = 'orders'"

        result = parser.replace_table_name(sql, "orders", "orders_0")

        assert result == "SELECT * FROM orders_0 WHERE name = 'orders'"

    def test_keep_schema_prefix(self):
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()

        result = parser.replace_table_name("SELECT a FROM shop.orders o", "orders", "orders_1")

        assert result == "SELECT a FROM shop.orders_1 o"

    def test_do_not_replace_longer_table_name(self):
        """이름이 접두어로 겹치는 다른 테이블은 그대로 두어야 한다."""
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()
        sql = "SELECT a FROM orders_items JOIN orders o ON o.id = orders_items.oid"

        result = parser.replace_table_name(sql, "orders", "orders_2")

        assert result == "SELECT a FROM orders_items JOIN orders_2 o ON o.id = orders_items.oid"

    def test_case_insensitive_keyword(self):
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()

        result = parser.replace_table_name("select a from orders", "orders", "orders_0")

        assert result == "select a from orders_0"

    def test_table_name_with_regex_characters(self):
        """정규식 특수 문자가 포함된 이름도 문자 그대로 치환해야 한다."""
        from sqlshard.engine.sql_parser import SqlParser

        parser = SqlParser()

        result = parser.replace_table_name("SELECT a FROM t_x WHERE b = 1", "t.x", "t_0")

        assert result == "SELECT a FROM t_x WHERE b = 1"


class TestValidateSql:
    """SQL 형태 검사 테스트."""

    def test_blank_sql_is_configuration_error(self):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.engine.sql_parser import SqlParser

        result = SqlParser().validate_sql("   ")

        assert result.is_valid is False
        assert result.error_kind is ErrorKind.CONFIGURATION

    def test_missing_keyword_is_parse_error(self):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.engine.sql_parser import SqlParser

        result = SqlParser().validate_sql("hello world")

        assert result.is_valid is False
        assert result.error_kind is ErrorKind.PARSE

    def test_unbalanced_parentheses(self):
        from sqlshard.core.errors import ErrorKind
        from sqlshard.engine.sql_parser import SqlParser

        result = SqlParser().validate_sql("SELECT COUNT(1 FROM t")

        assert result.is_valid is False
        assert result.error_kind is ErrorKind.PARSE

    def test_valid_sql(self):
        from sqlshard.engine.sql_parser import SqlParser

        assert SqlParser().validate_sql("select count(1) from t").is_valid is True


class TestTableNameExtractor:
    """검증 포함 테이블명 추출 서비스 테스트."""

    def test_validate_and_extract(self):
        from sqlshard.engine.sql_parser import TableNameExtractor

        validation, table_names = TableNameExtractor().validate_and_extract(
            "SELECT a FROM t1 JOIN t2 ON t1.id = t2.id"
        )

        assert validation.is_valid is True
        assert table_names == ["t1", "t2"]

    def test_no_table_found(self):
        """테이블이 없으면 파싱 에러와 빈 리스트를 반환해야 한다."""
        from sqlshard.core.errors import ErrorKind
        from sqlshard.engine.sql_parser import TableNameExtractor

        validation, table_names = TableNameExtractor().validate_and_extract("SELECT 1")

        assert validation.is_valid is False
        assert validation.error_kind is ErrorKind.PARSE
        assert table_names == []

    def test_statistics_reports_duplicates(self):
        from sqlshard.engine.sql_parser import TableNameExtractor

        report = TableNameExtractor().statistics("SELECT a FROM t1 JOIN t1 x ON x.id = t1.pid")

        assert "전체 테이블명 수: 2" in report
        assert "고유 테이블명 수: 1" in report
        assert "중복" in report
