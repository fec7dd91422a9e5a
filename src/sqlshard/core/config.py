"""애플리케이션 설정 모듈."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """애플리케이션 설정."""

    # 분표 생성 설정
    max_shard_count: int = 1000
    preview_limit: int = 5
    default_suffix_format: str = "_"

    # 코드 생성 설정
    max_sql_length: int = 10000
    default_variable_name: str = "sql"
    default_language: str = "java"

    # SQL 포맷팅 (sqlglot 방언)
    sql_dialect: str = "mysql"

    # 로깅 설정
    log_level: str = "WARNING"

    model_config = {
        "env_prefix": "SQLSHARD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }
