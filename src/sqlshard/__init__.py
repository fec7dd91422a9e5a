"""sqlshard - 분표(sharding) SQL 변환 도구 모음."""

__version__ = "0.1.0"
