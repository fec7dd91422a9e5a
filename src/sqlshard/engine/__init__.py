"""SQL 변환 엔진."""
