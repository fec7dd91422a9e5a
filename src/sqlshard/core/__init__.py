"""Core 모듈 - 설정, 데이터 모델, 에러 정의."""
