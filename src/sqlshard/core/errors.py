"""에러 분류 및 메시지 정제."""

import re
from enum import Enum

# 제어 문자 (0x00-0x1F, 0x7F)
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x1F\x7F]")


class ErrorKind(Enum):
    """실패 결과의 에러 분류."""

    CONFIGURATION = "configuration"
    PARSE = "parse"
    UNEXPECTED = "unexpected"


class SqlShardError(Exception):
    """sqlshard 기본 예외."""

    kind = ErrorKind.UNEXPECTED


class ConfigurationError(SqlShardError):
    """설정 불변식 위반 (빈 테이블 목록, 잘못된 식별자, SELECT * 등)."""

    kind = ErrorKind.CONFIGURATION


class ParseError(SqlShardError):
    """SQL/코드 형태 검사 실패 또는 추출 결과 없음."""

    kind = ErrorKind.PARSE


def sanitize_message(message: str) -> str:
    """에러 메시지에서 제어 문자를 제거한다.

    Args:
        message: 원본 메시지

    Returns:
        제어 문자가 제거된 메시지
    """
    return CONTROL_CHAR_PATTERN.sub("", message)


def classify(error: Exception) -> ErrorKind:
    """예외를 에러 분류로 변환한다."""
    if isinstance(error, SqlShardError):
        return error.kind
    return ErrorKind.UNEXPECTED
