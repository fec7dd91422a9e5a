"""에러 분류 및 로깅 설정 테스트."""

import logging


class TestErrorKind:
    """예외 → 에러 분류 변환 테스트."""

    def test_configuration_error_kind(self):
        from sqlshard.core.errors import ConfigurationError, ErrorKind, classify

        assert classify(ConfigurationError("bad")) is ErrorKind.CONFIGURATION

    def test_parse_error_kind(self):
        from sqlshard.core.errors import ErrorKind, ParseError, classify

        assert classify(ParseError("bad")) is ErrorKind.PARSE

    def test_unknown_exception_is_unexpected(self):
        """sqlshard 예외가 아니면 UNEXPECTED로 분류해야 한다."""
        from sqlshard.core.errors import ErrorKind, classify

        assert classify(KeyError("x")) is ErrorKind.UNEXPECTED


class TestSanitizeMessage:
    """에러 메시지 정제 테스트."""

    def test_remove_control_characters(self):
        """제어 문자를 제거해야 한다."""
        from sqlshard.core.errors import sanitize_message

        assert sanitize_message("bad\x00 input\x1b\x7f") == "bad input"

    def test_keep_plain_message(self):
        from sqlshard.core.errors import sanitize_message

        assert sanitize_message("분표 수는 0보다 커야 합니다") == "분표 수는 0보다 커야 합니다"


class TestSetupLogging:
    """로깅 설정 테스트."""

    def test_setup_logging_sets_level(self):
        """지정한 레벨이 sqlshard 로거에 적용되어야 한다."""
        from sqlshard.core.logging import setup_logging

        setup_logging("debug")

        logger = logging.getLogger("sqlshard")
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

        setup_logging("WARNING")
