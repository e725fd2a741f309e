"""Tests for exit codes and error descriptions."""

import pytest

from refdocs.exit_codes import (
    BUILD_ERROR,
    CONFIG_ERROR,
    DATA_ERROR,
    FILESYSTEM_ERROR,
    GENERAL_ERROR,
    INTERRUPTED,
    TEMPLATE_ERROR,
    VCS_ERROR,
    BuildError,
    CommandError,
    ConfigurationError,
    FilesystemError,
    RefdocsError,
    SerializationError,
    TemplateError,
    VCSError,
    EXCEPTION_EXIT_CODES,
    describe_error,
    get_exit_code_for_exception,
)


@pytest.mark.parametrize("exc, code", [
    (VCSError("x"), VCS_ERROR),
    (ConfigurationError("x"), CONFIG_ERROR),
    (BuildError("x"), BUILD_ERROR),
    (FilesystemError("x"), FILESYSTEM_ERROR),
    (TemplateError("x"), TEMPLATE_ERROR),
    (SerializationError("x"), DATA_ERROR),
])
def test_error_kinds_have_distinct_codes(exc, code):
    assert isinstance(exc, RefdocsError)
    assert exc.exit_code == code
    assert get_exit_code_for_exception(exc) == code


def test_builtin_exceptions():
    assert get_exit_code_for_exception(KeyboardInterrupt()) == INTERRUPTED
    assert get_exit_code_for_exception(RuntimeError()) == GENERAL_ERROR
    assert get_exit_code_for_exception(CommandError("x", 9)) == 9
    assert get_exit_code_for_exception(ValueError("bad")) == GENERAL_ERROR
    assert EXCEPTION_EXIT_CODES == {"KeyboardInterrupt": INTERRUPTED}


def test_build_error_includes_stderr():
    err = BuildError("doxygen failed with status 1", stderr="error: bad input\n", returncode=1)
    assert str(err) == "doxygen failed with status 1\nerror: bad input"
    assert str(BuildError("plain")) == "plain"


class TestDescribeError:

    def test_single(self):
        assert describe_error(VCSError("failed to check out 'v1'")) == "failed to check out 'v1'"

    def test_chain(self):
        try:
            try:
                raise FileNotFoundError("Doxyfile: no such file")
            except OSError as e:
                raise ConfigurationError("failed to read configuration file Doxyfile") from e
        except ConfigurationError as e:
            err = e

        assert describe_error(err) == (
            "failed to read configuration file Doxyfile: Doxyfile: no such file"
        )

    def test_suppressed_context(self):
        try:
            try:
                raise ValueError("hidden")
            except ValueError:
                raise FilesystemError("shown") from None
        except FilesystemError as e:
            err = e

        assert describe_error(err) == "shown"

    def test_empty_message_uses_class_name(self):
        assert describe_error(RuntimeError()) == "RuntimeError"
