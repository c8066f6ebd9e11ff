"""
Tests for exit codes and the error taxonomy.
"""

import json

import pytest

from glrelease.exit_codes import (
    API_ERROR,
    CONFIG_ERROR,
    DATA_ERROR,
    GENERAL_ERROR,
    NETWORK_ERROR,
    PERMISSION_ERROR,
    CommandError,
    ConfigurationError,
    ConflictError,
    GlobMismatchError,
    HostError,
    NotFoundError,
    TransientHostError,
    get_exit_code_for_exception,
)


class TestErrorTaxonomy:

    @pytest.mark.parametrize("error,code", [
        (ConfigurationError("bad filter"), CONFIG_ERROR),
        (GlobMismatchError("dist/*"), DATA_ERROR),
        (HostError("HTTP 401", status=401), API_ERROR),
        (NotFoundError("no tag"), API_ERROR),
        (ConflictError("exists"), API_ERROR),
        (TransientHostError("HTTP 503", status=503), NETWORK_ERROR),
    ])
    def test_exit_codes(self, error, code):
        assert isinstance(error, CommandError)
        assert error.exit_code == code
        assert get_exit_code_for_exception(error) == code

    def test_host_error_hierarchy(self):
        assert issubclass(NotFoundError, HostError)
        assert issubclass(ConflictError, HostError)
        assert issubclass(TransientHostError, HostError)
        assert NotFoundError("x").status == 404
        assert ConflictError("x").status == 409

    def test_glob_message(self):
        error = GlobMismatchError("dist/*.zip")
        assert str(error) == "could not find file that matches glob 'dist/*.zip'"
        assert error.pattern == "dist/*.zip"


class TestBuiltinExceptions:

    def test_json_decode_error(self):
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("{")
        assert get_exit_code_for_exception(exc_info.value) == CONFIG_ERROR

    def test_permission_error(self):
        assert get_exit_code_for_exception(PermissionError("denied")) == PERMISSION_ERROR

    def test_unknown_exception(self):
        assert get_exit_code_for_exception(RuntimeError("boom")) == GENERAL_ERROR
