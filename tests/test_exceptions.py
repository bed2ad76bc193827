"""Tests for rolegate exception hierarchy."""

from rolegate.exceptions import (
    AuthorityConfigurationError,
    AuthorityError,
    ConfigurationError,
    ErrorKind,
    InvalidCredentialError,
    RolegateError,
    StoreError,
    TransientAuthorityError,
)


class TestRolegateError:
    """Tests for base RolegateError."""

    def test_basic_error(self):
        """Test creating a basic error."""
        err = RolegateError("Something went wrong")
        assert str(err) == "Something went wrong"
        assert err.cause is None

    def test_error_with_cause(self):
        """Test error with underlying cause."""
        cause = ValueError("inner error")
        err = RolegateError("Outer error", cause=cause)
        assert "Outer error" in str(err)
        assert "inner error" in str(err)
        assert err.cause is cause

    def test_all_errors_inherit_from_base(self):
        """Test that all exceptions inherit from RolegateError."""
        exceptions = [
            ConfigurationError("test"),
            StoreError("test"),
            AuthorityError("test"),
            InvalidCredentialError(),
            AuthorityConfigurationError("test"),
            TransientAuthorityError("test"),
        ]
        for exc in exceptions:
            assert isinstance(exc, RolegateError), f"{type(exc).__name__} should inherit from RolegateError"


class TestAuthorityErrors:
    """Tests for authority error kinds."""

    def test_default_kind_is_unexpected(self):
        assert AuthorityError("boom").kind is ErrorKind.UNEXPECTED

    def test_invalid_credential_kind(self):
        err = InvalidCredentialError()
        assert err.kind is ErrorKind.INVALID_CREDENTIAL
        assert isinstance(err, AuthorityError)

    def test_configuration_kind(self):
        err = AuthorityConfigurationError("world defined twice")
        assert err.kind is ErrorKind.DUPLICATE_CONFIGURATION

    def test_transient_network_kind(self):
        err = TransientAuthorityError("timeout")
        assert err.kind is ErrorKind.NETWORK_ERROR

    def test_transient_non_network_kind(self):
        err = TransientAuthorityError("upstream returned 500", network=False)
        assert err.kind is ErrorKind.UNEXPECTED

    def test_error_kind_str(self):
        assert str(ErrorKind.NETWORK_ERROR) == "network_error"
