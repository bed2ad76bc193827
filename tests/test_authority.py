"""Tests for the authority capability."""

import pytest

from rolegate.authority import AuthorityResult, ErrorKind, InMemoryAuthority
from rolegate.exceptions import InvalidCredentialError, TransientAuthorityError
from rolegate.identifiers import mask_credential


class TestAuthorityResult:
    """Tests for AuthorityResult."""

    def test_success(self):
        result = AuthorityResult.success("BlueWorld")

        assert result.ok
        assert result.value == "BlueWorld"
        assert result.error is None

    def test_failure(self):
        result = AuthorityResult.failure(ErrorKind.NETWORK_ERROR)

        assert not result.ok
        assert result.error is ErrorKind.NETWORK_ERROR
        assert result.message == "network_error"

    def test_needs_exactly_one(self):
        """Test that a result is either a value or an error."""
        with pytest.raises(ValueError):
            AuthorityResult()
        with pytest.raises(ValueError):
            AuthorityResult(value="BlueWorld", error=ErrorKind.UNEXPECTED)

    def test_from_authority_error(self):
        result = AuthorityResult.from_exception(InvalidCredentialError("key deleted"))

        assert result.error is ErrorKind.INVALID_CREDENTIAL
        assert result.message == "key deleted"

    def test_from_other_exception(self):
        result = AuthorityResult.from_exception(KeyError("worlds"))

        assert result.error is ErrorKind.UNEXPECTED
        assert result.message.startswith("KeyError")


class TestInMemoryAuthority:
    """Tests for InMemoryAuthority."""

    @pytest.mark.asyncio
    async def test_known_credential(self):
        authority = InMemoryAuthority(roles={"key": "BlueWorld"})

        result = await authority.lookup("key")

        assert result == AuthorityResult.success("BlueWorld")
        assert authority.calls == ["key"]

    @pytest.mark.asyncio
    async def test_unknown_credential(self):
        result = await InMemoryAuthority().lookup("key")
        assert result.error is ErrorKind.INVALID_CREDENTIAL

    @pytest.mark.asyncio
    async def test_error_entry(self):
        authority = InMemoryAuthority(roles={"key": ErrorKind.DUPLICATE_CONFIGURATION})

        result = await authority.lookup("key")

        assert result.error is ErrorKind.DUPLICATE_CONFIGURATION

    @pytest.mark.asyncio
    async def test_lookup_maps_raised_errors(self):
        """Test that lookup turns raised exceptions into failed results."""
        authority = InMemoryAuthority(roles={"key": TransientAuthorityError("timed out")})

        with pytest.raises(TransientAuthorityError):
            await authority.validate("key")
        result = await authority.lookup("key")

        assert result.error is ErrorKind.NETWORK_ERROR
        assert result.message == "timed out"

    @pytest.mark.asyncio
    async def test_revoke(self):
        authority = InMemoryAuthority(roles={"key": "BlueWorld"}, accounts={"key": "ACC"})

        authority.revoke("key")

        assert (await authority.lookup("key")).error is ErrorKind.INVALID_CREDENTIAL
        assert (await authority.resolve_account("key")).error is ErrorKind.INVALID_CREDENTIAL

    @pytest.mark.asyncio
    async def test_resolve_account(self):
        authority = InMemoryAuthority(accounts={"key": "ACC-GUID"})

        result = await authority.resolve_account("key")

        assert result.value == "ACC-GUID"


class TestMaskCredential:
    """Tests for mask_credential."""

    def test_keeps_prefix(self):
        masked = mask_credential("ABCDEFGH-1234-5678")
        assert masked.startswith("ABCDEFGH")
        assert "5678" not in masked

    def test_short_values_fully_masked(self):
        assert mask_credential("abc") == "***"
