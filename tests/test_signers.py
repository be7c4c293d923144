"""
Tests for the native and custodial signers and the wallet session.
"""
import pytest
import requests
from aptos_sdk import ed25519
from aptos_sdk.account_address import AccountAddress
from nacl.signing import VerifyKey

from movetx_sdk.authenticator import assemble, verify
from movetx_sdk.encoding import compute_digest
from movetx_sdk.exceptions import InvalidSignature, NetworkError, SignerUnavailable
from movetx_sdk.signer import (
    CustodialSigner,
    LocalAccountSigner,
    NativeSigner,
    RemoteCustodialSigner,
    SignerKind,
    WalletSession,
    sign_digest,
)
from conftest import TEST_CUSTODIAL_ADDRESS, TEST_PRIV_KEY, FakeCustodialSigner, make_unsigned

SIGNER_URL = "https://signer.example.com"


class TestLocalAccountSigner:

    def test_address_derived_from_key(self):
        signer = LocalAccountSigner(TEST_PRIV_KEY)
        expected = AccountAddress.from_key(ed25519.PublicKey(VerifyKey(signer.public_key_bytes)))
        assert signer.address == "0x" + expected.address.hex()
        assert len(signer.address) == 66

    def test_explicit_address(self):
        signer = LocalAccountSigner(TEST_PRIV_KEY, address="0xcd")
        assert signer.address == "0x" + "0" * 62 + "cd"

    def test_accepts_bytes(self):
        from_hex = LocalAccountSigner(TEST_PRIV_KEY)
        from_bytes = LocalAccountSigner(bytes.fromhex(TEST_PRIV_KEY[2:]))
        assert from_hex.address == from_bytes.address

    def test_generate(self):
        assert LocalAccountSigner.generate().address != LocalAccountSigner.generate().address

    def test_sign_transaction(self):
        signer = LocalAccountSigner(TEST_PRIV_KEY)
        tx = make_unsigned(fee_payer=True, sender=signer.address)

        result = signer.sign_transaction(tx)

        assert verify(result.authenticator, compute_digest(tx))
        assert result.raw_transaction == tx.to_bytes()

    def test_refuses_fee_payer_role(self):
        signer = LocalAccountSigner(TEST_PRIV_KEY)
        with pytest.raises(ValueError):
            signer.sign_transaction(make_unsigned(), as_fee_payer=True)

    def test_is_native_signer(self):
        assert isinstance(LocalAccountSigner(TEST_PRIV_KEY), NativeSigner)


class TestSignDigest:

    def test_signature_over_digest(self):
        signer = FakeCustodialSigner()
        digest = compute_digest(make_unsigned(fee_payer=True))

        raw = sign_digest(signer, TEST_CUSTODIAL_ADDRESS, digest)

        assert signer.requests == [{"address": TEST_CUSTODIAL_ADDRESS, "chainType": "aptos", "hash": "0x" + digest.hex()}]
        assert raw.signer_address == TEST_CUSTODIAL_ADDRESS
        assert verify(assemble(signer.public_key, raw), digest)

    def test_missing_signature(self):
        class EmptySigner:
            def sign_raw_hash(self, address, chain_type, hash):
                return {}

        with pytest.raises(InvalidSignature):
            sign_digest(EmptySigner(), TEST_CUSTODIAL_ADDRESS, b"\x01")

    def test_is_custodial_signer(self):
        assert isinstance(FakeCustodialSigner(), CustodialSigner)


class TestRemoteCustodialSigner:

    def test_sign_raw_hash(self, requests_mock):
        route = requests_mock.post(f"{SIGNER_URL}/sign_raw_hash", json={"signature": "0x" + "ab" * 64})
        signer = RemoteCustodialSigner(SIGNER_URL + "/", api_key="secret")

        response = signer.sign_raw_hash(address=TEST_CUSTODIAL_ADDRESS, chain_type="aptos", hash="0x0102")

        assert response == {"signature": "0x" + "ab" * 64}
        assert route.last_request.json() == {"address": TEST_CUSTODIAL_ADDRESS, "chainType": "aptos", "hash": "0x0102"}
        assert route.last_request.headers["Authorization"] == "Bearer secret"

    @pytest.mark.parametrize("status", [401, 403, 404])
    def test_refused(self, requests_mock, status):
        requests_mock.post(f"{SIGNER_URL}/sign_raw_hash", status_code=status)
        with pytest.raises(SignerUnavailable):
            RemoteCustodialSigner(SIGNER_URL).sign_raw_hash(TEST_CUSTODIAL_ADDRESS, "aptos", "0x01")

    def test_server_error(self, requests_mock):
        requests_mock.post(f"{SIGNER_URL}/sign_raw_hash", status_code=500, text="oops")
        with pytest.raises(NetworkError):
            RemoteCustodialSigner(SIGNER_URL).sign_raw_hash(TEST_CUSTODIAL_ADDRESS, "aptos", "0x01")

    def test_transport_error(self, requests_mock):
        requests_mock.post(f"{SIGNER_URL}/sign_raw_hash", exc=requests.exceptions.ConnectionError)
        with pytest.raises(NetworkError):
            RemoteCustodialSigner(SIGNER_URL).sign_raw_hash(TEST_CUSTODIAL_ADDRESS, "aptos", "0x01")

    def test_invalid_json(self, requests_mock):
        requests_mock.post(f"{SIGNER_URL}/sign_raw_hash", text="nope")
        with pytest.raises(NetworkError):
            RemoteCustodialSigner(SIGNER_URL).sign_raw_hash(TEST_CUSTODIAL_ADDRESS, "aptos", "0x01")


class TestWalletSession:

    def test_native_session(self):
        signer = LocalAccountSigner(TEST_PRIV_KEY)
        session = WalletSession(native_signer=signer)
        assert session.address == signer.address
        assert session.signer_kind() is SignerKind.NATIVE
        assert session.bound_signer() is signer

    def test_custodial_session(self):
        signer = FakeCustodialSigner()
        session = WalletSession(address="0xCD", custodial_signer=signer, public_key=signer.public_key)
        assert session.signer_kind() is SignerKind.CUSTODIAL
        assert session.bound_signer() is signer
        assert session.normalized_address == "0x" + "0" * 62 + "cd"

    def test_both_signers_rejected(self):
        with pytest.raises(ValueError):
            WalletSession(native_signer=LocalAccountSigner(TEST_PRIV_KEY), custodial_signer=FakeCustodialSigner())

    def test_nothing_bound(self):
        with pytest.raises(SignerUnavailable):
            WalletSession().signer_kind()
        with pytest.raises(SignerUnavailable):
            WalletSession().normalized_address

    def test_custodial_missing_public_key(self):
        session = WalletSession(address=TEST_CUSTODIAL_ADDRESS, custodial_signer=FakeCustodialSigner())
        with pytest.raises(SignerUnavailable):
            session.signer_kind()

    def test_from_linked_accounts(self):
        signer = FakeCustodialSigner()
        accounts = [
            {"type": "email", "address": "user@example.com"},
            {"type": "wallet", "chainType": "ethereum", "address": "0x1234", "publicKey": "0x04"},
            {"type": "wallet", "chainType": "aptos", "address": "0xaa"},
            {"type": "wallet", "chainType": "aptos", "address": TEST_CUSTODIAL_ADDRESS,
             "publicKey": signer.public_key},
        ]

        session = WalletSession.from_linked_accounts(accounts, signer)

        assert session.address == TEST_CUSTODIAL_ADDRESS
        assert session.public_key == signer.public_key
        assert session.signer_kind() is SignerKind.CUSTODIAL

    def test_from_linked_accounts_none_usable(self):
        with pytest.raises(SignerUnavailable):
            WalletSession.from_linked_accounts([{"type": "wallet", "chainType": "ethereum"}], FakeCustodialSigner())
