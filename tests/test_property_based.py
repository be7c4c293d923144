"""
Property-based tests for the MoveTx SDK.

These tests verify that properties hold true across many random inputs.
"""
from hypothesis import HealthCheck, given, settings, strategies as st

from movetx_sdk.encoding import compute_digest, normalize_public_key, normalize_signature
from movetx_sdk.signer import LocalAccountSigner
from movetx_sdk.authenticator import assemble, verify
from conftest import make_unsigned

key_strategy = st.binary(min_size=32, max_size=32)
sequence_strategy = st.integers(min_value=0, max_value=2 ** 64 - 1)
expiration_strategy = st.integers(min_value=0, max_value=2 ** 40)


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(key=key_strategy, scheme_byte=st.binary(min_size=1, max_size=1), prefixed=st.booleans())
def test_public_key_normalization(key, scheme_byte, prefixed):
    """A scheme-prefixed key and the bare key normalize to the same 64 hex chars"""
    prefix = "0x" if prefixed else ""
    bare = normalize_public_key(prefix + key.hex())
    with_scheme = normalize_public_key(prefix + (scheme_byte + key).hex())

    assert bare == key.hex()
    assert with_scheme == key.hex()
    assert len(bare) == 64


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(signature=st.binary(min_size=64, max_size=64), prefixed=st.booleans())
def test_signature_normalization(signature, prefixed):
    assert normalize_signature(("0x" if prefixed else "") + signature.hex()) == signature


@settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(sequence_number=sequence_strategy, expiration=expiration_strategy, fee_payer=st.booleans())
def test_digest_is_deterministic(sequence_number, expiration, fee_payer):
    """Identical transactions always produce identical digests"""
    first = make_unsigned(fee_payer=fee_payer, sequence_number=sequence_number, expiration=expiration)
    second = make_unsigned(fee_payer=fee_payer, sequence_number=sequence_number, expiration=expiration)
    assert compute_digest(first) == compute_digest(second)


@settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(sequence_number=sequence_strategy, expiration=expiration_strategy)
def test_fee_payer_flag_changes_digest(sequence_number, expiration):
    sponsored = make_unsigned(fee_payer=True, sequence_number=sequence_number, expiration=expiration)
    self_paid = make_unsigned(fee_payer=False, sequence_number=sequence_number, expiration=expiration)
    assert compute_digest(sponsored) != compute_digest(self_paid)


@settings(max_examples=25, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(seed=key_strategy, sequence_number=sequence_strategy, fee_payer=st.booleans())
def test_signature_binds_to_its_digest(seed, sequence_number, fee_payer):
    """An authenticator verifies only for the transaction it was produced for"""
    signer = LocalAccountSigner(seed)
    tx = make_unsigned(fee_payer=fee_payer, sequence_number=sequence_number)
    digest = compute_digest(tx)
    authenticator = assemble(signer.public_key_bytes, signer.sign_message(digest))

    assert verify(authenticator, digest)
    flipped = make_unsigned(fee_payer=not fee_payer, sequence_number=sequence_number)
    assert not verify(authenticator, compute_digest(flipped))
