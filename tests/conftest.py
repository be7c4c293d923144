"""
Pytest fixtures for the MoveTx SDK tests.
"""
import re
import time

import pytest
from aptos_sdk.transactions import EntryFunction, ModuleId, RawTransaction, TransactionPayload
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from movetx_sdk import builder as builder_module
from movetx_sdk._rate_limited_log import reset_rate_limits
from movetx_sdk.builder import UnsignedTransaction
from movetx_sdk.encoding import encode_argument, to_account_address
from movetx_sdk.models import CallIntent
from movetx_sdk.signer import LocalAccountSigner

# Constants for testing
TEST_FULLNODE_URL = "https://fullnode.example.com/v1"
TEST_SPONSOR_URL = "https://sponsor.example.com/api"
TEST_MODULE_ADDRESS = "0x" + "ab" * 32
TEST_FUNCTION = f"{TEST_MODULE_ADDRESS}::poll::vote"
TEST_PRIV_KEY = "0x" + "0123456789abcdef" * 4
TEST_CUSTODIAL_KEY = "0x" + "fedcba9876543210" * 4
TEST_CUSTODIAL_ADDRESS = "0x" + "cd" * 32
TEST_CHAIN_ID = 250
TEST_SEQUENCE_NUMBER = 7

ACCOUNT_URL = re.compile(re.escape(TEST_FULLNODE_URL) + r"/accounts/0x[0-9a-f]{64}$")
BY_HASH_URL = re.compile(re.escape(TEST_FULLNODE_URL) + r"/transactions/by_hash/0x[0-9a-zA-Z]+$")

VOTE_ABI = {
    "address": TEST_MODULE_ADDRESS,
    "name": "poll",
    "exposed_functions": [
        {
            "name": "vote",
            "visibility": "public",
            "is_entry": True,
            "is_view": False,
            "generic_type_params": [],
            "params": ["&signer", "u64", "u8"],
            "return": []
        },
        {
            "name": "get_poll",
            "visibility": "public",
            "is_entry": False,
            "is_view": True,
            "generic_type_params": [],
            "params": ["u64"],
            "return": ["0x1::string::String"]
        }
    ]
}


class FakeCustodialSigner:
    """Custodial signer double that signs locally and records every request"""

    def __init__(self, private_key_hex: str = TEST_CUSTODIAL_KEY, key_prefix: str = "00"):
        self._key = Ed25519PrivateKey.from_private_bytes(bytes.fromhex(private_key_hex[2:]))
        signer = LocalAccountSigner(self._key)
        # Custodial services report the key with a leading scheme byte
        self.public_key = "0x" + key_prefix + signer.public_key_bytes.hex()
        self.requests = []

    def sign_raw_hash(self, address, chain_type, hash):
        self.requests.append({"address": address, "chainType": chain_type, "hash": hash})
        signature = self._key.sign(bytes.fromhex(hash[2:]))
        return {"signature": "0x" + signature.hex()}


# Make time.sleep instantaneous so polling doesn't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _reset_caches():
    builder_module.clear_abi_cache()
    reset_rate_limits()
    yield
    builder_module.clear_abi_cache()
    reset_rate_limits()


@pytest.fixture
def native_signer():
    return LocalAccountSigner(TEST_PRIV_KEY)


@pytest.fixture
def custodial_signer():
    return FakeCustodialSigner()


@pytest.fixture
def vote_intent():
    return CallIntent(function=TEST_FUNCTION, function_arguments=[3, 1])


def make_unsigned(
    fee_payer: bool = False,
    sequence_number: int = TEST_SEQUENCE_NUMBER,
    sender: str = TEST_CUSTODIAL_ADDRESS,
    poll_id: int = 3,
    expiration: int = 1_700_000_000,
) -> UnsignedTransaction:
    """Build an UnsignedTransaction without touching the network"""
    intent = CallIntent(function=TEST_FUNCTION, function_arguments=[poll_id, 1], argument_types=["u64", "u8"])
    payload = TransactionPayload(
        EntryFunction(
            ModuleId(to_account_address(TEST_MODULE_ADDRESS), "poll"),
            "vote",
            [],
            [encode_argument("u64", poll_id), encode_argument("u8", 1)],
        )
    )
    raw = RawTransaction(
        to_account_address(sender),
        sequence_number,
        payload,
        200000,
        100,
        expiration,
        TEST_CHAIN_ID,
    )
    return UnsignedTransaction(
        sender=sender,
        intent=intent,
        fee_payer_requested=fee_payer,
        raw_transaction=raw,
    )


@pytest.fixture
def mock_ledger(requests_mock):
    """Mock the fullnode REST API with a funded account and an executed transaction"""
    routes = {
        "account": requests_mock.get(
            ACCOUNT_URL,
            json={"sequence_number": str(TEST_SEQUENCE_NUMBER), "authentication_key": "0x" + "00" * 32}
        ),
        "ledger_info": requests_mock.get(
            TEST_FULLNODE_URL,
            json={"chain_id": TEST_CHAIN_ID, "ledger_version": "1000", "ledger_timestamp": "1700000000000000"}
        ),
        "gas": requests_mock.get(f"{TEST_FULLNODE_URL}/estimate_gas_price", json={"gas_estimate": 150}),
        "module": requests_mock.get(
            f"{TEST_FULLNODE_URL}/accounts/{TEST_MODULE_ADDRESS}/module/poll",
            json={"bytecode": "0x00", "abi": VOTE_ABI}
        ),
        "submit": requests_mock.post(
            f"{TEST_FULLNODE_URL}/transactions",
            json={"hash": "0xdirect", "sender": TEST_CUSTODIAL_ADDRESS},
            status_code=202
        ),
        "by_hash": requests_mock.get(
            BY_HASH_URL,
            json={"type": "user_transaction", "success": True, "vm_status": "Executed successfully"}
        ),
    }
    return routes
