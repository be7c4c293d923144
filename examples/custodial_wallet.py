#!/usr/bin/env python3
"""
Example of executing a call from a custodial (embedded) wallet.
"""
import json
import os

from movetx_sdk import (
    CallIntent,
    MoveTxError,
    RemoteCustodialSigner,
    TransactionClient,
    WalletSession,
)


def main():
    """
    Demonstrate a call signed by a remote custodial signing service.

    The user's linked accounts come from the wallet provider; the first
    Aptos-compatible wallet with a public key is used.
    """
    SIGNER_URL = os.environ.get("SIGNER_URL")
    SIGNER_API_KEY = os.environ.get("SIGNER_API_KEY")
    LINKED_ACCOUNTS = os.environ.get("LINKED_ACCOUNTS", "[]")
    SPONSORSHIP_URL = os.environ.get("SPONSORSHIP_URL")
    FUNCTION = os.environ.get("FUNCTION")

    if not SIGNER_URL or not FUNCTION:
        print("ERROR: SIGNER_URL and FUNCTION environment variables are required")
        return

    signer = RemoteCustodialSigner(SIGNER_URL, api_key=SIGNER_API_KEY)
    wallet = WalletSession.from_linked_accounts(json.loads(LINKED_ACCOUNTS), signer)
    client = TransactionClient(wallet, network="testnet", sponsorship_url=SPONSORSHIP_URL)

    # Argument types are read from the module ABI
    intent = CallIntent(function=FUNCTION, function_arguments=json.loads(os.environ.get("ARGUMENTS", "[]")))
    try:
        outcome = client.execute_call(intent)
    except MoveTxError as e:
        print(f"Call failed: {type(e).__name__}: {e}")
        return

    print(f"Transaction hash: {outcome.transaction_hash} (sponsored={outcome.sponsored})")
    print(f"Explorer: {client.tx_url(outcome.transaction_hash)}")


if __name__ == "__main__":
    main()
