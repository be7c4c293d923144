#!/usr/bin/env python3
"""
Example of executing an entry function with gas sponsorship.
"""
import logging
import os

from movetx_sdk import (
    CallIntent,
    ChainExecutionFailed,
    LocalAccountSigner,
    SponsorshipDenied,
    TransactionClient,
    WalletSession,
)


def main():
    """
    Demonstrate a sponsored call with automatic fallback.

    This example shows how to:
    1. Bind a locally held key to a wallet session
    2. Check the remaining sponsorship quota
    3. Execute a call, falling back to a self-paid transaction if needed
    4. Get a block explorer URL for the transaction
    """
    logging.basicConfig(level=logging.INFO)

    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    SPONSORSHIP_URL = os.environ.get("SPONSORSHIP_URL")
    FUNCTION = os.environ.get("FUNCTION", "0x1::aptos_account::transfer")
    RECIPIENT = os.environ.get("RECIPIENT", "0x1")

    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    signer = LocalAccountSigner(PRIVATE_KEY)
    client = TransactionClient(
        WalletSession(native_signer=signer),
        network="testnet",
        sponsorship_url=SPONSORSHIP_URL
    )
    print(f"Sender: {signer.address}")

    availability = client.check_sponsorship_availability()
    print(f"Sponsorship available: {availability.available} "
          f"({availability.daily_used}/{availability.daily_limit} used today)")

    intent = CallIntent(function=FUNCTION, function_arguments=[RECIPIENT, 1])
    try:
        outcome = client.execute_call(intent)
    except SponsorshipDenied as e:
        print(f"Sponsorship denied: {e}")
        return
    except ChainExecutionFailed as e:
        print(f"Transaction {e.transaction_hash} aborted: {e.abort_reason}")
        return

    print(f"Transaction hash: {outcome.transaction_hash}")
    print(f"Gas sponsored: {outcome.sponsored}")
    if outcome.fallback_reason:
        print(f"Fell back to self-paid submission: {outcome.fallback_reason}")
    print(f"Explorer: {client.tx_url(outcome.transaction_hash)}")


if __name__ == "__main__":
    main()
