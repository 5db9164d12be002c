"""
keytree Usage Examples

This file demonstrates key features of the keytree library.
"""

import asyncio
import logging

from keytree import HDNode, KeystoreOptions, Transaction, Wallet, derive_wallets
from keytree.crypto import generate_mnemonic, recover_sender
from keytree.utils.validation import to_wei

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

MNEMONIC = "upset fuel enhance depart portion hope core animal innocent will athlete snack"
RECIPIENT = "0x933b946c4fec43372c5580096408d25b3c7936c5"

# Cheap scrypt cost so the demo runs quickly
DEMO_KEYSTORE_OPTIONS = KeystoreOptions(scrypt_n=1 << 12)


def restore_example():
    """Example 1: Restore node and wallet from a mnemonic."""
    print("\n=== Restore Example ===")

    root = HDNode.from_mnemonic(MNEMONIC)
    print(f"Root fingerprint: {root.fingerprint.hex()}")
    print(f"Root xpub: {root.extended_public_key}")

    wallet = Wallet.from_mnemonic(MNEMONIC)
    print(f"Wallet at {wallet.path}: {wallet.address}")


def random_wallet_example():
    """Example 2: Random mnemonic and wallet."""
    print("\n=== Random Wallet Example ===")

    mnemonic = generate_mnemonic(strength=128)  # 12 words
    print(f"Mnemonic has {len(mnemonic.split())} words")

    wallet = Wallet.create_random()
    print(f"Random wallet: {wallet.address}")


async def keystore_example():
    """Example 3: Encrypt and decrypt a wallet."""
    print("\n=== Keystore Example ===")

    password = "p@$$word"
    wallet = Wallet.create_random()

    encrypted = await wallet.encrypt_async(password, DEMO_KEYSTORE_OPTIONS)
    print(f"Keystore JSON: {len(encrypted)} characters")

    decrypted = Wallet.from_encrypted_json(encrypted, password)
    print(f"Decrypted: {decrypted}")
    print(f"Mnemonic restored: {decrypted == wallet}")


def derive_example():
    """Example 4: Derive five accounts."""
    print("\n=== Derivation Example ===")

    for wallet in derive_wallets(MNEMONIC, "m/44'/60'/0'/0", count=5):
        print(f"  {wallet.path}: {wallet.address}")


def sign_transaction_example():
    """Example 5: Sign a transaction."""
    print("\n=== Transaction Signing Example ===")

    wallet = derive_wallets(MNEMONIC, "m/44'/60'/0'/0", count=5)[1]
    tx = Transaction(
        nonce=0,
        gas_limit=21000,
        gas_price=to_wei("2", unit_decimals=9),
        to=RECIPIENT,
        value=to_wei("1.0"),
        data="0x",
    )

    raw = wallet.sign_transaction(tx)
    print(f"Signed transaction: 0x{raw.hex()}")
    print(f"Sender: {recover_sender(raw)}")


async def main():
    """Run all examples."""
    examples = [
        restore_example,
        random_wallet_example,
        keystore_example,
        derive_example,
        sign_transaction_example,
    ]

    for example in examples:
        try:
            result = example()
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            print(f"Error in {example.__name__}: {e}")


if __name__ == "__main__":
    # Run examples
    asyncio.run(main())
