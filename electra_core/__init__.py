"""
Electra wallet core - wallet state and key lifecycle for the Electra coin.

Key features:
- HD wallets from BIP-39 mnemonics (BIP-32 derivation)
- Random (legacy WIF) address imports
- Passphrase locking of every private key (AES-256-GCM)
- Guarded exports of ciphered or, explicitly, plaintext keys
- Balance lookups through a block explorer
- Lock / unlock / staking info delegated to a remote node over JSON-RPC
"""

__version__ = "1.0.0"
__all__ = [
    "address_store",
    "balance",
    "cipher",
    "config",
    "crypto_utils",
    "custody",
    "errors",
    "export_guard",
    "keys",
    "logging_config",
    "models",
    "rpc",
    "wallet",
    "web_services",
]
