"""Solana RPC integration."""

from solmind.data.solana.client import TOKEN_PROGRAM_ID, SolanaRPCClient
from solmind.data.solana.exceptions import SolanaError, SolanaRPCError
from solmind.data.solana.signer import KeypairSigner, TransactionSigner

__all__ = [
    "KeypairSigner",
    "SolanaError",
    "SolanaRPCClient",
    "SolanaRPCError",
    "TOKEN_PROGRAM_ID",
    "TransactionSigner",
]
