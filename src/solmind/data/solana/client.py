"""Solana JSON-RPC client for wallet history and transaction submission."""

import asyncio
import base64
from datetime import datetime, timezone
from typing import Any

import httpx

from solmind.config.settings import SolanaConfig
from solmind.data.models import ConfirmationResult, TokenHolding, TransactionRecord
from solmind.data.solana.exceptions import SolanaRPCError
from solmind.utils.logging import get_logger

logger = get_logger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


class SolanaRPCClient:
    """Client for a Solana JSON-RPC node.

    Implements the blockchain data provider used by the wallet state
    aggregator and the transaction submission path used by the trader.
    """

    def __init__(
        self,
        config: SolanaConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize RPC client.

        Args:
            config: Solana settings; defaults are used when omitted.
            http: Shared HTTP client. One is created (and owned) when omitted.
        """
        self.config = config or SolanaConfig()
        self.rpc_url = self.config.rpc_url
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            timeout=30.0,
            headers={"Content-Type": "application/json"},
        )
        self._request_id = 0

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        """Issue a JSON-RPC call and return its ``result``.

        Raises:
            SolanaRPCError: On transport failure or an RPC error object.
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        try:
            response = await self._http.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error("RPC {} failed: {}", method, str(e))
            raise SolanaRPCError(f"RPC {method} failed: {e}", method=method) from e
        except ValueError as e:
            raise SolanaRPCError(f"RPC {method} returned invalid JSON", method=method) from e

        if "error" in data:
            error = data["error"] or {}
            logger.error("RPC {} error: {}", method, error)
            raise SolanaRPCError(
                f"RPC {method} error: {error.get('message', error)}",
                method=method,
                code=error.get("code"),
            )
        return data.get("result")

    async def get_signatures_for_address(
        self, address: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Get recent transaction signatures for an address, newest first."""
        result = await self._rpc(
            "getSignaturesForAddress",
            [address, {"limit": limit or self.config.history_limit}],
        )
        return result or []

    async def get_transaction(self, signature: str) -> dict[str, Any] | None:
        """Get a confirmed transaction by signature."""
        return await self._rpc(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "json",
                    "maxSupportedTransactionVersion": 0,
                    "commitment": self.config.commitment,
                },
            ],
        )

    async def get_transaction_history(self, address: str) -> list[TransactionRecord]:
        """Get recent transactions for a wallet, newest first.

        Args:
            address: Wallet address.

        Returns:
            Transaction records with fee and native balance movement.
        """
        signatures = await self.get_signatures_for_address(address)
        details = await asyncio.gather(
            *(self.get_transaction(sig["signature"]) for sig in signatures)
        )

        records = []
        for sig, tx in zip(signatures, details):
            meta = (tx or {}).get("meta") or {}
            pre_balances = meta.get("preBalances") or [0]
            post_balances = meta.get("postBalances") or [0]
            block_time = sig.get("blockTime") or (tx or {}).get("blockTime")
            records.append(
                TransactionRecord(
                    signature=sig["signature"],
                    block_time=(
                        datetime.fromtimestamp(block_time, tz=timezone.utc)
                        if block_time
                        else None
                    ),
                    fee=int(meta.get("fee") or 0),
                    pre_balance=int(pre_balances[0]),
                    post_balance=int(post_balances[0]),
                    err=sig.get("err"),
                )
            )
        return records

    async def get_token_accounts(self, address: str) -> list[TokenHolding]:
        """Get SPL token accounts owned by a wallet."""
        result = await self._rpc(
            "getTokenAccountsByOwner",
            [address, {"programId": TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed"}],
        )

        holdings = []
        for account in (result or {}).get("value", []):
            info = account["account"]["data"]["parsed"]["info"]
            token_amount = info.get("tokenAmount", {})
            decimals = int(token_amount.get("decimals", 0))
            holdings.append(
                TokenHolding(
                    address=info["mint"],
                    decimals=decimals,
                    balance=int(token_amount.get("amount", 0)) / 10**decimals,
                )
            )
        return holdings

    async def get_account_info(self, address: str) -> dict[str, Any] | None:
        """Get parsed account info, or None if the account does not exist."""
        result = await self._rpc("getAccountInfo", [address, {"encoding": "jsonParsed"}])
        return (result or {}).get("value")

    async def send_transaction(self, transaction: bytes) -> str:
        """Submit a signed transaction.

        Args:
            transaction: Serialized signed transaction.

        Returns:
            Transaction signature.
        """
        encoded = base64.b64encode(transaction).decode("ascii")
        signature = await self._rpc(
            "sendTransaction",
            [
                encoded,
                {
                    "encoding": "base64",
                    "skipPreflight": False,
                    "preflightCommitment": self.config.commitment,
                },
            ],
        )
        logger.info("Transaction submitted: {}", signature)
        return signature

    async def get_signature_status(self, signature: str) -> dict[str, Any] | None:
        """Get the current status of a signature, or None if unseen."""
        result = await self._rpc(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": True}],
        )
        statuses = (result or {}).get("value") or [None]
        return statuses[0]

    async def confirm_transaction(
        self, signature: str, commitment: str | None = None
    ) -> ConfirmationResult:
        """Poll until a transaction reaches the commitment level or fails.

        This waits without bound; callers apply their own timeout.

        Args:
            signature: Transaction signature.
            commitment: Required commitment, defaults to the configured one.

        Returns:
            ConfirmationResult with ``err`` set when the transaction failed.
        """
        required = _COMMITMENT_RANK.get(commitment or self.config.commitment, 1)
        while True:
            status = await self.get_signature_status(signature)
            if status is not None:
                if status.get("err") is not None:
                    return ConfirmationResult(
                        signature=signature,
                        err=status["err"],
                        slot=status.get("slot"),
                        confirmation_status=status.get("confirmationStatus"),
                    )
                level = _COMMITMENT_RANK.get(status.get("confirmationStatus") or "", -1)
                if level >= required:
                    return ConfirmationResult(
                        signature=signature,
                        slot=status.get("slot"),
                        confirmation_status=status.get("confirmationStatus"),
                    )
            await asyncio.sleep(self.config.poll_interval)
