"""debridge_swap: cross-chain swaps through the DeBridge Liquidity Network."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx
from pydantic import BaseModel, Field, model_validator
from web3 import Web3

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action, get_integrations
from gasless_agentkit.amounts import to_base_units
from gasless_agentkit.chains import NATIVE_TOKEN_ADDRESS, is_supported_chain, resolve_token
from gasless_agentkit.services.transactions import (
    ensure_allowance,
    get_decimals,
    send_transaction,
    wait_for_transaction,
)
from gasless_agentkit.types import Transaction
from gasless_agentkit.wallet.provider import read_balance

logger = logging.getLogger("gasless_agentkit.actions.debridge_swap")

DLN_SOURCE_CONTRACT = "0x663DC15D3C1aC63ff12E45Ab68FeA3F0a883C251"

# Smallest amounts DeBridge accepts, per token and chain, to cover operating costs.
TOKEN_MINIMUMS: dict[str, dict[int, str]] = {
    "USDT": {43114: "1.0", 56: "1.0", 1: "0.5", 10: "0.5", 42161: "0.5"},
    "USDC": {43114: "1.0", 56: "1.0", 1: "0.5"},
}
DEFAULT_MINIMUM = "1.0"

DEBRIDGE_SWAP_PROMPT = """
This tool allows you to swap tokens across different chains using DeBridge Liquidity Network (DLN).

Required inputs:
- src_chain_token_in: Source token address or symbol (use 'eth' for native ETH)
- src_chain_token_in_amount: Amount of source token to swap (or 'auto' if specifying destination amount)
- dst_chain_token_out: Destination token address or symbol
- dst_chain_token_out_amount: Amount of destination token to receive (or 'auto' if specifying source amount)
- dst_chain_token_out_recipient: Address to receive the swapped tokens

Optional inputs:
- src_chain_id: Source chain ID (defaults to current wallet chain)
- dst_chain_id: Destination chain ID
- wait: Whether to wait for transaction confirmation (default: false)
- affiliate_fee_percent: Percentage of the fee to be paid to affiliate_fee_recipient (default: 0)
- affiliate_fee_recipient: Address to receive the affiliate fee

Supported networks: Avalanche (43114), BNB Chain (56), Metis (1088), Base (8453), Fantom (250), Moonbeam (1284)

Notes:
- One of src_chain_token_in_amount or dst_chain_token_out_amount must be a specific value (not both 'auto')
- The wallet must have sufficient balance of the source token
- Cross-chain swaps may take several minutes to complete
"""


class DebridgeSwapInput(BaseModel):
    src_chain_token_in: str = Field(
        ..., description="The source token address or symbol (use 'eth' for native ETH)"
    )
    src_chain_token_in_amount: str = Field(
        ...,
        description="The amount of source token to swap (or 'auto' if specifying destination amount)",
    )
    dst_chain_token_out: str = Field(..., description="The destination token address or symbol")
    dst_chain_token_out_amount: str = Field(
        "auto",
        description="The amount of destination token to receive (or 'auto' if specifying source amount)",
    )
    dst_chain_token_out_recipient: str = Field(
        ..., description="The address to receive the swapped tokens"
    )
    src_chain_id: Optional[int] = Field(
        None, description="The source chain ID (defaults to current wallet chain)"
    )
    dst_chain_id: Optional[int] = Field(None, description="The destination chain ID")
    wait: bool = Field(False, description="Whether to wait for transaction confirmation")
    affiliate_fee_percent: float = Field(
        0, description="Percentage of the fee to be paid to affiliate_fee_recipient"
    )
    affiliate_fee_recipient: Optional[str] = Field(
        None, description="Address to receive the affiliate fee"
    )

    @model_validator(mode="after")
    def _one_amount_fixed(self) -> DebridgeSwapInput:
        if (
            self.src_chain_token_in_amount.lower() == "auto"
            and self.dst_chain_token_out_amount.lower() == "auto"
        ):
            raise ValueError(
                "Either src_chain_token_in_amount or dst_chain_token_out_amount must be specified"
            )
        return self


def check_minimum(token: str, chain_id: int, amount: str) -> str | None:
    """Return an error message if *amount* is below DeBridge's minimum."""
    if amount.lower() == "auto":
        return None
    token_key = token.upper()
    minimum = TOKEN_MINIMUMS.get(token_key, {}).get(chain_id, DEFAULT_MINIMUM)
    try:
        too_small = Decimal(amount) < Decimal(minimum)
    except InvalidOperation:
        return f"Error: Invalid amount {amount!r}"
    if too_small:
        return (
            f"Error: Amount too small for cross-chain swap. For {token_key} on chain {chain_id}, "
            f"the minimum amount is {minimum} to cover operational costs."
        )
    return None


async def create_order(params: dict[str, str]) -> dict:
    settings = get_integrations()
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        resp = await client.get(
            f"{settings.debridge_api_url}/dln/order/create-tx",
            params=params,
            headers={"Accept": "application/json"},
        )
    if resp.status_code >= 400:
        raise DebridgeApiError(resp.text, _error_id(resp))
    return resp.json()


class DebridgeApiError(Exception):
    def __init__(self, message: str, error_id: str | None = None) -> None:
        self.error_id = error_id
        super().__init__(message)


def _error_id(resp: httpx.Response) -> str | None:
    try:
        return resp.json().get("errorId")
    except ValueError:
        return None


async def debridge_swap(account, args: DebridgeSwapInput) -> str:
    src_chain_id = args.src_chain_id or account.chain_id

    # Runs before any network call.
    minimum_error = check_minimum(args.src_chain_token_in, src_chain_id, args.src_chain_token_in_amount)
    if minimum_error:
        return minimum_error

    if args.dst_chain_id and not is_supported_chain(args.dst_chain_id):
        return f"Error: Destination chain ID {args.dst_chain_id} is not supported"

    src_token = resolve_token(src_chain_id, args.src_chain_token_in)
    if src_token is None:
        return (
            f'Error: Could not resolve source token symbol "{args.src_chain_token_in}" '
            f"to an address on chain {src_chain_id}"
        )
    dst_chain = args.dst_chain_id or src_chain_id
    dst_token = resolve_token(dst_chain, args.dst_chain_token_out)
    if dst_token is None:
        return (
            f'Error: Could not resolve destination token symbol "{args.dst_chain_token_out}" '
            f"to an address on chain {args.dst_chain_id}"
        )

    try:
        is_native = src_token.lower() == NATIVE_TOKEN_ADDRESS.lower()
        owner = await account.get_address()

        amount_in: int | None = None
        if args.src_chain_token_in_amount.lower() != "auto":
            decimals = 18 if is_native else get_decimals(account, src_token)
            amount_in = to_base_units(args.src_chain_token_in_amount, decimals)
            if amount_in <= 0:
                return f"Error: Invalid amount. After conversion, got {amount_in} which is not a positive integer."

        if not is_native:
            balance = read_balance(account.web3, src_token, owner)
            needed = balance if amount_in is None else amount_in
            if balance < needed:
                return f"Error: Insufficient token balance. Have {balance} but need {needed}"
            approval = await ensure_allowance(account, src_token, DLN_SOURCE_CONTRACT, needed)
            if approval is not None and not approval.success:
                return f"Token approval failed: {approval.error}"

        params = {
            "srcChainId": str(src_chain_id),
            "srcChainTokenIn": src_token,
            "srcChainTokenInAmount": "auto" if amount_in is None else str(amount_in),
            "dstChainId": str(args.dst_chain_id) if args.dst_chain_id else "",
            "dstChainTokenOut": dst_token,
            "dstChainTokenOutAmount": args.dst_chain_token_out_amount,
            "dstChainTokenOutRecipient": args.dst_chain_token_out_recipient,
            "srcChainOrderAuthorityAddress": owner,
            "dstChainOrderAuthorityAddress": args.dst_chain_token_out_recipient,
            "prependOperatingExpense": "true",
            "affiliateFeePercent": str(args.affiliate_fee_percent),
        }
        if args.affiliate_fee_recipient:
            params["affiliateFeeRecipient"] = args.affiliate_fee_recipient

        order = await create_order(params)
        order_tx = order.get("tx") or {}
        if not order_tx.get("to") or not order_tx.get("data"):
            return f"Error: Invalid response from DeBridge API: {order}"

        response = await send_transaction(
            account,
            Transaction(
                to=Web3.to_checksum_address(order_tx["to"]),
                data=order_tx["data"],
                value=int(order_tx.get("value") or 0),
            ),
        )
        if not response.success:
            return f"Transaction failed: {response.error}"
    except DebridgeApiError as e:
        if e.error_id == "ERROR_LOW_GIVE_AMOUNT" or "ERROR_LOW_GIVE_AMOUNT" in str(e):
            return (
                f"Error: The amount you're trying to swap ({args.src_chain_token_in_amount} "
                f"{args.src_chain_token_in}) is too small to cover the operational costs of a "
                f"cross-chain swap. Try increasing the amount to at least 1.0 {args.src_chain_token_in}."
            )
        logger.error("DeBridge API error: %s", e)
        return f"Error creating DeBridge swap: {e}"
    except EXPECTED_ERRORS as e:
        return f"Error creating DeBridge swap: {e}"

    summary = (
        f"From: {args.src_chain_token_in} (Chain ID: {src_chain_id})\n"
        f"To: {args.dst_chain_token_out} (Chain ID: {args.dst_chain_id})\n"
        f"Recipient: {args.dst_chain_token_out_recipient}\n"
    )
    order_id = order.get("orderId")

    if args.wait:
        try:
            status = await wait_for_transaction(account, response)
        except EXPECTED_ERRORS as e:
            logger.error("Waiting for DeBridge swap %s failed: %s", response.user_op_hash, e)
            return f"Error creating DeBridge swap: {e}"
        if status.status != "confirmed":
            return f"Transaction status: {status.status}\n{status.error or ''}"
        return (
            "Successfully initiated DeBridge swap!\n\n"
            f"{summary}\n"
            f"Transaction confirmed in block {status.block_number}!\n"
            f"Order ID: {order_id}\n\n"
            "Note: Cross-chain swaps typically take a few minutes to complete.\n"
            "You can track the status of the swap using the order ID."
        )

    return (
        "Successfully submitted DeBridge swap!\n\n"
        f"{summary}\n"
        f"{response.message or 'Transaction submitted'}\n"
        f"Order ID: {order_id}\n\n"
        "Note: Cross-chain swaps typically take a few minutes to complete.\n"
        "You can either:\n"
        f"1. Check the status with check_transaction using {response.user_op_hash or response.tx_hash}\n"
        "2. Or next time, ask to wait for confirmation using the 'wait' parameter"
    )


DEBRIDGE_SWAP_ACTION = Action(
    name="debridge_swap",
    description=DEBRIDGE_SWAP_PROMPT,
    args_schema=DebridgeSwapInput,
    func=debridge_swap,
)
