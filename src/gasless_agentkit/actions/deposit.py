"""smart_deposit: wrap USDC into the confidential-token deposit contract on Avalanche."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field
from web3 import Web3

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action, get_integrations
from gasless_agentkit.amounts import to_base_units
from gasless_agentkit.chains import resolve_token_symbol
from gasless_agentkit.services.transactions import (
    encode_approve,
    send_transaction,
    wait_for_transaction,
)
from gasless_agentkit.types import Transaction
from gasless_agentkit.wallet.abi import encode_call

logger = logging.getLogger("gasless_agentkit.actions.deposit")

AVALANCHE_CHAIN_ID = 43114
SUPPORTED_TICKERS = {"USDC": 6}

SMART_DEPOSIT_PROMPT = """
This tool allows you to perform gas token deposits on Avalanche C-Chain.

It takes the following inputs:
- amount: The amount to deposit
- token_ticker: The token symbol (currently only USDC is supported)

USAGE GUIDANCE:
- Provide the amount to deposit in the input token's units
- Provide the token symbol (currently only "USDC" is supported)

EXAMPLES:
- "Deposit 50 USDC tokens"
- "Deposit 10 usdc"

Important notes:
- This action is only available on Avalanche C-Chain and only supports USDC token deposits.
- The approval is confirmed before the deposit is sent.
"""


class SmartDepositInput(BaseModel):
    amount: str = Field(..., description="The amount of tokens to deposit")
    token_ticker: str = Field(..., description="The token ticker (currently only 'USDC' is supported)")


async def smart_deposit(account, args: SmartDepositInput) -> str:
    ticker = args.token_ticker.upper()
    if account.chain_id != AVALANCHE_CHAIN_ID:
        return "Error: Deposits are only available on Avalanche C-Chain (43114)."
    if ticker not in SUPPORTED_TICKERS:
        return f"Error: Unsupported token {args.token_ticker}. Only USDC deposits are supported."

    deposit_contract = get_integrations().deposit_contracts.get(AVALANCHE_CHAIN_ID, {}).get(ticker)
    if not deposit_contract:
        return (
            f"Error: No deposit contract configured for {ticker} on chain {AVALANCHE_CHAIN_ID}. "
            "Set integrations.deposit_contracts in the configuration."
        )
    token_address = Web3.to_checksum_address(resolve_token_symbol(AVALANCHE_CHAIN_ID, ticker))
    deposit_contract = Web3.to_checksum_address(deposit_contract)

    try:
        amount = to_base_units(args.amount, SUPPORTED_TICKERS[ticker])
        owner = await account.get_address()

        approval = await send_transaction(
            account, Transaction(to=token_address, data=encode_approve(deposit_contract, amount))
        )
        if not approval.success:
            return f"Transaction failed: approval was rejected: {approval.error}"
        approval_status = await wait_for_transaction(account, approval)
        if approval_status.status == "failed":
            return f"Transaction failed: approval reverted: {approval_status.error}"
        if approval_status.status != "confirmed":
            return (
                "Transaction failed: approval not confirmed yet "
                f"(user op {approval.user_op_hash or approval.tx_hash}); the deposit was not sent."
            )

        deposit = await send_transaction(
            account,
            Transaction(
                to=deposit_contract,
                data=encode_call("depositAndWrap", ["address", "uint256"], [owner, amount]),
            ),
        )
        if not deposit.success:
            return f"Approval succeeded but deposit failed: {deposit.error}"
        deposit_status = await wait_for_transaction(account, deposit)
        if deposit_status.status == "failed":
            return f"Approval succeeded but deposit failed: {deposit_status.error}"
    except EXPECTED_ERRORS as e:
        logger.error("Deposit failed: %s", e)
        return f"Error depositing asset: {e}"

    if deposit_status.status != "confirmed":
        return (
            f"Deposit of {args.amount} tokens to {deposit_contract} was submitted but is not "
            f"confirmed yet. User Operation Hash: {deposit.user_op_hash or deposit.tx_hash}. "
            "Use check_transaction to follow it."
        )

    return (
        "The transaction has been confirmed on the blockchain. "
        f"Successfully deposited {args.amount} tokens from contract {token_address} "
        f"to {deposit_contract}. Transaction Hash: {deposit_status.tx_hash or deposit.user_op_hash}"
    )


SMART_DEPOSIT_ACTION = Action(
    name="smart_deposit",
    description=SMART_DEPOSIT_PROMPT,
    args_schema=SmartDepositInput,
    func=smart_deposit,
)
