"""smart_transfer: gasless native or ERC-20 transfer."""

from __future__ import annotations

from pydantic import BaseModel, Field
from web3 import Web3

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action
from gasless_agentkit.amounts import to_base_units
from gasless_agentkit.chains import NATIVE_TOKEN_ADDRESS, resolve_token
from gasless_agentkit.services.transactions import (
    encode_transfer,
    get_decimals,
    send_transaction,
    wait_for_transaction,
)
from gasless_agentkit.types import Transaction

SMART_TRANSFER_PROMPT = """
This tool will transfer an ERC20 token from the wallet to another onchain address using gasless transactions.

It takes the following inputs:
- amount: The amount to transfer (in human-readable units, e.g. "1.5")
- token_address: The token contract address, a ticker supported on the chain, or 'eth' for the native token
- destination: Where to send the funds (must be a valid onchain address)

Important notes:
- Gasless transfers are only available on supported networks: Avalanche C-Chain, Metis chain, BASE, BNB chain, FANTOM, Moonbeam.
- The transaction will be submitted and the tool will wait for confirmation by default.
"""


class SmartTransferInput(BaseModel):
    amount: str = Field(..., description="The amount of tokens to transfer")
    token_address: str = Field(
        ..., description="The token contract address, symbol, or 'eth' for the native token"
    )
    destination: str = Field(..., description="The recipient address")
    wait: bool = Field(True, description="Wait for the transaction to be confirmed")


async def smart_transfer(account, args: SmartTransferInput) -> str:
    try:
        if not Web3.is_address(args.destination):
            return f"Error transferring the asset: Invalid destination address {args.destination}"

        token = resolve_token(account.chain_id, args.token_address)
        if token is None:
            return f"Error transferring the asset: Unknown token {args.token_address}"

        destination = Web3.to_checksum_address(args.destination)
        is_native = token.lower() == NATIVE_TOKEN_ADDRESS.lower()
        if is_native:
            tx = Transaction(to=destination, value=to_base_units(args.amount, 18))
            asset = "ETH"
        else:
            decimals = get_decimals(account, token)
            amount = to_base_units(args.amount, decimals)
            tx = Transaction(
                to=Web3.to_checksum_address(token), data=encode_transfer(destination, amount)
            )
            asset = f"tokens from contract {token}"

        response = await send_transaction(account, tx)
        if not response.success:
            return f"Error transferring the asset: {response.error}"

        if args.wait:
            status = await wait_for_transaction(account, response)
            if status.status == "failed":
                return f"Error transferring the asset: {status.error}"
            if status.status != "confirmed":
                return (
                    f"Transfer of {args.amount} {asset} to {args.destination} was submitted but is "
                    f"not confirmed yet. User operation hash: {response.user_op_hash or response.tx_hash}"
                )
            tx_hash = status.tx_hash or response.tx_hash or response.user_op_hash
        else:
            tx_hash = response.tx_hash or response.user_op_hash

        return (
            f"Successfully transferred {args.amount} {asset} to {args.destination}.\n"
            f"Transaction hash: {tx_hash}"
        )
    except EXPECTED_ERRORS as e:
        return f"Error transferring the asset: {e}"


SMART_TRANSFER_ACTION = Action(
    name="smart_transfer",
    description=SMART_TRANSFER_PROMPT,
    args_schema=SmartTransferInput,
    func=smart_transfer,
)
