"""get_address: report the smart account address."""

from __future__ import annotations

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action, EmptyArgs
from gasless_agentkit.services.server_wallet import ServerWalletAccount

GET_ADDRESS_PROMPT = """
This tool retrieves the smart account address that is already configured with the SDK.
No additional wallet setup or private key generation is needed.

USAGE GUIDANCE:
- When a user asks for their wallet address, account address, or smart account address, use this tool immediately
- No parameters are needed to retrieve the address
- The address can be used for receiving tokens or for verification purposes
- This is a read-only operation that doesn't modify any blockchain state

Note: This action works on all supported networks (Base, Fantom, Moonbeam, Metis, Avalanche, BSC).
"""


async def get_address(account, args: EmptyArgs) -> str:
    try:
        if isinstance(account, ServerWalletAccount):
            wallet = await account.get_wallet()
            if wallet is None:
                return (
                    f"Error: No wallet found at index {account.wallet_index}. "
                    "Use list_server_wallets to see available wallets."
                )
            return f"Smart Account (Server Wallet Index {account.wallet_index}): {wallet.smart_address}"

        return f"Smart Account: {await account.get_address()}"
    except EXPECTED_ERRORS as e:
        return f"Error getting address: {e}"


GET_ADDRESS_ACTION = Action(
    name="get_address",
    description=GET_ADDRESS_PROMPT,
    args_schema=EmptyArgs,
    func=get_address,
)
