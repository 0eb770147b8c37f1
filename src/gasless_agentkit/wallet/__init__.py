"""Smart account client and its supporting pieces."""

from gasless_agentkit.wallet.signer import SmartAccountSignerAdapter, load_signer
from gasless_agentkit.wallet.smart_account import SmartAccount, UserOpResponse

__all__ = ["SmartAccount", "SmartAccountSignerAdapter", "UserOpResponse", "load_signer"]
