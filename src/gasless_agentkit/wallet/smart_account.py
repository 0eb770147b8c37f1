"""Thin ERC-4337 (EntryPoint v0.6) smart account client.

The account is a counterfactual contract owned by an ECDSA key through an
ownership module. Transactions are wrapped into user operations, sponsored
by the paymaster, signed by the owner and handed to the bundler. Nothing
here validates or bundles operations itself; that is the bundler's job.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from eth_account.messages import encode_defunct
from web3 import Web3
from web3.exceptions import Web3Exception

from gasless_agentkit.amounts import from_base_units
from gasless_agentkit.chains import NATIVE_TOKEN_ADDRESS
from gasless_agentkit.config import SmartAccountConfig
from gasless_agentkit.types import TokenBalance, Transaction, TransactionStatus
from gasless_agentkit.wallet.abi import (
    decode_result,
    encode_args,
    encode_call,
    from_hex,
    hexstr,
    to_hex,
)
from gasless_agentkit.wallet.bundler import BundlerClient, PaymasterClient
from gasless_agentkit.wallet.provider import get_web3, read_balance, read_decimals

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

logger = logging.getLogger("gasless_agentkit.wallet.smart_account")

# Well-formed ECDSA signature used while estimating gas, before the real
# hash is known.
DUMMY_ECDSA_SIGNATURE = bytes.fromhex(
    "73c3ac716c487ca34bb858247b5ccf1dc354fbaabdd089af3b2ac8e78ba85a49"
    "59a2d76250325bd67c11771c31fccda87c33ceec17cc0de912690521bb95ffcb1b"
)


def user_operation_hash(user_op: dict, entry_point: str, chain_id: int) -> bytes:
    """EntryPoint v0.6 ``getUserOpHash``."""
    keccak = Web3.keccak
    packed = encode_args(
        ["address", "uint256", "bytes32", "bytes32", "uint256",
         "uint256", "uint256", "uint256", "uint256", "bytes32"],
        [
            user_op["sender"],
            from_hex(user_op["nonce"]),
            keccak(hexstr_bytes(user_op["initCode"])),
            keccak(hexstr_bytes(user_op["callData"])),
            from_hex(user_op["callGasLimit"]),
            from_hex(user_op["verificationGasLimit"]),
            from_hex(user_op["preVerificationGas"]),
            from_hex(user_op["maxFeePerGas"]),
            from_hex(user_op["maxPriorityFeePerGas"]),
            keccak(hexstr_bytes(user_op["paymasterAndData"])),
        ],
    )
    return bytes(
        keccak(encode_args(["bytes32", "address", "uint256"], [keccak(packed), entry_point, chain_id]))
    )


def hexstr_bytes(value: str) -> bytes:
    return bytes.fromhex(value.removeprefix("0x"))


def status_from_receipt(receipt: dict[str, Any]) -> TransactionStatus:
    inner = receipt.get("receipt") or {}
    if receipt.get("success"):
        return TransactionStatus(
            status="confirmed",
            tx_hash=inner.get("transactionHash"),
            block_number=from_hex(inner.get("blockNumber")) or None,
            receipt=receipt,
        )
    return TransactionStatus(
        status="failed",
        tx_hash=inner.get("transactionHash"),
        error=receipt.get("reason") or "User operation reverted",
        receipt=receipt,
    )


@dataclass
class UserOpResponse:
    """Handle for a submitted user operation."""

    user_op_hash: str
    account: SmartAccount

    async def wait(self) -> TransactionStatus:
        return await self.account.wait_for_user_operation(self.user_op_hash)


class SmartAccount:
    """Counterfactual smart account controlled by *signer*."""

    def __init__(
        self,
        signer: LocalAccount,
        chain_id: int,
        bundler: BundlerClient,
        paymaster: PaymasterClient,
        *,
        rpc_url: str | None = None,
        settings: SmartAccountConfig | None = None,
        index: int = 0,
        web3: Web3 | None = None,
    ) -> None:
        self.signer = signer
        self.settings = settings or SmartAccountConfig()
        self.bundler = bundler
        self.paymaster = paymaster
        self.index = index
        self.web3 = web3 or get_web3(chain_id, rpc_url)
        self._chain_id = chain_id
        self._address: str | None = None

    @classmethod
    def create(
        cls,
        signer: LocalAccount,
        chain_id: int,
        api_key: str,
        *,
        rpc_url: str | None = None,
        settings: SmartAccountConfig | None = None,
        timeout: float = 30.0,
    ) -> SmartAccount:
        """Wire a smart account to the configured bundler and paymaster."""
        settings = settings or SmartAccountConfig()
        bundler = BundlerClient(settings.bundler_for(chain_id), settings.entry_point, timeout)
        paymaster = PaymasterClient(settings.paymaster_for(chain_id, api_key), timeout)
        return cls(signer, chain_id, bundler, paymaster, rpc_url=rpc_url, settings=settings)

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def owner(self) -> str:
        return self.signer.address

    # ------------------------------------------------------------------
    # Address and deployment
    # ------------------------------------------------------------------

    def _module_setup_data(self) -> bytes:
        return hexstr_bytes(encode_call("initForSmartAccount", ["address"], [self.owner]))

    async def get_address(self) -> str:
        """Counterfactual address, computed by the factory once and cached."""
        if self._address is None:
            data = encode_call(
                "getAddressForCounterFactualAccount",
                ["address", "bytes", "uint256"],
                [self.settings.ecdsa_module, self._module_setup_data(), self.index],
            )
            raw = self.web3.eth.call({"to": self.settings.account_factory, "data": data})
            (address,) = decode_result(["address"], raw)
            self._address = Web3.to_checksum_address(address)
        return self._address

    async def is_deployed(self) -> bool:
        code = self.web3.eth.get_code(await self.get_address())
        return len(code) > 0

    async def _init_code(self) -> str:
        if await self.is_deployed():
            return "0x"
        deploy = encode_call(
            "deployCounterFactualAccount",
            ["address", "bytes", "uint256"],
            [self.settings.ecdsa_module, self._module_setup_data(), self.index],
        )
        return self.settings.account_factory + deploy.removeprefix("0x")

    async def get_nonce(self) -> int:
        data = encode_call("getNonce", ["address", "uint192"], [await self.get_address(), 0])
        raw = self.web3.eth.call({"to": self.settings.entry_point, "data": data})
        return decode_result(["uint256"], raw)[0]

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    @staticmethod
    def _call_data(transactions: list[Transaction]) -> str:
        if len(transactions) == 1:
            tx = transactions[0]
            return encode_call(
                "execute_ncC",
                ["address", "uint256", "bytes"],
                [Web3.to_checksum_address(tx.to), tx.value, hexstr_bytes(tx.data)],
            )
        return encode_call(
            "executeBatch_y6U",
            ["address[]", "uint256[]", "bytes[]"],
            [
                [Web3.to_checksum_address(tx.to) for tx in transactions],
                [tx.value for tx in transactions],
                [hexstr_bytes(tx.data) for tx in transactions],
            ],
        )

    def _fee_data(self) -> tuple[int, int]:
        # EIP-1559 when the chain reports a base fee, legacy gas price otherwise
        try:
            latest = self.web3.eth.get_block("latest")
            base_fee = latest.get("baseFeePerGas")
            if base_fee is None:
                raise ValueError("No baseFeePerGas")
            priority = self.web3.eth.max_priority_fee
            return base_fee * 2 + priority, priority
        except (Web3Exception, ValueError, OSError):
            gas_price = self.web3.eth.gas_price
            return gas_price, gas_price

    def _wrap_signature(self, signature: bytes) -> str:
        return hexstr(encode_args(["bytes", "address"], [signature, self.settings.ecdsa_module]))

    async def build_user_operation(self, transactions: list[Transaction]) -> dict:
        """Assemble, sponsor and sign a user operation for *transactions*."""
        max_fee, max_priority = self._fee_data()
        user_op: dict = {
            "sender": await self.get_address(),
            "nonce": to_hex(await self.get_nonce()),
            "initCode": await self._init_code(),
            "callData": self._call_data(transactions),
            "callGasLimit": to_hex(0),
            "verificationGasLimit": to_hex(0),
            "preVerificationGas": to_hex(0),
            "maxFeePerGas": to_hex(max_fee),
            "maxPriorityFeePerGas": to_hex(max_priority),
            "paymasterAndData": "0x",
            "signature": self._wrap_signature(DUMMY_ECDSA_SIGNATURE),
        }

        sponsorship = await self.paymaster.sponsor_user_operation(user_op)
        user_op["paymasterAndData"] = sponsorship["paymasterAndData"]
        gas_fields = ("callGasLimit", "verificationGasLimit", "preVerificationGas")
        if all(sponsorship.get(name) for name in gas_fields):
            estimate = sponsorship
        else:
            estimate = await self.bundler.estimate_user_operation_gas(user_op)
        for name in gas_fields:
            user_op[name] = to_hex(from_hex(estimate[name]))

        op_hash = user_operation_hash(user_op, self.settings.entry_point, self.chain_id)
        signed = self.signer.sign_message(encode_defunct(primitive=op_hash))
        user_op["signature"] = self._wrap_signature(bytes(signed.signature))
        return user_op

    async def send_transaction(self, tx: Transaction | list[Transaction]) -> UserOpResponse:
        transactions = tx if isinstance(tx, list) else [tx]
        user_op = await self.build_user_operation(transactions)
        user_op_hash = await self.bundler.send_user_operation(user_op)
        logger.info("Submitted user operation %s on chain %s", user_op_hash, self.chain_id)
        return UserOpResponse(user_op_hash=user_op_hash, account=self)

    async def get_user_operation_receipt(self, user_op_hash: str) -> dict | None:
        return await self.bundler.get_user_operation_receipt(user_op_hash)

    async def wait_for_user_operation(
        self, user_op_hash: str, timeout: float | None = None
    ) -> TransactionStatus:
        """Poll the bundler until the operation lands or *timeout* passes."""
        timeout = self.settings.receipt_timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout
        while True:
            receipt = await self.get_user_operation_receipt(user_op_hash)
            if receipt:
                return status_from_receipt(receipt)
            if time.monotonic() >= deadline:
                logger.info("Timed out waiting for user operation %s", user_op_hash)
                return TransactionStatus(status="pending")
            await asyncio.sleep(self.settings.poll_interval)

    # ------------------------------------------------------------------
    # Signing and reads
    # ------------------------------------------------------------------

    async def sign_message(self, message: str | bytes) -> str:
        """EIP-191 personal signature by the owner key."""
        if isinstance(message, str):
            signable = encode_defunct(text=message)
        else:
            signable = encode_defunct(primitive=message)
        return hexstr(self.signer.sign_message(signable).signature)

    async def sign_typed_data(self, typed_data: dict) -> str:
        """EIP-712 signature by the owner key over a full typed-data message."""
        signed = self.signer.sign_typed_data(full_message=typed_data)
        return hexstr(signed.signature)

    async def get_balances(self, token_addresses: list[str]) -> list[TokenBalance]:
        """Balances of *token_addresses*; the native placeholder reads the coin."""
        owner = await self.get_address()
        balances: list[TokenBalance] = []
        for token in token_addresses:
            if token.lower() == NATIVE_TOKEN_ADDRESS.lower():
                amount = self.web3.eth.get_balance(owner)
                decimals = 18
            else:
                amount = read_balance(self.web3, token, owner)
                decimals = read_decimals(self.web3, token)
            balances.append(
                TokenBalance(
                    address=token,
                    amount=amount,
                    decimals=decimals,
                    formatted_amount=from_base_units(amount, decimals),
                )
            )
        return balances
