"""create_fourmeme_token: launch a token on four.meme (BNB Smart Chain)."""

from __future__ import annotations

import base64
import binascii
import logging
import time
from enum import Enum
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from gasless_agentkit.actions.base import EXPECTED_ERRORS, Action, get_integrations
from gasless_agentkit.errors import AgentkitError
from gasless_agentkit.services.server_wallet import ServerWalletAccount
from gasless_agentkit.services.transactions import send_transaction, wait_for_transaction
from gasless_agentkit.types import Transaction
from gasless_agentkit.wallet.abi import decode_result, encode_call, event_topic

logger = logging.getLogger("gasless_agentkit.actions.fourmeme")

BSC_CHAIN_ID = 56
TOKEN_MANAGER2_ADDRESS = "0x5c952063c7fc8610FFDB798152D69F0B9550762b"
TOKEN_CREATE_TYPES = [
    "address", "address", "uint256", "string", "string", "uint256", "uint256", "uint256",
]
TOKEN_CREATE_TOPIC = event_topic("TokenCreate", TOKEN_CREATE_TYPES)

GENERATE_NONCE_ENDPOINT = "/v1/private/user/nonce/generate"
LOGIN_ENDPOINT = "/v1/private/user/login/dex"
UPLOAD_TOKEN_IMAGE_ENDPOINT = "/v1/private/token/upload"
CREATE_TOKEN_ENDPOINT = "/v1/private/token/create"

ONE_DAY_MS = 24 * 60 * 60 * 1000

CREATE_FOURMEME_TOKEN_PROMPT = """
This tool creates a new token on Fourmeme platform without using the Fourmeme interface directly.

It handles the complete flow:
1. Authentication with the user's wallet
2. Uploading a token image
3. Getting token creation parameters and signature
4. Executing the token creation transaction on-chain

Parameters:
- name: Token name (e.g., "My Token")
- symbol: Token symbol/ticker (e.g., "MTK")
- description: Token description
- image_url: Optional URL to an image (if not provided, image_file is required)
- image_file: Base64 encoded image file content (required if image_url not provided)
- launch_time: Optional timestamp in milliseconds for token launch (defaults to 24 hours from now)
- category: Token category (one of: Meme, AI, Defi, Games, Infra, De-Sci, Social, Depin, Charity, Others)
- website_url, twitter_url, telegram_url: Optional project links
- pre_sale: Optional pre-purchased BNB amount by creator (defaults to 0)

Notes:
- Only available on BNB Smart Chain (56)
- Total token supply is fixed at 1 billion
- Raised amount is fixed at 24 BNB
- Sale ratio is fixed at 80%
- BNB is used as the base currency
"""


class TokenCategory(str, Enum):
    MEME = "Meme"
    AI = "AI"
    DEFI = "Defi"
    GAMES = "Games"
    INFRA = "Infra"
    DESCI = "De-Sci"
    SOCIAL = "Social"
    DEPIN = "Depin"
    CHARITY = "Charity"
    OTHERS = "Others"


class CreateFourmemeTokenInput(BaseModel):
    name: str = Field(..., description="Token name (e.g., 'My Token')")
    symbol: str = Field(..., description="Token symbol/ticker (e.g., 'MTK')")
    description: str = Field(..., description="Token description")
    image_url: Optional[str] = Field(None, description="Optional URL to an already uploaded image")
    image_file: Optional[str] = Field(
        None, description="Base64 encoded image file content (required if image_url not provided)"
    )
    launch_time: Optional[int] = Field(
        None, description="Optional launch timestamp in milliseconds (defaults to 24 hours from now)"
    )
    category: TokenCategory = Field(..., description="Token category")
    website_url: Optional[str] = Field(None, description="Optional project website URL")
    twitter_url: Optional[str] = Field(None, description="Optional project Twitter URL")
    telegram_url: Optional[str] = Field(None, description="Optional project Telegram URL")
    pre_sale: Optional[str] = Field(
        None, description="Optional pre-purchased BNB amount by creator (defaults to 0)"
    )


class FourmemeError(AgentkitError):
    pass


def _raised_token() -> dict[str, Any]:
    return {
        "symbol": "BNB",
        "nativeSymbol": "BNB",
        "symbolAddress": "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c",
        "deployCost": "0",
        "buyFee": "0.01",
        "sellFee": "0.01",
        "minTradeFee": "0",
        "b0Amount": "8",
        "totalBAmount": "24",
        "totalAmount": "1000000000",
        "logoUrl": "https://static.four.meme/market/68b871b6-96f7-408c-b8d0-388d804b34275092658264263839640.png",
        "tradeLevel": ["0.1", "0.5", "1"],
        "status": "PUBLISH",
        "buyTokenLink": "https://pancakeswap.finance/swap",
        "reservedNumber": 10,
        "saleRate": "0.8",
        "networkCode": "BSC",
        "platform": "MEME",
    }


class FourmemeClient:
    """The handful of four.meme endpoints needed to launch a token."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        settings = get_integrations()
        self.base_url = base_url or settings.fourmeme_api_url
        self.timeout = timeout or settings.http_timeout
        self.access_token: str | None = None

    async def _post(self, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.access_token:
            headers["meme-web-access"] = self.access_token
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
            resp = await client.post(path, headers=headers, **kwargs)
            resp.raise_for_status()
            body = resp.json()
        if body.get("code") != "0" and body.get("code") != 0:
            raise FourmemeError(f"{path} failed: {body.get('msg') or 'Unknown error'}")
        return body.get("data")

    async def get_nonce(self, address: str) -> str:
        return await self._post(
            GENERATE_NONCE_ENDPOINT,
            json={"accountAddress": address, "verifyType": "LOGIN", "networkCode": "BSC"},
        )

    async def login(self, address: str, signature: str) -> str:
        self.access_token = await self._post(
            LOGIN_ENDPOINT,
            json={
                "region": "WEB",
                "langType": "EN",
                "loginIp": "",
                "inviteCode": "",
                "verifyInfo": {
                    "address": address,
                    "networkCode": "BSC",
                    "signature": signature,
                    "verifyType": "LOGIN",
                },
                "walletName": "MetaMask",
            },
        )
        return self.access_token

    async def upload_image(self, image: bytes) -> str:
        return await self._post(
            UPLOAD_TOKEN_IMAGE_ENDPOINT,
            files={"file": ("token-image.png", image, "image/png")},
        )

    async def create_token(self, args: CreateFourmemeTokenInput, image_url: str, launch_time: int) -> tuple[str, str]:
        """Return ``(create_arg, signature)`` for the on-chain call."""
        data = await self._post(
            CREATE_TOKEN_ENDPOINT,
            json={
                "name": args.name,
                "shortName": args.symbol,
                "desc": args.description,
                "imgUrl": image_url,
                "launchTime": launch_time,
                "label": args.category.value,
                "lpTradingFee": 0.0025,
                "webUrl": args.website_url or "",
                "twitterUrl": args.twitter_url or "",
                "telegramUrl": args.telegram_url or "",
                "preSale": args.pre_sale or "0",
                "totalSupply": 1_000_000_000,
                "raisedAmount": 24,
                "saleRate": 0.8,
                "reserveRate": 0,
                "funGroup": False,
                "clickFun": False,
                "symbol": "BNB",
                "raisedToken": _raised_token(),
            },
        )
        return data["createArg"], data["signature"]


def _as_bytes(value: str) -> bytes:
    return bytes.fromhex(value.removeprefix("0x"))


def find_created_token(receipt: dict[str, Any] | None) -> str | None:
    """Pull the new token address out of a ``TokenCreate`` log, if present."""
    if not receipt:
        return None
    logs = receipt.get("logs") or (receipt.get("receipt") or {}).get("logs") or []
    for log in logs:
        if (log.get("address") or "").lower() != TOKEN_MANAGER2_ADDRESS.lower():
            continue
        topics = log.get("topics") or []
        if not topics or topics[0].lower() != TOKEN_CREATE_TOPIC:
            continue
        decoded = decode_result(TOKEN_CREATE_TYPES, log["data"])
        return decoded[1]
    return None


async def create_fourmeme_token(account, args: CreateFourmemeTokenInput) -> str:
    if not args.image_url and not args.image_file:
        return "Error creating token: Either image_url or image_file must be provided"
    if account.chain_id != BSC_CHAIN_ID:
        return "Error creating token: Fourmeme tokens can only be created on BNB Smart Chain (56)"
    if isinstance(account, ServerWalletAccount):
        return "Error creating token: four.meme login needs a locally signed smart account"

    try:
        image = base64.b64decode(args.image_file, validate=True) if not args.image_url else None
    except binascii.Error:
        return "Error creating token: image_file is not valid base64"

    client = FourmemeClient()
    try:
        address = await account.get_address()
        nonce = await client.get_nonce(address)
        signature = await account.sign_message(f"You are sign in Meme {nonce}")
        await client.login(address, signature)
        logger.info("Logged in to four.meme as %s", address)

        image_url = args.image_url or await client.upload_image(image)
        launch_time = args.launch_time or int(time.time() * 1000) + ONE_DAY_MS
        create_arg, create_signature = await client.create_token(args, image_url, launch_time)

        response = await send_transaction(
            account,
            Transaction(
                to=TOKEN_MANAGER2_ADDRESS,
                data=encode_call(
                    "createToken", ["bytes", "bytes"], [_as_bytes(create_arg), _as_bytes(create_signature)]
                ),
            ),
        )
        if not response.success:
            return f"Error creating token: {response.error}"
        status = await wait_for_transaction(account, response)
    except EXPECTED_ERRORS as e:
        logger.error("Token creation failed: %s", e)
        return f"Error creating token: {e}"

    if status.status == "failed":
        return f"Error creating token: {status.error}"
    if status.status == "pending":
        return (
            "Transaction submitted. Please check your wallet for confirmation.\n"
            f"User operation hash: {response.user_op_hash}"
        )

    token_address = find_created_token(status.receipt) or "Unknown"
    return (
        "Successfully created token:\n"
        f"Token Address: {token_address}\n"
        f"Token Name: {args.name}\n"
        f"Token Symbol: {args.symbol}\n"
        f"Transaction: {status.tx_hash}"
    )


CREATE_FOURMEME_TOKEN_ACTION = Action(
    name="create_fourmeme_token",
    description=CREATE_FOURMEME_TOKEN_PROMPT,
    args_schema=CreateFourmemeTokenInput,
    func=create_fourmeme_token,
)
