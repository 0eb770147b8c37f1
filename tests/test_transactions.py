from unittest.mock import AsyncMock, MagicMock, patch

from gasless_agentkit.services.server_wallet import ServerWalletAccount
from gasless_agentkit.services.transactions import (
    check_transaction_status,
    encode_approve,
    ensure_allowance,
    send_transaction,
    wait_for_transaction,
)
from gasless_agentkit.types import Transaction, TransactionResponse, TransactionStatus

SPENDER = "0x5555555555555555555555555555555555555555"
TOKEN = "0x6666666666666666666666666666666666666666"


async def test_smart_account_failures_become_responses(smart_account):
    smart_account.send_transaction.side_effect = RuntimeError("AA21 didn't pay prefund")
    response = await send_transaction(smart_account, Transaction(to=SPENDER))
    assert not response.success
    assert response.error == "AA21 didn't pay prefund"


async def test_smart_account_submission(smart_account):
    smart_account.send_transaction.return_value = MagicMock(user_op_hash="0xop")
    response = await send_transaction(smart_account, Transaction(to=SPENDER))
    assert response.success
    assert response.user_op_hash == "0xop"


async def test_server_wallet_submission_is_delegated():
    service = MagicMock()
    service.send_transaction = AsyncMock(return_value=TransactionResponse(success=True, tx_hash="0xtx"))
    account = ServerWalletAccount(service, 43114, 3)
    response = await send_transaction(account, Transaction(to=SPENDER))
    assert response.tx_hash == "0xtx"
    service.send_transaction.assert_awaited_once()
    assert service.send_transaction.await_args.args[0] == 3


async def test_wait_prefers_an_embedded_receipt(smart_account):
    response = TransactionResponse(success=True, receipt={"success": True, "receipt": {"transactionHash": "0xtx"}})
    status = await wait_for_transaction(smart_account, response)
    assert status.status == "confirmed"
    smart_account.wait_for_user_operation.assert_not_awaited()


async def test_wait_polls_the_bundler(smart_account):
    smart_account.wait_for_user_operation.return_value = TransactionStatus(status="confirmed", tx_hash="0xtx")
    status = await wait_for_transaction(smart_account, TransactionResponse(success=True, user_op_hash="0xop"))
    assert status.tx_hash == "0xtx"


async def test_check_transaction_status_pending(smart_account):
    status = await check_transaction_status(smart_account, "0xop")
    assert status.status == "pending"


async def test_sufficient_allowance_skips_approval(smart_account):
    with patch("gasless_agentkit.services.transactions.read_allowance", return_value=100):
        assert await ensure_allowance(smart_account, TOKEN, SPENDER, 100) is None
    smart_account.send_transaction.assert_not_awaited()


async def test_short_allowance_is_approved(smart_account):
    smart_account.send_transaction.return_value = MagicMock(user_op_hash="0xop")
    smart_account.wait_for_user_operation.return_value = TransactionStatus(status="confirmed")
    with patch("gasless_agentkit.services.transactions.read_allowance", return_value=0):
        response = await ensure_allowance(smart_account, TOKEN, SPENDER, 100)

    assert response.success
    tx = smart_account.send_transaction.await_args.args[0]
    assert tx.data == encode_approve(SPENDER, 100)


async def test_reverted_approval(smart_account):
    smart_account.send_transaction.return_value = MagicMock(user_op_hash="0xop")
    smart_account.wait_for_user_operation.return_value = TransactionStatus(status="failed", error="reverted")
    with patch("gasless_agentkit.services.transactions.read_allowance", return_value=0):
        response = await ensure_allowance(smart_account, TOKEN, SPENDER, 100)
    assert not response.success
    assert response.error == "reverted"


async def test_pending_approval_is_not_a_success(smart_account):
    smart_account.send_transaction.return_value = MagicMock(user_op_hash="0xop")
    smart_account.wait_for_user_operation.return_value = TransactionStatus(status="pending")
    with patch("gasless_agentkit.services.transactions.read_allowance", return_value=0):
        response = await ensure_allowance(smart_account, TOKEN, SPENDER, 100)
    assert not response.success
    assert response.error == "Approval not confirmed yet (user op 0xop)"
