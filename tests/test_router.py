"""Tests for the TokenRouter gateway and message id extraction."""

from unittest.mock import patch

import pytest
from hexbytes import HexBytes

from warpbridge.core.errors import ContractCallFailed, MessageIdExtractionFailed
from warpbridge.core.router import RemoteTransferReceipt, RouterGateway, extract_message_id
from warpbridge.core.utils import address_to_bytes32

from conftest import MAILBOX, PRIVATE_KEY, PRUVTEST_ID, RECEIVER, ROUTER, SENDER, SEPOLIA_ID

DISPATCH_TOPIC = "0x788dbc1b7152732178210e7f4d9d010ef016f9eafbe66786bd7169f56e0c353a"
MESSAGE_ID = "0x" + "ab" * 32


def _functions(web3):
    return web3.eth.contract.return_value.functions


class TestRouterReads:
    def test_supported_domains(self, config, web3, web3_factory):
        _functions(web3).domains.return_value.call.return_value = [PRUVTEST_ID, 42161]
        gateway = RouterGateway(config, web3_factory=web3_factory)

        assert gateway.list_supported_domains("USDC", "sepolia") == {PRUVTEST_ID, 42161}
        assert web3.eth.contract.call_args.kwargs["address"] == ROUTER

    def test_remote_router_bytes32(self, config, web3, web3_factory):
        _functions(web3).routers.return_value.call.return_value = HexBytes(bytes(12) + bytes.fromhex("11" * 20))
        gateway = RouterGateway(config, web3_factory=web3_factory)

        assert gateway.get_remote_router("USDC", "sepolia", PRUVTEST_ID) == "0x" + "00" * 12 + "11" * 20
        _functions(web3).routers.assert_called_once_with(PRUVTEST_ID)

    def test_remote_router_zero_is_a_value(self, config, web3, web3_factory):
        _functions(web3).routers.return_value.call.return_value = HexBytes(bytes(32))
        gateway = RouterGateway(config, web3_factory=web3_factory)

        assert gateway.get_remote_router("USDC", "sepolia", 999) == "0x" + "00" * 32

    def test_quote_fee(self, config, web3, web3_factory):
        _functions(web3).quoteGasPayment.return_value.call.return_value = 10**15
        gateway = RouterGateway(config, web3_factory=web3_factory)

        assert gateway.quote_fee("USDC", "sepolia", PRUVTEST_ID) == 10**15
        _functions(web3).quoteGasPayment.assert_called_once_with(PRUVTEST_ID)

    def test_balance_of(self, config, web3, web3_factory):
        _functions(web3).balanceOf.return_value.call.return_value = 7
        gateway = RouterGateway(config, web3_factory=web3_factory)

        assert gateway.balance_of("USDC", "sepolia", SENDER) == 7

    def test_read_failure_is_wrapped(self, config, web3, web3_factory):
        _functions(web3).quoteGasPayment.return_value.call.side_effect = RuntimeError("rpc down")
        gateway = RouterGateway(config, web3_factory=web3_factory)

        with pytest.raises(ContractCallFailed, match="Failed to quote gas payment: rpc down"):
            gateway.quote_fee("USDC", "sepolia", PRUVTEST_ID)


class TestTransferRemote:
    def test_attaches_fee_as_value(self, config, web3, web3_factory):
        gateway = RouterGateway(config, web3_factory=web3_factory)
        recipient = address_to_bytes32(RECEIVER)
        receipt = {"status": 1, "logs": []}

        with patch("warpbridge.core.router.send_and_wait", return_value=("0xfeed", receipt)) as send:
            result = gateway.transfer_remote("USDC", "sepolia", PRUVTEST_ID, recipient, 1_000_000, 500, PRIVATE_KEY)

        assert result == RemoteTransferReceipt(transaction_hash="0xfeed", receipt=receipt)
        _functions(web3).transferRemote.assert_called_once_with(PRUVTEST_ID, recipient, 1_000_000)
        assert send.call_args.kwargs == {"chain_id": SEPOLIA_ID, "value": 500}

    def test_failure_is_wrapped(self, config, web3_factory):
        gateway = RouterGateway(config, web3_factory=web3_factory)

        with patch("warpbridge.core.router.send_and_wait", side_effect=ValueError("Contract would revert: boom")):
            with pytest.raises(ContractCallFailed, match="Failed to transfer tokens: Contract would revert: boom"):
                gateway.transfer_remote("USDC", "sepolia", PRUVTEST_ID, b"\x00" * 32, 1, 0, PRIVATE_KEY)


class TestExtractMessageId:
    def test_second_topic_of_mailbox_log(self):
        receipt = {
            "logs": [
                {"address": ROUTER, "topics": [HexBytes(DISPATCH_TOPIC), HexBytes(MESSAGE_ID)]},
                {"address": MAILBOX, "topics": [HexBytes(DISPATCH_TOPIC), HexBytes("0x" + "01" * 32), HexBytes("0x" + "02" * 32)]},
                {"address": MAILBOX.lower(), "topics": [HexBytes(DISPATCH_TOPIC), HexBytes(MESSAGE_ID)]},
            ]
        }

        assert extract_message_id(receipt, MAILBOX) == MESSAGE_ID

    def test_string_topics(self):
        receipt = {"logs": [{"address": MAILBOX, "topics": [DISPATCH_TOPIC, MESSAGE_ID]}]}

        assert extract_message_id(receipt, MAILBOX) == MESSAGE_ID

    def test_no_matching_log(self):
        receipt = {"logs": [{"address": ROUTER, "topics": [DISPATCH_TOPIC, MESSAGE_ID]}]}

        with pytest.raises(MessageIdExtractionFailed, match="Message ID not found in receipt"):
            extract_message_id(receipt, MAILBOX)

    def test_empty_logs(self):
        with pytest.raises(MessageIdExtractionFailed):
            extract_message_id({"logs": []}, MAILBOX)
