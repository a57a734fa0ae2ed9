"""Tests for the CLI entrypoint."""

from unittest.mock import patch

import pytest

from warpbridge.cli.main import main
from warpbridge.core.bridge import TransferOutcome
from warpbridge.core.errors import PrecheckFailed
from warpbridge.core.units import Unit

from conftest import PRIVATE_KEY, PRUVTEST_ID, RECEIVER, ROUTER, SENDER, SEPOLIA_ID

TRANSFER_ARGS = ["USDC", "sepolia", "pruvtest", RECEIVER, "1.5"]


@pytest.fixture
def service_cls():
    with patch("warpbridge.cli.main.BridgeService") as cls:
        yield cls


@pytest.fixture
def private_key(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", PRIVATE_KEY)


def test_precheck_with_explicit_sender(config, service_cls, capsys):
    main(["precheck", *TRANSFER_ARGS, "--sender", SENDER], config=config)

    request = service_cls.return_value.precheck_transfer.call_args.args[0]
    assert request.sender == SENDER
    assert request.amount == "1.5"
    assert request.amount_unit is Unit.TOKEN
    assert "Precheck passed" in capsys.readouterr().out


def test_transfer_runs_precheck_first(config, service_cls, private_key, capsys):
    service = service_cls.return_value
    service.transfer.return_value = TransferOutcome(transaction_hash="0xabc", message_id="0xdef")

    main(["transfer", *TRANSFER_ARGS, "--unit", "base"], config=config)

    service.precheck_transfer.assert_called_once()
    request = service.transfer.call_args.args[0]
    assert request.sender == PRIVATE_KEY
    assert request.amount_unit is Unit.BASE
    out = capsys.readouterr().out
    assert "0xabc" in out
    assert "0xdef" in out


def test_transfer_skip_precheck(config, service_cls, private_key):
    service_cls.return_value.transfer.return_value = TransferOutcome(transaction_hash="0xabc")

    main(["transfer", *TRANSFER_ARGS, "--skip-precheck"], config=config)

    service_cls.return_value.precheck_transfer.assert_not_called()


def test_transfer_without_private_key(config, service_cls, monkeypatch, capsys):
    monkeypatch.delenv("PRIVATE_KEY", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        main(["transfer", *TRANSFER_ARGS], config=config)

    assert excinfo.value.code == 1
    assert "PRIVATE_KEY environment variable not set" in capsys.readouterr().out
    service_cls.return_value.transfer.assert_not_called()


def test_precheck_failure_exits(config, service_cls, capsys):
    service_cls.return_value.precheck_transfer.side_effect = PrecheckFailed(
        "Transfer precheck failed: Origin and destination chains must be different"
    )

    with pytest.raises(SystemExit):
        main(["precheck", *TRANSFER_ARGS, "--sender", SENDER], config=config)

    assert "Origin and destination chains must be different" in capsys.readouterr().out


def test_quote(config, service_cls, capsys):
    service = service_cls.return_value
    service.config = config
    service.router.quote_fee.return_value = 25 * 10**16

    main(["quote", "USDC", "sepolia", "pruvtest"], config=config)

    service.router.quote_fee.assert_called_once_with("USDC", "sepolia", PRUVTEST_ID)
    assert "0.25 ETH" in capsys.readouterr().out


def test_approve_uses_router_as_spender(config, service_cls, private_key):
    service = service_cls.return_value
    service.config = config
    service.tokens.get_decimals.return_value = 6

    main(["approve", "USDC", "sepolia", "1"], config=config)

    service.tokens.approve.assert_called_once_with("USDC", "sepolia", ROUTER, 1_000_000, PRIVATE_KEY)


def test_domains_labels_known_chains(config, service_cls, capsys):
    service = service_cls.return_value
    service.config = config
    service.router.list_supported_domains.return_value = {PRUVTEST_ID, 42}

    main(["domains", "USDC", "sepolia"], config=config)

    out = capsys.readouterr().out
    assert f"{PRUVTEST_ID} (pruvtest)" in out
    assert "42 (unknown)" in out


def test_router_not_enrolled(config, service_cls, capsys):
    service = service_cls.return_value
    service.config = config
    service.router.get_remote_router.return_value = ""

    main(["router", "USDC", "pruvtest", "sepolia"], config=config)

    service.router.get_remote_router.assert_called_once_with("USDC", "pruvtest", SEPOLIA_ID)
    assert "none" in capsys.readouterr().out


def test_allowance_for_explicit_owner(config, service_cls, capsys):
    service = service_cls.return_value
    service.config = config
    service.tokens.get_allowance.return_value = 2_500_000
    service.tokens.format_amount.return_value = "2.5"

    main(["allowance", "USDC", "sepolia", "--owner", SENDER], config=config)

    service.tokens.get_allowance.assert_called_once_with("USDC", "sepolia", SENDER, ROUTER)
    assert "2.5 USDC" in capsys.readouterr().out
