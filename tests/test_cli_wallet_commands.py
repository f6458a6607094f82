from __future__ import annotations

from ledger_shell.cli.errors import ExecutionError, NoOpenWallet


def test_create_open_close_cycle(shell) -> None:
    shell.run("wallet create w1 key=k1", "wallet open w1 key=k1")
    assert shell.context.wallet.name == "w1"
    assert 'Wallet "w1" has been created' in shell.out()
    assert 'Wallet "w1" has been opened' in shell.out()

    shell.run("wallet close")
    assert shell.context.wallet is None
    assert ("close_wallet", "w1") in shell.sdk.calls


def test_open_other_wallet_closes_current(shell) -> None:
    shell.sdk.create_wallet("w1", "k1")
    shell.sdk.create_wallet("w2", "k2")
    shell.run("wallet open w1 key=k1", "wallet open w2 key=k2")
    assert shell.context.wallet.name == "w2"
    assert shell.sdk.calls.count(("close_wallet", "w1")) == 1
    assert 'Wallet "w1" has been closed' in shell.out()


def test_open_same_wallet_is_refused(shell) -> None:
    shell.sdk.create_wallet("w1", "k1")
    shell.run("wallet open w1 key=k1")
    result = shell.run("wallet open w1 key=k1")
    assert isinstance(result.error, ExecutionError)
    assert "already opened" in shell.err()
    assert ("close_wallet", "w1") not in shell.sdk.calls


def test_close_without_wallet_fails(shell) -> None:
    result = shell.run("wallet close")
    assert isinstance(result.error, NoOpenWallet)


def test_delete_and_detach_refuse_open_wallet(shell) -> None:
    shell.sdk.create_wallet("w1", "k1")
    shell.run("wallet open w1 key=k1")
    assert shell.run("wallet delete w1 key=k1").ok is False
    assert shell.run("wallet detach w1").ok is False
    assert "w1" in shell.sdk.wallets

    shell.run("wallet close")
    assert shell.run("wallet delete w1 key=k1").ok
    assert "w1" not in shell.sdk.wallets


def test_list_shows_wallets_and_current(shell) -> None:
    shell.sdk.create_wallet("alpha", "k")
    shell.sdk.create_wallet("beta", "k")
    shell.run("wallet open beta key=k", "wallet list")
    out = shell.out()
    assert "alpha" in out and "beta" in out
    assert 'Current wallet "beta"' in out


def test_export_requires_open_wallet_and_import_creates(shell, tmp_path) -> None:
    path = tmp_path / "export"
    result = shell.run(f"wallet export export_path={path} export_key=e")
    assert isinstance(result.error, NoOpenWallet)

    shell.sdk.create_wallet("w1", "k1")
    shell.run("wallet open w1 key=k1", f"wallet export export_path={path} export_key=e")
    assert ("export_wallet", str(path)) in shell.sdk.calls

    shell.run(f"wallet import w2 key=k2 export_path={path} export_key=e")
    assert shell.sdk.wallets["w2"] == "k2"


def test_storage_config_must_be_json(shell) -> None:
    result = shell.run("wallet create w1 key=k1 storage_config={broken")
    assert result.ok is False
    assert "parse error" in shell.err()

    result = shell.run("wallet create w1 key=k1 storage_config=broken")
    assert result.ok is False
    assert 'invalid parameters: Invalid "storage_config" parameter' in shell.err()
