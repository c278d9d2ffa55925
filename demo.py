#!/usr/bin/env python3
"""
Complete demo of the Multisig Vault signature flow
"""

from multisig_vault.address import AccountKey, Network
from multisig_vault.config import AppConfig, configure_logging
from multisig_vault.errors import AlreadyTerminal, QuorumNotMet, UnknownSigner, ValidationError
from multisig_vault.identity import WalletSession
from multisig_vault.ledger import InMemoryLedger, PlaceholderBroadcaster
from multisig_vault.queries import VaultQueries
from multisig_vault.registry import VaultRegistry
from multisig_vault.state_machine import TransactionStateMachine
from multisig_vault.vault import TransactionKind, Vault


def main():
    configure_logging(AppConfig.from_env().log_level)

    print("=" * 60)
    print("🏦 MULTISIG VAULT - COMPLETE DEMO")
    print("=" * 60)
    print()

    # Step 1: Setup
    print("🔧 STEP 1: Setting up vault signers")
    print("-" * 40)

    signers = {}
    for name in ("Alice", "Bob", "Carol"):
        _, address = AccountKey.generate_address(Network.TESTNET)
        signers[name] = address
        print(f"✅ {name}: {address}")

    _, vault_address = AccountKey.generate_address(Network.TESTNET)
    ledger = InMemoryLedger([
        Vault(vault_address, list(signers.values()), threshold=2, balance=5_000_000_000)
    ])
    print()

    # Step 2: Load vault
    print("🏗️  STEP 2: Loading vault from the ledger")
    print("-" * 40)

    registry = VaultRegistry(ledger)
    vault = registry.fetch(vault_address)
    machine = TransactionStateMachine(registry, PlaceholderBroadcaster())

    session = WalletSession()
    session.sign_in({'profile': {'stxAddress': {'testnet': signers["Alice"]}}})
    queries = VaultQueries(registry, session)

    print(f"✅ Vault: {vault.address}")
    print(f"✅ Balance: {vault.balance:,} micro-STX")
    print(f"✅ Rules: {vault.threshold}-of-{len(vault.signers)} signatures required")
    print(f"✅ Alice is signer: {queries.is_authorized_signer()}")
    print()

    # Step 3: Propose
    print("📝 STEP 3: Proposing a transfer")
    print("-" * 40)

    try:
        machine.propose(vault_address, TransactionKind.TOKEN_TRANSFER, 500, signers["Bob"])
    except ValidationError as e:
        print(f"❌ Token transfer without contract rejected: {e}")

    tx = machine.propose(vault_address, TransactionKind.NATIVE_TRANSFER, 1_000_000, signers["Bob"])
    print(f"✅ Proposed {tx.id}: {tx.amount:,} micro-STX to Bob ({tx.status.value})")
    print()

    # Step 4: Collect signatures
    print("✍️  STEP 4: Collecting signatures")
    print("-" * 40)

    try:
        machine.sign(vault_address, tx.id, "ST33QGZ09QT4F0RP7AW0GG52XSTJZGNB6YEJDENNX")
    except UnknownSigner as e:
        print(f"❌ Outsider rejected: {e}")

    tx = machine.sign(vault_address, tx.id, signers["Alice"])
    print(f"✅ Alice signed: {queries.get_signature_count(tx.id)}/{vault.threshold} ({tx.status.value})")
    print(f"   Alice has signed: {queries.has_signed(tx.id)}")

    try:
        machine.execute(vault_address, tx.id)
    except QuorumNotMet as e:
        print(f"❌ Early execution blocked: {e}")

    tx = machine.sign(vault_address, tx.id, signers["Carol"])
    print(f"✅ Carol signed: {queries.get_signature_count(tx.id)}/{vault.threshold} ({tx.status.value})")
    print()

    # Step 5: Execute
    print("🚀 STEP 5: Executing")
    print("-" * 40)

    tx = machine.execute(vault_address, tx.id)
    print(f"✅ Executed: {tx.executed_ref}")

    try:
        machine.sign(vault_address, tx.id, signers["Bob"])
    except AlreadyTerminal as e:
        print(f"❌ Late signature rejected: {e}")
    print()

    # Summary
    summary = queries.summary()
    print("📊 SUMMARY")
    print("-" * 40)
    print(f"   Transactions: {summary['transaction_count']}")
    print(f"   Pending: {summary['pending_count']}")
    print(f"   Executed: {summary['executed_count']}")
    print()
    print("🎉 Demo complete!")


if __name__ == "__main__":
    main()
