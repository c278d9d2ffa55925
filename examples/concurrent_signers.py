#!/usr/bin/env python3
"""
Example: independent signers racing on one transaction
"""

import threading

from multisig_vault.address import AccountKey
from multisig_vault.errors import AlreadyTerminal, QuorumNotMet
from multisig_vault.ledger import InMemoryLedger, PlaceholderBroadcaster
from multisig_vault.quorum import signature_count
from multisig_vault.registry import VaultRegistry
from multisig_vault.state_machine import TransactionStateMachine
from multisig_vault.vault import Vault


def main():
    print("=== Concurrent Signers ===")
    print()

    signers = [AccountKey.generate_address()[1] for _ in range(5)]
    _, vault_address = AccountKey.generate_address()

    registry = VaultRegistry(InMemoryLedger([Vault(vault_address, signers, threshold=3)]))
    registry.fetch(vault_address)
    broadcaster = PlaceholderBroadcaster()
    machine = TransactionStateMachine(registry, broadcaster)

    tx = machine.propose(vault_address, "stx-transfer", 250_000, signers[0])
    print(f"📝 Proposed {tx.id} in a 3-of-5 vault")

    outcomes = []
    lock = threading.Lock()

    def sign_then_execute(address):
        try:
            machine.sign(vault_address, tx.id, address)
            result = machine.execute(vault_address, tx.id)
            outcome = f"executed as {result.executed_ref[:18]}..."
        except QuorumNotMet:
            outcome = "quorum not met yet"
        except AlreadyTerminal:
            outcome = "already executed"
        with lock:
            outcomes.append((address, outcome))

    threads = [threading.Thread(target=sign_then_execute, args=(a,)) for a in signers]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for address, outcome in outcomes:
        print(f"   {address[:12]}...: {outcome}")

    final = registry.get(vault_address).get_transaction(tx.id)
    print()
    print(f"✅ Final status: {final.status.value}")
    print(f"✅ Signatures: {signature_count(final)}")
    print(f"✅ Broadcasts: {len(broadcaster.broadcasts)}")


if __name__ == "__main__":
    main()
