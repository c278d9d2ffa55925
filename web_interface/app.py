#!/usr/bin/env python3
"""
Web interface for Multisig Vault
"""

import logging
from typing import Optional

from flask import Flask, request, jsonify, session

from multisig_vault.address import AccountKey, Network
from multisig_vault.config import AppConfig, configure_logging
from multisig_vault.errors import MultisigError, ValidationError
from multisig_vault.identity import IdentityProvider, StaticIdentity, WalletSession
from multisig_vault.ledger import Broadcaster, InMemoryLedger, PlaceholderBroadcaster, VaultSource
from multisig_vault.queries import VaultQueries
from multisig_vault.quorum import describe
from multisig_vault.registry import VaultRegistry
from multisig_vault.state_machine import TransactionStateMachine
from multisig_vault.vault import Vault

logger = logging.getLogger(__name__)

ADDRESS_HEADER = 'X-Account-Address'

ERROR_STATUS = {
    'invalid_address': 400,
    'validation_error': 400,
    'unknown_signer': 403,
    'not_found': 404,
    'already_terminal': 409,
    'quorum_not_met': 409,
    'broadcast_error': 502,
}


def create_app(
    config: Optional[AppConfig] = None,
    ledger: Optional[VaultSource] = None,
    broadcaster: Optional[Broadcaster] = None
) -> Flask:
    config = config or AppConfig.from_env()
    if ledger is None:
        ledger = InMemoryLedger(generate_placeholders=config.placeholder_vaults)

    app = Flask(__name__)
    app.secret_key = config.secret_key

    registry = VaultRegistry(ledger)
    machine = TransactionStateMachine(registry, broadcaster or PlaceholderBroadcaster())

    app.config['MULTISIG_REGISTRY'] = registry
    app.config['MULTISIG_STATE_MACHINE'] = machine
    app.config['MULTISIG_LEDGER'] = ledger

    def current_identity() -> IdentityProvider:
        header = request.headers.get(ADDRESS_HEADER)
        if header:
            return StaticIdentity(header)
        return WalletSession(session.get('userData'))

    def queries(address: str) -> VaultQueries:
        return VaultQueries(registry, current_identity(), address)

    def load_vault(address: str) -> Vault:
        if not registry.is_registered(address):
            registry.fetch(address)
        return registry.get(address)

    def transaction_view(tx, vault: Vault, view: VaultQueries) -> dict:
        data = tx.to_dict()
        data['quorum'] = describe(tx, vault.threshold)
        data['userHasSigned'] = view.has_signed(tx.id)
        return data

    @app.errorhandler(MultisigError)
    def handle_domain_error(e):
        return jsonify({'success': False, 'error': str(e), 'code': e.code}), ERROR_STATUS.get(e.code, 400)

    @app.route('/api/session', methods=['GET', 'POST', 'DELETE'])
    def wallet_session():
        """Sign in with wallet user data, inspect or sign out"""
        if request.method == 'POST':
            data = request.get_json(silent=True) or {}
            user_data = data.get('userData')
            if not isinstance(user_data, dict):
                raise ValidationError("userData is required")
            session['userData'] = user_data
        elif request.method == 'DELETE':
            session.pop('userData', None)

        identity = WalletSession(session.get('userData'))
        return jsonify({
            'success': True,
            'isSignedIn': identity.is_signed_in,
            'address': identity.current_address,
            'network': identity.network.value
        })

    @app.route('/api/vaults', methods=['POST'])
    def create_vault():
        """Create a new vault on the in-memory ledger"""
        if not isinstance(ledger, InMemoryLedger):
            return jsonify({'success': False, 'error': 'Ledger does not accept new vaults'}), 501

        data = request.get_json(silent=True) or {}
        try:
            network = Network(data.get('network', Network.TESTNET.value))
        except ValueError:
            network = None
        if network not in (Network.MAINNET, Network.TESTNET):
            raise ValidationError(f"Unknown network: {data.get('network')!r}")

        # Generate keys for members
        members_info = []
        for member in data.get('members', []):
            private_hex, address = AccountKey.generate_address(network)
            members_info.append({
                'name': member.get('name'),
                'address': address,
                'private_key': private_hex
            })

        signers = list(data.get('signers', [])) + [m['address'] for m in members_info]
        _, vault_address = AccountKey.generate_address(network)

        vault = Vault(
            address=vault_address,
            signers=signers,
            threshold=data.get('threshold', 1),
            balance=data.get('initial_balance', 0)
        )
        ledger.put(vault)
        logger.info("Created vault %s with %d signers", vault_address, len(signers))

        return jsonify({
            'success': True,
            'address': vault_address,
            'threshold': vault.threshold,
            'signers': vault.signers,
            'members': members_info
        }), 201

    @app.route('/api/vault/<address>')
    def get_vault(address):
        """Fetch (or refresh) a vault and return its summary"""
        registry.fetch(address)
        return jsonify({'success': True, 'vault': queries(address).summary()})

    @app.route('/api/vault/<address>/transactions', methods=['GET'])
    def list_transactions(address):
        vault = load_vault(address)
        view = queries(address)

        state = request.args.get('state', 'all')
        if state == 'pending':
            transactions = view.get_pending_transactions()
        elif state == 'executed':
            transactions = view.get_executed_transactions()
        elif state == 'all':
            transactions = view.get_transactions()
        else:
            raise ValidationError(f"Unknown transaction state filter: {state!r}")

        return jsonify({
            'success': True,
            'transactions': [transaction_view(tx, vault, view) for tx in transactions]
        })

    @app.route('/api/vault/<address>/transactions/<tx_id>', methods=['GET'])
    def get_transaction(address, tx_id):
        vault = load_vault(address)
        view = queries(address)

        tx = view.get_transaction(tx_id)
        if tx is None:
            return jsonify({'success': False, 'error': 'Transaction not found', 'code': 'not_found'}), 404

        return jsonify({'success': True, 'transaction': transaction_view(tx, vault, view)})

    @app.route('/api/vault/<address>/transactions', methods=['POST'])
    def propose_transaction(address):
        vault = load_vault(address)
        data = request.get_json(silent=True) or {}

        if 'type' not in data or 'amount' not in data or 'recipient' not in data:
            raise ValidationError("type, amount and recipient are required")

        tx = machine.propose(
            address,
            kind=data['type'],
            amount=data['amount'],
            recipient=data['recipient'],
            token_contract=data.get('tokenContract')
        )
        return jsonify({'success': True, 'transaction': transaction_view(tx, vault, queries(address))}), 201

    @app.route('/api/vault/<address>/transactions/<tx_id>/sign', methods=['POST'])
    def sign_transaction(address, tx_id):
        vault = load_vault(address)
        signer = current_identity().current_address
        if not signer:
            return jsonify({'success': False, 'error': 'Not signed in', 'code': 'unauthenticated'}), 401

        tx = machine.sign(address, tx_id, signer)
        return jsonify({'success': True, 'transaction': transaction_view(tx, vault, queries(address))})

    @app.route('/api/vault/<address>/transactions/<tx_id>/execute', methods=['POST'])
    def execute_transaction(address, tx_id):
        vault = load_vault(address)
        data = request.get_json(silent=True) or {}

        tx = machine.execute(address, tx_id, executed_ref=data.get('executedTxId'))
        return jsonify({'success': True, 'transaction': transaction_view(tx, vault, queries(address))})

    @app.route('/api/vault/<address>/transactions/<tx_id>/fail', methods=['POST'])
    def fail_transaction(address, tx_id):
        vault = load_vault(address)
        data = request.get_json(silent=True) or {}

        tx = machine.mark_failed(address, tx_id, data.get('reason') or 'Reported failed')
        return jsonify({'success': True, 'transaction': transaction_view(tx, vault, queries(address))})

    return app


if __name__ == "__main__":
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    create_app(config).run(
        host=config.host,
        port=config.port,
        debug=False
    )
