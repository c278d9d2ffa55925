import unittest
from multisig_vault.errors import InvalidAddress, ValidationError
from multisig_vault.vault import Signer, Transaction, TransactionKind, TransactionStatus, Vault, parse_amount

VAULT = "SM2Z6B8Q9WKV5CK7E3XEZ3R3TQMG7M1J8HQPXKNE1"
ALICE = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
BOB = "SP3FBR2AGK5H9QBDH3EEN6DF8EK8JY7RX8QJ5SVTE"
CAROL = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"


class TestVault(unittest.TestCase):

    def test_vault_creation(self):
        """Test vault creation and membership"""
        vault = Vault(VAULT, [ALICE, BOB, CAROL], threshold=2, balance=5_000_000)

        self.assertEqual(len(vault.signers), 3)
        self.assertEqual(vault.threshold, 2)
        self.assertEqual(vault.transactions, [])
        self.assertTrue(vault.is_signer(ALICE))
        self.assertFalse(vault.is_signer("ST33QGZ09QT4F0RP7AW0GG52XSTJZGNB6YEJDENNX"))
        self.assertFalse(vault.is_signer(None))

    def test_threshold_bounds(self):
        """Threshold must be between 1 and the number of signers"""
        with self.assertRaises(ValidationError):
            Vault(VAULT, [ALICE, BOB, CAROL], threshold=0)
        with self.assertRaises(ValidationError):
            Vault(VAULT, [ALICE, BOB, CAROL], threshold=4)
        with self.assertRaises(ValidationError):
            Vault(VAULT, [], threshold=1)

        Vault(VAULT, [ALICE, BOB, CAROL], threshold=3)

    def test_signer_validation(self):
        with self.assertRaises(ValidationError):
            Vault(VAULT, [ALICE, ALICE], threshold=1)
        with self.assertRaises(ValidationError):
            Vault(VAULT, [ALICE, "bogus"], threshold=1)
        with self.assertRaises(InvalidAddress):
            Vault("", [ALICE], threshold=1)
        with self.assertRaises(ValidationError):
            Vault(VAULT, [ALICE], threshold=1, balance=-1)

    def test_duplicate_transaction_ids(self):
        tx = Transaction("txn-001", TransactionKind.NATIVE_TRANSFER, 10, BOB, [Signer(ALICE)])
        with self.assertRaises(ValidationError):
            Vault(VAULT, [ALICE], threshold=1, transactions=[tx, tx])


class TestTransaction(unittest.TestCase):

    def test_token_transfer_requires_contract(self):
        with self.assertRaises(ValidationError):
            Transaction("txn-001", TransactionKind.TOKEN_TRANSFER, 10, BOB, [Signer(ALICE)])

    def test_terminal_statuses(self):
        self.assertTrue(TransactionStatus.EXECUTED.is_terminal)
        self.assertTrue(TransactionStatus.FAILED.is_terminal)
        self.assertFalse(TransactionStatus.PENDING.is_terminal)
        self.assertFalse(TransactionStatus.READY_TO_EXECUTE.is_terminal)

    def test_content_hash_ignores_signatures(self):
        """Hash covers what was proposed, not who signed it"""
        tx1 = Transaction("txn-001", "stx-transfer", 1_000_000, BOB, [Signer(ALICE), Signer(BOB)])
        tx2 = Transaction("txn-001", "stx-transfer", 1_000_000, BOB, [Signer(ALICE, True), Signer(BOB)])
        tx3 = Transaction("txn-001", "stx-transfer", 2_000_000, BOB, [Signer(ALICE), Signer(BOB)])

        self.assertEqual(tx1.tx_hash, tx2.tx_hash)
        self.assertNotEqual(tx1.tx_hash, tx3.tx_hash)
        self.assertTrue(tx1.tx_hash.startswith("0x"))

    def test_from_contract_read(self):
        """Contract reads carry amounts as decimal strings"""
        tx = Transaction.from_dict({
            'id': "txn-001",
            'type': "stx-transfer",
            'amount': "1000000",
            'recipient': BOB,
            'txHash': "0x1234567890abcdef",
            'status': "pending",
            'signers': [
                {'address': ALICE, 'hasSigned': True},
                {'address': BOB, 'hasSigned': False},
            ],
            'timestamp': 1700000000000,
        })

        self.assertEqual(tx.amount, 1_000_000)
        self.assertEqual(tx.kind, TransactionKind.NATIVE_TRANSFER)
        self.assertEqual(tx.status, TransactionStatus.PENDING)
        self.assertEqual(tx.tx_hash, "0x1234567890abcdef")
        self.assertTrue(tx.find_signer(ALICE).has_signed)
        self.assertIsNone(tx.find_signer(CAROL))

    def test_from_dict_rejects_bad_values(self):
        base = {'id': "txn-001", 'type': "stx-transfer", 'amount': "10", 'recipient': BOB}

        with self.assertRaises(ValidationError):
            Transaction.from_dict(dict(base, type="nft-transfer"))
        with self.assertRaises(ValidationError):
            Transaction.from_dict(dict(base, amount="-5"))
        with self.assertRaises(ValidationError):
            Transaction.from_dict(dict(base, status="lost"))

    def test_amount_rejects_non_ascii_digits(self):
        """Unicode digits such as superscripts are not amounts"""
        for value in ("\u00b2", "\u0663", "\uff11\uff12"):
            with self.assertRaises(ValidationError):
                parse_amount(value)
        self.assertEqual(parse_amount("0012"), 12)

    def test_vault_serialization(self):
        vault = Vault(VAULT, [ALICE, BOB], threshold=1, balance=42, transactions=[
            Transaction("txn-001", "token-transfer", 7, CAROL, [Signer(ALICE), Signer(BOB, True)],
                        token_contract="SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9.token-abtc")
        ])

        restored = Vault.from_dict(vault.to_dict())

        self.assertEqual(restored, vault)
        self.assertEqual(restored.to_dict()['threshold'], 1)

if __name__ == '__main__':
    unittest.main()
