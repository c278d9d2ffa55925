import unittest
from multisig_vault.address import (
    AccountKey, Network, c32_encode, is_valid_address, network_of,
    parse_contract_principal, validate_address
)
from multisig_vault.errors import InvalidAddress, ValidationError

MAINNET_SIGNER = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"
TESTNET_SIGNER = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
MULTISIG_VAULT = "SM2Z6B8Q9WKV5CK7E3XEZ3R3TQMG7M1J8HQPXKNE1"
TOKEN_CONTRACT = "SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9.token-abtc"


class TestAddressSyntax(unittest.TestCase):

    def test_valid_addresses(self):
        """Well-formed addresses on both networks pass"""
        self.assertTrue(is_valid_address(MAINNET_SIGNER))
        self.assertTrue(is_valid_address(TESTNET_SIGNER))
        self.assertTrue(is_valid_address(MULTISIG_VAULT))
        self.assertTrue(is_valid_address("SP2RVXN8ZCJQY8ZCJQY8ZCJQY8ZCJQY8ZCJQY8Z"))

    def test_malformed_addresses(self):
        """Empty, truncated, lowercase and non-c32 addresses fail"""
        self.assertFalse(is_valid_address(""))
        self.assertFalse(is_valid_address(None))
        self.assertFalse(is_valid_address("SP2J6ZY48"))
        self.assertFalse(is_valid_address(MAINNET_SIGNER.lower()))
        self.assertFalse(is_valid_address("SX2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"))
        self.assertFalse(is_valid_address("SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJO"))
        self.assertFalse(is_valid_address(MAINNET_SIGNER + "7"))

    def test_validate_address_raises(self):
        with self.assertRaises(InvalidAddress):
            validate_address("")
        with self.assertRaises(InvalidAddress):
            validate_address("not-an-address")
        self.assertEqual(validate_address(TESTNET_SIGNER), TESTNET_SIGNER)

    def test_network_detection(self):
        self.assertEqual(network_of(MAINNET_SIGNER), Network.MAINNET)
        self.assertEqual(network_of(MULTISIG_VAULT), Network.MAINNET)
        self.assertEqual(network_of(TESTNET_SIGNER), Network.TESTNET)

    def test_contract_principal(self):
        address, name = parse_contract_principal(TOKEN_CONTRACT)
        self.assertEqual(address, "SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9")
        self.assertEqual(name, "token-abtc")

        for bad in (None, "", "SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9",
                    "SP3K8BC0PPEVCV7NZ6QSRWPQ2JE9E5B6N3PA0KBR9.1token", "nope.token-abtc"):
            with self.assertRaises(ValidationError):
                parse_contract_principal(bad)


class TestAccountKey(unittest.TestCase):

    def test_c32_encoding(self):
        self.assertEqual(c32_encode(b"\x20"), "10")
        self.assertEqual(c32_encode(b"\x00\x01"), "01")

    def test_key_derived_addresses(self):
        """Derived addresses are well-formed and network specific"""
        key = AccountKey()

        testnet = key.address(Network.TESTNET)
        mainnet = key.address(Network.MAINNET)

        self.assertTrue(testnet.startswith("ST"))
        self.assertTrue(mainnet.startswith("SP"))
        self.assertTrue(is_valid_address(testnet))
        self.assertTrue(is_valid_address(mainnet))
        self.assertEqual(network_of(testnet), Network.TESTNET)

    def test_address_is_deterministic(self):
        key = AccountKey()
        restored = AccountKey(bytes.fromhex(key.private_key_hex()))

        self.assertEqual(key.address(), restored.address())
        self.assertEqual(len(key.public_key_hex()), 66)

    def test_generate_address(self):
        private_hex, address = AccountKey.generate_address(Network.MAINNET)
        self.assertEqual(len(private_hex), 64)
        self.assertEqual(network_of(address), Network.MAINNET)

    def test_disconnected_has_no_address(self):
        with self.assertRaises(ValueError):
            AccountKey().address(Network.DISCONNECTED)

if __name__ == '__main__':
    unittest.main()
