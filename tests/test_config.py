import unittest
from multisig_vault.config import AppConfig, DEFAULT_SECRET_KEY


class TestAppConfig(unittest.TestCase):

    def test_defaults(self):
        config = AppConfig.from_env({})

        self.assertEqual(config.secret_key, DEFAULT_SECRET_KEY)
        self.assertEqual(config.host, "0.0.0.0")
        self.assertEqual(config.port, 10000)
        self.assertEqual(config.log_level, "INFO")
        self.assertTrue(config.placeholder_vaults)

    def test_overrides(self):
        config = AppConfig.from_env({
            "MULTISIG_SECRET_KEY": "s3cret",
            "HOST": "127.0.0.1",
            "PORT": "8080",
            "MULTISIG_LOG_LEVEL": "debug",
            "MULTISIG_PLACEHOLDER_VAULTS": "off",
        })

        self.assertEqual(config.secret_key, "s3cret")
        self.assertEqual(config.host, "127.0.0.1")
        self.assertEqual(config.port, 8080)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertFalse(config.placeholder_vaults)

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            AppConfig.from_env({"PORT": "http"})
        with self.assertRaises(ValueError):
            AppConfig.from_env({"MULTISIG_PLACEHOLDER_VAULTS": "maybe"})
        with self.assertRaises(ValueError):
            AppConfig.from_env({"MULTISIG_LOG_LEVEL": "chatty"})

if __name__ == '__main__':
    unittest.main()
