import unittest

from filedesk.config import ActivationConstraint, ClientConfig, DragConfig, SelectionConfig


class TestConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        self.assertEqual(SelectionConfig().double_click_ms, 350.0)
        self.assertEqual(SelectionConfig().max_range, 1000)

        drag = DragConfig()
        self.assertEqual(drag.pointer, ActivationConstraint(150.0, 5.0))
        self.assertEqual(drag.touch, ActivationConstraint(250.0, 8.0))
        self.assertEqual(drag.collision_padding, 8.0)
        self.assertEqual(drag.root_folder_id, "root")

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            SelectionConfig(max_range=0)
        with self.assertRaises(ValueError):
            ActivationConstraint(delay_ms=-1, tolerance_px=0)
        with self.assertRaises(ValueError):
            DragConfig(root_folder_id=" ")
        with self.assertRaises(ValueError):
            ClientConfig(base_url="files.example.com")
        with self.assertRaises(ValueError):
            ClientConfig(base_url="https://x", max_retries=-1)

    def test_client_config_from_dict(self) -> None:
        config = ClientConfig.from_dict(
            {"base_url": "https://x/api", "token": " t0k ", "max_retries": 5}
        )
        self.assertEqual(config.headers["Authorization"], "Bearer t0k")
        self.assertEqual(config.max_retries, 5)
        self.assertEqual(config.timeout_sec, 30.0)

        with self.assertRaises(TypeError):
            ClientConfig.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_client_config_from_env(self) -> None:
        config = ClientConfig.from_env(
            {"FILEDESK_API_URL": "https://x/api", "FILEDESK_API_TIMEOUT": "5"}
        )
        self.assertEqual(config.base_url, "https://x/api")
        self.assertEqual(config.timeout_sec, 5.0)
        self.assertNotIn("Authorization", config.headers)

        with self.assertRaises(ValueError):
            ClientConfig.from_env({})
        with self.assertRaises(ValueError):
            ClientConfig.from_env({"FILEDESK_API_URL": "https://x", "FILEDESK_API_TIMEOUT": "soon"})


if __name__ == "__main__":
    unittest.main()
