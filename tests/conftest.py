pytest_plugins = ["reposhare.testing.conftest"]
