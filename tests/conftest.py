pytest_plugins = ["mock_extended.pytest_plugin"]
