# Lifecycle fixtures and reporting hooks live in harness/plugin.py.
pytest_plugins = ["harness.plugin"]
