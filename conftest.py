# conftest.py
pytest_plugins = ["pytester"]
