[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "azurite"
version = "0.1.0"
description = "Tokenizer, expression parser and dependency resolver for the Azurite programming language"
requires-python = ">=3.11"
dependencies = []
keywords = ["compiler", "lexer", "tokenizer", "parser", "ast", "programming-language", "azurite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["azurite"]

[tool.pytest.ini_options]
addopts = "-ra"
