"""Tokenizer, expression parser, syntax tree and dependency resolver for the Azurite language."""

__version__ = "0.1.0"
__all__ = ["tokens", "ast", "lexer", "parser_core", "manifest", "resolver"]