"""
Parser package for Balsa placeholders.

Provides the placeholder lexer, the expression parser, and the document-level
entry point that combines them with the scanner.
"""

from .base import ExpressionParser, document_parse
from .lexer import PlaceholderLexer, Token

__all__ = ["ExpressionParser", "document_parse", "PlaceholderLexer", "Token"]
