"""Quote assembly across venues."""

from tokenimpact.quotes.assembler import assemble_quote, fetch_quote, format_number, select_best

__all__ = ["assemble_quote", "fetch_quote", "format_number", "select_best"]
