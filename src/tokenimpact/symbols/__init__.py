"""Symbol normalization and catalog."""

from tokenimpact.symbols.catalog import (
    filter_by_quote,
    filter_by_search,
    filter_by_venue,
    get_symbol_catalog,
    get_symbol_info,
    is_symbol_in_catalog,
)
from tokenimpact.symbols.normalize import (
    denormalize,
    is_valid_canonical,
    normalize,
    parse_canonical,
)

__all__ = [
    "denormalize",
    "filter_by_quote",
    "filter_by_search",
    "filter_by_venue",
    "get_symbol_catalog",
    "get_symbol_info",
    "is_symbol_in_catalog",
    "is_valid_canonical",
    "normalize",
    "parse_canonical",
]
