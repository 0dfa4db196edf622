"""Exception types raised inside the product finder."""


class FinderError(Exception):
    """Base class for product finder errors."""


class InvalidProductError(FinderError, ValueError):
    """A catalog entry could not be turned into a Product."""


class LLMRankingError(FinderError):
    """The LLM ranker produced no usable product ids."""


class InvalidFilterError(FinderError, ValueError):
    """A catalog filter value is malformed."""
