"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TransferSourceError(DomainException):
    """Transfer data provider returned an error or is unavailable"""

    pass


class RateOracleError(DomainException):
    """Exchange rate oracle returned an error or is unavailable"""

    pass


class InvalidWalletAddressError(DomainException):
    """Wallet address is not a valid EVM address"""

    pass


class UnsupportedChainError(DomainException):
    """Blockchain is not one the transfer source can query"""

    pass


class InsufficientDataError(DomainException):
    """Not enough conversion history to produce results"""

    pass


class AnalysisNotFoundError(DomainException):
    """No analysis exists with the requested id"""

    pass
