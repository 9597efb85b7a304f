"""Exceptions raised by the fresh-wallet classification engine."""


class FreshWalletError(Exception):
    """Base exception for fresh-wallet classification errors."""


class ConfigurationError(FreshWalletError):
    """Raised when thresholds or settings cannot produce a usable engine.

    Only raised while building catalogs, rules and managers, never while
    evaluating a wallet.
    """


class InvalidInputError(FreshWalletError, ValueError):
    """Raised when a WalletSignal violates the caller contract.

    Negative counts, non-integer ages and unknown category values are
    reported instead of being clamped, so acquisition bugs stay visible.
    """
