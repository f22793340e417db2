"""
x402 BCH custom exception hierarchy
"""


class X402Error(Exception):
    """x402 base exception"""

    pass


class SignatureError(X402Error):
    """Signature-related error"""

    pass


class SignatureCreationError(SignatureError):
    """Signature creation failed"""

    pass


class ValidationError(X402Error):
    """Validation-related error"""

    pass


class ConfigurationError(X402Error):
    """Configuration-related error"""

    pass


class UnsupportedNetworkError(ConfigurationError):
    """Unsupported network"""

    pass


class PaymentError(X402Error):
    """Failure while answering a 402 challenge"""

    pass


class MalformedRequestConfig(PaymentError):
    """The intercepted error carries no usable request"""

    def __init__(self, message: str = "Missing request configuration"):
        super().__init__(message)


class NoRequirementsOffered(PaymentError):
    """The 402 response lists no payment requirements"""

    def __init__(self, message: str = "No payment requirements found in 402 response"):
        super().__init__(message)


class NoMatchingRequirement(PaymentError, UnsupportedNetworkError):
    """None of the offered requirements is a BCH utxo requirement"""

    def __init__(self, message: str = "No BCH payment requirements found in 402 response"):
        super().__init__(message)


class FundingError(PaymentError):
    """Funding a payment failed"""

    pass


class InsufficientBalance(FundingError):
    """Wallet reported it cannot cover the payment"""

    def __init__(self, message: str = "Insufficient balance"):
        super().__init__(message)


class InsufficientFunds(FundingError):
    """No UTXO covers amount plus fee"""

    def __init__(self, message: str = "Not enough BCH to complete transaction!"):
        super().__init__(message)


class UtxoRetrievalError(FundingError):
    """Fetching UTXOs from the provider failed"""

    def __init__(self, upstream_message: str):
        self.upstream_message = upstream_message
        super().__init__(f"Error retrieving UTXOs: {upstream_message}")
