"""
Exception classes for the AWS signing helper
"""

from typing import Optional, Dict, Any


class SigningHelperError(Exception):
    """Base exception for all signing helper errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ValidationError(SigningHelperError):
    """Exception raised for invalid options or configuration"""
    pass


class CertificateParseError(SigningHelperError):
    """Exception raised when a certificate or certificate bundle cannot be parsed"""

    def __init__(self, message: str = "could not parse certificate", error_code: str = "CERTIFICATE_PARSE_ERROR",
                 details: Optional[Dict[str, Any]] = None):
        if "could not parse certificate" not in message:
            message = f"could not parse certificate: {message}"
        super().__init__(message, error_code, details)


class KeyParseError(SigningHelperError):
    """Exception raised when a private key cannot be parsed"""

    def __init__(self, message: str = "unable to parse private key", error_code: str = "KEY_PARSE_ERROR",
                 details: Optional[Dict[str, Any]] = None):
        if "unable to parse private key" not in message:
            message = f"unable to parse private key: {message}"
        super().__init__(message, error_code, details)


class SigningError(SigningHelperError):
    """Exception raised when a signature cannot be produced"""

    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class NetworkError(SigningHelperError):
    """Exception raised for DNS, connection and timeout failures"""

    def __init__(self, message: str, error_code: str = "NETWORK_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class ProtocolError(SigningHelperError):
    """Exception raised when the server response cannot be used"""

    def __init__(self, message: str, error_code: str = "PROTOCOL_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class AuthenticationError(ProtocolError):
    """Exception raised when the session endpoint rejects the request"""

    def __init__(self, message: str, error_code: str = "AUTHENTICATION_ERROR",
                 http_status: int = 0, response_body: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
        self.response_body = response_body
