"""
AWS4-X509 request signer

Signs outgoing requests with a certificate and its private key instead of a
shared secret. The leaf certificate (and optional chain) travel in request
headers so the verifier can check the signature against the certificate's
public key.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from cryptography.hazmat.primitives import serialization

from ..crypto.certificates import CertificateData
from ..crypto.private_keys import PrivateKeyMaterial
from ..crypto.signatures import DigestAlgorithm, SigningOpts, sign
from ..exceptions import SigningError
from .canonical_request import (
    build_authorization_header,
    build_canonical_request,
    create_string_to_sign,
    signing_algorithm,
)
from .types import SignableRequest, SignatureResult, SignerParams
from .utils import host_from_url, payload_hash, utc_now

logger = logging.getLogger(__name__)

HOST_HEADER = 'host'
X_AMZ_DATE = 'x-amz-date'
X_AMZ_X509 = 'x-amz-x509'
X_AMZ_X509_CHAIN = 'x-amz-x509-chain'
X_AMZ_CONTENT_SHA256 = 'x-amz-content-sha256'
AUTHORIZATION = 'authorization'

OPTIONAL_SIGNING_HEADERS = (X_AMZ_X509_CHAIN, X_AMZ_CONTENT_SHA256)

DEFAULT_SERVICE = 'rolesanywhere'


class RolesAnywhereSigner:
    """
    Request signer backed by an X.509 certificate and private key

    The signer holds no mutable state; one instance may sign many requests,
    from several threads.
    """

    def __init__(
        self,
        certificate: CertificateData,
        private_key: PrivateKeyMaterial,
        region: str,
        certificate_chain: Optional[List[CertificateData]] = None,
        service: str = DEFAULT_SERVICE,
        digest: DigestAlgorithm = DigestAlgorithm.SHA256
    ):
        """
        Initialize the signer.

        Args:
            certificate: Leaf certificate whose key signs requests
            private_key: Private key matching the certificate
            region: Region of the credential scope
            certificate_chain: Optional intermediate certificates
            service: Service name of the credential scope
            digest: Digest used for the string to sign

        Raises:
            SigningError: If the private key does not belong to the certificate
        """
        if certificate.key_type != private_key.key_type:
            raise SigningError(
                f"Private key type {private_key.key_type.value} does not match "
                f"certificate key type {certificate.key_type.value}",
                "KEY_CERTIFICATE_MISMATCH"
            )

        if certificate.certificate is not None and not _same_public_key(private_key, certificate):
            raise SigningError(
                f"Private key does not match the public key of certificate {certificate.serial_number}",
                "KEY_CERTIFICATE_MISMATCH"
            )

        self.certificate = certificate
        self.private_key = private_key
        self.certificate_chain = list(certificate_chain or [])
        self.region = region
        self.service = service
        self.digest = digest
        self.algorithm = signing_algorithm(certificate.key_type, digest)

    def sign(self, request: SignableRequest, signing_time: datetime) -> SignatureResult:
        """
        Sign a request at an explicit instant.

        The signing headers are set on the request only once the signature
        has been produced; on failure the request is left unchanged.

        Args:
            request: Request to sign
            signing_time: Instant to sign at (naive values are UTC)

        Returns:
            SignatureResult: Headers set on the request, plus intermediate strings

        Raises:
            SigningError: If signing fails
        """
        try:
            params = SignerParams(
                signing_time=signing_time,
                region=self.region,
                service=self.service,
                algorithm=self.algorithm
            )

            staged_headers = self._signing_headers(request, params)
            staged = SignableRequest(
                method=request.method,
                url=request.url,
                headers={**self._unsigned_headers(request, staged_headers), **staged_headers},
                body=request.body
            )

            canonical_request, signed_headers = build_canonical_request(
                staged, staged_headers.get(X_AMZ_CONTENT_SHA256)
            )
            string_to_sign = create_string_to_sign(canonical_request, params, self.digest)

            logger.debug(f"Canonical request:\n{canonical_request}")
            logger.debug(f"String to sign:\n{string_to_sign}")

            result = sign(
                string_to_sign.encode('utf-8'),
                SigningOpts(private_key=self.private_key, digest=self.digest)
            )

            staged_headers[AUTHORIZATION] = build_authorization_header(
                params,
                self.certificate.serial_number,
                signed_headers,
                result.signature
            )

        except SigningError:
            raise
        except Exception as e:
            raise SigningError(
                f"Request signing failed: {e}",
                "SIGNING_FAILED",
                {"url": request.url, "original_error": str(e)}
            ) from e

        for name in OPTIONAL_SIGNING_HEADERS:
            if name not in staged_headers:
                request.headers.pop(name, None)
        request.headers.update(staged_headers)
        logger.debug(f"Signed {request.method.value} request to {request.url}")

        return SignatureResult(
            headers=staged_headers,
            canonical_request=canonical_request,
            string_to_sign=string_to_sign,
            signed_headers=signed_headers,
            signature=result.signature
        )

    def sign_with_curr_time(self, request: SignableRequest) -> SignatureResult:
        """Sign a request at the current wall-clock time."""
        return self.sign(request, utc_now())

    @staticmethod
    def _unsigned_headers(request: SignableRequest, staged_headers: Dict[str, str]) -> Dict[str, str]:
        # Chain and body hash left over from an earlier signature must not be re-signed
        return {
            name: value for name, value in request.headers.items()
            if name not in OPTIONAL_SIGNING_HEADERS or name in staged_headers
        }

    def _signing_headers(self, request: SignableRequest, params: SignerParams) -> Dict[str, str]:
        headers = {
            HOST_HEADER: host_from_url(request.url),
            X_AMZ_DATE: params.formatted_signing_date_time(),
            X_AMZ_X509: self.certificate.certificate_data,
        }

        if self.certificate_chain:
            headers[X_AMZ_X509_CHAIN] = certificate_chain_to_string(self.certificate_chain)

        if request.has_body():
            headers[X_AMZ_CONTENT_SHA256] = payload_hash(request.body)

        return headers


def _same_public_key(private_key: PrivateKeyMaterial, certificate: CertificateData) -> bool:
    encoding = serialization.Encoding.DER
    public_format = serialization.PublicFormat.SubjectPublicKeyInfo
    expected = certificate.certificate.public_key().public_bytes(encoding, public_format)
    return private_key.public_key().public_bytes(encoding, public_format) == expected


def certificate_chain_to_string(chain: List[CertificateData]) -> str:
    """Comma separated base64 DER of each chain certificate, in order."""
    return ','.join(cert.certificate_data for cert in chain)


def create_signer(
    certificate: CertificateData,
    private_key: PrivateKeyMaterial,
    region: str,
    certificate_chain: Optional[List[CertificateData]] = None,
    **kwargs
) -> RolesAnywhereSigner:
    return RolesAnywhereSigner(certificate, private_key, region, certificate_chain, **kwargs)
