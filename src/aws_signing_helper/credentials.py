"""
Temporary credential generation

Ties together certificate and key loading, request signing and the session
exchange: one call turns a CredentialsOpts into one Credentials record.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from .config import CredentialsOpts
from .crypto.certificates import read_certificate_bundle_data, read_certificate_data
from .crypto.private_keys import read_private_key_data
from .http_client import Credentials, SessionClient
from .signing.types import HttpMethod, SignableRequest
from .signing.utils import format_rfc3339_timestamp, utc_now
from .signing.x509_signer import RolesAnywhereSigner

logger = logging.getLogger(__name__)

SESSIONS_PATH = '/sessions'
CREDENTIAL_PROCESS_VERSION = 1


def build_create_session_request(opts: CredentialsOpts) -> SignableRequest:
    """
    Build the unsigned session-creation request.

    The ARNs travel in the query string and the duration in the JSON body.
    """
    query = urlencode(
        {
            'profileArn': opts.profile_arn,
            'roleArn': opts.role_arn,
            'trustAnchorArn': opts.trust_anchor_arn,
        }
    )
    url = f'{opts.resolved_endpoint()}{SESSIONS_PATH}?{query}'

    payload: Dict[str, Any] = {'durationSeconds': opts.session_duration}
    if opts.role_session_name:
        payload['roleSessionName'] = opts.role_session_name

    return SignableRequest(
        method=HttpMethod.POST,
        url=url,
        headers={'Content-Type': 'application/json'},
        body=json.dumps(payload, separators=(',', ':'))
    )


def generate_credentials(
    opts: CredentialsOpts,
    session: Optional[requests.Session] = None,
    signing_time: Optional[datetime] = None
) -> Credentials:
    """
    Exchange a certificate-signed request for temporary credentials.

    Args:
        opts: Credential exchange options
        session: Optional requests session to send through
        signing_time: Instant to sign at; defaults to the current time

    Returns:
        Credentials: Temporary credentials

    Raises:
        CertificateParseError: If the certificate or bundle cannot be parsed
        KeyParseError: If the private key cannot be parsed
        SigningError: If the request cannot be signed
        NetworkError: On transport failures
        ProtocolError: If the endpoint rejects the request or returns a bad body
    """
    certificate = read_certificate_data(opts.certificate_id)
    chain = read_certificate_bundle_data(opts.certificate_bundle_id) if opts.certificate_bundle_id else None
    private_key = read_private_key_data(opts.private_key_id)

    signer = RolesAnywhereSigner(
        certificate=certificate,
        private_key=private_key,
        region=opts.resolved_region(),
        certificate_chain=chain
    )

    request = build_create_session_request(opts)
    signer.sign(request, signing_time or utc_now())

    logger.info(f"Requesting session for role {opts.role_arn} with certificate {certificate.serial_number}")

    with SessionClient(timeout=opts.timeout, verify_ssl=not opts.no_verify_ssl, session=session) as client:
        return client.create_session(request)


@dataclass(frozen=True)
class CredentialProcessOutput:
    """Credentials in the shape a credential-process consumer expects"""
    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: str
    version: int = CREDENTIAL_PROCESS_VERSION

    @classmethod
    def from_credentials(cls, credentials: Credentials) -> 'CredentialProcessOutput':
        return cls(
            access_key_id=credentials.access_key_id,
            secret_access_key=credentials.secret_access_key,
            session_token=credentials.session_token,
            expiration=format_rfc3339_timestamp(credentials.expiration)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'Version': self.version,
            'AccessKeyId': self.access_key_id,
            'SecretAccessKey': self.secret_access_key,
            'SessionToken': self.session_token,
            'Expiration': self.expiration,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
