"""
Credential exchange configuration

Options for one session-creation attempt, with JSON and file loading and
region/endpoint resolution from the trust anchor ARN.
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

from ..exceptions import ValidationError

DEFAULT_SESSION_DURATION = 3600
MIN_SESSION_DURATION = 900
MAX_SESSION_DURATION = 43200
DEFAULT_TIMEOUT = 30.0


def parse_region_from_arn(arn: str) -> str:
    """
    Extract the region field of an ARN.

    Args:
        arn: ARN of the form arn:partition:service:region:account:resource

    Returns:
        str: Region name

    Raises:
        ValidationError: If the ARN is malformed or has no region
    """
    parts = arn.split(':', 5) if isinstance(arn, str) else []
    if len(parts) != 6 or parts[0] != 'arn':
        raise ValidationError(f"Invalid ARN: {arn}", "INVALID_ARN", {"arn": arn})

    region = parts[3]
    if not region:
        raise ValidationError(f"ARN has no region: {arn}", "INVALID_ARN", {"arn": arn})
    return region


def default_endpoint(region: str) -> str:
    """Session endpoint for a region."""
    suffix = 'amazonaws.com.cn' if region.startswith('cn-') else 'amazonaws.com'
    return f'https://rolesanywhere.{region}.{suffix}'


@dataclass
class CredentialsOpts:
    """
    Configuration for one credential exchange.

    Attributes:
        private_key_id: Path to the PEM private key
        certificate_id: Path to the PEM leaf certificate
        role_arn: Role to assume
        profile_arn: Roles Anywhere profile
        trust_anchor_arn: Trust anchor that issued the certificate
        certificate_bundle_id: Optional path to a PEM bundle of intermediates
        endpoint: Session endpoint; derived from the region if omitted
        region: Signing region; parsed from the trust anchor ARN if omitted
        session_duration: Requested credential lifetime in seconds
        role_session_name: Optional role session name
        no_verify_ssl: Skip TLS verification of the endpoint
        timeout: Network timeout in seconds
    """
    private_key_id: str
    certificate_id: str
    role_arn: str
    profile_arn: str
    trust_anchor_arn: str
    certificate_bundle_id: Optional[str] = None
    endpoint: Optional[str] = None
    region: Optional[str] = None
    session_duration: int = DEFAULT_SESSION_DURATION
    role_session_name: Optional[str] = None
    no_verify_ssl: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        """Validate credential options."""
        for name in ('private_key_id', 'certificate_id', 'role_arn', 'profile_arn', 'trust_anchor_arn'):
            if not getattr(self, name):
                raise ValidationError(f"{name} cannot be empty", "MISSING_OPTION", {"option": name})

        for name in ('role_arn', 'profile_arn', 'trust_anchor_arn'):
            if not str(getattr(self, name)).startswith('arn:'):
                raise ValidationError(
                    f"{name} is not an ARN: {getattr(self, name)}",
                    "INVALID_ARN",
                    {"option": name}
                )

        if self.region is None:
            parse_region_from_arn(self.trust_anchor_arn)

        if isinstance(self.session_duration, bool) or not isinstance(self.session_duration, int):
            raise ValidationError("Session duration must be an integer number of seconds", "INVALID_DURATION")

        if not MIN_SESSION_DURATION <= self.session_duration <= MAX_SESSION_DURATION:
            raise ValidationError(
                f"Session duration must be between {MIN_SESSION_DURATION} and {MAX_SESSION_DURATION} seconds",
                "INVALID_DURATION",
                {"session_duration": self.session_duration}
            )

        if self.timeout <= 0:
            raise ValidationError("Timeout must be positive", "INVALID_TIMEOUT")

        if self.endpoint:
            parsed = urlparse(self.endpoint)
            if parsed.scheme not in ('http', 'https') or not parsed.netloc:
                raise ValidationError(f"Invalid endpoint URL: {self.endpoint}", "INVALID_ENDPOINT")

    def resolved_region(self) -> str:
        return self.region or parse_region_from_arn(self.trust_anchor_arn)

    def resolved_endpoint(self) -> str:
        """Endpoint without a trailing slash."""
        endpoint = self.endpoint or default_endpoint(self.resolved_region())
        return endpoint.rstrip('/')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CredentialsOpts':
        """Build options from a dictionary with snake_case keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValidationError(
                f"Unknown credential options: {', '.join(sorted(unknown))}",
                "UNKNOWN_OPTION",
                {"options": sorted(unknown)}
            )
        try:
            return cls(**data)
        except TypeError as e:
            raise ValidationError(f"Invalid credential options: {e}", "INVALID_FORMAT") from e

    @classmethod
    def from_json(cls, json_string: str) -> 'CredentialsOpts':
        """Load options from a JSON object string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR") from e

        if not isinstance(data, dict):
            raise ValidationError("Configuration JSON must be an object", "INVALID_FORMAT")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'CredentialsOpts':
        """Load options from a JSON file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ValidationError(f"Failed to read configuration file: {e}", "FILE_ERROR") from e
        return cls.from_json(json_string)
