"""
Command-line interface for the AWS signing helper
Provides the credential-process and sign-string commands
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import CredentialsOpts, DEFAULT_SESSION_DURATION
from .credentials import CredentialProcessOutput, generate_credentials
from .crypto.private_keys import read_private_key_data
from .crypto.signatures import DigestAlgorithm, SigningOpts, sign
from .exceptions import SigningHelperError


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='aws-signing-helper',
        description='Obtain temporary AWS credentials with an X.509 certificate and private key'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'AWS signing helper {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_credential_process_parser(subparsers)
    setup_sign_string_parser(subparsers)

    return parser


def setup_credential_process_parser(subparsers):
    """Setup credential-process subcommand."""
    cp_parser = subparsers.add_parser(
        'credential-process',
        help='Print temporary credentials in credential-process JSON format'
    )
    cp_parser.add_argument('--certificate', required=True, help='Path to the PEM certificate')
    cp_parser.add_argument('--private-key', required=True, help='Path to the PEM private key')
    cp_parser.add_argument('--trust-anchor-arn', required=True, help='Trust anchor ARN')
    cp_parser.add_argument('--profile-arn', required=True, help='Profile ARN')
    cp_parser.add_argument('--role-arn', required=True, help='Role ARN to assume')
    cp_parser.add_argument('--intermediates', help='Path to a PEM bundle of intermediate certificates')
    cp_parser.add_argument('--endpoint', help='Session endpoint (derived from the region if omitted)')
    cp_parser.add_argument('--region', help='Signing region (parsed from the trust anchor ARN if omitted)')
    cp_parser.add_argument(
        '--session-duration',
        type=int,
        default=DEFAULT_SESSION_DURATION,
        help=f'Credential lifetime in seconds (default: {DEFAULT_SESSION_DURATION})'
    )
    cp_parser.add_argument('--role-session-name', help='Role session name')
    cp_parser.add_argument('--no-verify-ssl', action='store_true', help='Skip TLS verification of the endpoint')
    cp_parser.add_argument('--debug', action='store_true', help='Log debug output to stderr')


def setup_sign_string_parser(subparsers):
    """Setup sign-string subcommand."""
    sign_parser = subparsers.add_parser('sign-string', help='Sign stdin with a private key')
    sign_parser.add_argument('--private-key', required=True, help='Path to the PEM private key')
    sign_parser.add_argument(
        '--digest',
        choices=[d.value for d in DigestAlgorithm],
        default=DigestAlgorithm.SHA256.value,
        help='Digest algorithm (default: SHA256)'
    )
    sign_parser.add_argument('--debug', action='store_true', help='Log debug output to stderr')


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s %(name)s %(levelname)s %(message)s',
        stream=sys.stderr
    )


def handle_credential_process_command(args) -> int:
    """Handle credential-process command."""
    try:
        opts = CredentialsOpts(
            private_key_id=args.private_key,
            certificate_id=args.certificate,
            role_arn=args.role_arn,
            profile_arn=args.profile_arn,
            trust_anchor_arn=args.trust_anchor_arn,
            certificate_bundle_id=args.intermediates,
            endpoint=args.endpoint,
            region=args.region,
            session_duration=args.session_duration,
            role_session_name=args.role_session_name,
            no_verify_ssl=args.no_verify_ssl
        )
        credentials = generate_credentials(opts)
    except SigningHelperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(CredentialProcessOutput.from_credentials(credentials).to_json())
    return 0


def handle_sign_string_command(args) -> int:
    """Handle sign-string command."""
    try:
        private_key = read_private_key_data(args.private_key)
        payload = sys.stdin.buffer.read()
        result = sign(payload, SigningOpts(private_key=private_key, digest=DigestAlgorithm(args.digest)))
    except SigningHelperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(result.signature)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.debug)

    if args.command == 'credential-process':
        return handle_credential_process_command(args)
    elif args.command == 'sign-string':
        return handle_sign_string_command(args)

    parser.print_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
