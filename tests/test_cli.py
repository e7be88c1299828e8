"""
Test suite for the command-line interface
"""

import io
import json

import pytest

from aws_signing_helper.cli import create_parser, main
from aws_signing_helper.crypto import DigestAlgorithm, verify_signature

TRUST_ANCHOR_ARN = "arn:aws:rolesanywhere:us-east-1:000000000000:trust-anchor/41cl0bae-6783-40d4-ab20-65dc5d922e45"
PROFILE_ARN = "arn:aws:rolesanywhere:us-east-1:000000000000:profile/41cl0bae-6783-40d4-ab20-65dc5d922e45"
ROLE_ARN = "arn:aws:iam::000000000000:role/ExampleS3WriteRole"


def credential_process_args(cert_dir, *extra):
    return [
        "credential-process",
        "--certificate", str(cert_dir / "client-cert.pem"),
        "--private-key", str(cert_dir / "client-key.pem"),
        "--trust-anchor-arn", TRUST_ANCHOR_ARN,
        "--profile-arn", PROFILE_ARN,
        "--role-arn", ROLE_ARN,
        *extra,
    ]


class TestCredentialProcess:
    """Test the credential-process command"""

    def test_prints_credentials(self, cert_dir, stub_endpoint, capsys):
        """Test credential-process JSON on stdout"""
        endpoint = stub_endpoint(status=201)

        exit_code = main(credential_process_args(
            cert_dir,
            "--endpoint", endpoint.url,
            "--intermediates", str(cert_dir / "intermediates.pem"),
            "--session-duration", "900",
        ))

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {
            "Version": 1,
            "AccessKeyId": "accessKeyId",
            "SecretAccessKey": "secretAccessKey",
            "SessionToken": "sessionToken",
            "Expiration": "2022-07-27T04:36:55Z",
        }
        assert json.loads(endpoint.requests[0]["body"]) == {"durationSeconds": 900}
        assert "x-amz-x509-chain" in endpoint.requests[0]["headers"]

    def test_rejected_request(self, cert_dir, stub_endpoint, capsys):
        """Test that a rejection exits non-zero with a message"""
        endpoint = stub_endpoint(status=403, body={"message": "Untrusted signing certificate"})

        exit_code = main(credential_process_args(cert_dir, "--endpoint", endpoint.url))

        captured = capsys.readouterr()
        assert exit_code == 1
        assert captured.out == ""
        assert "Untrusted signing certificate" in captured.err

    def test_invalid_certificate(self, cert_dir, capsys):
        """Test that an unreadable certificate is reported"""
        args = credential_process_args(cert_dir)
        args[args.index("--certificate") + 1] = str(cert_dir / "missing.pem")

        assert main(args) == 1
        assert "could not parse certificate" in capsys.readouterr().err

    def test_invalid_duration(self, cert_dir, capsys):
        """Test that an out-of-range duration is reported before signing"""
        assert main(credential_process_args(cert_dir, "--session-duration", "60")) == 1
        assert "Session duration" in capsys.readouterr().err

    def test_missing_required_argument(self, cert_dir):
        """Test that argparse rejects a missing ARN"""
        args = credential_process_args(cert_dir)
        index = args.index("--role-arn")
        del args[index:index + 2]

        with pytest.raises(SystemExit) as excinfo:
            main(args)
        assert excinfo.value.code == 2


class TestSignString:
    """Test the sign-string command"""

    @pytest.mark.parametrize("key_file,digest", [
        ("rsa-2048-key.pem", "SHA256"),
        ("ec-prime256v1-key-pkcs8.pem", "SHA384"),
    ])
    def test_signs_stdin(self, cert_dir, monkeypatch, capsys, rsa_key, ec_key, key_file, digest):
        """Test that stdin is signed with the given key and digest"""
        payload = b"string to sign\n"
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(payload)))

        exit_code = main(["sign-string", "--private-key", str(cert_dir / key_file), "--digest", digest])

        assert exit_code == 0
        signature = bytes.fromhex(capsys.readouterr().out.strip())
        public_key = (rsa_key if key_file.startswith("rsa") else ec_key).public_key()
        assert verify_signature(payload, public_key, DigestAlgorithm(digest), signature)

    def test_invalid_key(self, cert_dir, monkeypatch, capsys):
        """Test that a bad key exits non-zero"""
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"data")))

        assert main(["sign-string", "--private-key", str(cert_dir / "invalid-rsa-key.pem")]) == 1
        assert "unable to parse private key" in capsys.readouterr().err


class TestParser:
    """Test argument parsing"""

    def test_no_command(self, capsys):
        """Test that running without a command prints help"""
        assert main([]) == 1
        assert "credential-process" in capsys.readouterr().out

    def test_defaults(self):
        """Test credential-process defaults"""
        args = create_parser().parse_args([
            "credential-process",
            "--certificate", "c", "--private-key", "k",
            "--trust-anchor-arn", TRUST_ANCHOR_ARN,
            "--profile-arn", PROFILE_ARN,
            "--role-arn", ROLE_ARN,
        ])

        assert args.session_duration == 3600
        assert args.no_verify_ssl is False
        assert args.intermediates is None

    def test_digest_choices(self):
        """Test that only supported digests are accepted"""
        with pytest.raises(SystemExit):
            create_parser().parse_args(["sign-string", "--private-key", "k", "--digest", "MD5"])
