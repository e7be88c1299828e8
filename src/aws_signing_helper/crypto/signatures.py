"""
Signing capabilities for certificate-backed request signing

A signing capability produces a raw signature over a precomputed digest. Two
variants exist, one per key family: RSA (PKCS#1 v1.5) and ECDSA (ASN.1/DER
encoded r and s). The variant is chosen once, when key material is loaded.
"""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed

from ..exceptions import SigningError
from .certificates import KeyType

if TYPE_CHECKING:
    from .private_keys import PrivateKeyMaterial


PublicKey = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey]


class DigestAlgorithm(str, Enum):
    """Digest algorithms supported for signing"""
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        """Return the matching cryptography hash algorithm instance."""
        if self is DigestAlgorithm.SHA256:
            return hashes.SHA256()
        if self is DigestAlgorithm.SHA384:
            return hashes.SHA384()
        return hashes.SHA512()

    def digest(self, data: bytes) -> bytes:
        """Hash data with this algorithm."""
        return hashlib.new(self.value.lower(), data).digest()

    def hexdigest(self, data: bytes) -> str:
        return hashlib.new(self.value.lower(), data).hexdigest()


class SigningCapability(ABC):
    """
    Something that can sign a digest with a private key.

    Subclasses wrap a private key of a single family. Keys held outside the
    process (hardware tokens, key stores) plug in by providing a key object
    that implements cryptography's private key interface for that family.
    """

    key_type: KeyType
    algorithm_name: str

    def __init__(self, key):
        self._key = key

    @abstractmethod
    def _sign(self, digest: bytes, algorithm: DigestAlgorithm) -> bytes:
        ...

    def sign_digest(self, digest: bytes, algorithm: DigestAlgorithm) -> bytes:
        """
        Sign a precomputed digest.

        Args:
            digest: Digest bytes produced with ``algorithm``
            algorithm: Digest algorithm used to produce ``digest``

        Returns:
            bytes: Raw signature

        Raises:
            SigningError: If the key cannot sign the digest
        """
        expected_size = algorithm.hash_algorithm().digest_size
        if len(digest) != expected_size:
            raise SigningError(
                f"Digest length {len(digest)} does not match {algorithm.value} ({expected_size} bytes)",
                "DIGEST_MISMATCH",
                {"algorithm": algorithm.value}
            )

        try:
            return self._sign(digest, algorithm)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise SigningError(
                f"{self.algorithm_name} signing with {algorithm.value} failed: {e}",
                "SIGNING_FAILED",
                {"algorithm": algorithm.value, "original_error": str(e)}
            ) from e

    def public_key(self) -> PublicKey:
        return self._key.public_key()


class RSASigningCapability(SigningCapability):
    """PKCS#1 v1.5 signatures with an RSA key"""

    key_type = KeyType.RSA
    algorithm_name = "RSA"

    def _sign(self, digest: bytes, algorithm: DigestAlgorithm) -> bytes:
        return self._key.sign(digest, padding.PKCS1v15(), Prehashed(algorithm.hash_algorithm()))


class ECDSASigningCapability(SigningCapability):
    """DER encoded ECDSA signatures with an EC key"""

    key_type = KeyType.EC
    algorithm_name = "ECDSA"

    def _sign(self, digest: bytes, algorithm: DigestAlgorithm) -> bytes:
        return self._key.sign(digest, ec.ECDSA(Prehashed(algorithm.hash_algorithm())))


def create_signing_capability(key) -> SigningCapability:
    """
    Select the signing capability for a private key.

    Raises:
        SigningError: If the key is neither RSA nor EC
    """
    if isinstance(key, rsa.RSAPrivateKey):
        return RSASigningCapability(key)
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return ECDSASigningCapability(key)

    raise SigningError(
        f"Unsupported private key type: {type(key).__name__}",
        "UNSUPPORTED_KEY_TYPE"
    )


@dataclass(frozen=True)
class SigningOpts:
    """
    Options for a single sign call.

    Attributes:
        private_key: Key material to sign with
        digest: Digest algorithm applied to the payload
    """
    private_key: 'PrivateKeyMaterial'
    digest: DigestAlgorithm = DigestAlgorithm.SHA256


@dataclass(frozen=True)
class SigningResult:
    """Hex encoded signature produced by one sign call"""
    signature: str

    @property
    def signature_bytes(self) -> bytes:
        return bytes.fromhex(self.signature)


def sign(payload: bytes, opts: SigningOpts) -> SigningResult:
    """
    Hash a payload and sign the digest.

    Args:
        payload: Bytes to sign
        opts: Key material and digest algorithm

    Returns:
        SigningResult: Hex encoded signature

    Raises:
        SigningError: If signing fails
    """
    digest = opts.digest.digest(payload)
    signature = opts.private_key.signing_capability.sign_digest(digest, opts.digest)
    return SigningResult(signature=signature.hex())


def verify_signature(
    payload: bytes,
    public_key: PublicKey,
    digest: DigestAlgorithm,
    signature: bytes
) -> bool:
    """
    Check a signature produced by ``sign``.

    Args:
        payload: Signed bytes
        public_key: RSA or EC public key
        digest: Digest algorithm used when signing
        signature: Raw signature bytes

    Returns:
        bool: True if the signature is valid
    """
    try:
        if isinstance(public_key, rsa.RSAPublicKey):
            public_key.verify(signature, payload, padding.PKCS1v15(), digest.hash_algorithm())
        elif isinstance(public_key, ec.EllipticCurvePublicKey):
            public_key.verify(signature, payload, ec.ECDSA(digest.hash_algorithm()))
        else:
            return False
    except InvalidSignature:
        return False
    return True
