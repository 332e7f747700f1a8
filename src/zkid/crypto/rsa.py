"""
RSA PKCS#1 v1.5 signatures for partner-issued records.

Partner KYC providers sign the serialized record and, separately, the ID
number bytes with a 2048-bit RSA key. Circuits consume the modulus and the
signatures as 121-bit words.
"""

import logging
from dataclasses import dataclass
from typing import List

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .field import split_to_words

logger = logging.getLogger(__name__)

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


@dataclass(frozen=True)
class RSAKeyPair:
    """RSA key pair held as cryptography key objects."""

    private_key: rsa.RSAPrivateKey
    public_key: rsa.RSAPublicKey

    @property
    def modulus(self) -> int:
        return self.public_key.public_numbers().n

    def private_pem(self) -> bytes:
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )

    def public_pem(self) -> bytes:
        return self.public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    @classmethod
    def from_pem(cls, private_pem: bytes) -> "RSAKeyPair":
        private_key = serialization.load_pem_private_key(private_pem, password=None)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise ValueError("PEM does not contain an RSA private key")
        return cls(private_key, private_key.public_key())


class RSASigner:
    """RSA signing with SHA-256 and PKCS#1 v1.5 padding."""

    @staticmethod
    def generate_keypair(key_size: int = RSA_KEY_SIZE) -> RSAKeyPair:
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT, key_size=key_size
        )
        return RSAKeyPair(private_key, private_key.public_key())

    @staticmethod
    def sign(private_key: rsa.RSAPrivateKey, message: bytes) -> bytes:
        return private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())

    @staticmethod
    def verify(public_key: rsa.RSAPublicKey, message: bytes, signature: bytes) -> bool:
        """Verify a signature against a message and public key."""
        try:
            public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
            return True
        except InvalidSignature:
            return False

    @staticmethod
    def load_public_key(der_or_pem: bytes) -> rsa.RSAPublicKey:
        """Load a public key from PEM, or from DER as partners send it base64-decoded."""
        if der_or_pem.lstrip().startswith(b"-----BEGIN"):
            key = serialization.load_pem_public_key(der_or_pem)
        else:
            key = serialization.load_der_public_key(der_or_pem)
        if not isinstance(key, rsa.RSAPublicKey):
            raise ValueError("Key is not an RSA public key")
        return key

    @staticmethod
    def to_words(value: int, word_bits: int = 121, word_count: int = 17) -> List[int]:
        """Circuit word encoding of a modulus or signature."""
        return split_to_words(value, word_bits, word_count)

    @staticmethod
    def signature_to_int(signature: bytes) -> int:
        return int.from_bytes(signature, "big")
