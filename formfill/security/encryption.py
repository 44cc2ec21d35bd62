"""
Encryption helpers for locally held form values

AES-256-CBC with PKCS7 padding and a random IV per payload. The key must be
provisioned explicitly; there is no built-in fallback key.
"""
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..errors import CryptoOperationFailed, KeyProvisioningError
from ..utils import has_unresolved_env_vars

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16


@dataclass
class EncryptedPayload:
    """Ciphertext plus the IV needed to decrypt it"""
    encrypted: str
    iv: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"encrypted": self.encrypted, "iv": self.iv, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncryptedPayload":
        return cls(
            encrypted=data["encrypted"],
            iv=data["iv"],
            timestamp=int(data.get("timestamp", 0))
        )


class DataEncryptor:
    """Encrypts and decrypts JSON-serialisable values"""

    def __init__(self, key: bytes):
        if not isinstance(key, bytes) or len(key) != KEY_LENGTH:
            raise KeyProvisioningError(f"Encryption key must be exactly {KEY_LENGTH} bytes")
        self._key = key

    @classmethod
    def from_config(cls, hex_key: Optional[str]) -> "DataEncryptor":
        """Build an encryptor from a hex key taken from configuration"""
        if not hex_key or has_unresolved_env_vars(hex_key):
            raise KeyProvisioningError("No encryption key configured")
        try:
            key = bytes.fromhex(hex_key)
        except ValueError as e:
            raise KeyProvisioningError("Encryption key must be hex encoded") from e
        return cls(key)

    def encrypt_data(self, data: Any) -> EncryptedPayload:
        """Encrypt a JSON-serialisable value"""
        try:
            iv = os.urandom(IV_LENGTH)
            padder = padding.PKCS7(algorithms.AES.block_size).padder()
            plaintext = padder.update(json.dumps(data).encode("utf-8")) + padder.finalize()

            encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
            ciphertext = encryptor.update(plaintext) + encryptor.finalize()

            return EncryptedPayload(
                encrypted=ciphertext.hex(),
                iv=iv.hex(),
                timestamp=int(time.time() * 1000)
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Encryption error: {e}")
            raise CryptoOperationFailed("Failed to encrypt data") from e

    def decrypt_data(self, payload: EncryptedPayload) -> Any:
        """Decrypt a payload produced by encrypt_data"""
        try:
            decryptor = Cipher(
                algorithms.AES(self._key),
                modes.CBC(bytes.fromhex(payload.iv))
            ).decryptor()
            padded = decryptor.update(bytes.fromhex(payload.encrypted)) + decryptor.finalize()

            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()

            return json.loads(plaintext.decode("utf-8"))
        except (TypeError, ValueError) as e:
            # Bad padding, bad hex, wrong key and bad JSON all land here
            logger.error(f"Decryption error: {e}")
            raise CryptoOperationFailed("Failed to decrypt data") from e
