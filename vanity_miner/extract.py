"""Normalize externally supplied key bytes into a KeypairRecord."""

import base64
from dataclasses import dataclass, field
from typing import Iterable, Union

from bip_utils import Base58Encoder

from .keygen import create_generator
from .models import KeypairRecord, Variant


@dataclass
class ExtractedKeypair:
    record: KeypairRecord
    private_key_base64: str = field(repr=False)
    private_key_hex: str = field(repr=False)
    private_key_base58: str = field(repr=False)

    @property
    def public_identifier(self) -> str:
        return self.record.public_identifier


def extract_keypair(raw: Union[bytes, bytearray, Iterable[int]],
                    variant: Union[str, Variant] = Variant.BASE58) -> ExtractedKeypair:
    """Build a record from raw private key bytes (e.g. a Solana keypair JSON array).

    Raises ValueError for malformed input or a secret key whose public half
    does not belong to its seed.
    """
    try:
        data = bytes(raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Key material must be a byte sequence: {e}") from e

    generator = create_generator(variant)
    record = generator.from_private_bytes(data)

    if len(data) == 64 and data[32:] != record.public_key:
        raise ValueError("Secret key public half does not match the derived public key")

    material = record.private_material
    return ExtractedKeypair(
        record=record,
        private_key_base64=base64.b64encode(material).decode(),
        private_key_hex=material.hex(),
        private_key_base58=Base58Encoder.Encode(material),
    )
