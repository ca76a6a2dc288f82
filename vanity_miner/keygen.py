"""
Key generators, one per address variant.

Each ``generate()`` call draws fresh key material from a cryptographically
secure source and derives the public address with bip-utils.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Type, Union

from bip_utils import (
    Base58Encoder, Bip32KeyError, Bip39SeedGenerator, Bip44, Bip44Changes, Bip44Coins,
    Ed25519PrivateKey, EthAddrEncoder, Secp256k1PrivateKey, SolAddrEncoder,
)
from mnemonic import Mnemonic

from . import config
from .errors import GenerationError, UnsupportedVariantError
from .models import (
    BASE58_FORMAT, HEX_FORMAT, AddressFormat, KeypairRecord, Variant,
)

logger = logging.getLogger(__name__)

EntropySource = Callable[[int], bytes]

# Bip32KeyError does not subclass ValueError
DERIVATION_ERRORS = (ValueError, Bip32KeyError)

VARIANT_ALIASES = {
    "base58": Variant.BASE58,
    "solana": Variant.BASE58,
    "sol": Variant.BASE58,
    "hex": Variant.HEX,
    "evm": Variant.HEX,
    "eth": Variant.HEX,
}


def resolve_variant(tag: Union[str, Variant]) -> Variant:
    if isinstance(tag, Variant):
        return tag
    try:
        return VARIANT_ALIASES[str(tag).strip().lower()]
    except KeyError:
        raise UnsupportedVariantError(tag) from None


def verify_randomness(data: bytes) -> bool:
    """Reject obviously degenerate draws"""
    if len(data) < 16:
        return False
    if all(b == 0 for b in data) or all(b == 255 for b in data):
        return False
    unique = len(set(data))
    min_unique = max(2, len(data) // 8)
    return unique >= min_unique


class KeyGenerator(ABC):
    """Produces one fresh keypair and address per ``generate()`` call."""

    address_format: AddressFormat
    coin: Bip44Coins

    def __init__(self, entropy: Optional[EntropySource] = None,
                 use_mnemonic: bool = False):
        self._entropy = entropy or secrets.token_bytes
        self.use_mnemonic = use_mnemonic
        self._mnemo = Mnemonic("english") if use_mnemonic else None

    @property
    def variant(self) -> Variant:
        return self.address_format.variant

    @property
    def throughput_per_second(self) -> int:
        rate = self.address_format.throughput_per_second
        if self.use_mnemonic:
            rate = max(1, rate // config.MNEMONIC_SLOWDOWN)
        return rate

    def address_body(self, address: str) -> str:
        return self.address_format.body(address)

    def generate(self) -> KeypairRecord:
        try:
            if self.use_mnemonic:
                return self._generate_from_mnemonic()
            return self.from_private_bytes(self._draw(32))
        except DERIVATION_ERRORS as e:
            raise GenerationError(f"{self.variant.value} key derivation failed: {e}") from e

    def _draw(self, size: int) -> bytes:
        for _ in range(config.MAX_ENTROPY_REDRAWS):
            try:
                data = self._entropy(size)
            except (OSError, NotImplementedError) as e:
                raise GenerationError(f"Randomness source unavailable: {e}") from e
            if len(data) == size and verify_randomness(data):
                return data
            logger.warning("Discarding degenerate %d-byte draw from randomness source", size)
        raise GenerationError(
            f"Randomness source returned degenerate data {config.MAX_ENTROPY_REDRAWS} times in a row")

    def _generate_from_mnemonic(self) -> KeypairRecord:
        words = self._mnemo.to_mnemonic(self._draw(16))
        seed_bytes = Bip39SeedGenerator(words).Generate()
        bip_obj = Bip44.FromSeed(seed_bytes, self.coin)
        addr_obj = bip_obj.Purpose().Coin().Account(0).Change(
            Bip44Changes.CHAIN_EXT).AddressIndex(0)
        record = self.from_private_bytes(addr_obj.PrivateKey().Raw().ToBytes())
        record.mnemonic = words
        return record

    def verify(self, record: KeypairRecord) -> bool:
        """Re-derive the address from the private material"""
        try:
            derived = self.from_private_bytes(record.private_material)
        except DERIVATION_ERRORS:
            return False
        return derived.public_identifier == record.public_identifier

    @abstractmethod
    def from_private_bytes(self, raw: bytes) -> KeypairRecord:
        """Build a record from raw private key bytes. Raises ValueError."""

    @abstractmethod
    def encode_private(self, record: KeypairRecord) -> str:
        """Display encoding of the private material."""


class Base58KeyGenerator(KeyGenerator):
    """Ed25519 keys, address is the Base58 public key (Solana)."""

    address_format = BASE58_FORMAT
    coin = Bip44Coins.SOLANA

    def from_private_bytes(self, raw: bytes) -> KeypairRecord:
        raw = bytes(raw)
        if len(raw) not in (32, 64):
            raise ValueError(f"Expected a 32-byte seed or 64-byte secret key, got {len(raw)} bytes")
        seed = raw[:32]
        priv_key = Ed25519PrivateKey.FromBytes(seed)
        pub_key = priv_key.PublicKey()
        pub_bytes = pub_key.RawCompressed().ToBytes()[1:]
        return KeypairRecord(
            public_identifier=SolAddrEncoder.EncodeKey(pub_key),
            private_material=seed + pub_bytes,
            variant=Variant.BASE58,
            public_key=pub_bytes,
        )

    def encode_private(self, record: KeypairRecord) -> str:
        return Base58Encoder.Encode(record.private_material)


class HexKeyGenerator(KeyGenerator):
    """secp256k1 keys, address is the lowercase Keccak-derived EVM address."""

    address_format = HEX_FORMAT
    coin = Bip44Coins.ETHEREUM

    def from_private_bytes(self, raw: bytes) -> KeypairRecord:
        raw = bytes(raw)
        if len(raw) != 32:
            raise ValueError(f"Expected a 32-byte private key, got {len(raw)} bytes")
        priv_key = Secp256k1PrivateKey.FromBytes(raw)
        pub_key = priv_key.PublicKey()
        return KeypairRecord(
            public_identifier=EthAddrEncoder.EncodeKey(pub_key, skip_chksum_enc=True),
            private_material=raw,
            variant=Variant.HEX,
            public_key=pub_key.RawCompressed().ToBytes(),
        )

    def encode_private(self, record: KeypairRecord) -> str:
        return "0x" + record.private_material.hex()


GENERATORS: Dict[Variant, Type[KeyGenerator]] = {
    Variant.BASE58: Base58KeyGenerator,
    Variant.HEX: HexKeyGenerator,
}


def create_generator(variant: Union[str, Variant], **kwargs) -> KeyGenerator:
    return GENERATORS[resolve_variant(variant)](**kwargs)
