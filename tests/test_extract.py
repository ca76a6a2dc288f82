import base64

import pytest
from bip_utils import Base58Decoder

from vanity_miner.extract import extract_keypair
from vanity_miner.keygen import Base58KeyGenerator, HexKeyGenerator
from vanity_miner.models import Variant


def test_extract_solana_secret_key():
    record = Base58KeyGenerator().generate()
    extracted = extract_keypair(list(record.private_material))

    assert extracted.public_identifier == record.public_identifier
    assert extracted.record.variant is Variant.BASE58
    assert base64.b64decode(extracted.private_key_base64) == record.private_material
    assert bytes.fromhex(extracted.private_key_hex) == record.private_material
    assert Base58Decoder.Decode(extracted.private_key_base58) == record.private_material


def test_extract_from_seed_only():
    record = Base58KeyGenerator().generate()
    extracted = extract_keypair(record.private_material[:32])
    assert extracted.public_identifier == record.public_identifier
    assert extracted.record.private_material == record.private_material


def test_extract_rejects_mismatched_public_half():
    first = Base58KeyGenerator().generate()
    second = Base58KeyGenerator().generate()
    with pytest.raises(ValueError):
        extract_keypair(first.private_material[:32] + second.public_key)


def test_extract_hex_key():
    record = HexKeyGenerator().generate()
    extracted = extract_keypair(record.private_material, variant="evm")
    assert extracted.public_identifier == record.public_identifier
    assert extracted.private_key_hex == record.private_material.hex()


@pytest.mark.parametrize("raw", [b"\x01" * 10, [256] * 64, "not bytes"])
def test_extract_rejects_malformed_input(raw):
    with pytest.raises(ValueError):
        extract_keypair(raw)


def test_extracted_secrets_not_in_repr():
    extracted = extract_keypair(Base58KeyGenerator().generate().private_material)
    assert extracted.private_key_hex not in repr(extracted)
