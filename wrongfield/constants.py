"""
Field moduli bank for wrong-field / native-field pairs.

Each entry has:
  - name: short identifier used by configs and presets
  - modulus: the prime, as a hex string
  - description: human-readable name

Covers: secp256k1 base and scalar fields, NIST P-256 base field,
BN254 base and scalar fields, Pasta Fp and Fq.

IMPORTANT: load_fields() checks primality of every modulus with sympy.
A composite modulus here would make inversion silently wrong.
"""

from typing import Dict, List, Optional

from .rns.field import PrimeField

FIELD_REGISTRY = [
    {"name": "secp256k1_base",
     "modulus": "0xfffffffffffffffffffffffffffffffffffffffffffffffffffffffefffffc2f",
     "description": "secp256k1 base field p = 2^256 - 2^32 - 977"},
    {"name": "secp256k1_scalar",
     "modulus": "0xfffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141",
     "description": "secp256k1 group order n"},
    {"name": "p256_base",
     "modulus": "0xffffffff00000001000000000000000000000000ffffffffffffffffffffffff",
     "description": "NIST P-256 base field"},
    {"name": "bn254_base",
     "modulus": "0x30644e72e131a029b85045b68181585d97816a916871ca8d3c208c16d87cfd47",
     "description": "BN254 base field q"},
    {"name": "bn254_scalar",
     "modulus": "0x30644e72e131a029b85045b68181585d2833e84879b9709143e1f593f0000001",
     "description": "BN254 scalar field r"},
    {"name": "pasta_fp",
     "modulus": "0x40000000000000000000000000000000224698fc094cf91b992d30ed00000001",
     "description": "Pallas base field / Vesta scalar field"},
    {"name": "pasta_fq",
     "modulus": "0x40000000000000000000000000000000224698fc0994a8dd8c46eb2100000001",
     "description": "Vesta base field / Pallas scalar field"},
]

_FIELD_CACHE: Dict[str, PrimeField] = {}


def field_names() -> List[str]:
    return [entry["name"] for entry in FIELD_REGISTRY]


def load_fields(check_primality: bool = True) -> List[PrimeField]:
    """Build a PrimeField for every registry entry.

    Returns list of PrimeField descriptors in registry order.
    """
    fields = []
    if check_primality:
        import sympy as sp

    for entry in FIELD_REGISTRY:
        modulus = int(entry["modulus"], 16)
        if check_primality and not sp.isprime(modulus):
            raise ValueError(
                f"Registry modulus for '{entry['name']}' is not prime"
            )
        fields.append(PrimeField(modulus=modulus, name=entry["name"]))
    return fields


def get_field(name: str) -> PrimeField:
    """Look up a field by registry name (primality checked once)."""
    if not _FIELD_CACHE:
        for f in load_fields():
            _FIELD_CACHE[f.name] = f
    if name not in _FIELD_CACHE:
        raise ValueError(
            f"Unknown field '{name}'. Available: {', '.join(field_names())}"
        )
    return _FIELD_CACHE[name]


def describe_field(name: str) -> Optional[str]:
    for entry in FIELD_REGISTRY:
        if entry["name"] == name:
            return entry["description"]
    return None
