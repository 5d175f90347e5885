"""
wrongfield: RNS engine for wrong-field (non-native) arithmetic in
arithmetic circuits.

A wrong-field element is split into 4 limbs of bit_len_limb bits, each a
native-field element.  Relations between such integers are checked
modulo 2^(4 * bit_len_limb) limbwise and modulo the native modulus; the
Chinese remainder theorem lifts the pair to an exact integer relation as
long as every value stays below binary_modulus * native_modulus.

  Rns.construct(68, secp256k1_base, bn254_scalar)  derives every bound
  Rns.reduce / Rns.mul / Rns.invert                produce witnesses
  IntegerChip                                      lays out the constraints
"""

__version__ = "0.1.0"

from .errors import SoundnessError, SynthesisError
from .constants import FIELD_REGISTRY, get_field, load_fields, field_names
from .rns import (
    PrimeField, Integer, Limb, Rns,
    ShortQuotient, LongQuotient, ReductionContext, ComparisonResult,
    NUMBER_OF_LIMBS, NUMBER_OF_LOOKUP_LIMBS,
)
from .circuit import (
    Value, Region, Offset, MainGate, RangeChip, IntegerChip,
    AssignedInteger, AssignedLimb, AssignedValue,
)
from .config import RnsConfig, PRESETS, get_preset, load_config
from .logging import SynthesisLogger, RnsManifest, create_manifest

__all__ = [
    "SoundnessError", "SynthesisError",
    "FIELD_REGISTRY", "get_field", "load_fields", "field_names",
    "PrimeField", "Integer", "Limb", "Rns",
    "ShortQuotient", "LongQuotient", "ReductionContext", "ComparisonResult",
    "NUMBER_OF_LIMBS", "NUMBER_OF_LOOKUP_LIMBS",
    "Value", "Region", "Offset", "MainGate", "RangeChip", "IntegerChip",
    "AssignedInteger", "AssignedLimb", "AssignedValue",
    "RnsConfig", "PRESETS", "get_preset", "load_config",
    "SynthesisLogger", "RnsManifest", "create_manifest",
]
