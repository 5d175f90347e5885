"""
Run configuration: which wrong field is emulated over which native field,
and how wide the limbs are.

Configs come from a named preset or a YAML file:

    wrong: secp256k1_base
    native: bn254_scalar
    bit_len_limb: 68
    number_of_lookup_limbs: 4
    seed: 42
    n_samples: 1000
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any

import yaml

from .constants import get_field
from .rns.integer import NUMBER_OF_LOOKUP_LIMBS
from .rns.rns import Rns


@dataclass
class RnsConfig:
    """Field pair and limb layout for one Rns."""
    wrong: str = "secp256k1_base"   # FIELD_REGISTRY name of the emulated field
    native: str = "bn254_scalar"    # FIELD_REGISTRY name of the circuit field
    bit_len_limb: int = 68
    number_of_lookup_limbs: int = NUMBER_OF_LOOKUP_LIMBS
    seed: int = 42                  # RNG seed for validation samples
    n_samples: int = 1000           # Random samples per validation section

    def build_rns(self) -> Rns:
        """Construct the Rns; raises SoundnessError for unsound layouts."""
        return Rns.construct(
            self.bit_len_limb,
            get_field(self.wrong),
            get_field(self.native),
            number_of_lookup_limbs=self.number_of_lookup_limbs,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RnsConfig":
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**data)


PRESETS: Dict[str, RnsConfig] = {
    "secp256k1_base_on_bn254": RnsConfig(
        wrong="secp256k1_base", native="bn254_scalar", bit_len_limb=68),
    "secp256k1_scalar_on_bn254": RnsConfig(
        wrong="secp256k1_scalar", native="bn254_scalar", bit_len_limb=68),
    "pasta_fp_on_pasta_fq": RnsConfig(
        wrong="pasta_fp", native="pasta_fq", bit_len_limb=68),
}


def get_preset(name: str) -> RnsConfig:
    if name not in PRESETS:
        raise ValueError(
            f"Unknown preset '{name}'. Available: {', '.join(PRESETS)}"
        )
    return PRESETS[name]


def load_config(config_path) -> RnsConfig:
    with open(Path(config_path), 'r') as f:
        data = yaml.safe_load(f) or {}
    return RnsConfig.from_dict(data)
