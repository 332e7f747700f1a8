"""
Proof-input configuration for zkid.

Circuit-facing constants (tree depths, signal widths, default attestation ids)
live here so that a deployment targeting a different circuit build can
override them without touching the generators.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ProofInputConfig:
    """Configuration consumed by the circuit-input generators."""

    # Accumulator depths
    commitment_tree_depth: int = 33
    ofac_tree_levels: int = 64

    # Disclosure signals
    forbidden_countries_length: int = 120
    default_secret: str = "1234"
    attestation_id: str = "4"
    aadhaar_attestation_id: str = "3"

    # Partner RSA encoding
    rsa_word_bits: int = 121
    rsa_word_count: int = 17
    selfrica_padded_length: int = 320

    enable_tree_cache: bool = True

    environment_overrides: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_environment_overrides()

    def _apply_environment_overrides(self):
        env_mappings = {
            "ZKID_COMMITMENT_TREE_DEPTH": ("commitment_tree_depth", int),
            "ZKID_OFAC_TREE_LEVELS": ("ofac_tree_levels", int),
            "ZKID_FORBIDDEN_COUNTRIES_LENGTH": ("forbidden_countries_length", int),
            "ZKID_DEFAULT_SECRET": ("default_secret", str),
            "ZKID_ATTESTATION_ID": ("attestation_id", str),
            "ZKID_AADHAAR_ATTESTATION_ID": ("aadhaar_attestation_id", str),
            "ZKID_SELFRICA_PADDED_LENGTH": ("selfrica_padded_length", int),
            "ZKID_ENABLE_TREE_CACHE": ("enable_tree_cache", bool),
        }

        for env_var, (attr_name, attr_type) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue
            try:
                if attr_type == bool:
                    value = env_value.lower() in ("true", "1", "yes", "on")
                else:
                    value = attr_type(env_value)
            except (ValueError, TypeError) as e:
                raise ConfigurationError(
                    f"Invalid environment variable {env_var}={env_value}",
                    config_key=env_var,
                    config_value=env_value,
                    cause=e,
                )
            setattr(self, attr_name, value)
            self.environment_overrides[env_var] = value
            logger.debug("config override %s=%r", env_var, value)

    def validate(self) -> None:
        """Raise ConfigurationError if any setting is unusable."""
        if not 1 <= self.commitment_tree_depth <= 254:
            raise ConfigurationError(
                "commitment_tree_depth must be between 1 and 254",
                config_key="commitment_tree_depth",
                config_value=self.commitment_tree_depth,
            )
        if not 1 <= self.ofac_tree_levels <= 254:
            raise ConfigurationError(
                "ofac_tree_levels must be between 1 and 254",
                config_key="ofac_tree_levels",
                config_value=self.ofac_tree_levels,
            )
        if self.forbidden_countries_length < 0:
            raise ConfigurationError(
                "forbidden_countries_length cannot be negative",
                config_key="forbidden_countries_length",
                config_value=self.forbidden_countries_length,
            )
        if self.rsa_word_bits <= 0 or self.rsa_word_count <= 0:
            raise ConfigurationError(
                "RSA word layout must be positive",
                config_key="rsa_word_bits",
                config_value=(self.rsa_word_bits, self.rsa_word_count),
            )
        for key in ("attestation_id", "aadhaar_attestation_id", "default_secret"):
            if not str(getattr(self, key)).isdigit():
                raise ConfigurationError(
                    f"{key} must be a decimal string",
                    config_key=key,
                    config_value=getattr(self, key),
                )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "commitment_tree_depth": self.commitment_tree_depth,
            "ofac_tree_levels": self.ofac_tree_levels,
            "forbidden_countries_length": self.forbidden_countries_length,
            "default_secret": self.default_secret,
            "attestation_id": self.attestation_id,
            "aadhaar_attestation_id": self.aadhaar_attestation_id,
            "rsa_word_bits": self.rsa_word_bits,
            "rsa_word_count": self.rsa_word_count,
            "selfrica_padded_length": self.selfrica_padded_length,
            "enable_tree_cache": self.enable_tree_cache,
            "environment_overrides": self.environment_overrides,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ProofInputConfig":
        """Create configuration from dictionary."""
        data = {k: v for k, v in config_dict.items() if k != "environment_overrides"}
        return cls(**data)


_default_config: Optional[ProofInputConfig] = None


def get_default_config() -> ProofInputConfig:
    """Get the process-wide default configuration."""
    global _default_config
    if _default_config is None:
        _default_config = ProofInputConfig()
        _default_config.validate()
    return _default_config


def set_default_config(config: ProofInputConfig) -> None:
    """Replace the process-wide default configuration."""
    global _default_config
    config.validate()
    _default_config = config


def reset_default_config() -> None:
    """Drop the process-wide configuration so it is rebuilt on next use."""
    global _default_config
    _default_config = None
