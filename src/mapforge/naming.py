"""Canonical generated-map names and generator version grammar."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from mapforge.errors import MapGeneratorError, MapGeneratorErrorCode

# The server expects lower case names
GENERATED_MAP_PREFIX = "neroxis_map_generator"
GENERATED_MAP_NAME = GENERATED_MAP_PREFIX + "_{}_{}"
GENERATOR_EXECUTABLE_FILENAME = "MapGenerator_{}.jar"

SEED_MIN = -(2**63)
SEED_MAX = 2**63 - 1

VERSION_PATTERN = re.compile(r"\d{1,3}\.\d{1,3}\.\d{1,3}")
GENERATED_MAP_PATTERN = re.compile(
    rf"{GENERATED_MAP_PREFIX}_({VERSION_PATTERN.pattern})_(-?\d+)"
)


class GenerationRequest(BaseModel):
    """One `(version, seed)` generation request."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: str = Field(pattern=rf"^{VERSION_PATTERN.pattern}$")
    seed: int = Field(ge=SEED_MIN, le=SEED_MAX)

    @property
    def map_name(self) -> str:
        """Canonical generated map name for this request."""
        return encode(self.version, self.seed)


def validate_version(version: str) -> bool:
    """Return whether `version` is a numeric `x.y.z` triplet.

    Args:
        version: Candidate generator version.

    Returns:
        True when each component has one to three digits.
    """
    return VERSION_PATTERN.fullmatch(version) is not None


def encode(version: str, seed: int) -> str:
    """Format the canonical generated map name.

    Args:
        version: Generator version, passed through unchanged.
        seed: Signed 64-bit generation seed.

    Returns:
        Name of the form ``neroxis_map_generator_<version>_<seed>``.
    """
    return GENERATED_MAP_NAME.format(version, seed)


def decode(name: str) -> GenerationRequest:
    """Parse a generated map name back into its request.

    Args:
        name: Candidate generated map name.

    Returns:
        Decoded generation request.

    Raises:
        MapGeneratorError: If name does not match the generated map grammar.
    """
    match = GENERATED_MAP_PATTERN.fullmatch(name)
    if match is None:
        raise MapGeneratorError(
            MapGeneratorErrorCode.INVALID_REQUEST_NAME,
            f"Doesn't match pattern '{GENERATED_MAP_PATTERN.pattern}': {name}",
            data={"name": name},
        )
    version, raw_seed = match.group(1), int(match.group(2))
    if not SEED_MIN <= raw_seed <= SEED_MAX:
        raise MapGeneratorError(
            MapGeneratorErrorCode.INVALID_REQUEST_NAME,
            f"Seed out of 64-bit range: {name}",
            data={"name": name, "seed": raw_seed},
        )
    return GenerationRequest(version=version, seed=raw_seed)


def is_generated_name(name: str) -> bool:
    """Return whether `name` is a generated map name. Never raises."""
    try:
        decode(name)
    except MapGeneratorError:
        return False
    return True


def executable_filename(version: str) -> str:
    """Return generator jar filename for `version`."""
    return GENERATOR_EXECUTABLE_FILENAME.format(version)
