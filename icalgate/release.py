"""The release pipeline: populate fixtures, generate the fuzz input, run gates.

Each stage only starts after the previous one has fully completed, and any
failure ends the run. A failed run leaves fetched fixtures in the cache
directory, so running again only fetches what is still missing.
"""

from __future__ import annotations

import logging
import pathlib
from collections.abc import Sequence

from pydantic import BaseModel, Field, field_validator, model_validator

from .fixtures import (
    DEFAULT_SOURCES,
    Fetch,
    FixtureCache,
    FixtureSource,
    validate_sources,
)
from .gates import GateRunner, GateStep, default_gates
from .synthetic import SyntheticFixture, SyntheticFixtureGenerator

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_FIXTURE_DIR",
    "HarnessConfig",
    "run_release",
]

DEFAULT_FIXTURE_DIR = pathlib.Path("private-test-icals")


class HarnessConfig(BaseModel):
    """Configuration for a release run."""

    fixture_dir: pathlib.Path = DEFAULT_FIXTURE_DIR
    """Directory holding the cached and generated fixtures."""

    sources: list[FixtureSource] = Field(default_factory=lambda: list(DEFAULT_SOURCES))
    """Real-world fixtures, populated in order."""

    synthetic: SyntheticFixture = Field(default_factory=SyntheticFixture)

    project_dir: pathlib.Path = pathlib.Path(".")
    """Working directory for the gate commands."""

    @field_validator("sources")
    @classmethod
    def _validate_sources(cls, value: list[FixtureSource]) -> list[FixtureSource]:
        validate_sources(value)
        return value

    @model_validator(mode="after")
    def _validate_synthetic_path(self) -> HarnessConfig:
        """Check the synthetic fixture does not overwrite a cached one."""
        synthetic_path = pathlib.PurePath(self.synthetic.local_path)
        for source in self.sources:
            if pathlib.PurePath(source.local_path) == synthetic_path:
                raise ValueError(
                    f"Fixture source '{source.name}' uses the synthetic fixture "
                    f"path '{source.local_path}'"
                )
        return self


def run_release(
    config: HarnessConfig,
    fetch: Fetch | None = None,
    gates: Sequence[GateStep] | None = None,
    generator: SyntheticFixtureGenerator | None = None,
) -> None:
    """Run the full release gate, raising the first `HarnessError`."""
    fixture_dir = config.fixture_dir.resolve()

    _LOGGER.info("Populating fixture cache in %s", fixture_dir)
    FixtureCache(fixture_dir, config.sources, fetch=fetch).ensure()

    generator = generator or SyntheticFixtureGenerator(fixture_dir, config.synthetic)
    generator.generate()

    if gates is None:
        gates = default_gates(fixture_dir, project_dir=config.project_dir)
    GateRunner().run(gates)
    _LOGGER.info("Release gate passed")
