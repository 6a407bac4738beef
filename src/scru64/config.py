"""Configuration for generators created from the environment.

Environment Variables:
    SCRU64_NODE_SPEC: Node spec of the generator (e.g. "42/8"); required
    SCRU64_ROLLBACK_ALLOWANCE: Tolerated clock rollback in milliseconds
        (default: 10000)
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from scru64.errors import GlobalGeneratorConfigError
from scru64.generator import DEFAULT_ROLLBACK_ALLOWANCE, MAX_ROLLBACK_ALLOWANCE, Scru64Generator

ENV_NODE_SPEC = "SCRU64_NODE_SPEC"
ENV_ROLLBACK_ALLOWANCE = "SCRU64_ROLLBACK_ALLOWANCE"


class GeneratorSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    node_spec: str = Field(..., description="Node spec string, e.g. '42/8'")
    rollback_allowance: int = Field(
        default=DEFAULT_ROLLBACK_ALLOWANCE,
        ge=0,
        le=MAX_ROLLBACK_ALLOWANCE * 256 + 255,
        description="Tolerated clock rollback in milliseconds",
    )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GeneratorSettings:
        """Read settings from environment variables.

        Raises:
            GlobalGeneratorConfigError: If SCRU64_NODE_SPEC is not set or a
                value cannot be validated.
        """
        env = os.environ if environ is None else environ
        node_spec = env.get(ENV_NODE_SPEC)
        if node_spec is None:
            raise GlobalGeneratorConfigError(
                f"could not read config from {ENV_NODE_SPEC} env var",
                details={"variable": ENV_NODE_SPEC},
            )

        data: dict[str, object] = {"node_spec": node_spec}
        if env.get(ENV_ROLLBACK_ALLOWANCE):
            data["rollback_allowance"] = env[ENV_ROLLBACK_ALLOWANCE]
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise GlobalGeneratorConfigError(
                f"invalid generator settings: {exc.errors()[0]['msg']}",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    def create_generator(self) -> Scru64Generator:
        """Build a generator from these settings.

        Raises:
            InvalidSyntaxError: If the node spec is malformed.
            OutOfRangeError: If the node spec is out of its valid range.
        """
        return Scru64Generator(self.node_spec, rollback_allowance=self.rollback_allowance)
