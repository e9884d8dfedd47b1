"""
Block Payload Schemas

Required-shape contracts for decoded block payloads. Scalars are strict:
a value of the wrong type is reported, never coerced. Unknown keys are
ignored.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, model_validator

from devgraph.core.models import ApiBlock, EnvBlock, Healthcheck, ServiceBlock


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class HealthcheckSchema(_StrictModel):
    http: Optional[StrictStr] = Field(default=None, min_length=1)
    tcp: Optional[StrictInt] = None
    command: Optional[StrictStr] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _exactly_one(self) -> "HealthcheckSchema":
        declared = [k for k in ("http", "tcp", "command") if getattr(self, k) is not None]
        if len(declared) != 1:
            raise ValueError("healthcheck must declare exactly one of http, tcp, command")
        return self

    def to_model(self) -> Healthcheck:
        return Healthcheck(http=self.http, tcp=self.tcp, command=self.command)


class ServiceSchema(_StrictModel):
    name: StrictStr = Field(min_length=1)
    type: StrictStr = Field(min_length=1)
    commands: Optional[Dict[StrictStr, StrictStr]] = None
    depends: Optional[List[StrictStr]] = None
    ports: Optional[List[StrictInt]] = None
    healthcheck: Optional[HealthcheckSchema] = None

    def to_model(self) -> ServiceBlock:
        return ServiceBlock(
            name=self.name,
            type=self.type,
            commands=self.commands,
            depends=self.depends,
            ports=self.ports,
            healthcheck=self.healthcheck.to_model() if self.healthcheck else None,
        )


class ApiSchema(_StrictModel):
    service: StrictStr = Field(min_length=1)
    routes: Dict[StrictStr, Any]

    def to_model(self) -> ApiBlock:
        return ApiBlock(service=self.service, routes=self.routes)


class EnvSchema(_StrictModel):
    service: StrictStr = Field(min_length=1)
    vars: Dict[StrictStr, StrictStr]

    def to_model(self) -> EnvBlock:
        return EnvBlock(service=self.service, vars=self.vars)


SCHEMAS = {
    "service": ServiceSchema,
    "api": ApiSchema,
    "env": EnvSchema,
}


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into ``field.path: message`` clauses."""
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "(root)"
        parts.append(f"{loc}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)
