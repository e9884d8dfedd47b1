"""
Core Value Objects and Entities

Data model for a DevGraph build:

Blocks (one per annotated fenced code block):
- ServiceBlock: {name, type, commands?, depends?, ports?, healthcheck?}
- ApiBlock:     {service, routes}
- EnvBlock:     {service, vars}

Aggregate:
- Devgraph: {services: {name: ServiceNode}, apis: {service: ApiBlock}}

The JSON shape produced by ``Devgraph.to_dict()`` is written to
``graph.json`` and read back by independent consumers, so field names
and nesting are part of the public contract.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class BlockType(str, Enum):
    """Kind of devgraph block, taken from the fence language suffix."""
    SERVICE = "service"
    API = "api"
    ENV = "env"

    @classmethod
    def from_string(cls, value: str) -> "BlockType":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f'Unknown devgraph block type "{value}"') from None


class ParseErrorCode(str, Enum):
    UNKNOWN_BLOCK_TYPE = "UNKNOWN_BLOCK_TYPE"
    YAML_PARSE_ERROR = "YAML_PARSE_ERROR"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    FILE_READ_ERROR = "FILE_READ_ERROR"


# ---------------------------------------------------------------------------
# Block payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Healthcheck:
    """Exactly one of ``http``, ``tcp`` or ``command`` is set."""
    http: Optional[str] = None
    tcp: Optional[int] = None
    command: Optional[str] = None

    @property
    def kind(self) -> str:
        if self.http is not None:
            return "http"
        if self.tcp is not None:
            return "tcp"
        return "command"

    @property
    def target(self) -> Union[str, int, None]:
        return getattr(self, self.kind)

    def to_dict(self) -> Dict[str, Any]:
        return {self.kind: self.target}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Healthcheck":
        return Healthcheck(
            http=data.get("http"),
            tcp=data.get("tcp"),
            command=data.get("command"),
        )


@dataclass(frozen=True)
class ServiceBlock:
    """A named unit of the system (microservice, database, job...)."""
    name: str
    type: str
    commands: Optional[Dict[str, str]] = None
    depends: Optional[List[str]] = None
    ports: Optional[List[int]] = None
    healthcheck: Optional[Healthcheck] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.commands is not None:
            result["commands"] = dict(self.commands)
        if self.depends is not None:
            result["depends"] = list(self.depends)
        if self.ports is not None:
            result["ports"] = list(self.ports)
        if self.healthcheck is not None:
            result["healthcheck"] = self.healthcheck.to_dict()
        return result

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ServiceBlock":
        healthcheck = data.get("healthcheck")
        return ServiceBlock(
            name=data["name"],
            type=data["type"],
            commands=dict(data["commands"]) if data.get("commands") is not None else None,
            depends=list(data["depends"]) if data.get("depends") is not None else None,
            ports=list(data["ports"]) if data.get("ports") is not None else None,
            healthcheck=Healthcheck.from_dict(healthcheck) if healthcheck else None,
        )


@dataclass(frozen=True)
class ApiBlock:
    """Externally reachable routes of one service (``"METHOD /path"`` keys)."""
    service: str
    routes: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"service": self.service, "routes": dict(self.routes)}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ApiBlock":
        return ApiBlock(service=data["service"], routes=dict(data.get("routes") or {}))


@dataclass(frozen=True)
class EnvBlock:
    """Environment variables (name -> default value) of one service."""
    service: str
    vars: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"service": self.service, "vars": dict(self.vars)}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "EnvBlock":
        return EnvBlock(service=data["service"], vars=dict(data.get("vars") or {}))


BlockData = Union[ServiceBlock, ApiBlock, EnvBlock]

_PAYLOAD_TYPES = {
    BlockType.SERVICE: ServiceBlock,
    BlockType.API: ApiBlock,
    BlockType.ENV: EnvBlock,
}


@dataclass(frozen=True)
class DevgraphBlock:
    """
    One decoded, annotated unit extracted from a markdown file.

    ``data`` is a tagged payload: its class always matches ``type``.
    """
    type: BlockType
    file: str
    data: BlockData
    line: Optional[int] = None

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[BlockType(self.type)]
        if not isinstance(self.data, expected):
            raise ValueError(
                f"Block of type '{BlockType(self.type).value}' requires "
                f"{expected.__name__} data, got {type(self.data).__name__}"
            )

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file

    def to_dict(self) -> Dict[str, Any]:
        result = {"type": BlockType(self.type).value, "file": self.file, "data": self.data.to_dict()}
        if self.line is not None:
            result["line"] = self.line
        return result


# ---------------------------------------------------------------------------
# Parse results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParseError:
    """Malformed or unrecognised source text. Collected, never raised."""
    message: str
    file: str
    line: Optional[int] = None
    code: ParseErrorCode = ParseErrorCode.SCHEMA_VALIDATION_ERROR

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}" if self.line else self.file

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "code": ParseErrorCode(self.code).value,
            "message": self.message,
            "file": self.file,
        }
        if self.line is not None:
            result["line"] = self.line
        return result


@dataclass
class ParseResult:
    blocks: List[DevgraphBlock] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)

    def extend(self, other: "ParseResult") -> None:
        self.blocks.extend(other.blocks)
        self.errors.extend(other.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blocks": [b.to_dict() for b in self.blocks],
            "errors": [e.to_dict() for e in self.errors],
        }


# ---------------------------------------------------------------------------
# Graph aggregate
# ---------------------------------------------------------------------------

@dataclass
class ServiceNode:
    """A ServiceBlock enriched with every API and env block attached to it."""
    name: str
    type: str
    commands: Optional[Dict[str, str]] = None
    depends: Optional[List[str]] = None
    ports: Optional[List[int]] = None
    healthcheck: Optional[Healthcheck] = None
    apis: List[ApiBlock] = field(default_factory=list)
    env: List[EnvBlock] = field(default_factory=list)

    @classmethod
    def from_block(cls, block: ServiceBlock) -> "ServiceNode":
        return cls(
            name=block.name,
            type=block.type,
            commands=dict(block.commands) if block.commands is not None else None,
            depends=list(block.depends) if block.depends is not None else None,
            ports=list(block.ports) if block.ports is not None else None,
            healthcheck=block.healthcheck,
        )

    @property
    def dependencies(self) -> List[str]:
        return list(self.depends or [])

    def command(self, name: str) -> Optional[str]:
        return (self.commands or {}).get(name)

    def merged_env(self) -> Dict[str, str]:
        """Union of all attached env vars; later blocks override earlier ones."""
        merged: Dict[str, str] = {}
        for env_block in self.env:
            merged.update(env_block.vars)
        return merged

    def merged_routes(self) -> Dict[str, Any]:
        """Union of all attached routes; later blocks override earlier ones."""
        merged: Dict[str, Any] = {}
        for api in self.apis:
            merged.update(api.routes)
        return merged

    def route_count(self) -> int:
        return sum(len(api.routes) for api in self.apis)

    def to_dict(self) -> Dict[str, Any]:
        result = ServiceBlock(
            name=self.name,
            type=self.type,
            commands=self.commands,
            depends=self.depends,
            ports=self.ports,
            healthcheck=self.healthcheck,
        ).to_dict()
        if self.apis:
            result["apis"] = [a.to_dict() for a in self.apis]
        if self.env:
            result["env"] = [e.to_dict() for e in self.env]
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceNode":
        node = cls.from_block(ServiceBlock.from_dict(data))
        node.apis = [ApiBlock.from_dict(a) for a in data.get("apis") or []]
        node.env = [EnvBlock.from_dict(e) for e in data.get("env") or []]
        return node


@dataclass
class Devgraph:
    """
    The dependency graph of one build.

    ``apis`` indexes the *last* API block seen per service name, while
    ``services[name].apis`` keeps every block attached to that service.
    """
    services: Dict[str, ServiceNode] = field(default_factory=dict)
    apis: Dict[str, ApiBlock] = field(default_factory=dict)

    def service_names(self) -> List[str]:
        return list(self.services.keys())

    def has_service(self, name: str) -> bool:
        return name in self.services

    def to_dict(self) -> Dict[str, Any]:
        return {
            "services": {name: svc.to_dict() for name, svc in self.services.items()},
            "apis": {name: api.to_dict() for name, api in self.apis.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Devgraph":
        return cls(
            services={name: ServiceNode.from_dict(svc) for name, svc in (data.get("services") or {}).items()},
            apis={name: ApiBlock.from_dict(api) for name, api in (data.get("apis") or {}).items()},
        )
