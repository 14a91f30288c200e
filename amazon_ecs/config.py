from __future__ import annotations

from dataclasses import dataclass, field, asdict, replace
from typing import Dict, Any
import os
import json

from .version import __version__, CONFIG_SCHEMA_VERSION


@dataclass(frozen=True)
class RequestDefaults:
    """
    Fixed endpoint settings shared by every request.
    The endpoint host ends with a dot: the region is appended to it verbatim.
    """
    endpoint_host: str = "ecs.amazonaws."
    uri_path: str = "/onca/xml"
    hash_algorithm: str = "sha256"
    http_method: str = "GET"
    scheme: str = "http"


REQUEST_DEFAULTS = RequestDefaults()


@dataclass(frozen=True)
class OperationOptions:
    """
    Operation-level request fields.
    Immutable: derive a variant with ``with_overrides`` instead of mutating.
    """
    operation: str = "ItemSearch"
    api_version: str = "2009-03-31"
    response_group: str = "Large"
    service_name: str = "AWSECommerceService"

    def with_overrides(self, **overrides: Any) -> "OperationOptions":
        # None means "keep the current value" so CLI/API callers can pass optionals straight through.
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


DEFAULT_TRANSPORT = "amazon_ecs.utils.http:AiohttpTransport"


@dataclass
class SearchConfig:
    """
    Configuration consumed by the CLI and the HTTP facade.
    The request builder itself only needs credentials and a region; everything
    here is about where those come from.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    public_key: str = ""
    private_key: str = ""
    associate_tag: str = ""
    region: str = "com"
    search_index: str = "Books"
    operation: str = OperationOptions.operation
    api_version: str = OperationOptions.api_version
    response_group: str = OperationOptions.response_group
    service_name: str = OperationOptions.service_name
    # Dotted path so a different transport can be plugged in without code changes.
    transport: str = DEFAULT_TRANSPORT
    user_agent: str = f"amazon_ecs/{__version__}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def operation_options(self) -> OperationOptions:
        return OperationOptions(
            operation=self.operation,
            api_version=self.api_version,
            response_group=self.response_group,
            service_name=self.service_name,
        )

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """
        Build config from environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        return cls(
            public_key=_get("AMAZON_ECS_PUBLIC_KEY", ""),
            private_key=_get("AMAZON_ECS_PRIVATE_KEY", ""),
            associate_tag=_get("AMAZON_ECS_ASSOCIATE_TAG", ""),
            region=_get("AMAZON_ECS_REGION", "com"),
            search_index=_get("AMAZON_ECS_SEARCH_INDEX", "Books"),
            operation=_get("AMAZON_ECS_OPERATION", OperationOptions.operation),
            api_version=_get("AMAZON_ECS_API_VERSION", OperationOptions.api_version),
            response_group=_get("AMAZON_ECS_RESPONSE_GROUP", OperationOptions.response_group),
            service_name=_get("AMAZON_ECS_SERVICE_NAME", OperationOptions.service_name),
            transport=_get("AMAZON_ECS_TRANSPORT", DEFAULT_TRANSPORT),
            user_agent=_get("AMAZON_ECS_USER_AGENT", f"amazon_ecs/{__version__}"),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "SearchConfig":
        """
        Load configuration from a JSON file. Supports schema migration for future versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.public_key:
            raise ValueError("public_key cannot be empty; set AMAZON_ECS_PUBLIC_KEY or use --config.")
        if not self.private_key:
            raise ValueError("private_key cannot be empty; set AMAZON_ECS_PRIVATE_KEY or use --config.")
        if not self.associate_tag:
            raise ValueError("associate_tag cannot be empty; set AMAZON_ECS_ASSOCIATE_TAG or use --config.")
        if not self.region:
            raise ValueError("region cannot be empty (e.g. 'com', 'co.uk', 'de').")


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    # Ensure a schema_version is present
    raw.setdefault("schema_version", CONFIG_SCHEMA_VERSION)
    return raw
