"""Usage normalization: abstract usage variant -> per-resource oracle usage keys.

Output is keyed by "<resource_type>.<service_id>", matching the resource
addresses the artifact renderer declares. Only services actually being
priced get usage entries, and the result is a pure function of
(variant, services, provider).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable

import yaml

from pricewright.catalog import ServiceCatalog, get_catalog, normalize_provider, normalize_service_id
from pricewright.models import UsageVariant

_GB = 1024**3
_MINUTES_PER_MONTH = 30 * 24 * 60


@dataclass(frozen=True)
class _Derived:
    users: int
    requests: int
    storage_gb: float
    transfer_gb: float
    concurrency: int
    devices: int
    device_messages: int
    inference_hours: float
    training_hours: float


def _derive(variant: UsageVariant) -> _Derived:
    devices = variant.device_count
    per_device = variant.messages_per_device or _MINUTES_PER_MONTH
    return _Derived(
        users=variant.monthly_users,
        requests=variant.monthly_requests,
        storage_gb=variant.storage_gb,
        transfer_gb=variant.data_transfer_gb,
        concurrency=variant.peak_concurrency,
        devices=devices,
        device_messages=devices * per_device,
        inference_hours=variant.inference_hours or 730,
        training_hours=variant.training_hours,
    )


def _serverless(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {"monthly_requests": d.requests, "request_duration_ms": 250}
    if provider == "gcp":
        return {"monthly_function_invocations": d.requests, "request_duration_ms": 250}
    return {"monthly_executions": d.requests, "execution_duration_ms": 250}


def _container(d: _Derived, provider: str) -> dict[str, Any]:
    instances = max(2, math.ceil(d.concurrency / 50))
    if provider == "aws":
        return {"monthly_cpu_hours": instances * 730, "monthly_memory_gb_hours": instances * 2 * 730}
    if provider == "gcp":
        return {"monthly_requests": d.requests, "average_request_duration_ms": 250}
    return {"monthly_vcpu_seconds": int(d.requests * 0.5)}


def _relational(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {
            "storage_gb": d.storage_gb,
            "monthly_read_iops": int(d.requests * 0.7),
            "monthly_write_iops": int(d.requests * 0.3),
        }
    if provider == "gcp":
        return {"backup_storage_gb": d.storage_gb}
    return {"additional_backup_storage_gb": d.storage_gb}


def _nosql(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {
            "monthly_write_request_units": int(d.requests * 0.3),
            "monthly_read_request_units": int(d.requests * 0.7),
            "storage_gb": d.storage_gb,
        }
    if provider == "gcp":
        return {
            "monthly_document_writes": int(d.requests * 0.3),
            "monthly_document_reads": int(d.requests * 0.7),
            "storage_gb": d.storage_gb,
        }
    return {"monthly_serverless_request_units": d.requests, "storage_gb": d.storage_gb}


def _object_storage(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {
            "standard": {
                "storage_gb": d.storage_gb,
                "monthly_tier_1_requests": int(d.requests * 0.1),
                "monthly_tier_2_requests": int(d.requests * 0.05),
            },
            "monthly_data_transfer_gb": {"outbound_internet": d.transfer_gb},
        }
    if provider == "gcp":
        return {
            "storage_gb": d.storage_gb,
            "monthly_class_a_operations": int(d.requests * 0.1),
            "monthly_class_b_operations": int(d.requests * 0.05),
            "monthly_egress_data_transfer_gb": {"worldwide": d.transfer_gb},
        }
    return {
        "storage_gb": d.storage_gb,
        "monthly_write_operations": int(d.requests * 0.1),
        "monthly_read_operations": int(d.requests * 0.05),
    }


def _load_balancer(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {
            "new_connections": d.requests,
            "active_connections": round(d.requests / _MINUTES_PER_MONTH),
            "processed_bytes_gb": d.transfer_gb,
        }
    if provider == "gcp":
        return {"monthly_ingress_data_gb": d.transfer_gb}
    return {"monthly_data_processed_gb": d.transfer_gb}


def _cdn(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {
            "monthly_data_transfer_to_internet_gb": {"us_canada_europe": d.transfer_gb},
            "monthly_http_requests": {"us_canada_europe": int(d.requests * 0.8)},
            "monthly_https_requests": {"us_canada_europe": int(d.requests * 0.2)},
        }
    if provider == "gcp":
        return {"monthly_egress_data_transfer_gb": {"worldwide": d.transfer_gb}}
    return {"monthly_outbound_gb": d.transfer_gb}


def _api_gateway(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "azure":
        return {"monthly_api_calls": d.requests}
    return {"monthly_requests": d.requests}


def _websocket(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {"monthly_messages": d.requests, "monthly_connection_mins": d.requests * 5}
    if provider == "gcp":
        return {"monthly_requests": d.requests}
    return {"additional_units": max(0, math.ceil(d.concurrency / 1000) - 1)}


def _queue(d: _Derived, provider: str) -> dict[str, Any]:
    messages = int(d.requests * 0.2)
    if provider == "aws":
        return {"monthly_requests": messages}
    if provider == "gcp":
        return {"monthly_message_data_tb": round(messages / 1_000_000_000, 6)}
    return {"monthly_messaging_operations": messages}


def _event_bus(d: _Derived, provider: str) -> dict[str, Any]:
    events = int(d.requests * 0.1)
    if provider == "aws":
        return {"monthly_custom_events": events}
    if provider == "gcp":
        return {"monthly_events": events}
    return {"monthly_operations": events}


def _identity(d: _Derived, provider: str) -> dict[str, Any]:
    return {"monthly_active_users": d.users}


def _dns(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {"monthly_standard_queries": d.requests}
    return {"monthly_queries": d.requests}


def _logging(d: _Derived, provider: str) -> dict[str, Any]:
    # ~2 KB of log data per request
    ingested = round(d.requests * 2048 / _GB, 3)
    if provider == "aws":
        return {"monthly_data_ingested_gb": ingested, "storage_gb": ingested}
    if provider == "gcp":
        return {"monthly_logging_data_gb": ingested}
    return {"monthly_log_data_ingestion_gb": ingested}


def _secrets(d: _Derived, provider: str) -> dict[str, Any]:
    calls = max(1000, int(d.requests * 0.01))
    if provider == "azure":
        return {"monthly_secrets_operations": calls}
    return {"monthly_requests": calls}


def _iot(d: _Derived, provider: str) -> dict[str, Any]:
    if provider == "aws":
        return {"monthly_messages": d.device_messages, "device_count": d.devices}
    if provider == "gcp":
        return {"monthly_message_data_gb": round(d.device_messages / 1_000_000, 3)}
    return {"monthly_messages": d.device_messages}


def _ml_inference(d: _Derived, provider: str) -> dict[str, Any]:
    return {"monthly_instance_hours": d.inference_hours}


def _ml_training(d: _Derived, provider: str) -> dict[str, Any]:
    return {"monthly_hrs": d.training_hours} if d.training_hours else {}


_USAGE_BUILDERS: dict[str, Callable[[_Derived, str], dict[str, Any]]] = {
    "computeserverless": _serverless,
    "computecontainer": _container,
    "relationaldatabase": _relational,
    "nosqldatabase": _nosql,
    "objectstorage": _object_storage,
    "loadbalancer": _load_balancer,
    "cdn": _cdn,
    "apigateway": _api_gateway,
    "websocketgateway": _websocket,
    "messagequeue": _queue,
    "eventbus": _event_bus,
    "identityauth": _identity,
    "dns": _dns,
    "logging": _logging,
    "secretsmanagement": _secrets,
    "iotcore": _iot,
    "mlinference": _ml_inference,
    "mltraining": _ml_training,
}


def resource_address(provider: str, service_id: str, catalog: ServiceCatalog | None = None) -> str | None:
    """Address the artifact renderer uses for a service's primary resource."""
    catalog = catalog or get_catalog()
    resource_type = catalog.resource_type(provider, service_id)
    if not resource_type:
        return None
    return f"{resource_type}.{normalize_service_id(service_id)}"


def normalize_usage(
    variant: UsageVariant,
    services: list[str],
    provider: str,
    catalog: ServiceCatalog | None = None,
) -> dict[str, dict[str, Any]]:
    """Translate one usage variant into provider resource usage parameters."""
    provider = normalize_provider(provider)
    derived = _derive(variant)
    usage: dict[str, dict[str, Any]] = {}
    for raw in services:
        service_id = normalize_service_id(raw)
        builder = _USAGE_BUILDERS.get(service_id)
        if builder is None:
            continue
        address = resource_address(provider, service_id, catalog)
        if address is None:
            continue
        params = builder(derived, provider)
        if params:
            usage[address] = params
    return dict(sorted(usage.items()))


def to_usage_yaml(usage: dict[str, dict[str, Any]]) -> str:
    """Render the oracle usage file (infracost usage-file schema 0.1)."""
    body = yaml.safe_dump({"usage": usage}, default_flow_style=False, sort_keys=True) if usage else "usage: {}\n"
    return "version: 0.1\n" + body
