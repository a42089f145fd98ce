"""Terraform HCL artifact for a billable service set on one provider.

The artifact is minimal: one resource declaration per billable service (plus
the few companions a resource cannot be priced without) and nothing that
would be needed to actually apply it. Resource names are the canonical
service ids so oracle output maps straight back.
"""

from __future__ import annotations

import re
from typing import Any

from pricewright.catalog import COST_EFFECTIVE, HIGH_PERFORMANCE, ServiceCatalog, get_catalog, normalize_profile

_REQUIRED_PROVIDERS: dict[str, dict] = {
    "aws": {
        "source": "hashicorp/aws",
        "version": "= 5.82.2",
    },
    "gcp": {
        "source": "hashicorp/google",
        "version": "= 6.14.1",
    },
    "azure": {
        "source": "hashicorp/azurerm",
        "version": "= 4.14.0",
    },
}

_DEFAULT_REGIONS = {"aws": "us-east-1", "gcp": "us-central1", "azure": "eastus"}

# AWS instance vocabulary -> GCP machine types / Azure VM sizes
_GCP_MACHINE_TYPES = {
    "t3.small": "e2-small",
    "t3.medium": "e2-medium",
    "t3.large": "e2-standard-2",
    "c7i.large": "c3-standard-4",
    "c7i.xlarge": "c3-standard-8",
    "c7i.2xlarge": "c3-standard-22",
    "m5.large": "n2-standard-2",
    "m5.xlarge": "n2-standard-4",
}
_AZURE_VM_SIZES = {
    "t3.small": "Standard_B1ms",
    "t3.medium": "Standard_B2s",
    "t3.large": "Standard_B2ms",
    "c7i.large": "Standard_F2s_v2",
    "c7i.xlarge": "Standard_F4s_v2",
    "c7i.2xlarge": "Standard_F8s_v2",
    "m5.large": "Standard_D2s_v5",
    "m5.xlarge": "Standard_D4s_v5",
}
_GCP_DB_TIERS = {
    "db.t3.micro": "db-f1-micro",
    "db.t3.small": "db-g1-small",
    "db.t3.medium": "db-custom-2-4096",
    "db.r6i.large": "db-custom-2-16384",
    "db.r6i.xlarge": "db-custom-4-32768",
    "db.r6i.2xlarge": "db-custom-8-65536",
}
_AZURE_DB_SKUS = {
    "db.t3.micro": "B_Standard_B1ms",
    "db.t3.small": "B_Standard_B2s",
    "db.t3.medium": "GP_Standard_D2s_v3",
    "db.r6i.large": "MO_Standard_E2ds_v4",
    "db.r6i.xlarge": "MO_Standard_E4ds_v4",
    "db.r6i.2xlarge": "MO_Standard_E8ds_v4",
}
_GCP_REDIS_GB = {
    "cache.t3.micro": 1,
    "cache.t3.small": 2,
    "cache.t3.medium": 4,
    "cache.r6g.large": 13,
    "cache.r6g.xlarge": 26,
    "cache.r6g.2xlarge": 52,
}
_AZURE_REDIS = {
    "cache.t3.micro": ("Basic", "C", 0),
    "cache.t3.small": ("Standard", "C", 1),
    "cache.t3.medium": ("Standard", "C", 2),
    "cache.r6g.large": ("Premium", "P", 1),
    "cache.r6g.xlarge": ("Premium", "P", 2),
    "cache.r6g.2xlarge": ("Premium", "P", 3),
}

# Compute resource prefixes that a static-content artifact must never contain
FORBIDDEN_STATIC_PREFIXES = (
    "aws_eks",
    "aws_ecs",
    "aws_instance",
    "aws_lambda",
    "google_container",
    "google_cloud_run",
    "google_compute_instance",
    "azurerm_kubernetes",
    "azurerm_container_app",
    "azurerm_virtual_machine",
    "azurerm_linux_virtual_machine",
    "azurerm_linux_function_app",
)

_RESOURCE_RE = re.compile(r'^resource\s+"([a-z0-9_]+)"\s+"([A-Za-z0-9_-]+)"', re.MULTILINE)


def _slug(value: str) -> str:
    return value.replace("_", "-").lower()


def _block(resource_type: str, name: str, body: list[str]) -> list[str]:
    return [f'resource "{resource_type}" "{name}" {{', *[f"  {line}" for line in body], "}"]


def _render_aws_resource(sid: str, cfg: dict[str, Any], profile: str, engine: str, catalog: ServiceCatalog) -> list[str]:
    high_perf = profile == HIGH_PERFORMANCE
    lines: list[str] = []

    if sid == "computeserverless":
        memory = int(cfg.get("memory_mb", 512))
        if high_perf:
            memory = min(memory * 2, 10240)
        lines += _block(
            "aws_lambda_function",
            sid,
            [
                f'function_name = "{_slug(sid)}"',
                'role          = "arn:aws:iam::123456789012:role/pricing"',
                'handler       = "index.handler"',
                'runtime       = "python3.12"',
                f"memory_size   = {memory}",
                'filename      = "function.zip"',
            ],
        )

    elif sid == "computecontainer":
        if high_perf:
            node_type = cfg.get("node_type", "m5.large")
            instances = int(cfg.get("instances", 2))
            lines += _block("aws_eks_cluster", sid, [f'name     = "{_slug(sid)}"', 'role_arn = "arn:aws:iam::123456789012:role/eks"', "vpc_config {", '  subnet_ids = ["subnet-12345678"]', "}"])
            lines.append("")
            lines += _block(
                "aws_eks_node_group",
                sid,
                [
                    f"cluster_name    = aws_eks_cluster.{sid}.name",
                    f'node_group_name = "{_slug(sid)}-nodes"',
                    'node_role_arn   = "arn:aws:iam::123456789012:role/eks-nodes"',
                    'subnet_ids      = ["subnet-12345678"]',
                    f'instance_types  = ["{node_type}"]',
                    "scaling_config {",
                    f"  desired_size = {instances}",
                    f"  max_size     = {instances * 2}",
                    f"  min_size     = {instances}",
                    "}",
                ],
            )
        else:
            cpu_units = int(float(cfg.get("cpu", 1)) * 1024)
            memory_mb = int(float(cfg.get("memory_gb", 2)) * 1024)
            lines += _block("aws_ecs_cluster", sid, [f'name = "{_slug(sid)}"'])
            lines.append("")
            lines += _block(
                "aws_ecs_task_definition",
                sid,
                [
                    f'family                   = "{_slug(sid)}"',
                    'requires_compatibilities = ["FARGATE"]',
                    'network_mode             = "awsvpc"',
                    f'cpu                      = "{cpu_units}"',
                    f'memory                   = "{memory_mb}"',
                    "container_definitions    = jsonencode([{ name = \"app\", image = \"nginx\", essential = true }])",
                ],
            )
            lines.append("")
            lines += _block(
                "aws_ecs_service",
                sid,
                [
                    f'name            = "{_slug(sid)}"',
                    f"cluster         = aws_ecs_cluster.{sid}.id",
                    f"task_definition = aws_ecs_task_definition.{sid}.arn",
                    'launch_type     = "FARGATE"',
                    f"desired_count   = {int(cfg.get('instances', 2))}",
                ],
            )

    elif sid == "computevm":
        instance_type = cfg.get("instance_type", "m5.large" if high_perf else "t3.medium")
        lines += _block(
            "aws_instance",
            sid,
            ['ami           = "ami-0c55b159cbfafe1f0"', f'instance_type = "{instance_type}"', f"count         = {int(cfg.get('instances', 1))}"],
        )

    elif sid == "relationaldatabase":
        is_mysql = "mysql" in engine
        if high_perf:
            instances = int(cfg.get("instances", 2))
            lines += _block(
                "aws_rds_cluster",
                sid,
                [
                    f'cluster_identifier  = "{_slug(sid)}"',
                    f'engine              = "{"aurora-mysql" if is_mysql else "aurora-postgresql"}"',
                    'master_username     = "pricing"',
                    'master_password     = "not-a-real-password"',
                    "skip_final_snapshot = true",
                ],
            )
            lines.append("")
            lines += _block(
                "aws_rds_cluster_instance",
                sid,
                [
                    f"count              = {instances}",
                    f"cluster_identifier = aws_rds_cluster.{sid}.id",
                    f'instance_class     = "{cfg.get("instance_class", "db.r6i.large")}"',
                    f"engine             = aws_rds_cluster.{sid}.engine",
                ],
            )
        else:
            lines += _block(
                "aws_db_instance",
                sid,
                [
                    f'identifier          = "{_slug(sid)}"',
                    f'engine              = "{"mysql" if is_mysql else "postgres"}"',
                    f'instance_class      = "{cfg.get("instance_class", "db.t3.small")}"',
                    f"allocated_storage   = {int(cfg.get('storage_gb', 20))}",
                    f"multi_az            = {str(bool(cfg.get('multi_az', False))).lower()}",
                    'username            = "pricing"',
                    'password            = "not-a-real-password"',
                    "skip_final_snapshot = true",
                ],
            )

    elif sid == "nosqldatabase":
        lines += _block(
            "aws_dynamodb_table",
            sid,
            [
                f'name           = "{_slug(sid)}"',
                'billing_mode   = "PROVISIONED"',
                f"read_capacity  = {int(cfg.get('read_units', 25))}",
                f"write_capacity = {int(cfg.get('write_units', 25))}",
                'hash_key       = "id"',
                "attribute {",
                '  name = "id"',
                '  type = "S"',
                "}",
            ],
        )

    elif sid == "cache":
        lines += _block(
            "aws_elasticache_cluster",
            sid,
            [
                f'cluster_id      = "{_slug(sid)}"',
                'engine          = "redis"',
                f'node_type       = "{cfg.get("node_type", "cache.m5.large" if high_perf else "cache.t3.small")}"',
                f"num_cache_nodes = {int(cfg.get('nodes', 1))}",
            ],
        )

    elif sid == "objectstorage":
        lines += _block("aws_s3_bucket", sid, [f'bucket = "{_slug(sid)}-pricing"'])

    elif sid == "blockstorage":
        lines += _block(
            "aws_ebs_volume",
            sid,
            [
                'availability_zone = "us-east-1a"',
                f"size              = {int(cfg.get('size_gb', 100))}",
                f'type              = "{cfg.get("type", "gp3")}"',
                f"iops              = {int(cfg.get('iops', 3000))}",
            ],
        )

    elif sid == "loadbalancer":
        lines += _block("aws_lb", sid, [f'name               = "{_slug(sid)}"', 'load_balancer_type = "application"', 'subnets            = ["subnet-12345678", "subnet-87654321"]'])

    elif sid == "apigateway":
        protocol = "REST" if high_perf else "HTTP"
        if high_perf:
            lines += _block("aws_api_gateway_rest_api", sid, [f'name = "{_slug(sid)}"'])
        else:
            lines += _block("aws_apigatewayv2_api", sid, [f'name          = "{_slug(sid)}"', f'protocol_type = "{protocol}"'])

    elif sid == "cdn":
        lines += _block(
            "aws_cloudfront_distribution",
            sid,
            [
                "enabled = true",
                "origin {",
                '  domain_name = "origin.example.com"',
                f'  origin_id   = "{_slug(sid)}-origin"',
                "}",
                "default_cache_behavior {",
                '  allowed_methods        = ["GET", "HEAD"]',
                '  cached_methods         = ["GET", "HEAD"]',
                f'  target_origin_id       = "{_slug(sid)}-origin"',
                '  viewer_protocol_policy = "redirect-to-https"',
                "}",
                "restrictions {",
                '  geo_restriction { restriction_type = "none" }',
                "}",
                "viewer_certificate {",
                "  cloudfront_default_certificate = true",
                "}",
            ],
        )

    elif sid == "dns":
        lines += _block("aws_route53_zone", sid, ['name = "example.com"'])

    elif sid == "natgateway":
        lines += _block("aws_nat_gateway", sid, ['subnet_id     = "subnet-12345678"', 'allocation_id = "eipalloc-12345678"'])

    elif sid == "messagequeue":
        lines += _block("aws_sqs_queue", sid, [f'name = "{_slug(sid)}"'])

    elif sid == "searchengine":
        lines += _block(
            "aws_opensearch_domain",
            sid,
            [
                f'domain_name = "{_slug(sid)}"',
                "cluster_config {",
                f'  instance_type = "{cfg.get("instance_type", "t3.medium.search")}"',
                "}",
                "ebs_options {",
                "  ebs_enabled = true",
                f"  volume_size = {int(cfg.get('storage_gb', 50))}",
                "}",
            ],
        )

    elif sid == "logging":
        lines += _block("aws_cloudwatch_log_group", sid, [f'name              = "/pricing/{_slug(sid)}"', f"retention_in_days = {int(cfg.get('retention_days', 30))}"])

    elif sid == "secretsmanagement":
        lines += _block("aws_secretsmanager_secret", sid, [f'name = "{_slug(sid)}"'])

    else:
        lines += _generic_resource("aws", sid, catalog)

    return lines


def _render_gcp_resource(sid: str, cfg: dict[str, Any], profile: str, engine: str, catalog: ServiceCatalog) -> list[str]:
    high_perf = profile == HIGH_PERFORMANCE
    lines: list[str] = []

    if sid == "computeserverless":
        lines += _block(
            "google_cloudfunctions_function",
            sid,
            [
                f'name                = "{_slug(sid)}"',
                'runtime             = "python312"',
                f"available_memory_mb = {int(cfg.get('memory_mb', 512))}",
                'entry_point         = "handler"',
                "trigger_http        = true",
            ],
        )

    elif sid == "computecontainer":
        if high_perf:
            lines += _block("google_container_cluster", sid, [f'name               = "{_slug(sid)}"', 'location           = "us-central1"', "initial_node_count = 1", "remove_default_node_pool = true"])
            lines.append("")
            node_type = _GCP_MACHINE_TYPES.get(cfg.get("node_type", "m5.large"), "n2-standard-2")
            lines += _block(
                "google_container_node_pool",
                sid,
                [
                    f"cluster    = google_container_cluster.{sid}.name",
                    'location   = "us-central1"',
                    f"node_count = {int(cfg.get('instances', 2))}",
                    "node_config {",
                    f'  machine_type = "{node_type}"',
                    "}",
                ],
            )
        else:
            lines += _block(
                "google_cloud_run_service",
                sid,
                [
                    f'name     = "{_slug(sid)}"',
                    'location = "us-central1"',
                    "template {",
                    "  spec {",
                    "    containers {",
                    '      image = "gcr.io/cloudrun/hello"',
                    "      resources {",
                    "        limits = {",
                    f'          cpu    = "{cfg.get("cpu", 1)}"',
                    f'          memory = "{int(float(cfg.get("memory_gb", 2)) * 1024)}Mi"',
                    "        }",
                    "      }",
                    "    }",
                    "  }",
                    "}",
                ],
            )

    elif sid == "computevm":
        machine_type = _GCP_MACHINE_TYPES.get(cfg.get("instance_type", "t3.medium"), "e2-medium")
        lines += _block(
            "google_compute_instance",
            sid,
            [
                f"count        = {int(cfg.get('instances', 1))}",
                f'name         = "{_slug(sid)}"',
                f'machine_type = "{machine_type}"',
                'zone         = "us-central1-a"',
                "boot_disk {",
                "  initialize_params {",
                '    image = "debian-cloud/debian-12"',
                "  }",
                "}",
                "network_interface {",
                '  network = "default"',
                "}",
            ],
        )

    elif sid == "relationaldatabase":
        tier = _GCP_DB_TIERS.get(cfg.get("instance_class", "db.t3.small"), "db-g1-small")
        version = "MYSQL_8_0" if "mysql" in engine else "POSTGRES_15"
        availability = "REGIONAL" if cfg.get("multi_az") or high_perf else "ZONAL"
        lines += _block(
            "google_sql_database_instance",
            sid,
            [
                f'name             = "{_slug(sid)}"',
                f'database_version = "{version}"',
                'region           = "us-central1"',
                "settings {",
                f'  tier              = "{tier}"',
                f'  availability_type = "{availability}"',
                f"  disk_size         = {int(cfg.get('storage_gb', 20))}",
                "}",
            ],
        )

    elif sid == "nosqldatabase":
        lines += _block("google_firestore_database", sid, ['name        = "(default)"', 'location_id = "nam5"', 'type        = "FIRESTORE_NATIVE"'])

    elif sid == "cache":
        memory_gb = _GCP_REDIS_GB.get(cfg.get("node_type", "cache.t3.small"), 2)
        tier = "STANDARD_HA" if high_perf or int(cfg.get("nodes", 1)) > 1 else "BASIC"
        lines += _block("google_redis_instance", sid, [f'name           = "{_slug(sid)}"', f'tier           = "{tier}"', f"memory_size_gb = {memory_gb}"])

    elif sid == "objectstorage":
        lines += _block("google_storage_bucket", sid, [f'name     = "{_slug(sid)}-pricing"', 'location = "US"'])

    elif sid == "loadbalancer":
        lines += _block("google_compute_forwarding_rule", sid, [f'name   = "{_slug(sid)}"', 'region = "us-central1"', 'load_balancing_scheme = "EXTERNAL_MANAGED"'])

    elif sid == "cdn":
        lines += _block("google_compute_backend_bucket", sid, [f'name        = "{_slug(sid)}"', 'bucket_name = "pricing-static"', "enable_cdn  = true"])

    elif sid == "dns":
        lines += _block("google_dns_managed_zone", sid, [f'name     = "{_slug(sid)}"', 'dns_name = "example.com."'])

    elif sid == "messagequeue":
        lines += _block("google_pubsub_topic", sid, [f'name = "{_slug(sid)}"'])

    elif sid == "natgateway":
        lines += _block("google_compute_router_nat", sid, [f'name   = "{_slug(sid)}"', 'router = "pricing-router"', 'region = "us-central1"', 'nat_ip_allocate_option = "AUTO_ONLY"', 'source_subnetwork_ip_ranges_to_nat = "ALL_SUBNETWORKS_ALL_IP_RANGES"'])

    else:
        lines += _generic_resource("gcp", sid, catalog)

    return lines


def _render_azure_resource(sid: str, cfg: dict[str, Any], profile: str, engine: str, catalog: ServiceCatalog) -> list[str]:
    high_perf = profile == HIGH_PERFORMANCE
    rg = ["resource_group_name = azurerm_resource_group.main.name", "location            = azurerm_resource_group.main.location"]
    lines: list[str] = []

    if sid == "computeserverless":
        lines += _block("azurerm_service_plan", sid, [f'name     = "{_slug(sid)}-plan"', *rg, 'os_type  = "Linux"', f'sku_name = "{"EP1" if high_perf else "Y1"}"'])
        lines.append("")
        lines += _block(
            "azurerm_linux_function_app",
            sid,
            [
                f'name                 = "{_slug(sid)}"',
                *rg,
                f"service_plan_id      = azurerm_service_plan.{sid}.id",
                'storage_account_name = "pricingfunctions"',
                "site_config {}",
            ],
        )

    elif sid == "computecontainer":
        if high_perf:
            vm_size = _AZURE_VM_SIZES.get(cfg.get("node_type", "m5.large"), "Standard_D2s_v5")
            lines += _block(
                "azurerm_kubernetes_cluster",
                sid,
                [
                    f'name       = "{_slug(sid)}"',
                    *rg,
                    f'dns_prefix = "{_slug(sid)}"',
                    "default_node_pool {",
                    '  name       = "default"',
                    f"  node_count = {int(cfg.get('instances', 2))}",
                    f'  vm_size    = "{vm_size}"',
                    "}",
                    "identity {",
                    '  type = "SystemAssigned"',
                    "}",
                ],
            )
        else:
            lines += _block(
                "azurerm_container_app",
                sid,
                [
                    f'name                         = "{_slug(sid)}"',
                    "resource_group_name          = azurerm_resource_group.main.name",
                    'container_app_environment_id = "pricing-environment"',
                    'revision_mode                = "Single"',
                    "template {",
                    f"  min_replicas = {int(cfg.get('instances', 1))}",
                    "  container {",
                    '    name   = "app"',
                    '    image  = "mcr.microsoft.com/k8se/quickstart:latest"',
                    f"    cpu    = {cfg.get('cpu', 1)}",
                    f'    memory = "{cfg.get("memory_gb", 2)}Gi"',
                    "  }",
                    "}",
                ],
            )

    elif sid == "computevm":
        size = _AZURE_VM_SIZES.get(cfg.get("instance_type", "t3.medium"), "Standard_B2s")
        lines += _block(
            "azurerm_linux_virtual_machine",
            sid,
            [
                f"count          = {int(cfg.get('instances', 1))}",
                f'name           = "{_slug(sid)}"',
                *rg,
                f'size           = "{size}"',
                'admin_username = "pricing"',
                "network_interface_ids = []",
                "os_disk {",
                '  caching              = "ReadWrite"',
                '  storage_account_type = "Standard_LRS"',
                "}",
            ],
        )

    elif sid == "relationaldatabase":
        sku = _AZURE_DB_SKUS.get(cfg.get("instance_class", "db.t3.small"), "B_Standard_B2s")
        resource_type = "azurerm_mysql_flexible_server" if "mysql" in engine else "azurerm_postgresql_flexible_server"
        body = [f'name       = "{_slug(sid)}"', *rg, f'sku_name   = "{sku}"', f"storage_mb = {int(cfg.get('storage_gb', 32)) * 1024}"]
        if cfg.get("multi_az") or high_perf:
            body += ["high_availability {", '  mode = "ZoneRedundant"', "}"]
        lines += _block(resource_type, sid, body)

    elif sid == "nosqldatabase":
        lines += _block(
            "azurerm_cosmosdb_account",
            sid,
            [
                f'name       = "{_slug(sid)}"',
                *rg,
                'offer_type = "Standard"',
                "consistency_policy {",
                '  consistency_level = "Session"',
                "}",
                "geo_location {",
                "  location          = azurerm_resource_group.main.location",
                "  failover_priority = 0",
                "}",
            ],
        )

    elif sid == "cache":
        sku, family, capacity = _AZURE_REDIS.get(cfg.get("node_type", "cache.t3.small"), ("Standard", "C", 1))
        lines += _block("azurerm_redis_cache", sid, [f'name     = "{_slug(sid)}"', *rg, f"capacity = {capacity}", f'family   = "{family}"', f'sku_name = "{sku}"'])

    elif sid == "objectstorage":
        lines += _block(
            "azurerm_storage_account",
            sid,
            ['name                     = "pricingstorage"', *rg, 'account_tier             = "Standard"', 'account_replication_type = "LRS"'],
        )

    elif sid == "loadbalancer":
        lines += _block(
            "azurerm_application_gateway",
            sid,
            [f'name = "{_slug(sid)}"', *rg, "sku {", f'  name     = "{"WAF_v2" if high_perf else "Standard_v2"}"', f'  tier     = "{"WAF_v2" if high_perf else "Standard_v2"}"', "  capacity = 2", "}"],
        )

    elif sid == "cdn":
        lines += _block("azurerm_cdn_endpoint", sid, [f'name         = "{_slug(sid)}"', *rg, 'profile_name = "pricing-cdn"', "origin {", '  name      = "origin"', '  host_name = "origin.example.com"', "}"])

    elif sid == "dns":
        lines += _block("azurerm_dns_zone", sid, ['name                = "example.com"', "resource_group_name = azurerm_resource_group.main.name"])

    elif sid == "messagequeue":
        lines += _block("azurerm_servicebus_namespace", sid, [f'name = "{_slug(sid)}"', *rg, f'sku  = "{"Premium" if high_perf else "Standard"}"'])

    else:
        lines += _generic_resource("azure", sid, catalog)

    return lines


def _generic_resource(provider: str, sid: str, catalog: ServiceCatalog) -> list[str]:
    resource_type = catalog.resource_type(provider, sid)
    if not resource_type:
        return [f"# No {provider} resource mapping for {sid}"]
    body = [f'name = "{_slug(sid)}"']
    if provider == "azure":
        body.append("resource_group_name = azurerm_resource_group.main.name")
    return _block(resource_type, sid, body)


_RENDERERS = {
    "aws": _render_aws_resource,
    "gcp": _render_gcp_resource,
    "azure": _render_azure_resource,
}


def render(
    provider: str,
    services: list[str],
    sizing: dict[str, dict[str, Any]] | None = None,
    cost_profile: str = COST_EFFECTIVE,
    engines: dict[str, str] | None = None,
    region: str | None = None,
    catalog: ServiceCatalog | None = None,
) -> str:
    """Render a single-provider HCL artifact for the given billable services."""
    if provider not in _RENDERERS:
        raise ValueError(f"Unsupported provider: {provider!r}")
    catalog = catalog or get_catalog()
    profile = normalize_profile(cost_profile)
    sizing = sizing or {}
    engines = engines or {}
    region = region if provider == "aws" and region else _DEFAULT_REGIONS[provider]

    parts: list[str] = ["# Generated by pricewright for cost estimation only", ""]

    rp = _REQUIRED_PROVIDERS[provider]
    provider_name = rp["source"].split("/")[1]
    parts += [
        "terraform {",
        "  required_providers {",
        f"    {provider_name} = {{",
        f'      source  = "{rp["source"]}"',
        f'      version = "{rp["version"]}"',
        "    }",
        "  }",
        "}",
        "",
    ]

    if provider == "aws":
        parts += [f'provider "aws" {{\n  region = "{region}"\n}}', ""]
    elif provider == "gcp":
        parts += [f'provider "google" {{\n  project = "pricing-estimate"\n  region  = "{region}"\n}}', ""]
    else:
        parts += ['provider "azurerm" {\n  features {}\n}', ""]
        parts += _block("azurerm_resource_group", "main", ['name     = "rg-pricing"', f'location = "{region}"'])
        parts.append("")

    renderer = _RENDERERS[provider]
    for sid in services:
        engine = str(engines.get(sid) or "").lower()
        parts += renderer(sid, sizing.get(sid, {}), profile, engine, catalog)
        parts.append("")

    return "\n".join(parts)


def declared_resources(hcl: str) -> list[tuple[str, str]]:
    """(resource_type, name) pairs declared in an HCL document."""
    return _RESOURCE_RE.findall(hcl)


def forbidden_compute(hcl: str) -> list[str]:
    """Resource types in an artifact that a static-content site must not declare."""
    return sorted({rtype for rtype, _ in declared_resources(hcl) if rtype.startswith(FORBIDDEN_STATIC_PREFIXES)})
