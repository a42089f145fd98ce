"""Tests for the canonical service catalog and product resolution."""

from __future__ import annotations

import pytest


class TestNormalization:
    def test_alias_maps_to_canonical(self):
        from pricewright.catalog import normalize_service_id

        assert normalize_service_id("relational_database") == "relationaldatabase"
        assert normalize_service_id("app_compute") == "computecontainer"
        assert normalize_service_id("global_load_balancer") == "loadbalancer"
        assert normalize_service_id("Secrets-Manager") == "secretsmanagement"

    def test_unknown_id_is_stripped_not_dropped(self):
        from pricewright.catalog import normalize_service_id

        assert normalize_service_id("Quantum Ledger") == "quantumledger"
        assert normalize_service_id("") == ""
        assert normalize_service_id(None) == ""

    def test_provider_aliases(self):
        from pricewright.catalog import normalize_provider

        assert normalize_provider("AWS") == "aws"
        assert normalize_provider("google") == "gcp"
        assert normalize_provider("Microsoft") == "azure"

    def test_profile_normalization(self):
        from pricewright.catalog import COST_EFFECTIVE, HIGH_PERFORMANCE, normalize_profile

        assert normalize_profile("high-performance") == HIGH_PERFORMANCE
        assert normalize_profile("premium") == HIGH_PERFORMANCE
        assert normalize_profile(None) == COST_EFFECTIVE
        assert normalize_profile("whatever") == COST_EFFECTIVE


class TestResolveProduct:
    def test_engine_hint_selects_variant(self):
        from pricewright.catalog import resolve_product

        assert resolve_product("aws", "relationaldatabase", "cost_effective", {"engine": "postgres"}) == "aws_rds_postgresql"
        assert resolve_product("aws", "relationaldatabase", "cost_effective", {"engine": "mysql"}) == "aws_rds_mysql"
        assert resolve_product("aws", "relationaldatabase", "high_performance", {"engine": "mysql"}) == "aws_aurora_mysql"

    def test_missing_engine_variant_falls_back_to_default(self):
        from pricewright.catalog import resolve_product

        # gcp has no MYSQL_PERF entry
        assert resolve_product("gcp", "relationaldatabase", "high_performance", {"engine": "mysql"}) == "gcp_cloud_sql_postgres"

    def test_profile_keyed_table(self):
        from pricewright.catalog import resolve_product

        assert resolve_product("aws", "computecontainer", "cost_effective") == "aws_ecs_fargate"
        assert resolve_product("aws", "computecontainer", "high_performance") == "aws_eks"

    def test_unknown_service_returns_none(self):
        from pricewright.catalog import resolve_product

        assert resolve_product("aws", "quantumledger", "cost_effective") is None

    def test_external_service_has_no_product(self):
        from pricewright.catalog import resolve_product

        assert resolve_product("aws", "paymentgateway") is None

    def test_pure_function(self):
        from pricewright.catalog import resolve_product

        first = [resolve_product(p, "cache", "high_performance") for p in ("aws", "gcp", "azure")]
        second = [resolve_product(p, "cache", "high_performance") for p in ("aws", "gcp", "azure")]
        assert first == second
        assert all(first)

    def test_display_name_defaults_to_raw_id(self):
        from pricewright.catalog import display_name

        assert display_name("aws_rds_postgresql") == "RDS PostgreSQL"
        assert display_name("no_such_product") == "no_such_product"
        assert display_name(None) == ""


class TestServiceCatalog:
    def test_categories_loaded(self):
        from pricewright.catalog import get_catalog

        categories = get_catalog().list_categories()
        for expected in ("compute", "database", "storage", "network", "security"):
            assert expected in categories

    def test_reverse_resource_lookup(self):
        from pricewright.catalog import get_catalog

        catalog = get_catalog()
        assert catalog.service_for_resource("aws", "aws_db_instance") == "relationaldatabase"
        assert catalog.service_for_resource("aws", "aws_eks_node_group") == "computecontainer"
        assert catalog.service_for_resource("gcp", "google_storage_bucket") == "objectstorage"
        assert catalog.service_for_resource("aws", "aws_unheard_of") is None

    def test_primary_resource_type(self):
        from pricewright.catalog import get_catalog

        catalog = get_catalog()
        assert catalog.resource_type("aws", "computeserverless") == "aws_lambda_function"
        assert catalog.resource_type("azure", "objectstorage") == "azurerm_storage_account"
        assert catalog.resource_type("aws", "paymentgateway") is None

    def test_service_def_to_dict(self):
        from pricewright.catalog import get_catalog

        data = get_catalog().get("relational_database").to_dict()
        assert data["service_id"] == "relationaldatabase"
        assert data["pricing_class"] == "DIRECT"
        assert data["stateful"] is True

    def test_duplicate_ids_rejected(self, tmp_path):
        from pricewright.catalog import ServiceCatalog

        body = "category: {cat}\nservices:\n  thing:\n    name: Thing\n    pricing_class: DIRECT\n"
        (tmp_path / "a.yaml").write_text(body.format(cat="a"))
        (tmp_path / "b.yaml").write_text(body.format(cat="b"))
        with pytest.raises(ValueError, match="Duplicate"):
            ServiceCatalog(tmp_path)

    def test_bad_pricing_class_rejected(self, tmp_path):
        from pricewright.catalog import ServiceCatalog

        (tmp_path / "a.yaml").write_text("category: a\nservices:\n  thing:\n    pricing_class: SOMETIMES\n")
        with pytest.raises(ValueError, match="pricing class"):
            ServiceCatalog(tmp_path)
