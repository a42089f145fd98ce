"""Tests for the HCL pricing artifact."""

from __future__ import annotations

import pytest
from pricewright.sizing import MEDIUM, sizing_for
from pricewright.terraform import declared_resources, forbidden_compute, render


class TestRender:
    def test_required_providers_block(self):
        hcl = render("aws", ["objectstorage"])
        assert 'source  = "hashicorp/aws"' in hcl
        assert 'version = "= 5.82.2"' in hcl
        assert 'region = "us-east-1"' in hcl

    def test_one_resource_per_service_named_by_id(self):
        hcl = render("aws", ["computeserverless", "objectstorage", "dns"])
        assert declared_resources(hcl) == [
            ("aws_lambda_function", "computeserverless"),
            ("aws_s3_bucket", "objectstorage"),
            ("aws_route53_zone", "dns"),
        ]

    def test_sizing_flows_into_resources(self):
        sizing = sizing_for(["relationaldatabase", "cache"], MEDIUM)
        hcl = render("aws", ["relationaldatabase", "cache"], sizing=sizing)
        assert 'instance_class      = "db.t3.small"' in hcl
        assert "multi_az            = true" in hcl
        assert 'node_type       = "cache.t3.small"' in hcl

    def test_engine_hint_selects_mysql(self):
        hcl = render("azure", ["relationaldatabase"], engines={"relationaldatabase": "MySQL"})
        assert ("azurerm_mysql_flexible_server", "relationaldatabase") in declared_resources(hcl)

    def test_high_performance_container_uses_eks(self):
        sizing = sizing_for(["computecontainer"], MEDIUM, "high_performance")
        hcl = render("aws", ["computecontainer"], sizing=sizing, cost_profile="high_performance")
        types = [t for t, _ in declared_resources(hcl)]
        assert types == ["aws_eks_cluster", "aws_eks_node_group"]
        assert 'instance_types  = ["m5.large"]' in hcl

    def test_cost_effective_container_uses_fargate(self):
        hcl = render("aws", ["computecontainer"])
        types = [t for t, _ in declared_resources(hcl)]
        assert types == ["aws_ecs_cluster", "aws_ecs_task_definition", "aws_ecs_service"]

    def test_high_performance_database_uses_aurora(self):
        hcl = render("aws", ["relationaldatabase"], cost_profile="premium")
        assert ("aws_rds_cluster", "relationaldatabase") in declared_resources(hcl)

    def test_gcp_translates_instance_vocabulary(self):
        hcl = render("gcp", ["computevm"], sizing={"computevm": {"instance_type": "t3.large", "instances": 2}})
        assert 'machine_type = "e2-standard-2"' in hcl
        assert "count        = 2" in hcl

    def test_azure_has_resource_group(self):
        hcl = render("azure", ["objectstorage"])
        assert ("azurerm_resource_group", "main") in declared_resources(hcl)

    def test_generic_block_for_unrendered_service(self):
        hcl = render("gcp", ["eventbus"])
        assert declared_resources(hcl) == [("google_eventarc_trigger", "eventbus")]
        assert 'name = "eventbus"' in hcl

    def test_unknown_service_is_a_comment(self):
        hcl = render("aws", ["quantumledger"])
        assert declared_resources(hcl) == []
        assert "# No aws resource mapping for quantumledger" in hcl

    def test_no_cross_provider_resources(self):
        services = ["computecontainer", "relationaldatabase", "cache", "objectstorage", "loadbalancer", "cdn"]
        for provider, prefix in (("aws", "aws_"), ("gcp", "google_"), ("azure", "azurerm_")):
            for rtype, _ in declared_resources(render(provider, services)):
                assert rtype.startswith(prefix)

    def test_unsupported_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            render("oracle", ["computevm"])


class TestForbiddenCompute:
    def test_static_services_are_clean(self):
        assert forbidden_compute(render("aws", ["objectstorage", "cdn", "dns"])) == []

    def test_compute_is_detected(self):
        assert forbidden_compute(render("aws", ["objectstorage", "computeserverless"])) == ["aws_lambda_function"]
        assert forbidden_compute(render("azure", ["computevm"])) == ["azurerm_linux_virtual_machine"]
