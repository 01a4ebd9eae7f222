"""
tests/albnet/test_config.py - ResolverSettings 테스트
"""

from datetime import timedelta

from albnet.config import DEFAULT_IMDS_ENDPOINT, ResolverSettings


class TestResolverSettings:
    """ResolverSettings 테스트"""

    def test_defaults(self):
        settings = ResolverSettings()
        assert settings.vpc_id is None
        assert settings.subnet_ttl == timedelta(minutes=60)
        assert settings.security_group_ttl == timedelta(minutes=60)
        assert settings.vpc_ttl == timedelta(minutes=60)
        assert settings.node_health_ttl == timedelta(minutes=5)
        assert settings.delete_max_attempts == 20
        assert settings.imds_endpoint == DEFAULT_IMDS_ENDPOINT

    def test_from_env(self):
        settings = ResolverSettings.from_env(
            {
                "AWS_VPC_ID": "vpc-env",
                "AWS_REGION": "eu-west-1",
                "AWS_DEFAULT_REGION": "us-west-2",
                "ALBNET_CLUSTER_NAME": "prod",
                "ALBNET_IMDS_ENDPOINT": "http://127.0.0.1:1338",
            }
        )
        assert settings.vpc_id == "vpc-env"
        assert settings.region == "eu-west-1"
        assert settings.cluster_name == "prod"
        assert settings.imds_endpoint == "http://127.0.0.1:1338"

    def test_empty_vpc_id_is_unset(self):
        assert ResolverSettings.from_env({"AWS_VPC_ID": ""}).vpc_id is None

    def test_default_region_fallback(self):
        assert ResolverSettings.from_env({"AWS_DEFAULT_REGION": "us-west-2"}).region == "us-west-2"

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("AWS_VPC_ID", "vpc-proc")
        assert ResolverSettings.from_env().vpc_id == "vpc-proc"
