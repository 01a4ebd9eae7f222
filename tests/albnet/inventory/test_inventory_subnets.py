"""
tests/albnet/inventory/test_inventory_subnets.py - SubnetResolver 테스트
"""

import pytest

from albnet.exceptions import ResourceLookupError, TransportError, ValidationError
from albnet.inventory.subnets import (
    CLUSTER_SUBNETS_CACHE_NAME,
    GET_SUBNETS_CACHE_NAME,
    TAG_NAME_SUBNET_INTERNAL_ELB,
    TAG_NAME_SUBNET_PUBLIC_ELB,
    SubnetResolver,
    role_tag_for_scheme,
    subnet_is_usable,
)
from albnet.inventory.types import Subnet
from albnet.inventory.vpc import VPCLocator

CLUSTER_TAG = ("kubernetes.io/cluster/prod", "shared")
PUBLIC = (CLUSTER_TAG, (TAG_NAME_SUBNET_PUBLIC_ELB, "1"))
INTERNAL = (CLUSTER_TAG, (TAG_NAME_SUBNET_INTERNAL_ELB, "1"))


def _subnet(subnet_id, az, name=None):
    data = {"SubnetId": subnet_id, "AvailabilityZone": az, "VpcId": "vpc-123"}
    if name is not None:
        data["Tags"] = [{"Key": "Name", "Value": name}]
    return data


@pytest.fixture
def vpc(paged_ec2, cache, metadata):
    return VPCLocator(paged_ec2, cache, metadata, vpc_id_override="vpc-123")


@pytest.fixture
def make_resolver(paged_ec2, cache, vpc):
    def _make(tag_index):
        return SubnetResolver(paged_ec2, cache, vpc, tag_index, cluster_name="prod")

    return _make


class TestSubnetIsUsable:
    def test_rejects_same_az(self):
        admitted = [Subnet("subnet-1", "us-east-1a")]
        assert subnet_is_usable(Subnet("subnet-2", "us-east-1a"), admitted) is False

    def test_accepts_new_az(self):
        admitted = [Subnet("subnet-1", "us-east-1a")]
        assert subnet_is_usable(Subnet("subnet-2", "us-east-1b"), admitted) is True


class TestRoleTagForScheme:
    def test_schemes_map_to_disjoint_tags(self):
        internal = role_tag_for_scheme("internal")
        public = role_tag_for_scheme("internet-facing")

        assert internal == TAG_NAME_SUBNET_INTERNAL_ELB
        assert public == TAG_NAME_SUBNET_PUBLIC_ELB
        assert internal != public

    def test_invalid_scheme(self):
        with pytest.raises(ValidationError) as exc_info:
            role_tag_for_scheme("external")

        assert exc_info.value.details["value"] == "external"


class TestGetSubnets:
    """get_subnets 테스트"""

    def test_partial_cache_hit_queries_only_misses(self, paged_ec2, cache, make_resolver, tag_index):
        """subnet-a는 캐시, subnet-b만 한 번에 조회"""
        cache.set(GET_SUBNETS_CACHE_NAME, "subnet-a", "subnet-001", 3600)
        paged_ec2.pages["describe_subnets"] = [{"Subnets": [_subnet("subnet-002", "us-east-1b", "subnet-b")]}]
        resolver = make_resolver(tag_index)

        result = resolver.get_subnets(["subnet-a", "subnet-b"])

        assert sorted(result) == ["subnet-001", "subnet-002"]
        calls = paged_ec2.calls_for("describe_subnets")
        assert len(calls) == 1
        assert calls[0]["Filters"] == [
            {"Name": "tag:Name", "Values": ["subnet-b"]},
            {"Name": "vpc-id", "Values": ["vpc-123"]},
        ]

    def test_fetched_names_are_cached(self, paged_ec2, make_resolver, tag_index):
        paged_ec2.pages["describe_subnets"] = [{"Subnets": [_subnet("subnet-002", "us-east-1b", "subnet-b")]}]
        resolver = make_resolver(tag_index)

        resolver.get_subnets(["subnet-b"])
        second = resolver.get_subnets(["subnet-b"])

        assert second == ["subnet-002"]
        assert len(paged_ec2.calls_for("describe_subnets")) == 1

    def test_all_cached_makes_no_call(self, paged_ec2, cache, make_resolver, tag_index):
        cache.set(GET_SUBNETS_CACHE_NAME, "a", "subnet-1", 3600)

        assert make_resolver(tag_index).get_subnets(["a"]) == ["subnet-1"]
        assert paged_ec2.calls == []

    def test_subnet_without_name_tag_is_omitted(self, paged_ec2, make_resolver, tag_index):
        paged_ec2.pages["describe_subnets"] = [
            {"Subnets": [_subnet("subnet-1", "us-east-1a"), _subnet("subnet-2", "us-east-1b", "b")]}
        ]

        assert make_resolver(tag_index).get_subnets(["a", "b"]) == ["subnet-2"]

    def test_failure_carries_filters(self, paged_ec2, make_resolver, tag_index, make_client_error):
        paged_ec2.failures["describe_subnets"] = (0, make_client_error("UnauthorizedOperation"))

        with pytest.raises(TransportError) as exc_info:
            make_resolver(tag_index).get_subnets(["subnet-b"])

        assert "subnet-b" in str(exc_info.value)


class TestClusterSubnets:
    """cluster_subnets 테스트"""

    def test_invalid_scheme_before_network(self, paged_ec2, make_resolver, make_tag_index):
        index = make_tag_index()

        with pytest.raises(ValidationError):
            make_resolver(index).cluster_subnets("public")

        assert index.calls == 0
        assert paged_ec2.calls == []

    def test_one_subnet_per_az_first_seen_wins(self, paged_ec2, make_resolver, make_tag_index, make_subnet_arn):
        """같은 AZ면 먼저 발견된 서브넷만 채택"""
        index = make_tag_index(
            {
                make_subnet_arn("subnet-zzz"): PUBLIC,
                make_subnet_arn("subnet-aaa"): PUBLIC,
                make_subnet_arn("subnet-mmm"): PUBLIC,
            }
        )
        paged_ec2.pages["describe_subnets"] = [
            {
                "Subnets": [
                    _subnet("subnet-aaa", "us-east-1a"),
                    _subnet("subnet-mmm", "us-east-1b"),
                    _subnet("subnet-zzz", "us-east-1a"),
                ]
            }
        ]

        result = make_resolver(index).cluster_subnets("internet-facing")

        assert result == ["subnet-mmm", "subnet-zzz"]

    def test_result_is_sorted(self, paged_ec2, make_resolver, make_tag_index, make_subnet_arn):
        index = make_tag_index(
            {
                make_subnet_arn("subnet-c"): INTERNAL,
                make_subnet_arn("subnet-a"): INTERNAL,
                make_subnet_arn("subnet-b"): INTERNAL,
            }
        )
        paged_ec2.pages["describe_subnets"] = [
            {
                "Subnets": [
                    _subnet("subnet-c", "us-east-1c"),
                    _subnet("subnet-a", "us-east-1a"),
                    _subnet("subnet-b", "us-east-1b"),
                ]
            }
        ]

        assert make_resolver(index).cluster_subnets("internal") == ["subnet-a", "subnet-b", "subnet-c"]

    def test_only_subnets_with_role_tag(self, paged_ec2, make_resolver, make_tag_index, make_subnet_arn):
        """scheme에 맞는 role 태그가 있는 서브넷만 조회"""
        index = make_tag_index(
            {
                make_subnet_arn("subnet-int"): INTERNAL,
                make_subnet_arn("subnet-pub1"): PUBLIC,
                make_subnet_arn("subnet-pub2"): PUBLIC,
            }
        )
        paged_ec2.pages["describe_subnets"] = [
            {"Subnets": [_subnet("subnet-pub1", "us-east-1a"), _subnet("subnet-pub2", "us-east-1b")]}
        ]

        make_resolver(index).cluster_subnets("internet-facing")

        calls = paged_ec2.calls_for("describe_subnets")
        assert calls == [{"Filters": [{"Name": "subnet-id", "Values": ["subnet-pub1", "subnet-pub2"]}]}]

    def test_cached_subnets_skip_query(self, paged_ec2, cache, make_resolver, make_tag_index, make_subnet_arn):
        cache.set(CLUSTER_SUBNETS_CACHE_NAME, "subnet-a", Subnet("subnet-a", "us-east-1a"), 3600)
        index = make_tag_index(
            {
                make_subnet_arn("subnet-a"): PUBLIC,
                make_subnet_arn("subnet-b"): PUBLIC,
            }
        )
        paged_ec2.pages["describe_subnets"] = [{"Subnets": [_subnet("subnet-b", "us-east-1b")]}]

        result = make_resolver(index).cluster_subnets("internet-facing")

        assert result == ["subnet-a", "subnet-b"]
        assert paged_ec2.calls_for("describe_subnets") == [
            {"Filters": [{"Name": "subnet-id", "Values": ["subnet-b"]}]}
        ]

    def test_admitted_subnets_are_cached(self, paged_ec2, make_resolver, make_tag_index, make_subnet_arn):
        index = make_tag_index(
            {
                make_subnet_arn("subnet-a"): PUBLIC,
                make_subnet_arn("subnet-b"): PUBLIC,
            }
        )
        paged_ec2.pages["describe_subnets"] = [
            {"Subnets": [_subnet("subnet-a", "us-east-1a"), _subnet("subnet-b", "us-east-1b")]}
        ]
        resolver = make_resolver(index)

        first = resolver.cluster_subnets("internet-facing")
        second = resolver.cluster_subnets("internet-facing")

        assert first == second == ["subnet-a", "subnet-b"]
        assert len(paged_ec2.calls_for("describe_subnets")) == 1

    def test_fewer_than_two_azs_fails(self, paged_ec2, make_resolver, make_tag_index, make_subnet_arn):
        """AZ가 하나뿐이면 부분 결과를 담아 실패"""
        index = make_tag_index(
            {
                make_subnet_arn("subnet-a"): PUBLIC,
                make_subnet_arn("subnet-b"): PUBLIC,
            }
        )
        paged_ec2.pages["describe_subnets"] = [
            {"Subnets": [_subnet("subnet-a", "us-east-1a"), _subnet("subnet-b", "us-east-1a")]}
        ]

        with pytest.raises(ResourceLookupError) as exc_info:
            make_resolver(index).cluster_subnets("internet-facing")

        error = exc_info.value
        assert error.details["subnets"] == ["subnet-a"]
        assert "subnet-a" in str(error)
        assert "kubernetes.io/cluster/prod" in str(error)
        assert TAG_NAME_SUBNET_PUBLIC_ELB in str(error)

    def test_no_tagged_subnets_fails_without_query(self, paged_ec2, make_resolver, tag_index):
        with pytest.raises(ResourceLookupError) as exc_info:
            make_resolver(tag_index).cluster_subnets("internal")

        assert exc_info.value.details["subnets"] == []
        assert paged_ec2.calls == []
