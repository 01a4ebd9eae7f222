"""
albnet/inventory/types.py - Resource snapshot dataclasses

Read-only snapshots built from boto3 describe responses. They are never
mutated, only replaced by a fresher fetch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

Tags = tuple[tuple[str, str], ...]

# EC2 instance state codes (low byte of State.Code)
INSTANCE_STATE_RUNNING = 16


def parse_tags(raw: list[dict[str, Any]] | None) -> Tags:
    """[{"Key": k, "Value": v}, ...] -> ((k, v), ...) keeping API order"""
    return tuple((tag.get("Key", ""), tag.get("Value", "")) for tag in raw or [])


def get_tag(tags: Tags, key: str) -> str | None:
    """First value for key, or None when the tag is absent"""
    for tag_key, value in tags:
        if tag_key == key:
            return value
    return None


@dataclass(frozen=True)
class Subnet:
    """Subnet information"""

    subnet_id: str
    availability_zone: str
    vpc_id: str = ""
    cidr_block: str = ""
    tags: Tags = field(default_factory=tuple)

    @property
    def name(self) -> str | None:
        return get_tag(self.tags, "Name")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Subnet:
        return cls(
            subnet_id=data.get("SubnetId", ""),
            availability_zone=data.get("AvailabilityZone", ""),
            vpc_id=data.get("VpcId", ""),
            cidr_block=data.get("CidrBlock", ""),
            tags=parse_tags(data.get("Tags")),
        )


@dataclass(frozen=True)
class SecurityGroup:
    """Security Group information"""

    group_id: str
    group_name: str
    vpc_id: str
    description: str = ""
    tags: Tags = field(default_factory=tuple)

    @property
    def name(self) -> str | None:
        """Value of the Name tag (not the group name)"""
        return get_tag(self.tags, "Name")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> SecurityGroup:
        return cls(
            group_id=data.get("GroupId", ""),
            group_name=data.get("GroupName", ""),
            vpc_id=data.get("VpcId", ""),
            description=data.get("Description", ""),
            tags=parse_tags(data.get("Tags")),
        )


@dataclass(frozen=True)
class VPC:
    """VPC information"""

    vpc_id: str
    cidr_block: str = ""
    state: str = ""
    is_default: bool = False
    tags: Tags = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> VPC:
        return cls(
            vpc_id=data.get("VpcId", ""),
            cidr_block=data.get("CidrBlock", ""),
            state=data.get("State", ""),
            is_default=data.get("IsDefault", False),
            tags=parse_tags(data.get("Tags")),
        )


@dataclass(frozen=True)
class Instance:
    """EC2 Instance information"""

    instance_id: str
    vpc_id: str
    state_code: int
    state_name: str = ""
    subnet_id: str = ""
    availability_zone: str = ""
    tags: Tags = field(default_factory=tuple)

    @property
    def is_running(self) -> bool:
        return self.state_code & 0xFF == INSTANCE_STATE_RUNNING

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Instance:
        state = data.get("State", {})
        return cls(
            instance_id=data.get("InstanceId", ""),
            vpc_id=data.get("VpcId") or "",
            state_code=state.get("Code", 0),
            state_name=state.get("Name", ""),
            subnet_id=data.get("SubnetId", ""),
            availability_zone=data.get("Placement", {}).get("AvailabilityZone", ""),
            tags=parse_tags(data.get("Tags")),
        )


@dataclass(frozen=True)
class InstanceStatus:
    """describe_instance_status entry"""

    instance_id: str
    state_code: int
    state_name: str = ""

    @property
    def is_running(self) -> bool:
        # The high byte of the state code is internal to EC2
        return self.state_code & 0xFF == INSTANCE_STATE_RUNNING

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> InstanceStatus:
        state = data.get("InstanceState", {})
        return cls(
            instance_id=data.get("InstanceId", ""),
            state_code=state.get("Code", 0),
            state_name=state.get("Name", ""),
        )
