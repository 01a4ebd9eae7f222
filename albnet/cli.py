"""
albnet/cli.py - 진단용 CLI

리소스 해석 결과를 콘솔에서 확인합니다.

Usage:
    albnet vpc-id
    albnet subnets --scheme internet-facing --cluster my-cluster
    albnet subnets-by-name public-a public-b
    albnet security-groups alb-sg
    albnet node-health i-0123456789abcdef0
    albnet status
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import click
from click import Context

from albnet import __version__
from albnet.config import ResolverSettings
from albnet.console import console, get_logger, print_error, print_success
from albnet.exceptions import AlbNetError
from albnet.inventory import NetworkResolver
from albnet.inventory.subnets import SCHEME_INTERNAL, SCHEME_INTERNET_FACING


def _resolver(ctx: Context) -> NetworkResolver:
    """컨텍스트에 저장된 resolver 반환 (첫 호출 시 생성)"""
    if "resolver" not in ctx.obj:
        import boto3

        settings: ResolverSettings = ctx.obj["settings"]
        ctx.obj["resolver"] = NetworkResolver.from_session(boto3.Session(region_name=settings.region), settings)
    resolver: NetworkResolver = ctx.obj["resolver"]
    return resolver


def _run(fn: Callable[[], Any], as_json: bool = False) -> Any:
    """resolver 호출 실행, AlbNetError는 메시지 출력 후 종료 코드 1"""
    try:
        result = fn()
    except AlbNetError as e:
        if as_json:
            click.echo(json.dumps(e.to_dict(), ensure_ascii=False, default=str))
        else:
            print_error(str(e))
        raise SystemExit(1) from None
    return result


def _print_ids(ids: list[str], as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(ids))
        return
    if not ids:
        console.print("[dim](none)[/dim]")
    for resource_id in ids:
        console.print(resource_id)


@click.group()
@click.version_option(__version__, prog_name="albnet")
@click.option("-r", "--region", default=None, help="AWS 리전 (기본: 환경 변수/세션 기본값)")
@click.option("--vpc-id", default=None, help="VPC ID 오버라이드 (AWS_VPC_ID)")
@click.option("--cluster", "cluster_name", default=None, help="클러스터 이름 (ALBNET_CLUSTER_NAME)")
@click.option("-v", "--verbose", is_flag=True, help="디버그 로그 출력")
@click.pass_context
def cli(
    ctx: Context,
    region: str | None,
    vpc_id: str | None,
    cluster_name: str | None,
    verbose: bool,
) -> None:
    """ALB 네트워크 리소스 해석 도구"""
    get_logger(level=logging.DEBUG if verbose else logging.WARNING)

    settings = ResolverSettings.from_env()
    if region:
        settings.region = region
    if vpc_id:
        settings.vpc_id = vpc_id
    if cluster_name:
        settings.cluster_name = cluster_name

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command("vpc-id")
@click.pass_context
def vpc_id_command(ctx: Context) -> None:
    """현재 프로세스가 속한 VPC ID"""
    console.print(_run(lambda: _resolver(ctx).get_vpc_id()))


@cli.command("subnets")
@click.option(
    "-s",
    "--scheme",
    type=click.Choice([SCHEME_INTERNAL, SCHEME_INTERNET_FACING]),
    default=SCHEME_INTERNET_FACING,
    show_default=True,
)
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
@click.pass_context
def subnets_command(ctx: Context, scheme: str, as_json: bool) -> None:
    """클러스터 태그 서브넷 (AZ당 1개)"""
    _print_ids(_run(lambda: _resolver(ctx).cluster_subnets(scheme), as_json), as_json)


@cli.command("subnets-by-name")
@click.argument("names", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
@click.pass_context
def subnets_by_name_command(ctx: Context, names: tuple[str, ...], as_json: bool) -> None:
    """Name 태그로 서브넷 ID 조회"""
    _print_ids(_run(lambda: _resolver(ctx).get_subnets(names), as_json), as_json)


@cli.command("security-groups")
@click.argument("names", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
@click.pass_context
def security_groups_command(ctx: Context, names: tuple[str, ...], as_json: bool) -> None:
    """Name 태그로 보안 그룹 ID 조회"""
    _print_ids(_run(lambda: _resolver(ctx).get_security_groups(names), as_json), as_json)


@cli.command("node-health")
@click.argument("instance_id")
@click.pass_context
def node_health_command(ctx: Context, instance_id: str) -> None:
    """인스턴스 running 여부 (종료 코드 0: healthy, 2: unhealthy)"""
    healthy = _run(lambda: _resolver(ctx).is_node_healthy(instance_id))
    if healthy:
        print_success(f"{instance_id} healthy")
        return
    print_error(f"{instance_id} not healthy")
    raise SystemExit(2)


@cli.command("status")
@click.pass_context
def status_command(ctx: Context) -> None:
    """EC2 API 연결 확인"""
    _run(lambda: _resolver(ctx).status())
    print_success("EC2 API reachable")


def main() -> None:
    """albnet 콘솔 스크립트 진입점"""
    cli()


if __name__ == "__main__":
    main()
