"""The compose file, guide and startup script agree on the application port."""

from __future__ import annotations

import re
from datetime import datetime

import pytest
import yaml

from labspace.models import ServiceEntry, TechStackEntry
from labspace.synthesis import resolve_app_port, synthesize
from tests._fixtures.listing_builder import ListingBuilder, make_profile

_URL_PORT = re.compile(r"http://localhost:(\d+)")


def _last_echo(script: str) -> str:
    return [line for line in script.splitlines() if line.startswith("echo ")][-1]


def _ports(profile, generated_at: datetime) -> tuple[set[int], set[int], int]:
    files = {a.path: a.content for a in synthesize(profile, generated_at=generated_at)}
    app = yaml.safe_load(files["docker-compose.yml"])["services"]["app"]
    compose_ports = {int(mapping.split(":")[0]) for mapping in app["ports"]}
    guide_ports = {int(port) for port in _URL_PORT.findall(files["LABSPACE.md"])}
    match = _URL_PORT.search(_last_echo(files["scripts/start.sh"]))
    assert match is not None
    return compose_ports, guide_ports, int(match.group(1))


@pytest.mark.parametrize(
    "services",
    [
        [],
        [ServiceEntry(name="Web Server", type="web", port=3000)],
        [ServiceEntry(name="Web Server", type="web", port=8080)],
        [
            ServiceEntry(name="Database", type="postgres", port=5432),
            ServiceEntry(name="Redis", type="redis", port=6379),
        ],
        [
            ServiceEntry(name="Database", type="postgres", port=5432),
            ServiceEntry(name="Web Server", type="web", port=4567),
        ],
    ],
)
def test_application_port_is_consistent(services, generated_at: datetime) -> None:
    ruby = TechStackEntry(name="Ruby", icon="💎", version="3.2")
    profile = make_profile(tech_stack=[ruby], services=services)

    compose_ports, guide_ports, script_port = _ports(profile, generated_at)
    expected = resolve_app_port(profile)

    assert compose_ports == {expected}
    assert guide_ports == {expected}
    assert script_port == expected


def test_custom_web_port_flows_into_run_commands(generated_at: datetime) -> None:
    ruby = TechStackEntry(name="Ruby", icon="💎", version="3.2")
    profile = make_profile(
        tech_stack=[ruby], services=[ServiceEntry(name="Web Server", type="web", port=4567)]
    )

    script = synthesize(profile, generated_at=generated_at)[-1].content

    assert "--port 4567" in script
    assert _last_echo(script) == "echo '🌐 Access your application at: http://localhost:4567'"


def test_detected_profile_round_trip_keeps_ports_consistent(
    listing_builder: ListingBuilder, generated_at: datetime
) -> None:
    listing_builder.write({"requirements.txt": "flask\nredis\n"})
    listing_builder.touch("app.py", "infra/redis.conf", "db/schema.sql")

    profile = listing_builder.detect()
    compose_ports, guide_ports, script_port = _ports(profile, generated_at)

    assert profile.ports == (5432, 6379, 3000)
    assert compose_ports == guide_ports == {script_port} == {3000}


def test_default_port_without_web_service() -> None:
    assert resolve_app_port(make_profile()) == 3000
