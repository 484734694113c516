"""Tests for profile serialization in labspace.models."""

from __future__ import annotations

import json

import pytest

from labspace.errors import InvalidInput
from labspace.models import profile_from_dict, profile_to_dict
from tests._fixtures.listing_builder import ListingBuilder


def test_detected_profile_survives_json_round_trip(listing_builder: ListingBuilder) -> None:
    listing_builder.write(
        {
            "package.json": '{"dependencies": {"express": "4"}, "scripts": {"start": "node ."}}',
            "pom.xml": "<project/>",
        }
    )
    listing_builder.touch("server.js", "test/app.test.js")
    profile = listing_builder.detect()

    payload = json.loads(json.dumps(profile_to_dict(profile)))

    assert payload["owner"] == "octo"
    assert payload["tech_stack"][0]["dependencies"] == ["express"]
    assert payload["tech_stack"][1]["build_tool"] == "Maven"
    assert profile_from_dict(payload) == profile


def test_ports_are_always_derived_from_services() -> None:
    profile = profile_from_dict(
        {
            "owner": "octo",
            "name": "demo",
            "services": [
                {"name": "Database", "type": "postgres", "port": 5432},
                {"name": "Redis", "type": "redis", "port": 6379},
            ],
            "ports": [22, "eighty"],
        }
    )

    assert profile.ports == (5432, 6379)
    assert profile.tech_stack == ()


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {"name": "demo"},
        {"owner": "octo", "name": ""},
        {"owner": "octo", "name": "demo", "tech_stack": "Node.js"},
        {"owner": "octo", "name": "demo", "services": [{"name": "Redis"}]},
        {"owner": "octo", "name": "demo", "services": [{"name": "x", "type": "y", "port": "n/a"}]},
        {"owner": "octo", "name": 'demo"; touch pwned; echo "'},
        {"owner": "oc to", "name": "demo"},
        {"owner": "octo", "name": "demo\nrm -rf /"},
    ],
)
def test_malformed_payloads_raise_invalid_input(payload) -> None:
    with pytest.raises(InvalidInput):
        profile_from_dict(payload)
