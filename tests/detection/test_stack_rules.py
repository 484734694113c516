"""Stack rule behaviour across ecosystems."""

from __future__ import annotations

from labspace.detection import detect, detect_stacks
from labspace.detection.stacks import StackRule
from labspace.models import FileEntry
from tests._fixtures.listing_builder import ListingBuilder


def _names(profile) -> list[str]:
    return [entry.name for entry in profile.tech_stack]


def test_node_manifest_yields_runtime_dependency_and_defaults(
    listing_builder: ListingBuilder,
) -> None:
    listing_builder.write({"package.json": '{"dependencies": {"express": "^4"}}'})

    profile = listing_builder.detect()

    assert _names(profile) == ["Node.js"]
    node = profile.tech_stack[0]
    assert node.dependencies == ("express",)
    assert node.dev_dependencies == ()
    assert node.version == ">=16.0.0"
    assert profile.services == ()
    assert profile.ports == ()
    assert profile.estimated_setup_time == "1-2 minutes"


def test_node_dependency_lists_are_truncated_in_manifest_order(
    listing_builder: ListingBuilder,
) -> None:
    runtime = ", ".join(f'"dep{i}": "1"' for i in range(12))
    dev = ", ".join(f'"dev{i}": "1"' for i in range(9))
    listing_builder.write(
        {
            "package.json": (
                '{"engines": {"node": ">=20"}, '
                f'"dependencies": {{{runtime}}}, "devDependencies": {{{dev}}}, '
                '"scripts": {"dev": "vite", "build": "vite build"}}'
            )
        }
    )

    node = listing_builder.detect().tech_stack[0]

    assert node.version == ">=20"
    assert node.dependencies == tuple(f"dep{i}" for i in range(8))
    assert node.dev_dependencies == tuple(f"dev{i}" for i in range(5))
    assert node.scripts == {"dev": "vite", "build": "vite build"}


def test_malformed_package_json_degrades_to_defaults(listing_builder: ListingBuilder) -> None:
    listing_builder.write({"package.json": "{not json"})

    node = listing_builder.detect().tech_stack[0]

    assert node.name == "Node.js"
    assert node.version == ">=16.0.0"
    assert node.dependencies == ()
    assert node.scripts == {}


def test_requirements_strip_specifiers_and_comments(listing_builder: ListingBuilder) -> None:
    listing_builder.write(
        {
            "requirements.txt": """
            # web stack
            fastapi==0.111
            uvicorn[standard]>=0.27
            -r dev.txt
            pydantic ~= 2.0
            requests; python_version > "3.8"
            """
        }
    )

    python = listing_builder.detect().tech_stack[0]

    assert python.name == "Python"
    assert python.version == "3.9+"
    assert python.dependencies == ("fastapi", "uvicorn", "pydantic", "requests")


def test_go_version_is_read_from_directive(listing_builder: ListingBuilder) -> None:
    listing_builder.write({"go.mod": "module example.com/app\n\ngo 1.21\n"})

    go = listing_builder.detect().tech_stack[0]

    assert go.name == "Go"
    assert go.version == "1.21"


def test_go_without_directive_reports_latest(listing_builder: ListingBuilder) -> None:
    listing_builder.write({"go.mod": "module example.com/app\n"})

    assert listing_builder.detect().tech_stack[0].version == "latest"


def test_ruby_version_takes_numeric_token(listing_builder: ListingBuilder) -> None:
    listing_builder.write({"Gemfile": "source 'https://rubygems.org'\nruby '~> 3.2.2'\n"})

    ruby = listing_builder.detect().tech_stack[0]

    assert ruby.name == "Ruby"
    assert ruby.version == "3.2.2"


def test_java_build_tool_prefers_maven(listing_builder: ListingBuilder) -> None:
    listing_builder.write({"pom.xml": "<project/>", "build.gradle": "plugins {}"})

    java = listing_builder.detect().tech_stack[0]

    assert java.name == "Java"
    assert java.build_tool == "Maven"


def test_gradle_only_java_project(listing_builder: ListingBuilder) -> None:
    listing_builder.write({"build.gradle": "plugins {}"})

    assert listing_builder.detect().tech_stack[0].build_tool == "Gradle"


def test_extension_only_signals_detect_php_and_dotnet(listing_builder: ListingBuilder) -> None:
    listing_builder.touch("web/index.php", "src/Api/Api.csproj")

    assert _names(listing_builder.detect()) == ["PHP", ".NET"]


def test_nested_dockerfile_is_not_a_container_signal(listing_builder: ListingBuilder) -> None:
    listing_builder.touch("infra/Dockerfile")

    profile = listing_builder.detect()

    assert "Docker" not in _names(profile)
    assert profile.has_containerfile is False


def test_polyglot_repository_keeps_detector_order(listing_builder: ListingBuilder) -> None:
    listing_builder.write(
        {
            "pubspec.yaml": "name: demo\n",
            "Cargo.toml": "[package]\nname = 'demo'\n",
            "composer.json": "{}",
            "Gemfile": "source 'https://rubygems.org'\n",
            "go.mod": "go 1.22\n",
            "pom.xml": "<project/>",
            "Dockerfile": "FROM scratch\n",
            "requirements.txt": "flask\n",
            "package.json": "{}",
        }
    )
    listing_builder.touch("Program.cs")

    profile = listing_builder.detect()

    assert _names(profile) == [
        "Node.js",
        "Python",
        "Docker",
        "Java",
        "Go",
        "Ruby",
        "PHP",
        "Rust",
        ".NET",
        "Dart/Flutter",
    ]
    assert profile.has_containerfile is True


def test_manifest_absent_from_set_is_skipped_even_if_listed() -> None:
    listing = [FileEntry(path="package.json", name="package.json", size=10)]

    profile = detect(listing, {})

    assert profile.tech_stack == ()


def test_failing_builder_degrades_to_rule_defaults() -> None:
    def _explode(files, manifests):
        raise KeyError("go.mod")

    rules = (
        StackRule("Go", "🐹", "latest", lambda files, manifests: True, _explode),
        StackRule("Rust", "🦀", "latest", lambda files, manifests: True),
    )

    entries = detect_stacks([], {}, rules)

    assert [(entry.name, entry.icon, entry.version) for entry in entries] == [
        ("Go", "🐹", "latest"),
        ("Rust", "🦀", "latest"),
    ]
    assert entries[0].dependencies == ()
