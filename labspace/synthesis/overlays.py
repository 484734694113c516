"""Per-stack overlay records consulted by every generator.

The lookup is keyed by stack name. Generators walk the profile's stacks in
order and apply each overlay in turn, so later stacks win on conflicting
settings keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from ..detection import stacks
from ..models import TechStackEntry


@dataclass(frozen=True)
class StackOverlay:
    """Everything the generators need to know about one ecosystem."""

    label: str
    manifest: Optional[str] = None
    install_command: Optional[str] = None
    run_commands: Tuple[str, ...] = ()
    script_commands: Mapping[str, str] = field(default_factory=dict)
    test_command: Optional[str] = None
    guard: Optional[str] = None
    extensions: Tuple[str, ...] = ()
    container_extensions: Tuple[str, ...] = ()
    settings: Mapping[str, object] = field(default_factory=dict)
    variants: Mapping[str, "StackOverlay"] = field(default_factory=dict)

    def guard_expression(self) -> Optional[str]:
        if self.guard:
            return self.guard
        if self.manifest:
            return f'[ -f "{self.manifest}" ]'
        return None

    def run_command_for(self, entry: TechStackEntry, port: int) -> Optional[str]:
        """Prefer a declared script, else chain the fallback commands."""
        for script, command in self.script_commands.items():
            if script in entry.scripts:
                return command.format(port=port)
        if not self.run_commands:
            return None
        return " || ".join(command.format(port=port) for command in self.run_commands)


_JAVA_EXTENSIONS = ("redhat.java", "vscjava.vscode-java-pack")
_JAVA_SETTINGS = {"java.configuration.updateBuildConfiguration": "automatic"}

OVERLAYS: Dict[str, StackOverlay] = {
    stacks.NODE: StackOverlay(
        label="Node.js",
        manifest=stacks.PACKAGE_JSON,
        install_command="npm install",
        run_commands=("node index.js", "node server.js", "node app.js"),
        script_commands={"dev": "npm run dev", "start": "npm start"},
        test_command="npm test",
        extensions=(
            "ms-vscode.vscode-node-debug2",
            "esbenp.prettier-vscode",
            "ms-vscode.vscode-typescript-next",
        ),
        container_extensions=("ms-vscode.vscode-typescript-next", "esbenp.prettier-vscode"),
        settings={
            "typescript.preferences.quoteStyle": "single",
            "javascript.preferences.quoteStyle": "single",
        },
    ),
    stacks.PYTHON: StackOverlay(
        label="Python",
        manifest=stacks.REQUIREMENTS_TXT,
        install_command="pip install -r requirements.txt",
        run_commands=("python app.py", "python main.py", "python server.py"),
        test_command="python -m pytest",
        extensions=("ms-python.python", "ms-python.flake8"),
        container_extensions=("ms-python.python",),
        settings={
            "python.defaultInterpreterPath": "/usr/local/bin/python",
            "python.formatting.provider": "black",
        },
    ),
    stacks.DOCKER: StackOverlay(
        label="Docker",
        extensions=("ms-azuretools.vscode-docker",),
        container_extensions=("ms-azuretools.vscode-docker",),
    ),
    stacks.JAVA: StackOverlay(
        label="Java",
        extensions=_JAVA_EXTENSIONS,
        container_extensions=_JAVA_EXTENSIONS,
        settings=_JAVA_SETTINGS,
        variants={
            "Maven": StackOverlay(
                label="Java (Maven)",
                manifest=stacks.POM_XML,
                install_command="mvn dependency:resolve",
                run_commands=("mvn spring-boot:run", "mvn exec:java"),
                test_command="mvn test",
                extensions=_JAVA_EXTENSIONS,
                container_extensions=_JAVA_EXTENSIONS,
                settings=_JAVA_SETTINGS,
            ),
            "Gradle": StackOverlay(
                label="Java (Gradle)",
                manifest=stacks.BUILD_GRADLE,
                install_command="gradle dependencies",
                run_commands=("gradle bootRun", "gradle run"),
                test_command="gradle test",
                extensions=_JAVA_EXTENSIONS,
                container_extensions=_JAVA_EXTENSIONS,
                settings=_JAVA_SETTINGS,
            ),
        },
    ),
    stacks.GO: StackOverlay(
        label="Go",
        manifest=stacks.GO_MOD,
        install_command="go mod tidy",
        run_commands=("go run .",),
        test_command="go test ./...",
        extensions=("golang.go",),
        container_extensions=("golang.go",),
        settings={"go.toolsManagement.autoUpdate": True},
    ),
    stacks.RUBY: StackOverlay(
        label="Ruby",
        manifest=stacks.GEMFILE,
        install_command="bundle install",
        run_commands=("bundle exec rackup --host 0.0.0.0 --port {port}", "ruby app.rb"),
        test_command="bundle exec rake test",
        extensions=("Shopify.ruby-lsp",),
        container_extensions=("Shopify.ruby-lsp",),
    ),
    stacks.PHP: StackOverlay(
        label="PHP",
        manifest=stacks.COMPOSER_JSON,
        install_command="composer install",
        run_commands=("php -S 0.0.0.0:{port}",),
        test_command="vendor/bin/phpunit",
        extensions=("bmewburn.vscode-intelephense-client",),
        container_extensions=("bmewburn.vscode-intelephense-client",),
    ),
    stacks.RUST: StackOverlay(
        label="Rust",
        manifest=stacks.CARGO_TOML,
        install_command="cargo fetch",
        run_commands=("cargo run",),
        test_command="cargo test",
        extensions=("rust-lang.rust-analyzer",),
        container_extensions=("rust-lang.rust-analyzer",),
        settings={"rust-analyzer.check.command": "clippy"},
    ),
    stacks.DOTNET: StackOverlay(
        label=".NET",
        install_command="dotnet restore",
        run_commands=("dotnet run",),
        test_command="dotnet test",
        guard="ls *.sln *.csproj *.fsproj >/dev/null 2>&1",
        extensions=("ms-dotnettools.csharp",),
        container_extensions=("ms-dotnettools.csharp",),
    ),
    stacks.DART: StackOverlay(
        label="Dart/Flutter",
        manifest=stacks.PUBSPEC_YAML,
        install_command="dart pub get",
        run_commands=("dart run",),
        test_command="dart test",
        extensions=("Dart-Code.dart-code", "Dart-Code.flutter"),
        container_extensions=("Dart-Code.dart-code",),
    ),
}


def resolve_overlay(entry: TechStackEntry) -> Optional[StackOverlay]:
    """Return the overlay for ``entry``, narrowed to its build tool when known."""
    overlay = OVERLAYS.get(entry.name)
    if overlay is None:
        return None
    if entry.build_tool and entry.build_tool in overlay.variants:
        return overlay.variants[entry.build_tool]
    if overlay.variants and entry.build_tool is None:
        # Without a build tool the first variant is the conventional default.
        return next(iter(overlay.variants.values()))
    return overlay


__all__ = ["OVERLAYS", "StackOverlay", "resolve_overlay"]
