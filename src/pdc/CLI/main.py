# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for PDC.
"""
import click
from pydantic import ValidationError
from ..CONFIG.settings import Settings
from ..BUILDERS.dockerfile_renderer import DockerfileRenderer
from ..BUILDERS.image_builder import ImageBuilder
from ..CONVERTERS.to_shell_script import LaunchScriptConverter
from ..MANAGERS.container_launcher import ContainerLauncher
from ..MANAGERS.network_manager import NetworkManager
from ..MODELS.container_spec import ProjectLayout
from ..PARSERS.dockerfile_parser import DockerfileParser
from ..RUNNERS.docker_runner import DockerError


@click.group()
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='YAML settings file')
@click.pass_context
def cli(ctx, config_path):
    """
    PDC - Patoka Dev Container.

    Builds the patoka development image and launches the dev container.
    """
    ctx.ensure_object(dict)
    try:
        ctx.obj['settings'] = Settings.load(config_path)
    except (ValueError, ValidationError) as e:
        raise click.ClickException(f"Invalid settings: {e}")


def _fail(ctx, error: DockerError):
    click.echo(f"Error: {error}", err=True)
    ctx.exit(error.returncode or 1)


@cli.command()
@click.option('--out', '-o', default='.', help='Build context directory')
@click.pass_context
def render(ctx, out):
    """Write the Dockerfile for the dev image."""
    settings = ctx.obj['settings']
    DockerfileRenderer().write(settings.image, out)


@cli.command()
@click.option('--node-version', default=None, help='Override the pinned Node.js version')
@click.option('--context', 'context_dir', default=None, help='Keep the build context in this directory')
@click.pass_context
def build(ctx, node_version, context_dir):
    """Build the dev image."""
    settings = ctx.obj['settings']
    try:
        reference = ImageBuilder().build(settings.image, node_version=node_version,
                                         context_dir=context_dir)
    except DockerError as e:
        _fail(ctx, e)
        return
    click.echo(f"Image {reference} built.")


@cli.command()
@click.option('--node-version', default=None, help='Node.js version the image should report')
@click.pass_context
def verify(ctx, node_version):
    """Check the toolchains inside the dev image."""
    settings = ctx.obj['settings']
    expected = node_version or settings.image.node.node_version
    try:
        report = ImageBuilder().verify(settings.image.reference, expected)
    except DockerError as e:
        _fail(ctx, e)
        return

    click.echo(f"{'TOOL':10} {'VERSION':40}")
    click.echo("-" * 50)
    for tool, version in report.versions.items():
        click.echo(f"{tool:10} {version:40}")


@cli.command()
@click.argument('host_path')
@click.pass_context
def launch(ctx, host_path):
    """Start the interactive dev container with HOST_PATH mounted."""
    settings = ctx.obj['settings']
    launcher = ContainerLauncher(settings.container)
    try:
        code = launcher.launch(host_path)
    except DockerError as e:
        _fail(ctx, e)
        return
    ctx.exit(code)


@cli.command()
@click.option('--out', '-o', default='.', help='Output directory')
@click.pass_context
def script(ctx, out):
    """Write a standalone launch script."""
    settings = ctx.obj['settings']
    LaunchScriptConverter(settings.container, projects=settings.projects).convert(out)


@cli.command()
@click.argument('host_path', type=click.Path(file_okay=False))
@click.pass_context
def check(ctx, host_path):
    """Report what a launch with HOST_PATH is likely to trip over."""
    settings = ctx.obj['settings']
    layout = ProjectLayout(host_path=host_path, projects=settings.projects)

    for name in layout.missing():
        click.echo(f"warning: project directory {name} not found under {host_path}")

    try:
        if not NetworkManager().exists(settings.network.name):
            click.echo(f"warning: network {settings.network.name} does not exist")
        if not ImageBuilder().exists(settings.container.image):
            click.echo(f"warning: image {settings.container.image} not built")
    except DockerError as e:
        _fail(ctx, e)
        return

    click.echo("Check complete.")


@cli.group()
def network():
    """Manage the dev network."""


@network.command('create')
@click.pass_context
def network_create(ctx):
    """Create the dev network if it is missing."""
    settings = ctx.obj['settings']
    try:
        created = NetworkManager().create(settings.network)
    except DockerError as e:
        _fail(ctx, e)
        return
    if created:
        click.echo(f"Network {settings.network.name} created.")
    else:
        click.echo(f"Network {settings.network.name} already exists.")


@cli.command()
@click.pass_context
def inspect(ctx):
    """Show build arguments and environment of the dev image."""
    settings = ctx.obj['settings']
    ast = DockerfileParser().parse_from_string(DockerfileRenderer().render(settings.image))

    click.echo(f"FROM {ast.base_image()}")
    for name, default in ast.build_args().items():
        click.echo(f"ARG {name}={default if default is not None else ''}")
    for name, value in ast.env().items():
        click.echo(f"ENV {name}={value}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
