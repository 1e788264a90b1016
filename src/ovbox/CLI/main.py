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
Command Line Interface for ovbox.
"""
import functools
import os

import click
from pydantic import ValidationError

from ..BUILDERS.model_packager import ModelPackager
from ..MANAGERS.environment_manager import EnvironmentManager
from ..MANAGERS.lifecycle_manager import LifecycleManager
from ..MANAGERS.model_importer import ModelImporter
from ..MODELS.lifecycle_config import ENV_OVERRIDES, LifecycleConfig
from ..MODELS.model_package import (
    DEFAULT_IMPORT_DEST,
    DEFAULT_INFER_DEVICE,
    DEFAULT_NUM_CTX,
    DEFAULT_OUT_DIR,
    ImportOptions,
    PackOptions,
)
from ..REGISTRY.model_hub_client import ModelHubClient
from ..RUNNERS.container_runtime import DockerCliRuntime
from ..UTILS import console
from ..exceptions import OvboxError

ENV_FILES = ['.env']


def load_config(volume_name=None) -> LifecycleConfig:
    """Resolves the configuration from .env in the working directory and the process environment."""
    environ = EnvironmentManager(os.getcwd()).get_merged_environment(ENV_FILES)
    return LifecycleConfig.from_environment(environ, volume_name=volume_name)


def get_runtime(ctx):
    if ctx.obj.get('runtime') is None:
        ctx.obj['runtime'] = DockerCliRuntime()
    return ctx.obj['runtime']


def get_hub(ctx):
    if ctx.obj.get('hub') is None:
        ctx.obj['hub'] = ModelHubClient()
    return ctx.obj['hub']


def fail_fast(func):
    """
    Turns an OvboxError into an [ERROR] line on stderr and the error's exit status.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except OvboxError as e:
            console.error(e.message)
            exit_code = e.exit_code
        click.get_current_context().exit(exit_code)
    return wrapper


class OvboxGroup(click.Group):
    """Command group whose help lists the environment overrides and their current values."""

    def format_epilog(self, ctx, formatter):
        config = load_config()
        rows = [(env_key, f"(current: {getattr(config, field)})")
                for env_key, field in ENV_OVERRIDES.items()]
        rows.append(('DEVICES', f"(current: {','.join(config.devices) or 'none'})"))
        with formatter.section('Environment overrides'):
            formatter.write_dl(rows)
        super().format_epilog(ctx, formatter)


@click.group(cls=OvboxGroup,
             invoke_without_command=True,
             context_settings={'help_option_names': ['-h', '--help']})
@click.pass_context
def cli(ctx):
    """
    ovbox - OpenVINO Ollama container toolbox.

    Builds and runs the OpenVINO Ollama image and imports ModelScope
    models into a running container.
    """
    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.pass_context
@fail_fast
def status(ctx):
    """Show environment, Dockerfile, image presence, and containers using the image."""
    LifecycleManager(load_config(), get_runtime(ctx)).status()


@cli.command()
@click.option('--force', is_flag=True, help='Rebuild even if the image already exists.')
@click.option('--no-cache', is_flag=True, help='Build without using the cache.')
@click.pass_context
@fail_fast
def build(ctx, force, no_cache):
    """
    Build the image.

    Runs: docker build -t IMAGE_NAME:IMAGE_TAG -f DOCKERFILE CONTEXT_DIR
    """
    LifecycleManager(load_config(), get_runtime(ctx)).build(force=force, no_cache=no_cache)


@cli.command()
@click.argument('volume', required=False)
@click.option('--device', 'devices', multiple=True,
              help='Device to pass through (repeatable). Replaces the defaults.')
@click.option('--no-devices', is_flag=True, help='Do not pass through any device.')
@click.pass_context
@fail_fast
def run(ctx, volume, devices, no_devices):
    """
    Run an interactive container from the image.

    VOLUME is the named volume mounted at /root/.ollama (default: ollama-models).
    """
    config = load_config(volume_name=volume)
    if no_devices:
        config = config.model_copy(update={'devices': ()})
    elif devices:
        config = config.model_copy(update={'devices': tuple(devices)})
    LifecycleManager(config, get_runtime(ctx)).run_shell()


@cli.command('help')
@click.pass_context
def help_command(ctx):
    """Show this help."""
    click.echo(ctx.parent.get_help())


@cli.command()
@click.argument('model_id')
@click.option('--alias', help='Ollama model name (default: derived from the model id, lowercased).')
@click.option('--device', default=DEFAULT_INFER_DEVICE, show_default=True,
              help='OpenVINO inference device string.')
@click.option('--ctx', 'num_ctx', type=click.IntRange(min=1), default=DEFAULT_NUM_CTX,
              show_default=True, help='num_ctx parameter in the Modelfile.')
@click.option('--out-dir', default=DEFAULT_OUT_DIR, show_default=True,
              help='Directory to store downloaded files before tarring.')
@click.option('--force', '-f', is_flag=True,
              help='Overwrite existing download/tar/Modelfile if present.')
@click.pass_context
@fail_fast
def pack(ctx, model_id, alias, device, num_ctx, out_dir, force):
    """Download a ModelScope model and pack it with a Modelfile for Ollama."""
    if not model_id.strip():
        raise click.BadParameter('must not be empty', param_hint='MODEL_ID')
    try:
        options = PackOptions(model_id=model_id, alias=alias, device=device,
                              num_ctx=num_ctx, out_dir=out_dir, force=force)
    except ValidationError as e:
        raise click.BadParameter(e.errors()[0]['msg'], param_hint='MODEL_ID')
    ModelPackager(get_hub(ctx), base_dir=os.getcwd()).pack(options)


@cli.command('import')
@click.argument('tar_path')
@click.option('--container', help='Container name or id (default: auto-detect a running Ollama container).')
@click.option('--alias', help='Ollama model name (default: derived from the tar file name).')
@click.option('--dest', default=DEFAULT_IMPORT_DEST, show_default=True,
              help='Destination directory inside the container.')
@click.option('--run', 'run_test', is_flag=True, help='Send a quick test prompt after importing.')
@click.pass_context
@fail_fast
def import_model(ctx, tar_path, container, alias, dest, run_test):
    """Copy a packed model into a running container and register it with ollama."""
    options = ImportOptions(tar_path=tar_path, container=container, alias=alias,
                            dest=dest, run=run_test)
    ModelImporter(get_runtime(ctx)).import_model(options)


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={}, prog_name='ovbox')


if __name__ == '__main__':
    main()
