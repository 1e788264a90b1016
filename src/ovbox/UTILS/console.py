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
Console output helpers. Informational lines go to stdout,
warnings and errors to stderr.
"""
import click


def info(message: str = ""):
    click.echo(f"[INFO] {message}")


def warn(message: str):
    click.echo(f"[WARN] {message}", err=True)


def error(message: str):
    click.echo(f"[ERROR] {message}", err=True)


def detail(label: str, value):
    """Prints an indented 'Label: value' line, labels padded to one column."""
    click.echo(f"  {label + ':':<12}{value}")


def blank():
    click.echo()
