import os
import shutil
import subprocess

import pytest

from ovbox.MANAGERS.model_importer import ModelImporter
from ovbox.MODELS.model_package import ImportOptions
from ovbox.RUNNERS.command_runner import CommandRunner
from ovbox.RUNNERS.container_runtime import DockerCliRuntime
from ovbox.REGISTRY.image_reference import ImageReference
from ovbox.exceptions import CommandFailedError, PreconditionError


@pytest.mark.skipif(os.name == 'nt', reason="uses POSIX echo")
def test_command_injection_attempt(tmp_path):
    """
    Shell operators in arguments are passed through literally, never interpreted.
    """
    runner = CommandRunner(working_dir=str(tmp_path))
    injected_file = tmp_path / "injected.txt"

    result = runner.run(["echo", "hello", ";", "touch", str(injected_file)])

    assert "; touch" in result.stdout
    assert not injected_file.exists(), "Command injection successful! Security vulnerability found."


def test_missing_program_is_precondition_error():
    runner = CommandRunner()
    with pytest.raises(PreconditionError):
        runner.run(["definitely-not-a-real-program-12345"])


@pytest.mark.skipif(os.name == 'nt', reason="uses POSIX false")
def test_failing_command_reports_exit_status():
    with pytest.raises(CommandFailedError) as excinfo:
        CommandRunner().run(["false"])
    assert excinfo.value.exit_code == 1
    assert excinfo.value.command_line == "false"


def test_image_reference_stays_one_token():
    """A hostile image name is a single argv element for docker."""

    class Recorder(CommandRunner):
        def __init__(self):
            super().__init__()
            self.argv = None

        def run(self, command, capture=True, check=True):
            self.argv = list(command)
            raise CommandFailedError(command, 1)

    recorder = Recorder()
    ref = ImageReference(name="x; rm -rf /", tag="v1")
    with pytest.raises(CommandFailedError):
        DockerCliRuntime(runner=recorder).build_image(ref, "Dockerfile", ".")
    assert "x; rm -rf /:v1" in recorder.argv


@pytest.mark.skipif(shutil.which("bash") is None, reason="needs bash")
def test_hostile_alias_and_dest_stay_literal(tmp_path, fake_runtime):
    """
    The in-container create script treats alias and destination as data.
    """
    alias = 'x"; touch pwned; echo "'
    dest = tmp_path / 'dest"; touch pwned; echo "'
    (dest / alias).mkdir(parents=True)

    package = tmp_path / "pkg" / "model.tar.gz"
    package.parent.mkdir()
    package.write_bytes(b"\x1f\x8b")
    (package.parent / "Modelfile").write_text("FROM model.tar.gz\n")

    # Stand-in ollama that records its arguments
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    args_log = tmp_path / "ollama-args.log"
    stub = bin_dir / "ollama"
    stub.write_text(f"#!/bin/sh\nprintf '[%s]\\n' \"$@\" >> '{args_log}'\n")
    stub.chmod(0o755)

    ModelImporter(fake_runtime).import_model(
        ImportOptions(tar_path=str(package), container="c", alias=alias, dest=str(dest))
    )
    script = fake_runtime.mutations()[-1][2][2]

    env = dict(os.environ, PATH=f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    result = subprocess.run(["bash", "-c", script], cwd=str(tmp_path), env=env,
                            capture_output=True, text=True)

    assert result.returncode == 0, result.stderr
    assert not list(tmp_path.rglob("pwned")), "Command injection successful! Security vulnerability found."
    assert f"[{alias}]" in args_log.read_text().splitlines()
