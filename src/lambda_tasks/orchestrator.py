"""The fixed lifecycle of a Lambda target: clean, build, npm, zip, upload."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Union

from . import output
from .builders.compiler import PythonCompiler
from .builders.installer import MANIFEST, PipInstaller
from .config import ExecutionMode, TargetConfig, resolve
from .errors import CompileError, FunctionNotFoundError, PlatformError
from .exporters.zip import ZipExporter
from .local_server import LocalRunner
from .remote import LambdaPlatformClient
from .scaffold import scaffold_target
from .tasks import TaskGraph

ENTRY_MODULE = "handler.py"
DIST_DIR = "dist"

# Operations shown by 'lambda' and exposed on the command line.
OPERATIONS: Dict[str, str] = {
    "init": "set up the directory with a handler, requirements and lambda-config.yaml",
    "run": "run the function behind a local HTTP server",
    "clean": "remove the dist directory",
    "build": "compile the source tree into dist/<name>",
    "npm": "install requirements.txt into dist/<name>",
    "zip": "build, npm, then archive dist/<name> into dist/<name>.zip",
    "lint": "report syntax errors without packaging",
    "package": "clean, then zip",
    "upload": "upload dist/<name>.zip to AWS Lambda",
    "deploy": "package, then upload",
    "info": "display info about the deployed function",
}


def print_operations() -> None:
    output.echo("the following tasks are available:")
    for name, description in OPERATIONS.items():
        output.echo(f"    lambda-tasks {name} - {description}")


class Orchestrator:
    """
    Registers the lifecycle tasks for one target directory.

    Collaborators default to the real implementations; tests pass their own.
    Unless check_entry is False, a target without an entry module terminates
    the process before any task is registered.
    """

    def __init__(
        self,
        target_dir: Union[str, Path],
        mode: ExecutionMode = ExecutionMode.DEVELOP,
        compiler=None,
        installer=None,
        archiver=None,
        platform_client=None,
        local_runner=None,
        check_entry: bool = True,
    ):
        self.target_dir = Path(target_dir).resolve()
        self.name = self.target_dir.name
        self.mode = mode
        self.entry_module = self.target_dir / ENTRY_MODULE
        self.dist_root = self.target_dir / DIST_DIR
        self.bundle_dir = self.dist_root / self.name
        self.artifact = self.dist_root / f"{self.name}.zip"

        self.config: TargetConfig = resolve(self.target_dir, mode)

        if check_entry and not self.entry_module.is_file():
            output.fatal(f"{self.entry_module} does not exist")

        self.compiler = compiler or PythonCompiler()
        self.installer = installer or PipInstaller()
        self.archiver = archiver or ZipExporter()
        self.platform = platform_client or LambdaPlatformClient(self.config)
        self.local_runner = local_runner or LocalRunner()

        self.graph = TaskGraph()
        self._register_tasks()

    def _register_tasks(self) -> None:
        g = self.graph
        g.register("clean", body=self.clean)
        g.register("compile:release", body=self.compile_release)
        g.register("compile:dev", body=self.compile_dev)
        g.register("build", ["compile:release"], description=OPERATIONS["build"])
        g.register("npm", body=self.install, description=OPERATIONS["npm"])
        g.register("zip", ["build", "npm"], body=self.zip)
        g.register("lint", ["compile:dev"], description=OPERATIONS["lint"])
        g.register("package", ["clean", "zip"], description=OPERATIONS["package"])
        g.register("upload", body=self.upload)
        g.register("deploy", ["package", "upload"], description=OPERATIONS["deploy"])
        g.register("info", body=self.info)
        g.register("run", body=self.serve)
        g.register("init", body=self.init)
        g.register("lambda", body=print_operations)

    def run(self, name: str) -> List[str]:
        return self.graph.run(name)

    # Task bodies

    def clean(self) -> None:
        if self.dist_root.exists():
            shutil.rmtree(self.dist_root)

    def compile_release(self) -> None:
        self.compiler.compile_release(self.entry_module, self.bundle_dir)

    def compile_dev(self) -> None:
        diagnostics = self.compiler.compile_dev(self.entry_module)
        for diagnostic in diagnostics:
            output.warning(str(diagnostic))
        if diagnostics:
            raise CompileError(f"{len(diagnostics)} module(s) failed to compile", diagnostics)
        output.success("No problems found.")

    def install(self) -> None:
        manifest = self.target_dir / MANIFEST
        if not manifest.is_file():
            output.log(f"No {MANIFEST} in {self.target_dir}, skipping install")
            return
        self.bundle_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(manifest, self.bundle_dir / MANIFEST)
        self.installer.install(self.bundle_dir, production=True)

    def zip(self) -> None:
        self.archiver.archive(self.bundle_dir, self.artifact.name, self.dist_root)

    def upload(self) -> None:
        self.platform.deploy_artifact(self.artifact, self.config)
        output.success(f"Deployed {self.artifact.name} to {self.config.function_name}")

    def info(self) -> None:
        """Prints the deployed function's metadata. Query failures never fail the task."""
        function_name = self.config.function_name
        data: Optional[dict] = None
        try:
            data = self.platform.get_function_info(function_name)
        except FunctionNotFoundError:
            output.warning(
                f"Unable to find lambda function {function_name}. "
                "Verify the lambda function name and AWS region are correct."
            )
        except PlatformError:
            output.warning("AWS API request failed. Check your AWS credentials and permissions.")
        output.echo(json.dumps(data, indent=2, default=str))

    def serve(self) -> None:
        self.local_runner.serve(self.entry_module, self.config)

    def init(self) -> None:
        for path in scaffold_target(
            self.target_dir, self.name, self.config.region, self.config.runtime
        ):
            output.log(f"Created {path}")
