import pytest


HANDLER_SOURCE = '''import json


def handler(event, context):
    return {"statusCode": 200, "body": json.dumps({"echo": event})}
'''


@pytest.fixture
def make_target(tmp_path):
    """Creates a target directory with an entry module and optional extra files."""

    def _make_target(name="payments", files=None, entry=True):
        target = tmp_path / name
        target.mkdir()
        if entry:
            (target / "handler.py").write_text(HANDLER_SOURCE)
        for filename, content in (files or {}).items():
            path = target / filename
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return target

    return _make_target


class Recorder:
    """Fake collaborators that log every call into one shared list."""

    def __init__(self, mocker):
        self.calls = []
        self.compiler = mocker.Mock()
        self.installer = mocker.Mock()
        self.archiver = mocker.Mock()
        self.platform_client = mocker.Mock()
        self.local_runner = mocker.Mock()

        self.compiler.compile_release.side_effect = self._record("compile_release")
        self.compiler.compile_dev.side_effect = self._record("compile_dev", [])
        self.installer.install.side_effect = self._record("install")
        self.archiver.archive.side_effect = self._record("archive")
        self.platform_client.deploy_artifact.side_effect = self._record("deploy_artifact")
        self.platform_client.get_function_info.side_effect = self._record(
            "get_function_info", {"Configuration": {"FunctionName": "payments"}}
        )
        self.local_runner.serve.side_effect = self._record("serve")

    def _record(self, name, result=None):
        def side_effect(*args, **kwargs):
            self.calls.append(name)
            return result

        return side_effect

    def fail(self, mock_method, name, error):
        def side_effect(*args, **kwargs):
            self.calls.append(name)
            raise error

        mock_method.side_effect = side_effect

    def collaborators(self):
        return {
            "compiler": self.compiler,
            "installer": self.installer,
            "archiver": self.archiver,
            "platform_client": self.platform_client,
            "local_runner": self.local_runner,
        }


@pytest.fixture
def recorder(mocker):
    return Recorder(mocker)
