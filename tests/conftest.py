import pytest

from ignite.models.config import Config
from ignite.services.command_service import Invocation
from ignite.services.permission_service import CallerContext


def make_config(**overrides) -> Config:
    values = {
        "working_dir": ".",
        "start_command": "echo started",
        "stop_command": "echo stopped",
    }
    values.update(overrides)
    return Config(**values)


class FakeInvocation(Invocation):
    def __init__(self, caller=None):
        self._caller = caller or CallerContext(user_id=1)
        self.deferred = False
        self.replies = []

    @property
    def caller(self):
        return self._caller

    async def defer(self):
        self.deferred = True

    async def reply(self, reply):
        self.replies.append(reply)


@pytest.fixture
def config(tmp_path):
    return make_config(working_dir=str(tmp_path))
