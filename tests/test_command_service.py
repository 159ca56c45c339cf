import asyncio
import time

from ignite.errors import QueryError
from ignite.models.server_status import ServerStatus
from ignite.services.command_service import CommandService
from ignite.services.permission_service import CallerContext
from ignite.services.process_service import ProcessService
from ignite.services.query_service import QueryService

from conftest import FakeInvocation, make_config


def _service(config, query_service=None):
    return CommandService(config, ProcessService(), query_service or QueryService(timeout=0.5))


def test_start_replies_with_output(config):
    invocation = FakeInvocation()

    asyncio.run(_service(config).handle_start(invocation))

    assert invocation.deferred is True
    assert "Server started successfully" in invocation.replies[0].content
    assert "started" in invocation.replies[0].content


def test_stop_failure_replies_with_stderr(tmp_path):
    config = make_config(working_dir=str(tmp_path), stop_command="echo 'not running' >&2; exit 2")
    invocation = FakeInvocation()

    asyncio.run(_service(config).handle_stop(invocation))

    assert "Failed to stop server" in invocation.replies[0].content
    assert "not running" in invocation.replies[0].content


def test_denied_caller_gets_no_process_run(tmp_path):
    marker = tmp_path / "ran"
    config = make_config(working_dir=str(tmp_path), start_command=f"touch {marker}",
                         allowed_guild_ids=frozenset({100}))
    invocation = FakeInvocation(CallerContext(user_id=1, guild_id=200))

    asyncio.run(_service(config).handle_start(invocation))

    assert "permission" in invocation.replies[0].content
    assert invocation.deferred is False
    assert not marker.exists()


def test_missing_guild_context_is_reported(tmp_path):
    config = make_config(working_dir=str(tmp_path), allowed_guild_ids=frozenset({100}))
    invocation = FakeInvocation(CallerContext(user_id=1))

    asyncio.run(_service(config).handle_start(invocation))

    assert "only be used in a server" in invocation.replies[0].content


def test_spawn_failure_is_reported(tmp_path):
    config = make_config(working_dir=str(tmp_path / "missing"))
    invocation = FakeInvocation()

    asyncio.run(_service(config).handle_start(invocation))

    assert "Failed to execute start command" in invocation.replies[0].content


def test_status_is_not_privileged(tmp_path):
    class _Query:
        async def query(self, host, port):
            return ServerStatus(online=True, name="Srv", map="m", game="g", players=1, max_players=2)

    config = make_config(working_dir=str(tmp_path), allowed_guild_ids=frozenset({100}),
                         admin_role_ids=frozenset({7}))
    invocation = FakeInvocation(CallerContext(user_id=1))

    asyncio.run(_service(config, _Query()).handle_status(invocation))

    assert "Srv" in invocation.replies[0].panel.title


def test_status_query_error_renders_error_panel(tmp_path):
    config = make_config(working_dir=str(tmp_path), host="not-an-ip")
    invocation = FakeInvocation()

    asyncio.run(_service(config).handle_status(invocation))

    panel = invocation.replies[0].panel
    assert "Failed to query server" in panel.title
    assert "Invalid IP address" in panel.description


def test_reply_failure_is_not_escalated(config):
    class _Expired(FakeInvocation):
        async def reply(self, reply):
            raise RuntimeError("interaction expired")

    asyncio.run(_service(config).handle_start(_Expired()))


def test_quick_reply_arrives_before_slow_one(tmp_path):
    slow = _service(make_config(working_dir=str(tmp_path), start_command="sleep 1; echo slow"))
    quick_config = make_config(working_dir=str(tmp_path), start_command="echo quick")
    quick = CommandService(quick_config, slow.process_service, slow.query_service)
    replied_at = {}

    class _Timed(FakeInvocation):
        def __init__(self, name):
            super().__init__()
            self.name = name

        async def reply(self, reply):
            replied_at[self.name] = time.monotonic()

    async def main():
        await asyncio.gather(slow.handle_start(_Timed("slow")), quick.handle_start(_Timed("quick")))

    asyncio.run(main())

    assert replied_at["quick"] < replied_at["slow"]


def test_nul_byte_in_command_is_reported(tmp_path):
    config = make_config(working_dir=str(tmp_path), start_command="echo a\x00b")
    invocation = FakeInvocation()

    asyncio.run(_service(config).handle_start(invocation))

    assert invocation.deferred is True
    assert "Failed to execute start command" in invocation.replies[0].content


def test_unexpected_process_fault_is_reported(config):
    service = _service(config)
    service.process_service.shutdown()
    invocation = FakeInvocation()

    asyncio.run(service.handle_stop(invocation))

    assert len(invocation.replies) == 1
    assert "Failed to stop server" in invocation.replies[0].content


def test_unexpected_status_fault_is_reported(config):
    class _Broken:
        async def query(self, host, port):
            raise RuntimeError("pool is gone")

    invocation = FakeInvocation()

    asyncio.run(_service(config, _Broken()).handle_status(invocation))

    assert "Failed to query server" in invocation.replies[0].content
    assert "pool is gone" in invocation.replies[0].content
