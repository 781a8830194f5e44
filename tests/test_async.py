"""Tests for the async batch runners — arequire, acall, aload_batch, acall_batch."""

import anyio
import pytest

from pregister._internal.invoke import invoke
from pregister.batch import aload_batch
from pregister.config import Options
from pregister.errors import InvocationError, LoadError
from pregister.registry import Registry
from pregister.tree import NamespaceTree

SERVICES = {
    "service/db/index.py": "NAME = 'db'\n",
    "service/cache.py": "NAME = 'cache'\n",
    "service/send-mail.py": "NAME = 'mail'\n",
    "service/broken.py": "raise RuntimeError('broken')\n",
}


class TestInvoke:
    @pytest.mark.asyncio
    async def test_sync(self) -> None:
        assert await invoke(lambda x: x + 1, 1) == 2

    @pytest.mark.asyncio
    async def test_async(self) -> None:
        async def double(x: int) -> int:
            return x * 2

        assert await invoke(double, 2) == 4


class TestAloadBatch:
    @pytest.mark.asyncio
    async def test_same_tree_as_sync(self, make_files) -> None:
        root = make_files(SERVICES)
        tree = NamespaceTree()

        result = await aload_batch(tree, "service", "service/**/*.py", Options(cwd=root))

        sync_registry = Registry(Options(cwd=root))
        sync_registry.require("service", "service/**/*.py")
        assert sorted(tree.root["service"]) == sorted(sync_registry.tree["service"])
        assert len(result) == 4
        assert len(result.failures) == 1
        assert [outcome.file for outcome in result.outcomes] == sorted(SERVICES)


class TestArequire:
    @pytest.mark.asyncio
    async def test_glob(self, make_files) -> None:
        root = make_files(SERVICES)
        registry = Registry()
        seen = []

        result = await registry.arequire("service", "service/**/*.py", Options(cwd=root), seen.append)

        assert seen == [result]
        assert isinstance(result.first_error, LoadError)
        assert registry.resolve("service.sendMail").NAME == "mail"

    @pytest.mark.asyncio
    async def test_value(self) -> None:
        registry = Registry()
        assert await registry.arequire("config", {"debug": True}) is None
        assert registry.resolve("config.debug", None) is None
        assert registry.resolve("config") == {"debug": True}

    @pytest.mark.asyncio
    async def test_import_string(self) -> None:
        registry = Registry()
        await registry.arequire("codec", "json", Options(export="loads"))
        assert registry.resolve("codec")("[1]") == [1]

    @pytest.mark.asyncio
    async def test_done_matches_require_for_values(self) -> None:
        registry = Registry()
        seen: list[object] = []
        await registry.arequire("a", {"x": 1}, None, seen.append)
        registry.require("b", {"x": 1}, None, seen.append)
        assert seen == []


class TestAcall:
    @pytest.mark.asyncio
    async def test_awaits_async_main(self, make_files) -> None:
        root = make_files(
            {
                "tasks/a.py": """
                import anyio

                async def main(calls):
                    await anyio.sleep(0)
                    calls.append("a")
                """,
                "tasks/b.py": """
                def main(calls):
                    calls.append("b")
                """,
            }
        )
        calls: list[str] = []

        result = await Registry().acall("tasks/*.py", Options(cwd=root, args=[calls]))

        assert result
        assert sorted(calls) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_args_wrapper_waits_for_done(self, make_files) -> None:
        root = make_files({"tasks/a.py": "def main(calls):\n    calls.append('a')\n"})
        calls: list[str] = []

        async def wrapper(module, done) -> None:
            async def later() -> None:
                await anyio.sleep(0.01)
                module.main(calls)
                done()

            async with anyio.create_task_group() as tg:
                tg.start_soon(later)

        result = await Registry().acall("tasks/*.py", Options(cwd=root, args=wrapper))

        assert result
        assert calls == ["a"]

    @pytest.mark.asyncio
    async def test_done_called_from_sync_wrapper(self, make_files) -> None:
        root = make_files({"tasks/a.py": "def main():\n    pass\n"})

        def wrapper(module, done) -> None:
            module.main()
            done()

        assert await Registry().acall("tasks/*.py", Options(cwd=root, args=wrapper))

    @pytest.mark.asyncio
    async def test_failures_collected(self, make_files) -> None:
        root = make_files(
            {
                "tasks/a.py": "async def main():\n    raise RuntimeError('async boom')\n",
                "tasks/b.py": "def main(:\n",
                "tasks/c.py": "def main():\n    pass\n",
            }
        )

        result = await Registry().acall("tasks/*.py", Options(cwd=root))

        assert len(result) == 3
        assert [type(error) for error in result.errors] == [InvocationError, LoadError]
        assert result.outcomes[2].ok

    @pytest.mark.asyncio
    async def test_invoke_hook(self, make_files) -> None:
        root = make_files({"tasks/a.py": "VALUE = 7\n"})
        seen: list[int] = []

        async def hook(module) -> None:
            seen.append(module.VALUE)

        await Registry().acall("tasks/*.py", Options(cwd=root, invoke=hook))

        assert seen == [7]
