"""
生命周期状态机测试
"""

import pytest

from umeko.core.lifecycle import Loadable, LoadableState, BotPlugin


class CountingLoadable(Loadable):
    def __init__(self):
        super().__init__()
        self.loads = 0
        self.destroys = 0
        self.fail_load = False
        self.fail_destroy = False

    async def on_load(self):
        self.loads += 1
        if self.fail_load:
            raise RuntimeError("load failed")

    async def on_destroy(self):
        self.destroys += 1
        if self.fail_destroy:
            raise RuntimeError("destroy failed")


class TestLoadable:
    """测试加载/销毁状态转换"""

    def setup_method(self):
        self.loadable = CountingLoadable()

    def test_initial_state(self):
        assert self.loadable.state == LoadableState.UNLOADED
        assert not self.loadable.is_loaded

    @pytest.mark.asyncio
    async def test_load_is_idempotent(self):
        await self.loadable.load()
        await self.loadable.load()

        assert self.loadable.state == LoadableState.LOADED
        assert self.loadable.loads == 1

    @pytest.mark.asyncio
    async def test_failed_load_reverts_to_unloaded(self):
        self.loadable.fail_load = True

        with pytest.raises(RuntimeError):
            await self.loadable.load()

        assert self.loadable.state == LoadableState.UNLOADED

    @pytest.mark.asyncio
    async def test_destroy_is_idempotent(self):
        await self.loadable.load()
        await self.loadable.destroy()
        await self.loadable.destroy()

        assert self.loadable.state == LoadableState.DESTROYED
        assert self.loadable.destroys == 1

    @pytest.mark.asyncio
    async def test_failed_destroy_still_ends_destroyed(self):
        await self.loadable.load()
        self.loadable.fail_destroy = True

        with pytest.raises(RuntimeError):
            await self.loadable.destroy()

        assert self.loadable.state == LoadableState.DESTROYED


class TestBotPlugin:
    """测试插件"""

    @pytest.mark.asyncio
    async def test_plugin_load(self):
        plugin = BotPlugin("music", "音乐插件")
        await plugin.load()

        assert plugin.is_loaded
        assert "music" in repr(plugin)
