"""
生命周期管理

为命令和插件提供统一的加载/销毁状态机：
UNLOADED -> LOADING -> LOADED -> DESTROYING -> DESTROYED
"""

import logging
from enum import Enum


class LoadableState(Enum):
    """可加载对象的生命周期状态"""
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    DESTROYING = "destroying"
    DESTROYED = "destroyed"


class Loadable:
    """
    可加载对象基类

    子类通过覆盖 on_load / on_destroy 钩子实现自己的副作用，
    load() 与 destroy() 负责状态转换并保证幂等。
    """

    def __init__(self):
        self.state = LoadableState.UNLOADED

    @property
    def is_loaded(self) -> bool:
        return self.state == LoadableState.LOADED

    async def load(self) -> None:
        """
        加载对象

        Raises:
            Exception: on_load 钩子抛出的异常，此时状态回退为 UNLOADED
        """
        if self.state in (LoadableState.LOADING, LoadableState.LOADED):
            return

        self.state = LoadableState.LOADING
        try:
            await self.on_load()
        except Exception:
            self.state = LoadableState.UNLOADED
            raise

        self.state = LoadableState.LOADED

    async def destroy(self) -> None:
        """
        销毁对象

        无论 on_destroy 是否成功，最终状态都是 DESTROYED。

        Raises:
            Exception: on_destroy 钩子抛出的异常
        """
        if self.state in (LoadableState.DESTROYING, LoadableState.DESTROYED):
            return

        self.state = LoadableState.DESTROYING
        try:
            await self.on_destroy()
        finally:
            self.state = LoadableState.DESTROYED

    async def on_load(self) -> None:
        """加载钩子"""
        pass

    async def on_destroy(self) -> None:
        """销毁钩子"""
        pass


class BotPlugin(Loadable):
    """
    机器人插件

    插件拥有一组命令，命令通过 dependencies 声明需要哪些插件先加载。
    """

    def __init__(self, name: str, description: str = ""):
        super().__init__()
        self.name = name
        self.description = description
        self.logger = logging.getLogger(f"umeko.plugins.{name}")

    async def load(self) -> None:
        self.logger.debug(f"加载插件: {self.name}")
        await super().load()
        self.logger.info(f"插件已加载: {self.name}")

    def __repr__(self) -> str:
        return f"BotPlugin(name={self.name!r}, state={self.state.value})"
