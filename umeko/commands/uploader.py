"""命令上传 - 将注册表快照整体替换到 Discord 命令注册接口"""

import asyncio
import logging
import pprint
from typing import Any, Dict, List, Optional
import aiohttp

DISCORD_API_BASE = "https://discord.com/api/v10"


class CommandUploader:
    """
    命令上传器

    使用 PUT 全量替换全局命令或指定服务器的命令。上传失败不会影响机器人运行。
    """

    def __init__(
        self,
        application_id: str,
        token: str,
        api_base: str = DISCORD_API_BASE,
        timeout: float = 10
    ):
        """
        初始化命令上传器

        Args:
            application_id: 应用ID
            token: 机器人令牌
            api_base: API 根地址
            timeout: 请求超时（秒）
        """
        self.logger = logging.getLogger("umeko.commands.uploader")
        self.application_id = application_id
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def build_url(self, guild_id: Optional[int] = None) -> str:
        """
        构建命令注册接口地址

        Args:
            guild_id: 服务器ID，为 None 时使用全局接口

        Returns:
            接口地址
        """
        base = f"{self.api_base}/applications/{self.application_id}"
        if guild_id:
            return f"{base}/guilds/{guild_id}/commands"
        return f"{base}/commands"

    async def upload(self, payload: List[Dict[str, Any]], guild_id: Optional[int] = None) -> bool:
        """
        上传命令列表

        Args:
            payload: export_snapshot() 生成的命令列表
            guild_id: 服务器ID，为 None 时全局上传

        Returns:
            True 如果上传成功
        """
        url = self.build_url(guild_id)
        headers = {"Authorization": f"Bot {self.token}"}
        target = f"服务器 {guild_id}" if guild_id else "全局"

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.put(url, json=payload, headers=headers) as response:
                    if response.status >= 400:
                        detail = await self._read_error_detail(response)
                        self.logger.error(
                            f"上传命令失败 ({target}) - HTTP {response.status}:\n{pprint.pformat(detail)}"
                        )
                        return False

        except asyncio.TimeoutError:
            self.logger.error(f"上传命令超时 ({target})")
            return False
        except aiohttp.ClientError as e:
            self.logger.error(f"上传命令网络错误 ({target}): {e}", exc_info=True)
            return False

        self.logger.info(f"已上传 {len(payload)} 个命令 ({target})")
        return True

    async def _read_error_detail(self, response: aiohttp.ClientResponse) -> Any:
        try:
            data = await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return await response.text()

        if isinstance(data, dict):
            return data.get("errors", data)
        return data

    async def upload_commands(self, registry: Any, guild_id: Optional[int] = None) -> bool:
        """
        导出注册表快照并上传

        Args:
            registry: 命令注册表
            guild_id: 服务器ID

        Returns:
            True 如果上传成功
        """
        return await self.upload(registry.export_snapshot(), guild_id)
