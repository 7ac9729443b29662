"""
Umeko Discord 机器人

命令分发层：斜杠命令、用户/消息右键菜单命令与 @机器人 消息命令，
命令文件变化时自动热重载。
"""

__version__ = "1.0.0"
