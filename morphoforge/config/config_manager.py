"""
配置管理系统
支持动态加载和热更新
"""

import logging
import os
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

logger = logging.getLogger("morphoforge")

DEFAULT_SLOTS = ("ف", "ع", "ل")
DEFAULT_SEPARATOR = "-"


class ConfigManager:
    """负责加载和管理配置文件，支持运行时动态加载"""

    def __init__(self, config_dir: str = "config"):
        """
        初始化配置管理器

        Args:
            config_dir: 配置文件目录
        """
        self.config_dir = Path(config_dir)
        self.system_config = {}
        self.schemes_config = []
        self._last_modified = {}
        self._lock = threading.RLock()

        # 验证配置目录存在
        if not self.config_dir.exists():
            raise FileNotFoundError(f"配置目录不存在: {self.config_dir}")

        self.load_all()

    def load_all(self):
        """一次性加载所有配置"""
        self.load_system_config()
        self.load_schemes()

    def load_system_config(self):
        """加载系统配置"""
        config_path = self.config_dir / "config.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"配置文件不存在: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                content = f.read()
                # 简单的环境变量替换
                content = self._replace_env_vars(content)
                self.system_config = yaml.safe_load(content) or {}

            self._last_modified["system_config"] = config_path.stat().st_mtime

            logger.info(f"成功加载系统配置: {config_path}")
        except Exception as e:
            logger.error(f"加载系统配置失败: {e}")
            raise

    def load_schemes(self):
        """加载默认模式集合"""
        schemes_path = self.config_dir / "schemes.yaml"

        if not schemes_path.exists():
            logger.warning(f"模式配置文件不存在: {schemes_path}，不预置模式")
            self.schemes_config = []
            return

        try:
            with open(schemes_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            self.schemes_config = data.get("schemes", []) or []

            self._last_modified["schemes"] = schemes_path.stat().st_mtime

            logger.info(
                f"成功加载模式配置: {schemes_path}, "
                f"包含{len(self.schemes_config)}个模式"
            )
        except Exception as e:
            logger.error(f"加载模式配置失败: {e}")
            raise

    def check_and_reload(self) -> bool:
        """
        检查配置文件变化，仅比较mtime

        Returns:
            bool: 是否进行了重新加载
        """
        with self._lock:
            changed = False

            config_path = self.config_dir / "config.yaml"
            if config_path.exists():
                current_mtime = config_path.stat().st_mtime
                if current_mtime > self._last_modified.get("system_config", 0):
                    logger.info("检测到config.yaml变化，重新加载...")
                    self.load_system_config()
                    changed = True

            schemes_path = self.config_dir / "schemes.yaml"
            if schemes_path.exists():
                current_mtime = schemes_path.stat().st_mtime
                if current_mtime > self._last_modified.get("schemes", 0):
                    logger.info("检测到schemes.yaml变化，重新加载...")
                    self.load_schemes()
                    changed = True

            return changed

    def get_system_config(self, key: str, default: Any = None) -> Any:
        """
        获取系统配置值

        Args:
            key: 配置键（支持点号分隔，如 'storage.data_dir'）
            default: 默认值

        Returns:
            配置值
        """
        self.check_and_reload()
        value = self.system_config

        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def get_default_schemes(self) -> List[Dict[str, str]]:
        """
        获取预置模式列表

        Returns:
            [{"name": ..., "template": ..., "description": ...}, ...]
        """
        self.check_and_reload()
        valid = []
        for item in self.schemes_config:
            if isinstance(item, dict) and "name" in item and "template" in item:
                valid.append(item)
            else:
                logger.warning(f"模式配置格式错误，跳过: {item}")
        return valid

    def get_slots(self) -> Tuple[str, str, str]:
        """获取三个占位符字符（对应词根第1、2、3位）"""
        slots = self.get_system_config("morphology.slots", list(DEFAULT_SLOTS))
        if (
            not isinstance(slots, (list, tuple))
            or len(slots) != 3
            or not all(isinstance(s, str) and len(s) == 1 for s in slots)
        ):
            logger.warning(f"占位符配置无效，使用默认值: {slots}")
            return DEFAULT_SLOTS
        return tuple(slots)

    def get_separator(self) -> str:
        """获取模板分隔符"""
        return self.get_system_config("morphology.separator", DEFAULT_SEPARATOR)

    def _replace_env_vars(self, content: str) -> str:
        """
        替换配置文件中的环境变量
        支持格式: ${VAR_NAME}
        """

        def replace_func(match):
            var_name = match.group(1)
            return os.getenv(var_name, match.group(0))

        return re.sub(r"\$\{([^}]+)\}", replace_func, content)
