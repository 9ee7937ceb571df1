"""
存储管理系统
负责快照文件的持久化、备份和导出
"""

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger("morphoforge")


class StorageManager:
    """管理快照文件的读写、备份与导出"""

    def __init__(self, base_dir: str = "data", backup_count: int = 1):
        """
        初始化存储管理器

        Args:
            base_dir: 数据存储目录
            backup_count: 每个快照保留的备份数量，0 表示不备份
        """
        self.base_dir = Path(base_dir)
        self.backup_count = max(0, int(backup_count))
        self.base_dir.mkdir(exist_ok=True, parents=True)

        logger.info(f"存储管理器已初始化，数据目录: {self.base_dir.absolute()}")

    def snapshot_path(self, name: str) -> Path:
        return self.base_dir / f"{name}.json"

    def save_snapshot(self, blob: str, name: str = "morphology") -> Path:
        """
        写入快照文件 {name}.json
        - 已有文件先备份为 {name}.{时间戳}.bak，只保留最近 backup_count 份

        Args:
            blob: 快照文本
            name: 快照名称

        Returns:
            快照文件路径
        """
        file_path = self.snapshot_path(name)

        try:
            if file_path.exists() and self.backup_count > 0:
                timestamp = datetime.now().strftime("%Y%m%d%H%M%S%f")
                backup = self.base_dir / f"{name}.{timestamp}.bak"
                shutil.copy(file_path, backup)
                logger.debug(f"[{name}] 旧快照已备份到 {backup}")
                self._prune_backups(name)

            tmp_path = file_path.with_suffix(".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(blob)
            tmp_path.replace(file_path)

            logger.info(f"[{name}] 快照已保存到 {file_path}")
            return file_path
        except Exception as e:
            logger.error(f"[{name}] 写入快照失败: {e}")
            raise

    def list_backups(self, name: str = "morphology") -> List[Path]:
        """列出快照的备份文件，按时间从旧到新排序"""
        pattern = re.compile(rf"{re.escape(name)}\.\d{{20}}\.bak")
        return sorted(
            path for path in self.base_dir.glob(f"{name}.*.bak")
            if pattern.fullmatch(path.name)
        )

    def _prune_backups(self, name: str) -> None:
        backups = self.list_backups(name)
        for stale in backups[:len(backups) - self.backup_count]:
            stale.unlink()
            logger.debug(f"[{name}] 已删除过期备份 {stale}")

    def load_snapshot(self, name: str = "morphology") -> Optional[str]:
        """
        读取快照文件

        Returns:
            快照文本；文件不存在时返回None
        """
        file_path = self.snapshot_path(name)
        if not file_path.exists():
            logger.debug(f"[{name}] 快照文件不存在: {file_path}")
            return None

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return f.read()
        except Exception as e:
            logger.error(f"[{name}] 读取快照失败: {e}")
            raise

    def export(self, name: str, output_path: str) -> bool:
        """
        导出快照到指定位置

        Returns:
            是否导出成功
        """
        source = self.snapshot_path(name)
        if not source.exists():
            logger.warning(f"[{name}] 源文件不存在: {source}")
            return False

        try:
            shutil.copy(source, output_path)
            logger.info(f"[{name}] 已导出到 {output_path}")
            return True
        except Exception as e:
            logger.error(f"[{name}] 导出失败: {e}")
            return False

    def clear(self, name: str = "morphology") -> bool:
        """
        删除快照文件（谨慎使用）

        Returns:
            是否成功
        """
        file_path = self.snapshot_path(name)
        if not file_path.exists():
            logger.info(f"[{name}] 文件不存在，无需清空")
            return True

        try:
            file_path.unlink()
            logger.warning(f"[{name}] 已删除快照")
            return True
        except Exception as e:
            logger.error(f"[{name}] 删除失败: {e}")
            return False
