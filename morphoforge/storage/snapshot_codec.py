"""
快照编解码
将模式存储和词根存储整体序列化为JSON文本，并可原子地恢复
"""

import json
import logging
from typing import Any, Dict, List

from morphoforge.errors import InvalidRootError, SnapshotImportError
from morphoforge.roots.root_store import RootStore
from morphoforge.schemes.scheme_store import SchemeStore

logger = logging.getLogger("morphoforge")

SNAPSHOT_FORMAT = "morphoforge-snapshot"
SNAPSHOT_VERSION = 1


class SnapshotCodec:
    """
    快照格式:
    {
        "format": "morphoforge-snapshot",
        "version": 1,
        "next_scheme_id": 16,
        "schemes": [{"id", "name", "template", "description"}, ...],
        "roots": [{"key": "كتب", "derived": [{"word", "scheme"}, ...]}, ...]
    }
    """

    def __init__(self, root_store: RootStore, scheme_store: SchemeStore):
        self.root_store = root_store
        self.scheme_store = scheme_store

    def export_snapshot(self) -> str:
        """导出完整快照"""
        data = {
            "format": SNAPSHOT_FORMAT,
            "version": SNAPSHOT_VERSION,
            "next_scheme_id": self.scheme_store.next_id,
            "schemes": [scheme.to_dict() for scheme in self.scheme_store],
            "roots": [
                {
                    "key": root.key,
                    "derived": [d.to_dict() for d in root.derived],
                }
                for root in self.root_store
            ],
        }
        logger.debug(
            f"导出快照: {len(data['schemes'])} 个模式, {len(data['roots'])} 个词根"
        )
        return json.dumps(data, ensure_ascii=False, indent=2)

    def import_snapshot(self, blob: str) -> bool:
        """
        导入快照，整体替换当前两个存储

        先在新存储中完整重建，全部校验通过后才替换，失败时当前状态不变

        Raises:
            SnapshotImportError: 快照结构错误

        Returns:
            True
        """
        try:
            data = json.loads(blob)
        except (TypeError, ValueError) as e:
            logger.error(f"快照解析失败: {e}")
            raise SnapshotImportError(f"快照不是合法的JSON: {e}") from e

        schemes, roots = self._build_stores(data)
        # 计数器不回退，本会话已分配过的标识符不再复用
        schemes.advance_ids(self.scheme_store.next_id)

        self.scheme_store.replace_with(schemes)
        self.root_store.replace_with(roots)
        logger.info(f"快照已导入: {len(schemes)} 个模式, {len(roots)} 个词根")
        return True

    def _build_stores(self, data: Any):
        if not isinstance(data, dict):
            raise SnapshotImportError("快照顶层必须是对象")
        if data.get("format", SNAPSHOT_FORMAT) != SNAPSHOT_FORMAT:
            raise SnapshotImportError(f"未知的快照格式: {data.get('format')}")
        version = data.get("version", SNAPSHOT_VERSION)
        if not isinstance(version, int) or version > SNAPSHOT_VERSION:
            raise SnapshotImportError(f"不支持的快照版本: {version}")

        schemes = SchemeStore()
        for record in self._require_list(data, "schemes"):
            self._require_fields(record, ("id", "name", "template", "description"), "模式")
            if not schemes.add(record["name"], record["template"], record["description"], scheme_id=record["id"]):
                raise SnapshotImportError(f"模式名称或标识符重复: {record['name']} ({record['id']})")

        next_id = data.get("next_scheme_id")
        if next_id is not None:
            if not isinstance(next_id, int) or isinstance(next_id, bool):
                raise SnapshotImportError("next_scheme_id 必须是整数")
            schemes.advance_ids(next_id)

        roots = RootStore()
        for record in self._require_list(data, "roots"):
            self._require_fields(record, ("key",), "词根")
            key = record["key"]
            if len(key) != 3:
                raise SnapshotImportError(f"词根键必须恰好三个字符: {key!r}")
            if key in roots:
                raise SnapshotImportError(f"词根重复: {key}")
            try:
                roots.add(key[0], key[1], key[2])
            except InvalidRootError as e:
                raise SnapshotImportError(str(e)) from e

            for entry in self._require_list(record, "derived"):
                self._require_fields(entry, ("word", "scheme"), "派生词")
                roots.attach_derived_word(key[0], key[1], key[2], entry["word"], entry["scheme"])

        return schemes, roots

    @staticmethod
    def _require_list(data: Dict[str, Any], field: str) -> List[Any]:
        value = data.get(field)
        if not isinstance(value, list):
            raise SnapshotImportError(f"字段 '{field}' 缺失或不是数组")
        return value

    @staticmethod
    def _require_fields(record: Any, fields, kind: str) -> None:
        if not isinstance(record, dict):
            raise SnapshotImportError(f"{kind}记录必须是对象: {record!r}")
        for field in fields:
            if not isinstance(record.get(field), str):
                raise SnapshotImportError(f"{kind}记录缺少字符串字段 '{field}': {record!r}")
