"""
主应用入口
阿拉伯语三字母词根形态派生引擎 - 命令行
"""

import argparse
import logging
import sys

from morphoforge.config.config_manager import ConfigManager
from morphoforge.errors import MorphologyError
from morphoforge.generator.derivation_generator import has_all_slots
from morphoforge.logging_config import setup_logging
from morphoforge.pipeline.morphology_engine import MorphologyEngine
from morphoforge.storage.storage_manager import StorageManager

logger = logging.getLogger("morphoforge")

# 会修改状态、执行后需要保存快照的命令
MUTATING_COMMANDS = {
    "load", "add-root", "remove-root", "generate", "generate-all", "validate",
    "remove-derived", "add-scheme", "update-scheme", "remove-scheme", "import",
}


def parse_args(argv=None):
    """解析命令行参数"""
    parser = argparse.ArgumentParser(description="三字母词根形态派生引擎")
    parser.add_argument("--config-dir", default="config", help="配置目录")
    parser.add_argument("--data-dir", help="数据目录（覆盖配置文件中的设置）")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("load", help="从文本文件加载词根")
    p.add_argument("file")

    for name, help_text in (
        ("add-root", "添加词根"),
        ("find-root", "查找词根"),
        ("remove-root", "删除词根"),
        ("family", "预览词根的全部派生词（不存储）"),
        ("generate-all", "生成并存储词根的全部派生词"),
        ("derived", "显示已存储的派生词"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("root")

    p = sub.add_parser("generate", help="用指定模式生成并存储派生词")
    p.add_argument("root")
    p.add_argument("scheme")

    p = sub.add_parser("validate", help="验证单词是否由词根派生")
    p.add_argument("word")
    p.add_argument("root")
    p.add_argument("--store", action="store_true", help="验证通过时存储该词")

    p = sub.add_parser("remove-derived", help="删除词根下的派生词")
    p.add_argument("root")
    p.add_argument("word")

    sub.add_parser("roots", help="列出全部词根")
    sub.add_parser("schemes", help="列出全部模式")

    p = sub.add_parser("add-scheme", help="添加模式")
    p.add_argument("name")
    p.add_argument("template")
    p.add_argument("--description", default="")

    p = sub.add_parser("update-scheme", help="修改模式")
    p.add_argument("name")
    p.add_argument("--template")
    p.add_argument("--description")

    p = sub.add_parser("remove-scheme", help="删除模式")
    p.add_argument("name")

    p = sub.add_parser("export", help="导出快照到文件")
    p.add_argument("output")

    p = sub.add_parser("import", help="从快照文件恢复")
    p.add_argument("input")

    sub.add_parser("reset", help="删除已保存的快照，下次运行时按配置重新初始化")

    return parser.parse_args(argv)


def build_engine(config_manager: ConfigManager, storage: StorageManager, snapshot_name: str) -> MorphologyEngine:
    """已有快照时从快照恢复，否则按配置预置模式"""
    blob = storage.load_snapshot(snapshot_name)
    if blob is None:
        logger.info("未找到快照，使用预置模式初始化")
        return MorphologyEngine.from_config(config_manager)

    engine = MorphologyEngine.from_config(config_manager, seed_schemes=False)
    engine.import_snapshot(blob)
    return engine


def run_command(args, engine: MorphologyEngine, storage: StorageManager, snapshot_name: str) -> int:
    """执行子命令，返回退出码"""
    command = args.command

    if command == "load":
        count = engine.load_roots_from_file(args.file)
        print(f"新增词根: {count}")

    elif command == "add-root":
        print(f"词根 '{engine.add_root(args.root)}' 已添加")

    elif command == "find-root":
        found = engine.root_exists(args.root)
        print(f"词根 '{args.root}' {'存在' if found else '不存在'}")
        return 0 if found else 1

    elif command == "remove-root":
        if not engine.remove_root(args.root):
            print(f"词根 '{args.root}' 不存在")
            return 1
        print(f"词根 '{args.root}' 已删除")

    elif command == "family":
        family = engine.generate_all_derived_words(args.root)
        for item in family:
            print(f"  {item['scheme']} → {item['word']}")
        print(f"共 {len(family)} 个派生词")

    elif command == "generate":
        word = engine.generate_derived_word(args.root, args.scheme)
        stored = engine.generate_and_store(args.root, args.scheme)
        print(f"{args.scheme} → {word or '(无法生成)'}{'（已存储）' if stored else ''}")

    elif command == "generate-all":
        print(f"已存储 {engine.generate_and_store_all(args.root)} 个新派生词")

    elif command == "validate":
        if args.store:
            result = engine.validate_and_store(args.word, args.root)
        else:
            result = engine.validate_word(args.word, args.root)
        if result["valid"]:
            print(f"'{args.word}' 属于词根 '{args.root}'，模式: {result['scheme']}")
        else:
            print(f"'{args.word}' 不属于词根 '{args.root}'")
            return 1

    elif command == "derived":
        words = engine.list_stored_derived_words(args.root)
        for item in words:
            print(f"  {item['word']} ({item['scheme']})")
        print(f"共 {len(words)} 个已存储派生词")

    elif command == "remove-derived":
        if not engine.remove_derived_word(args.root, args.word):
            print(f"派生词 '{args.word}' 不存在")
            return 1
        print(f"派生词 '{args.word}' 已删除")

    elif command == "roots":
        roots = engine.list_all_roots()
        for item in roots:
            words = "، ".join(d["word"] for d in item["derived_words"])
            print(f"  {item['key']} [{item['derived_word_count']}] {words}")
        print(f"共 {len(roots)} 个词根")

    elif command == "schemes":
        schemes = engine.list_schemes()
        for item in schemes:
            print(f"  [{item['id']}] {item['name']}: {item['template']} ({item['description']})")
        print(f"共 {len(schemes)} 个模式")

    elif command == "add-scheme":
        if not has_all_slots(args.template, engine.generator.slots, engine.generator.separator):
            print(f"模板必须包含全部占位符: {' '.join(engine.generator.slots)}")
            return 1
        if not engine.add_scheme(args.name, args.template, args.description):
            print(f"模式 '{args.name}' 已存在")
            return 1
        print(f"模式 '{args.name}' 已添加")

    elif command == "update-scheme":
        if args.template is not None and not has_all_slots(
            args.template, engine.generator.slots, engine.generator.separator
        ):
            print(f"模板必须包含全部占位符: {' '.join(engine.generator.slots)}")
            return 1
        if not engine.update_scheme(args.name, args.template, args.description):
            print(f"模式 '{args.name}' 不存在")
            return 1
        print(f"模式 '{args.name}' 已修改")

    elif command == "remove-scheme":
        if not engine.remove_scheme(args.name):
            print(f"模式 '{args.name}' 不存在")
            return 1
        print(f"模式 '{args.name}' 已删除")

    elif command == "export":
        # 尚未保存过时先落盘，再由存储管理器复制
        if storage.load_snapshot(snapshot_name) is None:
            storage.save_snapshot(engine.export_snapshot(), snapshot_name)
        if not storage.export(snapshot_name, args.output):
            print(f"导出失败: {args.output}")
            return 1
        print(f"快照已导出到 {args.output}")

    elif command == "import":
        with open(args.input, "r", encoding="utf-8") as f:
            engine.import_snapshot(f.read())
        print(f"已从 {args.input} 恢复快照")

    elif command == "reset":
        if not storage.clear(snapshot_name):
            print("删除快照失败")
            return 1
        print("快照已删除")

    if command in MUTATING_COMMANDS:
        storage.save_snapshot(engine.export_snapshot(), snapshot_name)

    return 0


def main(argv=None):
    """主程序入口"""
    args = parse_args(argv)

    try:
        config_manager = ConfigManager(config_dir=args.config_dir)
        setup_logging(
            config_manager.get_system_config("system.log_file", "logs/morphoforge.log"),
            level=config_manager.get_system_config("system.log_level", "INFO"),
        )

        data_dir = args.data_dir or config_manager.get_system_config("storage.data_dir", "data")
        snapshot_name = config_manager.get_system_config("storage.snapshot_name", "morphology")
        storage = StorageManager(
            base_dir=data_dir,
            backup_count=config_manager.get_system_config("storage.backup_count", 1),
        )

        engine = build_engine(config_manager, storage, snapshot_name)
        return run_command(args, engine, storage, snapshot_name)

    except KeyboardInterrupt:
        logger.info("用户中断操作")
        print("\n操作已中断")
        return 130

    except (MorphologyError, FileNotFoundError) as e:
        logger.error(f"操作失败: {e}")
        print(f"错误: {e}")
        return 1

    except Exception as e:
        logger.error(f"发生异常: {e}", exc_info=True)
        print(f"错误: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
