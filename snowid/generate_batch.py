"""
批量生成 ID 脚本

生成一批 ID 并逐行打印，用于人工检查生成器配置（身份、布局、起始时间）。

运行方式：
    python -m snowid.generate_batch --count 30 --worker-id 1
    snowid-batch --decode
"""
import argparse
import logging

from snowid.core.config import settings
from snowid.core.snowflake import IdGenerator

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print a batch of snowflake ids.")
    parser.add_argument("--count", type=int, default=30, help="number of ids to generate")
    parser.add_argument("--worker-id", type=int, default=None)
    parser.add_argument("--group-id", type=int, default=None)
    parser.add_argument("--decode", action="store_true", help="print decoded fields next to each id")
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    主函数

    Args:
        argv: 命令行参数，None 时读取 sys.argv

    Returns:
        退出码
    """
    args = build_parser().parse_args(argv)
    generator = IdGenerator(args.worker_id, args.group_id)
    logger.info(
        f"Generating {args.count} ids with worker_id={generator.worker_id} "
        f"group_id={generator.group_id}, layout expires at {generator.layout.expires_at.isoformat()}"
    )
    for _ in range(args.count):
        value = generator.next_id()
        if args.decode:
            parts = generator.decode(value)
            print(
                f"{value}\t{parts.created_at.isoformat()}\tgroup={parts.group_id}"
                f"\tworker={parts.worker_id}\tseq={parts.sequence}"
            )
        else:
            print(value)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
