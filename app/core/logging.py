import logging
import sys

# 门户自己的 logger 前缀；第三方库单独压级别
_PORTAL_LOGGERS = ("portal", "portal.orders", "portal.db")
_NOISY = {
    "aiosqlite": logging.WARNING,
    "httpx": logging.WARNING,
    "uvicorn.access": logging.INFO,
}


def setup_logging(level: str = "INFO") -> None:
    """
    stdout 单 handler；重复调用（测试 / reload）不会叠加输出。
    DEBUG 级别时顺带打开 SQL 日志，排查阶段谓词很方便。
    """
    lvl = level.upper()
    root = logging.getLogger()
    root.setLevel(lvl)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    root.addHandler(handler)

    for name in _PORTAL_LOGGERS:
        logging.getLogger(name).setLevel(lvl)
    for name, noisy_level in _NOISY.items():
        logging.getLogger(name).setLevel(noisy_level)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if lvl == "DEBUG" else logging.WARNING)
