import logging
import logging.handlers
import os

from .utilities import hexlify_packets

LOG_FORMAT = "[%(asctime)s.%(msecs)03d] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name="lineio",
    log_file="log/lineio.log",
    level=logging.DEBUG,
    backup_days=7,
    enable_console=True,
    enable_file=True,
):
    """
    설정된 로거를 반환합니다.

    :param name: 로거 이름
    :param log_file: 로그를 저장할 파일 경로
    :param level: 로깅 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :param backup_days: 보관할 최대 일수 (이 초과된 로그 파일은 자동 삭제됨)
    :param enable_console: 콘솔 핸들러 사용 여부
    :param enable_file: 파일 핸들러(자정마다 롤링) 사용 여부

    # 로거 설정 및 사용 예제
    logger = setup_logger(log_file="log/lineio.log", backup_days=7)
    logger.info("이 로그는 특정 기간 이후 자동으로 삭제됩니다.")
    """
    logger = logging.getLogger(name)
    # 문자열로 "INFO", "DEBUG" 등 전달 가능하도록 처리
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.DEBUG)
    logger.setLevel(level)

    # 이미 핸들러가 있으면 중복 추가를 방지하고 레벨만 갱신하여 반환
    if logger.handlers:
        for h in logger.handlers:
            h.setLevel(level)
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    if enable_file and log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        # 파일 핸들러 (기간별 롤링)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_file, when="midnight", interval=1, backupCount=backup_days, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger


def lineio_apply_logging_config(level=logging.DEBUG, log_file=None):
    """Reconfigure the package logger (call **sync**).

    :param level: Log level, e.g. ``logging.INFO`` or ``"INFO"``
    :param log_file: Optional file to log to, rotated at midnight

    Existing handlers are dropped, so this can be called repeatedly.
    """
    logger = logging.getLogger(Log.name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    setup_logger(
        name=Log.name,
        log_file=log_file,
        level=level,
        enable_console=True,
        enable_file=bool(log_file),
    )


class Log:
    """Package logger facade.

    Messages use ``{}`` placeholders, which are only formatted when the level
    is enabled. A trailing ``":hex"`` renders the bytes arguments as hex and
    ``":str"`` renders the preceding argument with ``str()``::

        Log.debug("recv: {}", data, ":hex")
    """

    name = "lineio"
    _logger = logging.getLogger(name)

    @classmethod
    def build_msg(cls, txt, *args):
        """Build message."""
        string_args = []
        count_args = len(args) - 1
        skip = False
        for i in range(count_args + 1):
            if skip:
                skip = False
                continue
            if i < count_args and args[i + 1] == ":hex":
                string_args.append(hexlify_packets(args[i]))
                skip = True
            elif i < count_args and args[i + 1] == ":str":
                string_args.append(str(args[i]))
                skip = True
            else:
                string_args.append(args[i])
        return txt.format(*string_args)

    @classmethod
    def _log(cls, level, txt, *args, **kwargs):
        if cls._logger.isEnabledFor(level):
            cls._logger.log(level, cls.build_msg(txt, *args), **kwargs)

    @classmethod
    def debug(cls, txt, *args):
        """Log debug messages."""
        cls._log(logging.DEBUG, txt, *args)

    @classmethod
    def info(cls, txt, *args):
        """Log info messages."""
        cls._log(logging.INFO, txt, *args)

    @classmethod
    def warning(cls, txt, *args):
        """Log warning messages."""
        cls._log(logging.WARNING, txt, *args)

    @classmethod
    def error(cls, txt, *args):
        """Log error messages."""
        cls._log(logging.ERROR, txt, *args)

    @classmethod
    def critical(cls, txt, *args):
        """Log critical messages."""
        cls._log(logging.CRITICAL, txt, *args)

    @classmethod
    def exception(cls, txt, *args):
        """Log an error together with the exception being handled."""
        cls._log(logging.ERROR, txt, *args, exc_info=True)

