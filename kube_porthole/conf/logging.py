import logging

DEFAULT_LEVEL = logging.INFO
DEFAULT_LEVEL_NAME = logging.getLevelName(DEFAULT_LEVEL)
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# the kubernetes client and urllib3 log every request on DEBUG
NOISY_LOGGERS = ("urllib3", "kubernetes", "websocket")


def setup_logger(level_name, logfile):
    for h in logging.getLogger().handlers[:]:
        h.close()
        logging.getLogger().removeHandler(h)

    if level_name.upper() == "NONE":
        logging.disable(logging.CRITICAL)
    else:
        logging.disable(logging.NOTSET)
        log_level = getattr(logging, level_name.upper(), None)
        log_level = log_level if isinstance(log_level, int) else None
        if logfile is None:
            logging.basicConfig(level=log_level or DEFAULT_LEVEL, format=LOG_FORMAT)
        else:
            logging.basicConfig(filename=logfile, level=log_level or DEFAULT_LEVEL, format=LOG_FORMAT)
        if not log_level:
            logging.warning(f"Unknown log level '{level_name}', using {DEFAULT_LEVEL_NAME}")
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(log_level or DEFAULT_LEVEL, logging.INFO))
