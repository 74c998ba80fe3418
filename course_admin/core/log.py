import logging

from rich.logging import RichHandler


def setup_logging(level:str = "INFO"):
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%Y-%m-%d %H:%M:%S]",
        handlers=[RichHandler(rich_tracebacks=True,show_path=False)],
    )
    # uvicorn installs its own handlers, keep its access log out of ours
    logging.getLogger("uvicorn.access").propagate = False
