from __future__ import annotations

import argparse
from typing import Iterable, Optional

from gitas_installer.bootstrap.paths import GitasPaths
from gitas_installer.config.loader import ConfigError, load_config
from gitas_installer.core.logging import configure_logging, get_logger
from gitas_installer.pipeline.orchestrator import InstallFailed, Installer


LOGGER = get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_INSTALL_FAILURE = 1
EXIT_INVALID_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="gitas-install",
        description=(
            "Download the latest gitas release for this machine, install it "
            "and add it to PATH."
        ),
    )


def main(argv: Optional[Iterable[str]] = None) -> int:
    """CLI entrypoint.

    Returns an exit code suitable for use as a console script.
    """

    parser = build_parser()
    parser.parse_args(list(argv) if argv is not None else None)

    paths = GitasPaths.default()
    try:
        config = load_config(paths)
    except ConfigError as e:
        configure_logging()
        LOGGER.error(str(e))
        print(f"Error (config): {e}")
        return EXIT_INVALID_CONFIG

    # Configure logging as early as the config allows.
    configure_logging(config.log_level)
    if config.config_sources:
        LOGGER.debug(f"Using config from {', '.join(config.config_sources)}")
    else:
        LOGGER.debug("No config file found, using defaults")

    outcome = Installer(config, paths).run()
    if isinstance(outcome, InstallFailed):
        return EXIT_INSTALL_FAILURE
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    raise SystemExit(main())
