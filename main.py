"""Main entry point for the health endpoint service."""

import asyncio
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from src.config import Config, ConfigError
from src.health import HealthCheckRegistry, HealthCheckServer
from version import __version__


def setup_logging(config: Config):
    """Set up console and rotating file logging."""
    log_config = config.logging_config
    log_level = getattr(logging, str(log_config.get('level', 'INFO')).upper())

    log_dir = Path(log_config.get('log_dir', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    max_bytes = log_config.get('max_file_size_mb', 10) * 1024 * 1024
    backup_count = log_config.get('backup_count', 5)

    file_handler = RotatingFileHandler(
        log_dir / 'healthz.log',
        maxBytes=max_bytes,
        backupCount=backup_count
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging initialized")


def build_registry(config: Config) -> HealthCheckRegistry:
    """
    Create the health check registry described by the configuration.

    Args:
        config: Loaded configuration

    Returns:
        Registry with the configured checks
    """
    checks_config = config.health_checks
    registry = HealthCheckRegistry(enabled=checks_config.get('enabled', True))
    if checks_config.get('self_check', True):
        registry.add_self_check()
    return registry


async def serve(config: Config):
    """Run the health server until SIGINT or SIGTERM."""
    logger = logging.getLogger(__name__)
    server_config = config.health_server

    if not server_config.get('enabled', True):
        logger.info("Health server disabled by configuration - nothing to do")
        return

    registry = build_registry(config)
    logger.info(f"Health checks enabled: {registry.enabled} ({len(registry.registrations)} registered)")

    server = HealthCheckServer(
        registry,
        host=server_config['host'],
        port=server_config['port'],
        path=server_config['path'],
        auth_token=config.auth.get('token') or None,
    )

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, shutdown_event.set)
        except NotImplementedError:
            # Windows event loops
            signal.signal(signum, lambda *_: loop.call_soon_threadsafe(shutdown_event.set))

    await server.start()
    try:
        await shutdown_event.wait()
        logger.info("Shutdown signal received")
    finally:
        await server.stop()


def main():
    """Load configuration, configure logging and serve the health endpoint."""
    try:
        config = Config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config)

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info(f"Health endpoint service v{__version__}")
    logger.info("=" * 60)

    try:
        asyncio.run(serve(config))
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
