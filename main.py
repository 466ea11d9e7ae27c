import time
import logging
import signal
import argparse

from core.config_loader import load_config
from core.matcher import CandidateSetManager
from database.database import create_session_factory
from database.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True


def signal_handler(sig, frame):
    global running
    logger.info("Shutdown signal received")
    running = False


def run_recompute_cycle(manager: CandidateSetManager):
    """Refresh statuses and recompute every active organization's candidate set."""
    summary = manager.recompute_all()
    if summary.failed:
        logger.warning(f"{summary.failed} subjects failed to recompute: {summary.failed_ids}")
    return summary


def main(argv=None):
    parser = argparse.ArgumentParser(description="GrantMatch bulk recompute driver")
    parser.add_argument('--once', action='store_true',
                        help='Run a single recompute cycle and exit')
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to config.yaml')
    args = parser.parse_args(argv)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    config = load_config(args.config)
    if not config.matching.enabled:
        logger.info("Matching disabled in configuration; nothing to do")
        return

    session_factory = create_session_factory(config.database.url)

    # Initialize DB (with retry logic)
    init_db(bind=session_factory.kw['bind'])

    manager = CandidateSetManager(session_factory=session_factory, config=config.matching)
    interval = config.schedule.interval_seconds

    cycle_count = 0
    while running:
        cycle_count += 1
        cycle_start = time.time()
        logger.info(f"=== Starting Recompute Cycle #{cycle_count} ===")
        try:
            run_recompute_cycle(manager)
        except Exception as e:
            logger.error(f"Error in main loop: {e}", exc_info=True)

        cycle_elapsed = time.time() - cycle_start
        if args.once:
            break
        if running:
            logger.info(f"=== Cycle #{cycle_count} completed in {cycle_elapsed:.2f}s. Sleeping for {interval} seconds... ===")
            # Sleep in chunks to allow responsive shutdown
            for _ in range(max(1, interval // 5)):
                if not running: break
                time.sleep(5)


if __name__ == "__main__":
    main()
