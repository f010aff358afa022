"""Main application entry point for applying stock mutations with out-of-stock webhooks."""

import logging
import sys

from src.common.exceptions.custom_exceptions import ApplicationError, DatabaseError
from src.common.logger_config import setup_logging
from src.inventory_webhooks_domain.application.stock_mutation_service import StockMutationService
from src.inventory_webhooks_domain.infrastructure.persistence.mysql_stock_repository import MySQLStockRepository
from src.inventory_webhooks_domain.infrastructure.publishers.http_webhook_publisher import HttpWebhookPublisher

logger = logging.getLogger(__name__)

USAGE = "Usage: python main.py (adjust|set) <stock_item_id> <value> | delete <stock_item_id>"


def setup_stock_mutation_dependencies() -> tuple[StockMutationService, HttpWebhookPublisher]:
    """Initializes and wires up the stock mutation dependencies."""
    stock_repository = MySQLStockRepository()
    webhook_publisher = HttpWebhookPublisher()
    stock_mutation_service = StockMutationService(stock_repo=stock_repository, event_publisher=webhook_publisher)
    return stock_mutation_service, webhook_publisher


def create_inventory_db_tables() -> None:
    """Creates tables for products, variants and stock items."""
    stock_repo = MySQLStockRepository()
    try:
        stock_repo.create_tables()
    except DatabaseError as e:
        logger.error(f"Error creating inventory database tables: {e}")
    finally:
        # Ensure connection is closed if not managed by a connection pool
        del stock_repo


def run_stock_mutation(command: str, args: list[str]) -> int:
    """Applies a single stock mutation and waits for any resulting webhook deliveries."""
    create_inventory_db_tables()  # Ensure tables exist each run (idempotent)
    stock_mutation_service, webhook_publisher = setup_stock_mutation_dependencies()

    try:
        if command == "adjust" and len(args) == 2:
            stock_item = stock_mutation_service.adjust_count_on_hand(int(args[0]), int(args[1]))
            logger.info(f"Stock item {stock_item.id} now holds {stock_item.count_on_hand}")
        elif command == "set" and len(args) == 2:
            stock_item = stock_mutation_service.set_count_on_hand(int(args[0]), int(args[1]))
            logger.info(f"Stock item {stock_item.id} now holds {stock_item.count_on_hand}")
        elif command == "delete" and len(args) == 1:
            stock_mutation_service.delete_stock_item(int(args[0]))
            logger.info(f"Stock item {args[0]} deleted")
        else:
            logger.error(USAGE)
            return 2
    except ValueError:
        logger.error(f"Stock item ids and values must be integers. {USAGE}")
        return 2
    except ApplicationError as e:
        logger.error(f"Stock mutation failed: {e}")
        return 1
    finally:
        webhook_publisher.shutdown(wait=True)

    return 0


if __name__ == "__main__":
    setup_logging()

    if len(sys.argv) < 2:
        logger.error(USAGE)
        sys.exit(2)

    sys.exit(run_stock_mutation(sys.argv[1], sys.argv[2:]))
