# src/inventory_webhooks_domain/infrastructure/persistence/mysql_stock_repository.py
"""MySQL implementation of the stock repository."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from typing import Optional

import mysql.connector
from mysql.connector import Error

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import DatabaseError
from src.inventory_webhooks_domain.domain.entities.product import Product
from src.inventory_webhooks_domain.domain.entities.stock_item import StockItem
from src.inventory_webhooks_domain.domain.entities.variant import Variant
from src.inventory_webhooks_domain.domain.repositories.stock_repository import IStockRepository

logger = logging.getLogger(__name__)


class MySQLStockRepository(IStockRepository):
    """
    MySQL implementation of the Stock Repository.

    Each thread works on its own connection, so a unit of work only ever sees
    the statements issued by the thread that opened it.
    """

    def __init__(self) -> None:
        """Initializes the repository."""
        self._local = threading.local()
        self._connections: list = []
        self._connections_guard = threading.Lock()

    @property
    def _in_transaction(self) -> bool:
        return getattr(self._local, "in_transaction", False)

    @_in_transaction.setter
    def _in_transaction(self, value: bool) -> None:
        self._local.in_transaction = value

    def _get_connection(self):
        """Establishes or returns this thread's active MySQL database connection."""
        connection = getattr(self._local, "connection", None)
        if not connection or not connection.is_connected():
            try:
                connection = mysql.connector.connect(
                    host=settings.DB_HOST,
                    database=settings.DB_DATABASE,
                    user=settings.DB_USER,
                    password=settings.DB_PASSWORD,
                    autocommit=True,  # Units of work open explicit transactions
                    charset="utf8mb4",
                    use_unicode=True,
                )
            except Error as e:
                raise DatabaseError(f"Failed to connect to MySQL: {e}", original_exception=e)
            self._local.connection = connection
            with self._connections_guard:
                self._connections.append(connection)
        return connection

    def _commit(self, conn) -> None:
        """Commits immediately unless the statement belongs to this thread's open unit of work."""
        if not self._in_transaction:
            conn.commit()

    def create_tables(self) -> None:
        """Creates tables for products, variants and stock items with 'inv_' prefix."""
        create_table_queries = [
            """
            CREATE TABLE IF NOT EXISTS inv_products (
                id BIGINT UNSIGNED PRIMARY KEY AUTO_INCREMENT,
                name VARCHAR(255) NOT NULL,
                slug VARCHAR(255) NOT NULL,
                status VARCHAR(50) NOT NULL DEFAULT 'active',
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                UNIQUE KEY uk_slug (slug)
            ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
            """,
            """
            CREATE TABLE IF NOT EXISTS inv_variants (
                id BIGINT UNSIGNED PRIMARY KEY AUTO_INCREMENT,
                product_id BIGINT UNSIGNED NOT NULL,
                sku VARCHAR(255),
                is_master BOOLEAN NOT NULL DEFAULT FALSE,
                track_inventory BOOLEAN NOT NULL DEFAULT TRUE,
                INDEX idx_product_id (product_id),
                FOREIGN KEY (product_id) REFERENCES inv_products(id) ON DELETE CASCADE
            ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
            """,
            """
            CREATE TABLE IF NOT EXISTS inv_stock_items (
                id BIGINT UNSIGNED PRIMARY KEY AUTO_INCREMENT,
                variant_id BIGINT UNSIGNED NOT NULL,
                stock_location_id BIGINT UNSIGNED NOT NULL,
                count_on_hand INT NOT NULL DEFAULT 0, -- Signed, backorderable items may go negative
                backorderable BOOLEAN NOT NULL DEFAULT TRUE,
                updated_at DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
                UNIQUE KEY uk_variant_location (variant_id, stock_location_id),
                FOREIGN KEY (variant_id) REFERENCES inv_variants(id) ON DELETE CASCADE
            ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
            """,
        ]
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            for query in create_table_queries:
                cursor.execute(query)
            conn.commit()
            logger.info("Inventory tables checked/created.")
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error creating inventory tables: {e}", original_exception=e)
        finally:
            cursor.close()

    def _lock_product_row(self, conn, product_id: Optional[int]) -> None:
        if product_id is None:
            return
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT id FROM inv_products WHERE id = %s FOR UPDATE", (product_id,))
            cursor.fetchall()
        except Error as e:
            raise DatabaseError(f"Error locking product {product_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    @contextmanager
    def transaction(self, product_id: Optional[int]) -> Iterator[None]:
        """
        Opens an explicit transaction and locks the product row with SELECT ... FOR UPDATE,
        so that concurrent units of work on the same product wait for each other.

        Without a product id nothing is locked. A unit of work opened while this thread
        already has one joins it; the outermost one commits or rolls back.
        """
        conn = self._get_connection()
        if self._in_transaction:
            self._lock_product_row(conn, product_id)
            yield
            return

        try:
            conn.start_transaction()
            self._in_transaction = True
            self._lock_product_row(conn, product_id)
        except Error as e:
            self._in_transaction = False
            raise DatabaseError(f"Error starting transaction for product {product_id}: {e}", original_exception=e)
        except DatabaseError:
            self._in_transaction = False
            conn.rollback()
            raise

        try:
            yield
            conn.commit()
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error committing changes for product {product_id}: {e}", original_exception=e)
        except Exception:
            conn.rollback()
            raise
        finally:
            self._in_transaction = False

    def get_product(self, product_id: int) -> Optional[Product]:
        """Retrieves a product with all of its variants."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute("SELECT id, name, slug, status FROM inv_products WHERE id = %s LIMIT 1", (product_id,))
            row = cursor.fetchone()
            if not row:
                return None

            cursor.execute(
                """
                SELECT id, product_id, sku, is_master, track_inventory
                FROM inv_variants
                WHERE product_id = %s
                ORDER BY is_master DESC, id
                """,
                (product_id,),
            )
            variants = [self._row_to_variant(variant_row) for variant_row in cursor.fetchall()]

            return Product(id=row["id"], name=row["name"], slug=row["slug"], status=row["status"], variants=variants)
        except Error as e:
            raise DatabaseError(f"Error fetching product {product_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def get_variant(self, variant_id: int) -> Optional[Variant]:
        """Retrieves a single variant."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(
                "SELECT id, product_id, sku, is_master, track_inventory FROM inv_variants WHERE id = %s LIMIT 1",
                (variant_id,),
            )
            row = cursor.fetchone()
            return self._row_to_variant(row) if row else None
        except Error as e:
            raise DatabaseError(f"Error fetching variant {variant_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def get_stock_item(self, stock_item_id: int) -> Optional[StockItem]:
        """Retrieves a single stock item."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(
                """
                SELECT id, variant_id, stock_location_id, count_on_hand, backorderable
                FROM inv_stock_items
                WHERE id = %s
                LIMIT 1
                """,
                (stock_item_id,),
            )
            row = cursor.fetchone()
            return self._row_to_stock_item(row) if row else None
        except Error as e:
            raise DatabaseError(f"Error fetching stock item {stock_item_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def get_product_id_for_stock_item(self, stock_item_id: int) -> Optional[int]:
        """Resolves the product a stock item belongs to through its variant."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                SELECT v.product_id
                FROM inv_stock_items si
                JOIN inv_variants v ON v.id = si.variant_id
                WHERE si.id = %s
                """,
                (stock_item_id,),
            )
            row = cursor.fetchone()
            return row[0] if row else None
        except Error as e:
            raise DatabaseError(f"Error resolving product for stock item {stock_item_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def get_stock_items_for_product(self, product_id: int) -> list[StockItem]:
        """Retrieves all stock items across every variant of a product."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        try:
            cursor.execute(
                """
                SELECT si.id, si.variant_id, si.stock_location_id, si.count_on_hand, si.backorderable
                FROM inv_stock_items si
                JOIN inv_variants v ON v.id = si.variant_id
                WHERE v.product_id = %s
                ORDER BY si.id
                """,
                (product_id,),
            )
            return [self._row_to_stock_item(row) for row in cursor.fetchall()]
        except Error as e:
            raise DatabaseError(f"Error fetching stock items for product {product_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    def save_product(self, product: Product) -> Product:
        """Inserts a product and assigns its id."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO inv_products (name, slug, status) VALUES (%s, %s, %s)",
                (product.name, product.slug, product.status),
            )
            self._commit(conn)
            return replace(product, id=cursor.lastrowid, variants=list(product.variants))
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error saving product {product.slug}: {e}", original_exception=e)
        finally:
            cursor.close()

    def save_variant(self, variant: Variant) -> Variant:
        """Inserts or updates a variant and assigns its id."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            if variant.id is None:
                cursor.execute(
                    """
                    INSERT INTO inv_variants (product_id, sku, is_master, track_inventory)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (variant.product_id, variant.sku, variant.is_master, variant.track_inventory),
                )
                variant = replace(variant, id=cursor.lastrowid)
            else:
                cursor.execute(
                    "UPDATE inv_variants SET sku = %s, track_inventory = %s WHERE id = %s",
                    (variant.sku, variant.track_inventory, variant.id),
                )
            self._commit(conn)
            return variant
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error saving variant {variant.sku}: {e}", original_exception=e)
        finally:
            cursor.close()

    def save_stock_item(self, stock_item: StockItem) -> StockItem:
        """Inserts or updates a stock item and assigns its id."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            if stock_item.id is None:
                cursor.execute(
                    """
                    INSERT INTO inv_stock_items (variant_id, stock_location_id, count_on_hand, backorderable)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (
                        stock_item.variant_id,
                        stock_item.stock_location_id,
                        stock_item.count_on_hand,
                        stock_item.backorderable,
                    ),
                )
                stock_item = replace(stock_item, id=cursor.lastrowid)
            else:
                cursor.execute(
                    "UPDATE inv_stock_items SET count_on_hand = %s, backorderable = %s WHERE id = %s",
                    (stock_item.count_on_hand, stock_item.backorderable, stock_item.id),
                )
            self._commit(conn)
            return stock_item
        except Error as e:
            conn.rollback()
            raise DatabaseError(
                f"Error saving stock item for variant {stock_item.variant_id}: {e}", original_exception=e
            )
        finally:
            cursor.close()

    def delete_stock_item(self, stock_item_id: int) -> None:
        """Removes a stock item."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM inv_stock_items WHERE id = %s", (stock_item_id,))
            self._commit(conn)
        except Error as e:
            conn.rollback()
            raise DatabaseError(f"Error deleting stock item {stock_item_id}: {e}", original_exception=e)
        finally:
            cursor.close()

    @staticmethod
    def _row_to_variant(row: dict) -> Variant:
        return Variant(
            id=row["id"],
            product_id=row["product_id"],
            sku=row["sku"] or "",
            is_master=bool(row["is_master"]),
            track_inventory=bool(row["track_inventory"]),
        )

    @staticmethod
    def _row_to_stock_item(row: dict) -> StockItem:
        return StockItem(
            id=row["id"],
            variant_id=row["variant_id"],
            stock_location_id=row["stock_location_id"],
            count_on_hand=int(row["count_on_hand"]),
            backorderable=bool(row["backorderable"]),
        )

    def __del__(self) -> None:
        """Closes every connection opened by this repository when the object is destroyed."""
        for connection in getattr(self, "_connections", []):
            if connection.is_connected():
                connection.close()
