from marketplace.buisness.inventory.catalog_gateway import CatalogGateway, ItemSnapshot
from marketplace.buisness.inventory.reservation_service import InventoryReservationService

__all__ = ['CatalogGateway', 'ItemSnapshot', 'InventoryReservationService']
