from marketplace.data.deliveries.delivery import Delivery, DeliveryStatus, DeliveryTimelineEntry

__all__ = ['Delivery', 'DeliveryStatus', 'DeliveryTimelineEntry']
