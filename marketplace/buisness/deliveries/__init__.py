from marketplace.buisness.deliveries.delivery_synchronizer import DeliverySynchronizer

__all__ = ['DeliverySynchronizer']
