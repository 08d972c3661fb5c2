from marketplace.data.carts.cart import Cart, CartLine

__all__ = ['Cart', 'CartLine']
