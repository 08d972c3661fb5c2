from marketplace.buisness.carts.cart_store import CartLineSnapshot, CartStore

__all__ = ['CartLineSnapshot', 'CartStore']
