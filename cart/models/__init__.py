from cart.models.cart_item import CartItem

__all__ = ["CartItem"]
