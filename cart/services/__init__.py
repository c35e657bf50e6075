from cart.services.cart import CartOwner, CartService

__all__ = ["CartOwner", "CartService"]
