"""MealMint: menu photo to budget-friendly dish recommendations."""

__version__ = "0.1.0"
