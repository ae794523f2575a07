"""Recipes, the document that holds them, where it is stored and how free
text becomes a recipe."""
