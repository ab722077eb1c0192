"""
MealMate - Recipe extraction engine.

Turns recipe web pages and free-form recipe text (social media captions,
pasted notes) into one normalized RecipeDraft record.
"""

__version__ = "1.0.0"
