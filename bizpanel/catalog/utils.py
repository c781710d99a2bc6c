"""
Utility functions and constants for catalog operations
"""
from decimal import Decimal, InvalidOperation


# Default categories offered when creating products and during onboarding
DEFAULT_CATEGORIES = [
    'Food',
    'Drinks',
    'Physical Products',
    'Services',
    'Digital',
    'Other',
]

# Sample product images; the first one is used when a product has no image
SAMPLE_IMAGES = [
    'https://images.unsplash.com/photo-1581235720704-06d3acfcb36f?w=500&h=500&fit=crop',
    'https://images.unsplash.com/photo-1600185365926-3a2ce3cdb9eb?w=500&h=500&fit=crop',
    'https://images.unsplash.com/photo-1615485290382-441e4d049cb5?w=500&h=500&fit=crop',
    'https://images.unsplash.com/photo-1547949003-9792a18a2601?w=500&h=500&fit=crop',
    'https://images.unsplash.com/photo-1583394838336-acd977736f90?w=500&h=500&fit=crop',
]

DEFAULT_IMAGE = SAMPLE_IMAGES[0]


def parse_price(value):
    """
    Parse a price entered by the user.

    Accepts numbers and strings, with either '.' or ',' as the decimal separator
    ("12,50" -> Decimal('12.50')). Returns None when the value is not a number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    text = str(value).strip().replace(',', '.')
    if not text:
        return None
    try:
        price = Decimal(text)
    except InvalidOperation:
        return None
    if not price.is_finite():
        return None
    return price
