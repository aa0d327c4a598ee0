"""
Unit Constants

Unit words and fraction characters used when splitting free-text
ingredient lines from imports into name / quantity / unit.
"""

# Unit words (lowercase input -> stored unit spelling)
UNIT_MAPPINGS = {
    'pound': 'lb', 'pounds': 'lb', 'lb': 'lb', 'lbs': 'lb',
    'ounce': 'oz', 'ounces': 'oz', 'oz': 'oz',
    'cup': 'cup', 'cups': 'cup', 'c': 'cup',
    'tablespoon': 'tbsp', 'tablespoons': 'tbsp', 'tbsp': 'tbsp', 'tbs': 'tbsp', 'tb': 'tbsp',
    'teaspoon': 'tsp', 'teaspoons': 'tsp', 'tsp': 'tsp', 'ts': 'tsp',
    'gram': 'g', 'grams': 'g', 'g': 'g',
    'kilogram': 'kg', 'kilograms': 'kg', 'kg': 'kg',
    'milliliter': 'ml', 'milliliters': 'ml', 'ml': 'ml',
    'liter': 'l', 'liters': 'l', 'l': 'l',
    'clove': 'clove', 'cloves': 'clove',
    'head': 'head', 'heads': 'head',
    'slice': 'slice', 'slices': 'slice',
    'piece': 'piece', 'pieces': 'piece',
    'can': 'can', 'cans': 'can',
    'package': 'package', 'packages': 'package', 'pkg': 'package',
    'bunch': 'bunch', 'bunches': 'bunch',
    'stalk': 'stalk', 'stalks': 'stalk',
    'sprig': 'sprig', 'sprigs': 'sprig',
    'pinch': 'pinch', 'pinches': 'pinch',
    'dash': 'dash', 'dashes': 'dash',
    'whole': 'whole',
}

# Unicode fraction characters -> ASCII fraction text (quantities stay strings)
UNICODE_FRACTIONS = {
    '½': '1/2',   # ½
    '⅓': '1/3',   # ⅓
    '⅔': '2/3',   # ⅔
    '¼': '1/4',   # ¼
    '¾': '3/4',   # ¾
    '⅕': '1/5',   # ⅕
    '⅖': '2/5',   # ⅖
    '⅗': '3/5',   # ⅗
    '⅘': '4/5',   # ⅘
    '⅙': '1/6',   # ⅙
    '⅚': '5/6',   # ⅚
    '⅛': '1/8',   # ⅛
    '⅜': '3/8',   # ⅜
    '⅝': '5/8',   # ⅝
    '⅞': '7/8',   # ⅞
}
