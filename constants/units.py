"""
Unit Constants and Conversion Tables

Contains the unit table used for costing: every canonical unit symbol with
its dimension and its factor relative to the dimension's base unit, plus the
free-text aliases accepted on input.
"""

from decimal import Decimal

# Dimensions
MASS = 'mass'
VOLUME = 'volume'
COUNT = 'count'

DIMENSIONS = (MASS, VOLUME, COUNT)

# Base unit per dimension (factor 1)
BASE_UNITS = {
    MASS: 'kg',
    VOLUME: 'L',
    COUNT: 'un',
}

# Unit table (unit -> (dimension, factor to base unit))
UNITS = {
    # Mass: base = kg
    'g': (MASS, Decimal('0.001')),
    'kg': (MASS, Decimal('1')),
    't': (MASS, Decimal('1000')),
    # Volume: base = L
    'ml': (VOLUME, Decimal('0.001')),
    'L': (VOLUME, Decimal('1')),
    # Count: base = un
    'un': (COUNT, Decimal('1')),
    'dz': (COUNT, Decimal('12')),
    'cx': (COUNT, Decimal('24')),
    'pct': (COUNT, Decimal('1')),
    'sc': (COUNT, Decimal('1')),
}

# Display labels for the unit pickers
UNIT_LABELS = {
    'g': 'Gramas (g)',
    'kg': 'Quilogramas (kg)',
    't': 'Toneladas (t)',
    'ml': 'Mililitros (ml)',
    'L': 'Litros (L)',
    'un': 'Unidade (un)',
    'dz': 'Dúzia (dz)',
    'cx': 'Caixa (cx)',
    'pct': 'Pacote (pct)',
    'sc': 'Saco (sc)',
}

# Unit mappings for input parsing (lowercase input -> canonical unit)
UNIT_MAPPINGS = {
    'g': 'g', 'gr': 'g', 'grama': 'g', 'gramas': 'g', 'gram': 'g', 'grams': 'g',
    'kg': 'kg', 'kgs': 'kg', 'quilo': 'kg', 'quilos': 'kg', 'kilo': 'kg', 'kilos': 'kg',
    'quilograma': 'kg', 'quilogramas': 'kg', 'kilogram': 'kg', 'kilograms': 'kg',
    't': 't', 'ton': 't', 'tonelada': 't', 'toneladas': 't',
    'ml': 'ml', 'mililitro': 'ml', 'mililitros': 'ml', 'milliliter': 'ml', 'milliliters': 'ml',
    'l': 'L', 'lt': 'L', 'litro': 'L', 'litros': 'L', 'liter': 'L', 'liters': 'L',
    'un': 'un', 'und': 'un', 'unid': 'un', 'unidade': 'un', 'unidades': 'un',
    'ea': 'un', 'each': 'un', 'piece': 'un', 'pieces': 'un',
    'dz': 'dz', 'duzia': 'dz', 'dúzia': 'dz', 'duzias': 'dz', 'dúzias': 'dz', 'dozen': 'dz',
    'cx': 'cx', 'caixa': 'cx', 'caixas': 'cx',
    'pct': 'pct', 'pacote': 'pct', 'pacotes': 'pct',
    'sc': 'sc', 'saco': 'sc', 'sacos': 'sc',
}
