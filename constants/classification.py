"""
CMV Classification Constants

Default boundaries for labelling a recipe's CMV percentage. Deployments
override them through configuration or the settings table.
"""

from decimal import Decimal

EXCELLENT = 'excellent'
GOOD = 'good'
HIGH = 'high'
NOT_APPLICABLE = 'not applicable'

CLASSIFICATION_LABELS = (EXCELLENT, GOOD, HIGH, NOT_APPLICABLE)

# Upper bounds (inclusive) for each label, in percent
DEFAULT_CMV_THRESHOLDS = {
    'excellentMax': Decimal('25'),
    'goodMax': Decimal('35'),
}

# Monthly CMV target shown on reports (industry average sits between 25-35%)
DEFAULT_CMV_MONTHLY_TARGET = Decimal('30')

# Settings table keys
SETTING_EXCELLENT_MAX = 'cmv_excellent_max'
SETTING_GOOD_MAX = 'cmv_good_max'
SETTING_MONTHLY_TARGET = 'cmv_monthly_target'
