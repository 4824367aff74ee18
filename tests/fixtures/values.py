"""
Test values fixtures for binder tests.

Provides one value per binding rule so tests across modules share the same inputs.
"""
import datetime
import decimal
import math
import uuid

import pytest


@pytest.fixture(scope='module')
def value_dict():
    """Return a dictionary of test values for every supported type"""
    return {
        # Integers
        'int_value': 42,
        'big_int': 9223372036854775807,  # Max int64
        'small_int': -32768,

        # Boolean
        'bool_true': True,
        'bool_false': False,

        # Floating point
        'float_value': math.pi,
        'decimal_value': decimal.Decimal('123456.789123'),

        # Text
        'text_value': 'Lorem ipsum dolor sit amet',
        'empty_text': '',

        # Identifiers
        'uuid_value': uuid.UUID('3fa85f64-5717-4562-b3fc-2c963f66afa6'),
        'uuid_text_upper': '3FA85F64-5717-4562-B3FC-2C963F66AFA6',
        'uuid_text_braced': '{3fa85f64-5717-4562-b3fc-2c963f66afa6}',
        'uuid_text_compact': '3FA85F6457174562B3FC2C963F66AFA6',

        # Date and time
        'datetime_value': datetime.datetime(2023, 5, 15, 14, 30, 45, 123456),

        # Binary data
        'binary_value': b'\x01\x02\x03\x04\x05',

        # NULL values
        'null_value': None,
    }
