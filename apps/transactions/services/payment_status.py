"""Money helpers and payment status derivation."""

from decimal import Decimal, InvalidOperation

from apps.transactions.models import PaymentStatus

CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def to_decimal(value) -> Decimal:
    """
    Convert a number or numeric string to an exact, unrounded Decimal.

    Floats go through ``str`` so 0.1 becomes Decimal('0.1'), not the
    binary approximation.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            raise ValueError("Amount must be a number")
    if not amount.is_finite():
        raise ValueError("Amount must be a number")
    return amount


def to_money(value) -> Decimal:
    """
    Convert a number or numeric string to a two-decimal Decimal.

    Values are never rounded: '10.50' and '10.500' are accepted,
    '10.005' is rejected.

    Raises:
        ValueError: If the value is not numeric or has sub-cent digits
    """
    amount = to_decimal(value)
    money = amount.quantize(CENT)
    if money != amount:
        raise ValueError("Amount can't have more than two decimal places")
    return money


def derive_status(total_amount, total_paid) -> str:
    """
    Payment status of a transaction from its amount and what has been paid.

    Both figures are compared exactly, without rounding to cents.

    >>> derive_status(Decimal('1000.00'), Decimal('0'))
    'pendiente'
    >>> derive_status(Decimal('1000.00'), Decimal('400.00'))
    'parcial'
    >>> derive_status(Decimal('1000.00'), Decimal('1000.00'))
    'pagado'
    """
    total_amount = to_decimal(total_amount)
    total_paid = to_decimal(total_paid)

    if total_paid <= 0:
        return PaymentStatus.PENDIENTE
    if total_paid < total_amount:
        return PaymentStatus.PARCIAL
    return PaymentStatus.PAGADO
