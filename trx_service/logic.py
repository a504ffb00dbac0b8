from decimal import Decimal
import logging
import math
import uuid

from . import schemas
from .validation import RequestValidator

logger = logging.getLogger(__name__)

# --- Discount rules (amounts in cents) ---
BASE_DISCOUNT_TIERS = (
    # (inclusive upper bound, fraction); amounts below 20000 get nothing
    (50000, Decimal("0.05")),
    (80000, Decimal("0.07")),
    (120000, Decimal("0.10")),
)
BASE_DISCOUNT_MINIMUM_AMOUNT = 20000
BASE_DISCOUNT_TOP = Decimal("0.15")

PRIME_DISCOUNT_THRESHOLD = 50000
PRIME_DISCOUNT = Decimal("0.08")
ENDS_WITH_FIVE_THRESHOLD = 90000
ENDS_WITH_FIVE_DISCOUNT = Decimal("0.10")

MAX_DISCOUNT = Decimal("0.20")


def is_prime(number: int) -> bool:
    if number < 2:
        return False
    if number == 2:
        return True
    if number % 2 == 0:
        return False
    for divisor in range(3, math.isqrt(number) + 1, 2):
        if number % divisor == 0:
            return False
    return True


def base_discount(total_amount: int) -> Decimal:
    if total_amount < BASE_DISCOUNT_MINIMUM_AMOUNT:
        return Decimal("0")
    for upper_bound, fraction in BASE_DISCOUNT_TIERS:
        if total_amount <= upper_bound:
            return fraction
    return BASE_DISCOUNT_TOP


def conditional_discount(total_amount: int) -> Decimal:
    amount_myr = total_amount // 100 # cents to whole MYR, truncated

    if total_amount > PRIME_DISCOUNT_THRESHOLD and is_prime(amount_myr):
        return PRIME_DISCOUNT

    if total_amount > ENDS_WITH_FIVE_THRESHOLD and amount_myr % 10 == 5:
        return ENDS_WITH_FIVE_DISCOUNT

    return Decimal("0")


def discount_fraction(total_amount: int) -> Decimal:
    """Base plus conditional discount, capped at MAX_DISCOUNT."""
    base = base_discount(total_amount)
    conditional = conditional_discount(total_amount)
    logger.debug(f"Discounts for {total_amount}: base={base}, conditional={conditional}")
    return min(base + conditional, MAX_DISCOUNT)


def calculate_discount(total_amount: int) -> schemas.TrxResponse:
    """
    Applies the discount rules to a total in cents.
    The discount is truncated to whole cents.
    """
    fraction = discount_fraction(total_amount)
    total_discount = int(total_amount * fraction)
    final_amount = total_amount - total_discount

    logger.info(f"Discount calculated - Total: {total_amount}, Fraction: {fraction}, Discount: {total_discount}, Final: {final_amount}")

    return schemas.TrxResponse(
        total_amount=total_amount,
        total_discount=total_discount,
        final_amount=final_amount,
    )


def submit_transaction(request: schemas.TrxRequest, validator: RequestValidator) -> schemas.TrxResponse | schemas.ErrorResponse:
    """
    Validates a partner submission and, when it passes, prices it.
    AuthorizationError from the validator is left to propagate.
    """
    transaction_id = str(uuid.uuid4())
    logger.info(f"Start submit transaction: {transaction_id}")

    failure = validator.validate(request)
    if failure is not None:
        logger.warning(f"Transaction {transaction_id} rejected: {failure.message}")
        return schemas.ErrorResponse(result_message=failure.message)

    response = calculate_discount(request.total_amount)
    logger.info(f"End submit transaction: {transaction_id} [{response.model_dump_json(by_alias=True)}]")
    return response
