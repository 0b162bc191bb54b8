"""
Commission calculator.

Splits the revenue of one event between the teacher and the school.
Values stay exact Decimal; rounding to cents happens only where a value
is displayed or exported (round_money).
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Union

from ..models.event import CommissionSnapshot, CommissionType, EventNode


CENT = Decimal("0.01")
MINUTES_PER_HOUR = Decimal("60")
HUNDRED = Decimal("100")

Number = Union[Decimal, int, str]


def to_decimal(value: Number) -> Decimal:
    """Convert int/str/Decimal to Decimal (floats go through str)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """
    Round to two decimals, half-up.

    Examples:
        >>> round_money(Decimal("12.345"))
        Decimal('12.35')
    """
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Earnings:
    """
    Money split of one event.

    Attributes:
        teacher_earn: Teacher commission for the event
        school_revenue: Lesson revenue minus teacher commission
        lesson_revenue: Revenue attributed to the event
    """

    teacher_earn: Decimal = Decimal("0")
    school_revenue: Decimal = Decimal("0")
    lesson_revenue: Decimal = Decimal("0")

    def __add__(self, other: 'Earnings') -> 'Earnings':
        return Earnings(
            teacher_earn=self.teacher_earn + other.teacher_earn,
            school_revenue=self.school_revenue + other.school_revenue,
            lesson_revenue=self.lesson_revenue + other.lesson_revenue,
        )

    @property
    def total(self) -> Decimal:
        """Teacher plus school (equals lesson revenue)."""
        return self.teacher_earn + self.school_revenue

    def rounded(self) -> Dict[str, Decimal]:
        """Display values rounded to cents."""
        return {
            "teacher": round_money(self.teacher_earn),
            "school": round_money(self.school_revenue),
            "total": round_money(self.total),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Rounded values as strings for reports."""
        rounded = self.rounded()
        return {
            "teacher": str(rounded["teacher"]),
            "school": str(rounded["school"]),
            "total": str(rounded["total"]),
        }


def lesson_revenue(
    duration_minutes: int,
    price_per_student: Number,
    student_count: int,
    package_duration_minutes: int
) -> Decimal:
    """
    Revenue attributed to an event of duration_minutes.

    The package price covers package_duration_minutes for each student;
    an event earns its share of that. A package without a duration earns
    nothing.
    """
    if package_duration_minutes <= 0:
        return Decimal("0")
    return (
        to_decimal(price_per_student)
        * Decimal(student_count)
        * Decimal(duration_minutes)
        / Decimal(package_duration_minutes)
    )


def calculate(
    duration_minutes: int,
    commission: CommissionSnapshot,
    price_per_student: Number,
    student_count: int,
    package_duration_minutes: int
) -> Earnings:
    """
    Calculate the teacher and school split for one event.

    Args:
        duration_minutes: Event duration
        commission: Commission type and rate (per hour for fixed, percent otherwise)
        price_per_student: Package price per student
        student_count: Students on the booking
        package_duration_minutes: Minutes the package covers

    Returns:
        Unrounded Earnings

    Examples:
        >>> commission = CommissionSnapshot(CommissionType.FIXED, Decimal("25"))
        >>> calculate(120, commission, Decimal("100"), 2, 240).teacher_earn
        Decimal('50')
    """
    revenue = lesson_revenue(
        duration_minutes, price_per_student, student_count, package_duration_minutes
    )
    rate = to_decimal(commission.rate)

    if commission.type == CommissionType.FIXED:
        teacher = rate * Decimal(duration_minutes) / MINUTES_PER_HOUR
    else:
        teacher = revenue * rate / HUNDRED

    return Earnings(
        teacher_earn=teacher,
        school_revenue=revenue - teacher,
        lesson_revenue=revenue,
    )


def calculate_for_event(node: EventNode) -> Earnings:
    """Earnings of an event from its commission and package snapshots."""
    return calculate(
        duration_minutes=node.duration,
        commission=node.commission,
        price_per_student=node.package.price_per_student,
        student_count=node.student.student_count,
        package_duration_minutes=node.package.duration_minutes,
    )
